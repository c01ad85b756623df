"""
Demo Data for Grant Tracker.

Seeds a store with a small board of grants and milestones around the
current date, used when no seed file is configured.
"""

import logging
from typing import Optional

from src.core.dates import add_days, today_utc
from src.core.grants import Grant, Milestone

logger = logging.getLogger(__name__)


def seed_demo_board(store, board_id: str, viewer_id: Optional[str] = None) -> int:
    """
    Adds demo grants and milestones to a store.

    Args:
        store: An InMemoryGrantStore.
        board_id: Board the grants belong to.
        viewer_id: Assigned to the first two grants so they are editable.

    Returns:
        int: Number of grants added.
    """
    today = today_utc()
    editors = frozenset({viewer_id}) if viewer_id else frozenset()

    grants = [
        Grant(
            id="demo-ocean",
            name="Ocean Acidification Study",
            start_date=add_days(today, -120),
            end_date=add_days(today, 240),
            progress_date=add_days(today, -10),
            assigned_users=editors,
            description="Three-year field survey of coastal pH levels.",
            board_id=board_id,
        ),
        Grant(
            id="demo-literacy",
            name="Community Literacy Program",
            start_date=add_days(today, -30),
            end_date=add_days(today, 150),
            progress_date=add_days(today, -30),
            assigned_users=editors,
            board_id=board_id,
        ),
        Grant(
            id="demo-archive",
            name="Regional Archive Digitization",
            start_date=add_days(today, -400),
            end_date=add_days(today, -20),
            progress_date=add_days(today, -20),
            description="Completed digitization of the county records.",
            board_id=board_id,
        ),
    ]
    for grant in grants:
        store.add_grant(grant)

    store.add_milestone(
        "demo-ocean",
        Milestone(id="m1", number=1, target_date=add_days(today, -60), label="Pilot sites"),
    )
    store.add_milestone(
        "demo-ocean",
        Milestone(id="m2", number=2, target_date=add_days(today, 90), label="Interim report"),
    )
    store.add_milestone(
        "demo-literacy",
        Milestone(id="m1", number=1, target_date=add_days(today, 45), label="Volunteer training"),
    )

    logger.info(f"Seeded {len(grants)} demo grants on board {board_id!r}")
    return len(grants)
