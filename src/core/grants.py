"""Core Grants Module.

Defines the Grant and Milestone dataclasses consumed by the timeline.

A Grant is a read-only projection of a store document: a named span of time
with a current progress date, a color token and the set of users allowed to
edit it. Milestones are dated sub-targets ordered by their display number.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from src.core.dates import to_utc


@dataclass(frozen=True)
class Milestone:
    """
    A dated sub-target within a grant.

    The target date is optional: documents without one are kept so that
    numbering stays intact, and the renderer skips them.
    """

    id: str
    number: int
    target_date: Optional[datetime] = None
    label: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the milestone to the store's document shape.

        Returns:
            Dict[str, Any]: camelCase document with ISO-8601 dates.
        """
        return {
            "id": self.id,
            "number": self.number,
            "targetDate": self.target_date.isoformat() if self.target_date else None,
            "label": self.label,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Milestone":
        """
        Creates a Milestone from a store document.

        Args:
            data: Document with 'id', 'number', optional 'targetDate', 'label'.

        Returns:
            Milestone: The parsed milestone.

        Raises:
            ValueError: If required fields are missing or malformed.
        """
        try:
            milestone_id = str(data["id"])
            number = int(data["number"])
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed milestone document: {data!r}") from e

        raw_target = data.get("targetDate")
        target = to_utc(raw_target) if raw_target else None
        return cls(
            id=milestone_id,
            number=number,
            target_date=target,
            label=data.get("label") or "",
        )


def sort_milestones(milestones: Iterable[Milestone]) -> List[Milestone]:
    """Returns milestones ordered by number ascending."""
    return sorted(milestones, key=lambda m: m.number)


@dataclass(frozen=True)
class Grant:
    """
    A grant shown as one row on the timeline.

    start_date <= end_date is expected but not enforced; the timeline must
    tolerate malformed documents.
    """

    id: str
    name: str
    start_date: datetime
    end_date: datetime
    progress_date: datetime
    color: str = ""
    assigned_users: FrozenSet[str] = field(default_factory=frozenset)
    description: str = ""
    board_id: Optional[str] = None

    def can_edit(self, viewer_id: Optional[str]) -> bool:
        """
        Checks whether a viewer may move this grant's progress marker.

        Args:
            viewer_id: The current user's id, or None when signed out.

        Returns:
            bool: True if the viewer is one of the assigned users.
        """
        return viewer_id is not None and viewer_id in self.assigned_users

    def clamp_to_span(self, value: datetime) -> datetime:
        """
        Clamps a date into [start_date, end_date].

        For malformed grants (end before start) the start date wins.
        """
        if self.end_date < self.start_date:
            return self.start_date
        return max(self.start_date, min(self.end_date, value))

    def is_active(self, now: datetime) -> bool:
        """Returns True if now lies within the grant's span."""
        return self.start_date <= now <= self.end_date

    def is_completed(self, now: datetime) -> bool:
        """Returns True if the grant's end date has passed."""
        return now > self.end_date

    def to_dict(self) -> Dict[str, Any]:
        """
        Converts the grant to the store's document shape.

        Returns:
            Dict[str, Any]: camelCase document with ISO-8601 dates.
        """
        return {
            "id": self.id,
            "name": self.name,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "progressDate": self.progress_date.isoformat(),
            "color": self.color,
            "assignedUsers": sorted(self.assigned_users),
            "description": self.description,
            "boardId": self.board_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Grant":
        """
        Creates a Grant from a store document.

        A missing progress date defaults to the start date, matching how
        new grants are created.

        Args:
            data: Document with camelCase keys.

        Returns:
            Grant: The parsed grant.

        Raises:
            ValueError: If the id or a required date is missing or
                cannot be parsed.
        """
        try:
            grant_id = str(data["id"])
            start = to_utc(data["startDate"])
            end = to_utc(data["endDate"])
        except KeyError as e:
            raise ValueError(f"Grant document missing field {e}") from e

        raw_progress = data.get("progressDate")
        progress = to_utc(raw_progress) if raw_progress else start

        return cls(
            id=grant_id,
            name=data.get("name") or "",
            start_date=start,
            end_date=end,
            progress_date=progress,
            color=data.get("color") or "",
            assigned_users=frozenset(data.get("assignedUsers") or ()),
            description=data.get("description") or "",
            board_id=data.get("boardId"),
        )


@dataclass(frozen=True)
class GrantStats:
    """Dashboard counters for a board."""

    total: int
    active: int
    completed: int


def compute_grant_stats(grants: Iterable[Grant], now: datetime) -> GrantStats:
    """
    Counts total, active and completed grants.

    Args:
        grants: Grants on the current board.
        now: Reference instant (aware UTC datetime).

    Returns:
        GrantStats: The counters.
    """
    grant_list = list(grants)
    return GrantStats(
        total=len(grant_list),
        active=sum(1 for g in grant_list if g.is_active(now)),
        completed=sum(1 for g in grant_list if g.is_completed(now)),
    )
