"""
Unit tests for the Grant and Milestone models.
"""

import pytest

from src.core.dates import utc_date
from src.core.grants import (
    Grant,
    Milestone,
    compute_grant_stats,
    sort_milestones,
)


@pytest.fixture
def grant():
    return Grant(
        id="g1",
        name="Ocean Study",
        start_date=utc_date(2026, 1, 1),
        end_date=utc_date(2026, 3, 1),
        progress_date=utc_date(2026, 2, 1),
        assigned_users=frozenset({"alice"}),
        board_id="b1",
    )


def test_can_edit_requires_assignment(grant):
    assert grant.can_edit("alice")
    assert not grant.can_edit("bob")
    assert not grant.can_edit(None)


def test_clamp_to_span(grant):
    assert grant.clamp_to_span(utc_date(2025, 6, 1)) == grant.start_date
    assert grant.clamp_to_span(utc_date(2027, 6, 1)) == grant.end_date
    assert grant.clamp_to_span(utc_date(2026, 2, 10)) == utc_date(2026, 2, 10)


def test_clamp_to_span_for_malformed_grant_returns_start():
    bad = Grant(
        id="bad",
        name="Backwards",
        start_date=utc_date(2026, 3, 1),
        end_date=utc_date(2026, 1, 1),
        progress_date=utc_date(2026, 2, 1),
    )
    assert bad.clamp_to_span(utc_date(2026, 2, 1)) == bad.start_date


def test_grant_document_round_trip(grant):
    doc = grant.to_dict()
    assert doc["startDate"].startswith("2026-01-01")
    assert doc["assignedUsers"] == ["alice"]
    assert Grant.from_dict(doc) == grant


def test_from_dict_defaults_progress_to_start():
    parsed = Grant.from_dict(
        {"id": "x", "name": "X", "startDate": "2026-01-01", "endDate": "2026-02-01"}
    )
    assert parsed.progress_date == parsed.start_date
    assert parsed.assigned_users == frozenset()


def test_from_dict_rejects_missing_dates():
    with pytest.raises(ValueError):
        Grant.from_dict({"id": "x", "startDate": "2026-01-01"})


def test_milestone_without_target_date_is_kept():
    milestone = Milestone.from_dict({"id": "m", "number": 2, "label": "Report"})
    assert milestone.target_date is None
    assert milestone.label == "Report"


def test_milestone_rejects_missing_number():
    with pytest.raises(ValueError):
        Milestone.from_dict({"id": "m"})


def test_sort_milestones_by_number():
    ms = [Milestone("c", 3), Milestone("a", 1), Milestone("b", 2)]
    assert [m.number for m in sort_milestones(ms)] == [1, 2, 3]


def test_compute_grant_stats(grant):
    finished = Grant(
        id="g2",
        name="Done",
        start_date=utc_date(2025, 1, 1),
        end_date=utc_date(2025, 6, 1),
        progress_date=utc_date(2025, 6, 1),
    )
    stats = compute_grant_stats([grant, finished], utc_date(2026, 2, 1))
    assert (stats.total, stats.active, stats.completed) == (2, 1, 1)
