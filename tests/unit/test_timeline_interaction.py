"""
Unit tests for the TimelineInteraction drag/hover state machine.

Tests cover:
- Permission-gated drag start
- Clamping of dragged dates to the grant span
- Release and stale-target abort
- Mutual exclusion of hover and drag
"""

import pytest

from src.core.dates import utc_date
from src.core.timeline_scale import (
    DEFAULT_PADDING,
    CoordinateMapper,
    ZoomMode,
    calculate_scale,
)
from src.gui.widgets.timeline.interaction import (
    DragState,
    InteractionState,
    TimelineInteraction,
)


@pytest.fixture
def progress_calls():
    return []


@pytest.fixture
def mapper(sample_grants):
    scale = calculate_scale(sample_grants, ZoomMode.MONTHLY)
    return CoordinateMapper(ZoomMode.MONTHLY.timeline_width, DEFAULT_PADDING, scale)


@pytest.fixture
def interaction(mapper, progress_calls):
    controller = TimelineInteraction(
        on_progress=lambda gid, d: progress_calls.append((gid, d))
    )
    controller.set_mapper(mapper)
    return controller


def grant_by_id(grants, grant_id):
    return next(g for g in grants if g.id == grant_id)


def test_initial_state(interaction):
    assert interaction.state is InteractionState.IDLE
    assert interaction.drag_state == DragState()
    assert interaction.hover_date is None


def test_hover_updates_date(interaction, mapper, sample_grants, progress_calls):
    x = mapper.date_to_x(utc_date(2026, 2, 1))
    result = interaction.move(x, sample_grants)

    assert interaction.state is InteractionState.HOVERING
    assert abs((result - utc_date(2026, 2, 1)).total_seconds()) < 1
    assert interaction.hover_date == result
    assert progress_calls == []


def test_leave_clears_hover(interaction, sample_grants):
    interaction.move(500, sample_grants)
    interaction.leave()
    assert interaction.hover_date is None
    assert interaction.state is InteractionState.IDLE


def test_press_requires_edit_permission(interaction, sample_grants):
    gamma = grant_by_id(sample_grants, "C")
    assert not interaction.press_marker(gamma, "alice")
    assert interaction.state is InteractionState.IDLE

    assert interaction.press_marker(gamma, "carol")
    assert interaction.drag_state == DragState(True, "C")


def test_press_with_no_viewer_is_rejected(interaction, sample_grants):
    assert not interaction.press_marker(sample_grants[0], None)


def test_drag_reports_every_move(interaction, mapper, sample_grants, progress_calls):
    beta = grant_by_id(sample_grants, "B")
    interaction.press_marker(beta, "bob")

    for day in (10, 20, 30):
        interaction.move(mapper.date_to_x(utc_date(2026, 4, day)), sample_grants)

    assert [gid for gid, _ in progress_calls] == ["B", "B", "B"]
    last_date = progress_calls[-1][1]
    assert abs((last_date - utc_date(2026, 4, 30)).total_seconds()) < 1


def test_drag_beyond_end_clamps_to_end(interaction, mapper, sample_grants, progress_calls):
    alpha = grant_by_id(sample_grants, "A")
    interaction.press_marker(alpha, "alice")

    result = interaction.move(mapper.width + 500, sample_grants)

    assert result == alpha.end_date
    assert progress_calls[-1] == ("A", alpha.end_date)


def test_drag_before_start_clamps_to_start(interaction, sample_grants):
    alpha = grant_by_id(sample_grants, "A")
    interaction.press_marker(alpha, "alice")
    assert interaction.move(-1000, sample_grants) == alpha.start_date


def test_hover_suppressed_while_dragging(interaction, sample_grants):
    interaction.move(400, sample_grants)
    assert interaction.hover_date is not None

    interaction.press_marker(sample_grants[0], "alice")
    interaction.move(450, sample_grants)
    assert interaction.hover_date is None
    assert interaction.state is InteractionState.DRAGGING


def test_leave_does_not_end_drag(interaction, sample_grants):
    interaction.press_marker(sample_grants[0], "alice")
    interaction.leave()
    assert interaction.is_dragging


def test_release_returns_to_idle(interaction, sample_grants, progress_calls):
    interaction.press_marker(sample_grants[0], "alice")
    interaction.release()
    assert interaction.state is InteractionState.IDLE

    interaction.move(600, sample_grants)
    assert progress_calls == []


def test_stale_target_aborts_drag(interaction, sample_grants, progress_calls):
    interaction.press_marker(sample_grants[0], "alice")
    remaining = [g for g in sample_grants if g.id != "A"]

    assert interaction.move(600, remaining) is None
    assert interaction.state is InteractionState.IDLE
    assert interaction.drag_state == DragState()
    assert progress_calls == []


def test_move_without_mapper_is_ignored(sample_grants):
    controller = TimelineInteraction()
    assert controller.move(100, sample_grants) is None
    assert controller.state is InteractionState.IDLE


def test_cancel_abandons_drag(interaction, sample_grants):
    interaction.press_marker(sample_grants[0], "alice")
    interaction.cancel()
    assert not interaction.is_dragging
