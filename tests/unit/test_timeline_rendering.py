"""
Unit tests for the grant row renderer and scene items.
"""

import pytest
from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QImage, QPainter

from src.core.dates import utc_date
from src.core.grants import Grant, Milestone
from src.core.timeline_scale import (
    DEFAULT_PADDING,
    ROW_HEIGHT,
    CoordinateMapper,
    ZoomMode,
    calculate_scale,
)
from src.gui.widgets.timeline.grant_row_item import (
    GrantRowItem,
    MilestoneItem,
    ProgressMarkerItem,
    build_row_geometry,
    milestone_tooltip,
)
from src.gui.widgets.timeline.timeline_scene import (
    GridLineItem,
    TimelineScene,
    TodayLineItem,
)


def make_mapper(grants, mode=ZoomMode.MONTHLY):
    scale = calculate_scale(grants, mode)
    return CoordinateMapper(mode.timeline_width, DEFAULT_PADDING, scale)


@pytest.fixture
def scenario_grant():
    return Grant(
        id="A",
        name="Alpha",
        start_date=utc_date(2026, 1, 1),
        end_date=utc_date(2026, 3, 1),
        progress_date=utc_date(2026, 1, 1),
        assigned_users=frozenset({"alice"}),
    )


# ============================================================================
# Row geometry
# ============================================================================


def test_scenario_geometry(scenario_grant):
    mapper = make_mapper([scenario_grant])
    geo = build_row_geometry(scenario_grant, 0, mapper, DEFAULT_PADDING)

    assert geo.top == DEFAULT_PADDING.top
    assert geo.bar_y == DEFAULT_PADDING.top + 10
    assert geo.bar_height == ROW_HEIGHT - 20
    assert geo.background_width > 0
    assert not geo.has_progress  # progress == start


def test_row_offset_follows_index(scenario_grant):
    mapper = make_mapper([scenario_grant])
    geo = build_row_geometry(scenario_grant, 3, mapper, DEFAULT_PADDING)
    assert geo.top == DEFAULT_PADDING.top + 3 * ROW_HEIGHT


def test_progress_is_clamped_into_span(scenario_grant):
    mapper = make_mapper([scenario_grant])
    late = build_row_geometry(
        scenario_grant, 0, mapper, DEFAULT_PADDING, utc_date(2026, 8, 1)
    )
    assert late.progress_x == pytest.approx(late.end_x)
    assert late.has_progress


def test_malformed_grant_has_negative_width():
    bad = Grant(
        id="bad",
        name="Backwards",
        start_date=utc_date(2026, 3, 1),
        end_date=utc_date(2026, 1, 1),
        progress_date=utc_date(2026, 2, 1),
    )
    mapper = make_mapper([bad])
    geo = build_row_geometry(bad, 0, mapper, DEFAULT_PADDING)
    assert geo.background_width < 0
    assert not geo.has_progress


# ============================================================================
# Items
# ============================================================================


def test_marker_is_draggable_only_for_editors(qapp, scenario_grant):
    mapper = make_mapper([scenario_grant])
    editable = GrantRowItem(
        scenario_grant, 0, mapper, DEFAULT_PADDING, QColor("red"), True
    )
    readonly = GrantRowItem(
        scenario_grant, 0, mapper, DEFAULT_PADDING, QColor("red"), False
    )

    assert isinstance(editable.marker, ProgressMarkerItem)
    assert editable.marker.draggable
    assert editable.marker.cursor().shape() == Qt.SizeHorCursor
    assert not readonly.marker.draggable
    assert readonly.marker.cursor().shape() == Qt.ArrowCursor


def test_marker_centered_on_progress(qapp, scenario_grant):
    mapper = make_mapper([scenario_grant])
    row = GrantRowItem(scenario_grant, 0, mapper, DEFAULT_PADDING, QColor("red"), True)
    assert row.marker.center_x == pytest.approx(row.geometry.progress_x)
    assert row.marker.center_y == pytest.approx(row.geometry.center_y)


def test_set_progress_date_moves_marker(qapp, scenario_grant):
    mapper = make_mapper([scenario_grant])
    row = GrantRowItem(scenario_grant, 0, mapper, DEFAULT_PADDING, QColor("red"), True)

    row.set_progress_date(utc_date(2026, 2, 1))

    assert row.geometry.has_progress
    assert row.marker.center_x == pytest.approx(mapper.date_to_x(utc_date(2026, 2, 1)))
    assert "Feb 1, 2026" in row.marker.toolTip()


def test_milestones_without_date_are_skipped(qapp, scenario_grant):
    mapper = make_mapper([scenario_grant])
    scene = TimelineScene()
    row = GrantRowItem(scenario_grant, 0, mapper, DEFAULT_PADDING, QColor("red"), True)
    scene.addItem(row)

    row.set_milestones(
        [
            Milestone("m1", 1, utc_date(2026, 1, 20), "Kickoff"),
            Milestone("m2", 2, None, "Undated"),
            Milestone("m3", 3, utc_date(2026, 2, 20)),
        ]
    )

    assert [item.milestone.number for item in row.milestone_items] == [1, 3]
    first = row.milestone_items[0]
    assert isinstance(first, MilestoneItem)
    assert first.label_text == "M1"
    assert first.x_pos == pytest.approx(mapper.date_to_x(utc_date(2026, 1, 20)))
    assert first.toolTip() == "Milestone 1: Kickoff\nTarget: Jan 20, 2026"
    assert row.milestone_items[1].toolTip() == ""

    row.set_milestones([])
    assert row.milestone_items == []
    assert not [i for i in scene.items() if isinstance(i, MilestoneItem)]


def test_milestone_tooltip_requires_label():
    assert milestone_tooltip(Milestone("m", 1, utc_date(2026, 1, 1))) == ""


def test_rows_paint_without_errors(qapp, scenario_grant):
    bad = Grant(
        id="bad",
        name="Backwards",
        start_date=utc_date(2026, 3, 1),
        end_date=utc_date(2026, 1, 1),
        progress_date=utc_date(2026, 2, 1),
    )
    grants = [scenario_grant, bad]
    mapper = make_mapper(grants)
    scene = TimelineScene()
    for index, grant in enumerate(grants):
        row = GrantRowItem(grant, index, mapper, DEFAULT_PADDING, QColor("teal"), True)
        scene.addItem(row)
        row.set_milestones([Milestone("m1", 1, utc_date(2026, 2, 1), "Mid")])

    image = QImage(2400, 300, QImage.Format_ARGB32)
    image.fill(0)
    painter = QPainter(image)
    scene.render(painter)
    painter.end()


def test_grid_and_today_items(qapp):
    grid = GridLineItem(100, 60, 300, "Jan 2026")
    today = TodayLineItem(250, 60, 300)

    assert grid.x_pos == 100
    assert grid.label_text == "Jan 2026"
    assert grid.label_item.text() == "Jan 2026"
    assert today.x_pos == 250
    assert today.label_item.text() == "TODAY"
    assert today.pen().style() == Qt.DashLine

    label_x = today.label_item.x()
    today.set_x(300)
    assert today.x_pos == 300
    assert today.line().y1() == 60
    assert today.label_item.x() == pytest.approx(label_x + 50)
