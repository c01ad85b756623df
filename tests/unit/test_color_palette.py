"""
Unit tests for ColorAssigner and color token parsing.
"""

from types import SimpleNamespace

from src.core.color_palette import HUES, ColorAssigner
from src.gui.utils.style_helper import FALLBACK_COLOR, parse_color


def test_hues_cycle_in_first_seen_order():
    assigner = ColorAssigner()
    tokens = [assigner.color_for(f"g{i}") for i in range(len(HUES) + 1)]
    assert tokens[0] == "hsl(0, 65%, 50%)"
    assert tokens[1] == "hsl(30, 65%, 50%)"
    assert tokens[len(HUES)] == tokens[0]


def test_assignment_is_stable():
    assigner = ColorAssigner()
    first = assigner.color_for("a")
    assigner.color_for("b")
    assert assigner.color_for("a") == first
    assert assigner.assigned_ids == ["a", "b"]


def test_assigners_are_independent():
    one, two = ColorAssigner(), ColorAssigner()
    one.color_for("x")
    assert two.color_for("y") == "hsl(0, 65%, 50%)"


def test_retain_forgets_removed_grants():
    assigner = ColorAssigner()
    assigner.color_for("a")
    second = assigner.color_for("b")
    assigner.retain(["b"])

    assert assigner.assigned_ids == ["b"]
    assert assigner.color_for("b") == second
    # The cycle keeps going: "a" comes back with the next hue
    assert assigner.color_for("a") == "hsl(60, 65%, 50%)"


def test_resolve_prefers_grant_color():
    assigner = ColorAssigner()
    assert assigner.resolve(SimpleNamespace(id="a", color="#ff0000")) == "#ff0000"
    assert assigner.resolve(SimpleNamespace(id="b", color="")).startswith("hsl(")


def test_parse_color_tokens(qapp):
    assert parse_color("#ff0000").red() == 255
    assert parse_color("hsl(120, 65%, 50%)").green() > parse_color(
        "hsl(120, 65%, 50%)"
    ).red()
    assert parse_color("not-a-color").name() == FALLBACK_COLOR
    assert parse_color("").name() == FALLBACK_COLOR
