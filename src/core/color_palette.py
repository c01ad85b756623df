"""
Color Palette Module.

Assigns distinct HSL colors to grants by cycling through a fixed hue list.
A ColorAssigner is an ordinary object owned by whoever renders the
timeline and passed into the render call; there is no shared global state.
"""

from typing import Dict, Iterable, List

HUES: List[int] = [0, 30, 60, 120, 180, 210, 240, 270, 300, 330]

SATURATION = 65
LIGHTNESS = 50


class ColorAssigner:
    """
    Deterministic hue-cycling color assignment keyed by grant id.

    The first grant seen gets HUES[0], the second HUES[1], and so on,
    wrapping around. Once assigned, a grant keeps its color for as long as
    it stays on the board.
    """

    def __init__(self) -> None:
        self._next_index = 0
        self._assigned: Dict[str, str] = {}

    def color_for(self, grant_id: str) -> str:
        """
        Returns the color token for a grant, assigning one if needed.

        Args:
            grant_id: The grant's id.

        Returns:
            str: An "hsl(h, s%, l%)" token.
        """
        if grant_id in self._assigned:
            return self._assigned[grant_id]

        hue = HUES[self._next_index % len(HUES)]
        self._next_index += 1

        color = f"hsl({hue}, {SATURATION}%, {LIGHTNESS}%)"
        self._assigned[grant_id] = color
        return color

    def resolve(self, grant) -> str:
        """
        Returns the grant's own color token, or an assigned one if empty.

        Args:
            grant: Object with id and color attributes.
        """
        return grant.color or self.color_for(grant.id)

    def retain(self, grant_ids: Iterable[str]) -> None:
        """
        Forgets the assignments of grants that are no longer shown.

        The hue cycle keeps advancing, so a returning grant gets a fresh
        color rather than one another grant is using.
        """
        keep = set(grant_ids)
        for grant_id in [g for g in self._assigned if g not in keep]:
            del self._assigned[grant_id]

    @property
    def assigned_ids(self) -> List[str]:
        """Ids of grants that currently hold a color."""
        return list(self._assigned)
