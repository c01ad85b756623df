"""
Timeline Interaction Module.

Pointer state machine for the grant timeline, kept free of Qt types so the
drag and hover rules can be exercised directly:

- IDLE -> DRAGGING on press over an editable progress marker
- DRAGGING -> DRAGGING on move: x -> date, clamped to the grant's span,
  reported through on_progress on every move (no batching)
- DRAGGING -> IDLE on release anywhere, or when the grant disappears
- IDLE <-> HOVERING on move/leave while not dragging (tooltip only)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)


class InteractionState(Enum):
    """Pointer interaction states."""

    IDLE = "idle"
    HOVERING = "hovering"
    DRAGGING = "dragging"


@dataclass(frozen=True)
class DragState:
    """
    Snapshot of the drag.

    Attributes:
        is_dragging: Whether a progress marker is being dragged.
        active_grant_id: The dragged grant, None when idle.
    """

    is_dragging: bool = False
    active_grant_id: Optional[str] = None


class TimelineInteraction:
    """
    Drag/hover controller.

    The mapper is any object with x_to_date(x); it is replaced on every
    render pass so moves always use the current scale.
    """

    def __init__(
        self,
        on_progress: Optional[Callable[[str, datetime], None]] = None,
    ) -> None:
        """
        Initializes the controller.

        Args:
            on_progress: Called with (grant_id, clamped_date) on each drag move.
        """
        self.on_progress = on_progress
        self.mapper = None
        self._state = InteractionState.IDLE
        self._drag = DragState()
        self._hover_date: Optional[datetime] = None

    @property
    def state(self) -> InteractionState:
        """Current interaction state."""
        return self._state

    @property
    def drag_state(self) -> DragState:
        """Current drag snapshot."""
        return self._drag

    @property
    def is_dragging(self) -> bool:
        """Whether a drag is in progress."""
        return self._drag.is_dragging

    @property
    def hover_date(self) -> Optional[datetime]:
        """Date under the pointer; always None while dragging."""
        if self._drag.is_dragging:
            return None
        return self._hover_date

    def set_mapper(self, mapper) -> None:
        """Sets the coordinate mapper used to convert x to dates."""
        self.mapper = mapper

    def press_marker(self, grant, viewer_id: Optional[str]) -> bool:
        """
        Starts dragging a grant's progress marker.

        Args:
            grant: The grant whose marker was pressed.
            viewer_id: The current viewer.

        Returns:
            bool: True if the drag started.
        """
        if self._drag.is_dragging:
            return False
        if not grant.can_edit(viewer_id):
            logger.debug(f"Viewer {viewer_id!r} may not edit grant {grant.id}")
            return False

        self._drag = DragState(is_dragging=True, active_grant_id=grant.id)
        self._hover_date = None
        self._state = InteractionState.DRAGGING
        logger.debug(f"Started dragging progress of grant {grant.id}")
        return True

    def move(self, x: float, grants: Iterable) -> Optional[datetime]:
        """
        Handles pointer movement.

        While dragging, converts x to a date clamped to the active grant's
        span and reports it. Otherwise updates the hover date.

        Args:
            x: Pointer x in surface coordinates.
            grants: The current grant list (used to find the drag target).

        Returns:
            Optional[datetime]: The new progress date while dragging, the
                hover date otherwise, or None if there is no mapper or the
                drag target disappeared.
        """
        if self.mapper is None:
            return None

        if not self._drag.is_dragging:
            self._hover_date = self.mapper.x_to_date(x)
            self._state = InteractionState.HOVERING
            return self._hover_date

        grant_id = self._drag.active_grant_id
        grant = next((g for g in grants if g.id == grant_id), None)
        if grant is None:
            logger.debug(f"Drag target {grant_id} disappeared, aborting drag")
            self.cancel()
            return None

        new_date = grant.clamp_to_span(self.mapper.x_to_date(x))
        if self.on_progress:
            self.on_progress(grant_id, new_date)
        return new_date

    def release(self) -> None:
        """Ends any drag, wherever the pointer is."""
        if self._drag.is_dragging:
            logger.debug(f"Finished dragging grant {self._drag.active_grant_id}")
        self._drag = DragState()
        self._state = InteractionState.IDLE

    def leave(self) -> None:
        """Pointer left the surface: clears the hover date only."""
        self._hover_date = None
        if not self._drag.is_dragging:
            self._state = InteractionState.IDLE

    def cancel(self) -> None:
        """Abandons a drag without rollback and clears hover state."""
        self._drag = DragState()
        self._hover_date = None
        self._state = InteractionState.IDLE
