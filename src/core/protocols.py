"""
Protocol Interfaces for Loose Coupling.

This module defines Protocol interfaces (PEP 544) for the grant/milestone
store the timeline reads from and writes progress dates to. Any backend
that implements these methods can drive the timeline without the UI
depending on a concrete implementation.
"""

from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class SubscriptionProtocol(Protocol):
    """
    Cancellation handle returned by store subscriptions.

    unsubscribe() must be idempotent; once called, no further callbacks
    are delivered.
    """

    @property
    def active(self) -> bool:
        """Whether the subscription still delivers updates."""
        ...

    def unsubscribe(self) -> None:
        """Stops delivery of further updates."""
        ...


@runtime_checkable
class GrantStoreProtocol(Protocol):
    """
    Protocol for the realtime grant/milestone store.

    Snapshots are pushed asynchronously; callers must not assume delivery is
    synchronous or exactly-once. Writes are best-effort and report failures
    through the optional on_error callback.
    """

    def subscribe(
        self, board_id: Optional[str], on_update: Callable[[List], None]
    ) -> SubscriptionProtocol:
        """
        Subscribes to the full grant list of a board.

        Args:
            board_id: Board to watch, or None for every grant.
            on_update: Called with the current grants ordered by start date.

        Returns:
            A subscription handle.
        """
        ...

    def subscribe_milestones(
        self, grant_id: str, on_update: Callable[[List], None]
    ) -> SubscriptionProtocol:
        """
        Subscribes to one grant's milestones.

        Args:
            grant_id: The grant to watch.
            on_update: Called with milestones ordered by number.

        Returns:
            A subscription handle.
        """
        ...

    def set_progress_date(
        self,
        grant_id: str,
        progress_date: datetime,
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> None:
        """
        Writes a grant's progress date.

        Args:
            grant_id: The grant to update.
            progress_date: New progress date (aware UTC).
            on_error: Called with the failure, if any.
        """
        ...

    def delete_grant(
        self,
        grant_id: str,
        on_error: Optional[Callable[[Exception], None]] = None,
        on_success: Optional[Callable[[], None]] = None,
    ) -> None:
        """
        Deletes a grant and its milestones.

        Args:
            grant_id: The grant to delete.
            on_error: Called with the failure, if any.
            on_success: Called once the delete completed.
        """
        ...

    def update_grant(self, grant_id: str, updates: Dict[str, Any]) -> None:
        """
        Merges edited fields into a grant.

        Raises:
            StoreError: If the grant does not exist.
        """
        ...
