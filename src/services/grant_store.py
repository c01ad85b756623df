"""
Grant Store Module.

In-memory implementation of the realtime grant/milestone store.

Snapshots and write results are delivered on the next turn of the Qt event
loop, never inside the calling method, so the timeline is exercised with
the same asynchronous delivery a managed realtime backend gives it.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from PySide6.QtCore import QObject, QTimer, Signal

from src.core.dates import to_utc
from src.core.grants import Grant, Milestone, sort_milestones

logger = logging.getLogger(__name__)

ErrorCallback = Optional[Callable[[Exception], None]]


class StoreError(Exception):
    """Raised or reported when a store operation fails."""


def _validate_seed(path, grant_docs, milestone_docs) -> None:
    """
    Checks the shape of seed data before anything is added to the store.

    Raises:
        StoreError: If grants is not a list of objects, or milestones is
            not an object mapping grant ids to lists of objects.
    """
    if not isinstance(grant_docs, list):
        raise StoreError(f"Seed file {path}: 'grants' must be a list")
    for index, doc in enumerate(grant_docs):
        if not isinstance(doc, dict):
            raise StoreError(f"Seed file {path}: grant #{index} is not an object")

    if not isinstance(milestone_docs, dict):
        raise StoreError(
            f"Seed file {path}: 'milestones' must map grant ids to lists"
        )
    for grant_id, docs in milestone_docs.items():
        if not isinstance(docs, list) or not all(isinstance(d, dict) for d in docs):
            raise StoreError(
                f"Seed file {path}: milestones of {grant_id!r} must be a list of objects"
            )


class Subscription:
    """
    Cancellation handle for a store subscription.

    unsubscribe() is idempotent and takes effect immediately: snapshots
    already queued for delivery are dropped.
    """

    def __init__(self, key: Optional[str], callback: Callable[[List], None]) -> None:
        """
        Initializes the subscription.

        Args:
            key: Board id (grant subscriptions) or grant id (milestones).
            callback: Receiver of snapshots.
        """
        self.key = key
        self.callback = callback
        self._active = True

    @property
    def active(self) -> bool:
        """Whether the subscription still delivers updates."""
        return self._active

    def unsubscribe(self) -> None:
        """Stops delivery of further updates."""
        self._active = False


class InMemoryGrantStore(QObject):
    """
    Reference grant store backed by plain dictionaries.

    Grants and milestones are kept as camelCase documents, the shape a
    document database returns, and converted to Grant/Milestone on delivery.
    """

    error_occurred = Signal(str)

    def __init__(self, parent=None) -> None:
        """
        Initializes an empty store.

        Args:
            parent: Optional parent QObject.
        """
        super().__init__(parent)
        self._grants: Dict[str, dict] = {}
        self._milestones: Dict[str, Dict[str, dict]] = {}
        self._grant_subscriptions: List[Subscription] = []
        self._milestone_subscriptions: List[Subscription] = []
        self._pending_write_failure: Optional[str] = None
        self._pending_subscription_failure: Optional[str] = None

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(
        self, board_id: Optional[str], on_update: Callable[[List[Grant]], None]
    ) -> Subscription:
        """
        Subscribes to the grants of a board.

        Args:
            board_id: Board to watch, or None for every grant.
            on_update: Called with grants ordered by start date ascending.

        Returns:
            Subscription: Handle to cancel delivery.
        """
        subscription = Subscription(board_id, on_update)
        self._grant_subscriptions.append(subscription)
        logger.debug(f"Grant subscription added for board {board_id!r}")
        QTimer.singleShot(0, lambda: self._deliver_grants(subscription))
        return subscription

    def subscribe_milestones(
        self, grant_id: str, on_update: Callable[[List[Milestone]], None]
    ) -> Subscription:
        """
        Subscribes to one grant's milestones.

        Args:
            grant_id: The grant to watch.
            on_update: Called with milestones ordered by number ascending.

        Returns:
            Subscription: Handle to cancel delivery.
        """
        subscription = Subscription(grant_id, on_update)
        self._milestone_subscriptions.append(subscription)
        QTimer.singleShot(0, lambda: self._deliver_milestones(subscription))
        return subscription

    def active_subscription_count(self) -> int:
        """Returns how many grant and milestone subscriptions are live."""
        self._prune_subscriptions()
        return len(self._grant_subscriptions) + len(self._milestone_subscriptions)

    def _prune_subscriptions(self) -> None:
        self._grant_subscriptions = [s for s in self._grant_subscriptions if s.active]
        self._milestone_subscriptions = [
            s for s in self._milestone_subscriptions if s.active
        ]

    def _grant_snapshot(self, board_id: Optional[str]) -> List[Grant]:
        """Builds the ordered grant list of a board, skipping bad documents."""
        if self._pending_subscription_failure is not None:
            message = self._pending_subscription_failure
            self._pending_subscription_failure = None
            raise StoreError(message)

        grants = []
        for doc in self._grants.values():
            if board_id is not None and doc.get("boardId") != board_id:
                continue
            try:
                grants.append(Grant.from_dict(doc))
            except ValueError as e:
                logger.error(f"Skipping malformed grant document {doc.get('id')}: {e}")
        grants.sort(key=lambda g: g.start_date)
        return grants

    def _deliver_grants(self, subscription: Subscription) -> None:
        if not subscription.active:
            return
        try:
            snapshot = self._grant_snapshot(subscription.key)
        except Exception as e:
            logger.error(f"Error delivering grants: {traceback.format_exc()}")
            self.error_occurred.emit(f"Failed to load grants: {e}")
            snapshot = []
        subscription.callback(snapshot)

    def _deliver_milestones(self, subscription: Subscription) -> None:
        if not subscription.active:
            return
        milestones = []
        for doc in self._milestones.get(subscription.key, {}).values():
            try:
                milestones.append(Milestone.from_dict(doc))
            except ValueError as e:
                logger.error(f"Skipping malformed milestone document: {e}")
        subscription.callback(sort_milestones(milestones))

    def _notify_grants(self) -> None:
        self._prune_subscriptions()
        for subscription in list(self._grant_subscriptions):
            QTimer.singleShot(
                0, lambda s=subscription: self._deliver_grants(s)
            )

    def _notify_milestones(self, grant_id: str) -> None:
        self._prune_subscriptions()
        for subscription in list(self._milestone_subscriptions):
            if subscription.key == grant_id:
                QTimer.singleShot(
                    0, lambda s=subscription: self._deliver_milestones(s)
                )

    # ------------------------------------------------------------------
    # Writes used by the timeline
    # ------------------------------------------------------------------

    def set_progress_date(
        self,
        grant_id: str,
        progress_date: datetime,
        on_error: ErrorCallback = None,
    ) -> None:
        """
        Writes a grant's progress date asynchronously.

        Args:
            grant_id: The grant to update.
            progress_date: New progress date.
            on_error: Called with a StoreError if the write fails.
        """
        value = to_utc(progress_date)
        QTimer.singleShot(
            0, lambda: self._apply_progress_date(grant_id, value, on_error)
        )

    def _apply_progress_date(
        self, grant_id: str, value: datetime, on_error: ErrorCallback
    ) -> None:
        try:
            self._check_write_failure()
            doc = self._grants.get(grant_id)
            if doc is None:
                raise StoreError(f"Grant {grant_id} not found")
            doc["progressDate"] = value.isoformat()
            doc["updatedAt"] = datetime.now(timezone.utc).isoformat()
        except StoreError as e:
            self._report_error("update progress", e, on_error)
            return
        self._notify_grants()

    def delete_grant(
        self,
        grant_id: str,
        on_error: ErrorCallback = None,
        on_success: Optional[Callable[[], None]] = None,
    ) -> None:
        """
        Deletes a grant and its milestones asynchronously.

        Args:
            grant_id: The grant to delete.
            on_error: Called with a StoreError if the delete fails.
            on_success: Called once the grant is gone.
        """
        QTimer.singleShot(
            0, lambda: self._apply_delete(grant_id, on_error, on_success)
        )

    def _apply_delete(
        self,
        grant_id: str,
        on_error: ErrorCallback,
        on_success: Optional[Callable[[], None]],
    ) -> None:
        try:
            self._check_write_failure()
            if grant_id not in self._grants:
                raise StoreError(f"Grant {grant_id} not found")
            # Milestones first so no orphan survives a partial failure
            self._milestones.pop(grant_id, None)
            del self._grants[grant_id]
        except StoreError as e:
            self._report_error("delete grant", e, on_error)
            return

        logger.info(f"Deleted grant {grant_id}")
        self._notify_milestones(grant_id)
        self._notify_grants()
        if on_success:
            on_success()

    def _check_write_failure(self) -> None:
        if self._pending_write_failure is not None:
            message = self._pending_write_failure
            self._pending_write_failure = None
            raise StoreError(message)

    def _report_error(
        self, operation: str, error: Exception, on_error: ErrorCallback
    ) -> None:
        logger.error(f"Failed to {operation}: {error}")
        self.error_occurred.emit(f"Failed to {operation}: {error}")
        if on_error:
            on_error(error)

    # ------------------------------------------------------------------
    # Seeding and test hooks
    # ------------------------------------------------------------------

    def add_grant(self, grant: Union[Grant, dict]) -> str:
        """
        Adds or replaces a grant document.

        Args:
            grant: A Grant or a camelCase document. Documents without an
                id get a generated one.

        Returns:
            str: The grant id.
        """
        doc = grant.to_dict() if isinstance(grant, Grant) else dict(grant)
        doc.setdefault("id", str(uuid.uuid4()))
        doc.setdefault("progressDate", doc.get("startDate"))
        self._grants[doc["id"]] = doc
        self._notify_grants()
        return doc["id"]

    def update_grant(self, grant_id: str, updates: dict) -> None:
        """
        Merges fields into an existing grant document.

        Raises:
            StoreError: If the grant does not exist.
        """
        if grant_id not in self._grants:
            raise StoreError(f"Grant {grant_id} not found")
        self._grants[grant_id].update(updates)
        self._notify_grants()

    def add_milestone(self, grant_id: str, milestone: Union[Milestone, dict]) -> str:
        """
        Adds or replaces a milestone of a grant.

        Returns:
            str: The milestone id.
        """
        doc = milestone.to_dict() if isinstance(milestone, Milestone) else dict(milestone)
        doc.setdefault("id", str(uuid.uuid4()))
        self._milestones.setdefault(grant_id, {})[doc["id"]] = doc
        self._notify_milestones(grant_id)
        return doc["id"]

    def delete_milestone(self, grant_id: str, milestone_id: str) -> None:
        """Removes a milestone if present."""
        if self._milestones.get(grant_id, {}).pop(milestone_id, None) is not None:
            self._notify_milestones(grant_id)

    def get_grant(self, grant_id: str) -> Optional[Grant]:
        """Returns the current state of a grant, or None."""
        doc = self._grants.get(grant_id)
        return Grant.from_dict(doc) if doc else None

    def fail_next_write(self, message: str = "Simulated backend failure") -> None:
        """Makes the next write operation fail with StoreError."""
        self._pending_write_failure = message

    def fail_next_subscription(self, message: str = "Simulated listener failure") -> None:
        """Makes the next grant snapshot delivery fail."""
        self._pending_subscription_failure = message

    def load_seed_file(self, path: Union[str, Path]) -> int:
        """
        Loads grants and milestones from a JSON file.

        Expected shape::

            {"grants": [{...}, ...], "milestones": {"<grant id>": [{...}]}}

        Args:
            path: Path to the JSON file.

        Returns:
            int: Number of grants loaded.

        Raises:
            StoreError: If the file cannot be read or has the wrong shape.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read seed file {path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(f"Seed file {path} must contain a JSON object")
        grant_docs = data.get("grants") or []
        milestone_docs = data.get("milestones") or {}
        _validate_seed(path, grant_docs, milestone_docs)

        for doc in grant_docs:
            self.add_grant(doc)
        for grant_id, docs in milestone_docs.items():
            for doc in docs:
                self.add_milestone(grant_id, doc)

        logger.info(f"Loaded {len(grant_docs)} grants from {path}")
        return len(grant_docs)
