"""
Tests that the reference store satisfies the store protocols.
"""

from src.core.protocols import GrantStoreProtocol, SubscriptionProtocol
from src.services.grant_store import InMemoryGrantStore, Subscription


def test_in_memory_store_implements_protocol(qtbot):
    assert isinstance(InMemoryGrantStore(), GrantStoreProtocol)


def test_subscription_implements_protocol():
    assert isinstance(Subscription("b1", lambda grants: None), SubscriptionProtocol)


def test_plain_object_does_not_satisfy_protocol():
    assert not isinstance(object(), GrantStoreProtocol)


def test_store_without_update_does_not_satisfy_protocol():
    class ReadOnlyStore:
        def subscribe(self, board_id, on_update): ...

        def subscribe_milestones(self, grant_id, on_update): ...

        def set_progress_date(self, grant_id, date, on_error=None): ...

        def delete_grant(self, grant_id, on_error=None, on_success=None): ...

    assert not isinstance(ReadOnlyStore(), GrantStoreProtocol)
