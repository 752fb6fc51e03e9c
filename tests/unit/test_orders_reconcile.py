import pytest

from backend.infra.errors import StoreError
from backend.orders.models import ReconcileStatus
from backend.orders.service import reconcile_session, handle_webhook_event


def _paid_session(**overrides):
    session = {
        "id": "cs_test_1",
        "payment_intent": "pi_123",
        "payment_status": "paid",
        "amount_total": 2400,
        "customer_details": {"email": "test@example.com", "name": "Test User"},
        "metadata": {
            "user_id": "user-123",
            "user_email": "test@example.com",
            "customer_id": "cust-9",
            "product_ids": "p1,p2",
            "quantities": "2,1",
        },
    }
    session.update(overrides)
    return session


@pytest.fixture
def ready(store, fake_stripe):
    store.add_product("p1", "Mug", 12, 5)
    store.add_product("p2", "Cap", 0, 3)
    fake_stripe.line_items["cs_test_1"] = [{"amount_total": 2400}, {"amount_total": 0}]
    return store, fake_stripe


def test_reconcile_creates_order_and_decrements_stock(ready):
    store, _ = ready
    result = reconcile_session(_paid_session())
    assert result.status is ReconcileStatus.CREATED
    assert len(store.orders) == 1
    order = result.order
    assert order["stripe_payment_id"] == "pi_123"
    assert order["customer_id"] == "cust-9"
    assert order["items"][0]["price_at_purchase"] == 24.0
    assert store.products["p1"]["stock"] == 3
    assert store.products["p2"]["stock"] == 2
    assert store.decrements == [[("p1", 2), ("p2", 1)]]


def test_reconcile_twice_is_noop(ready):
    store, _ = ready
    first = reconcile_session(_paid_session())
    second = reconcile_session(_paid_session(), source="fallback")
    assert second.status is ReconcileStatus.EXISTS
    assert second.order["id"] == first.order["id"]
    assert len(store.orders) == 1
    assert len(store.decrements) == 1
    assert store.products["p1"]["stock"] == 3


def test_reconcile_concurrent_writer_wins_race(ready, monkeypatch):
    store, _ = ready
    reconcile_session(_paid_session())
    real_get = store.get_order_by_payment_id
    reads = []

    # Lecture périmée: le second écrivain ne voit pas encore la commande
    def stale_first_read(pid):
        reads.append(pid)
        return None if len(reads) == 1 else real_get(pid)
    monkeypatch.setattr("backend.orders.repository.get_order_by_payment_id", stale_first_read)

    result = reconcile_session(_paid_session(), source="fallback")
    assert result.status is ReconcileStatus.EXISTS
    assert len(store.orders) == 1
    assert len(store.decrements) == 1


def test_reconcile_missing_metadata_skips(ready):
    store, stripe = ready
    session = _paid_session(metadata={"user_id": "user-123"})
    result = reconcile_session(session)
    assert result.status is ReconcileStatus.SKIPPED
    assert result.reason == "missing_metadata"
    assert store.orders == {}
    assert "list_line_items" not in stripe.calls


def test_reconcile_without_write_credential_creates_nothing(ready):
    store, _ = ready
    store.write_credential = False
    result = reconcile_session(_paid_session())
    assert result.status is ReconcileStatus.SKIPPED
    assert result.reason == "missing_write_credential"
    assert store.orders == {}
    assert store.decrements == []


def test_reconcile_propagates_store_errors(ready, monkeypatch):
    def boom(doc):
        raise StoreError("connection reset")
    monkeypatch.setattr("backend.orders.repository.create_order", boom)
    with pytest.raises(StoreError):
        reconcile_session(_paid_session())


def test_handle_webhook_event_ignores_other_types(ready):
    store, _ = ready
    assert handle_webhook_event({"type": "payment_intent.created", "data": {"object": {}}}) is None
    assert store.calls == []


def test_handle_webhook_event_checkout_completed(ready):
    store, _ = ready
    result = handle_webhook_event({"type": "checkout.session.completed", "data": {"object": _paid_session()}})
    assert result.status is ReconcileStatus.CREATED
    assert len(store.orders) == 1
