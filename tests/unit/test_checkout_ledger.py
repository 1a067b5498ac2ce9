import fakeredis
import pytest

from storefront.cart.models import ShippingAddress
from storefront.checkout.ledger import (
    InMemoryIdempotencyStore,
    RedisIdempotencyStore,
    SessionIdempotencyStore,
    clear_shipping_snapshot,
    get_idempotency_store,
    load_shipping_snapshot,
    save_shipping_snapshot,
)


@pytest.fixture(params=["session", "redis", "memory"])
def store(request):
    if request.param == "session":
        return SessionIdempotencyStore({})
    if request.param == "redis":
        return RedisIdempotencyStore(fakeredis.FakeRedis(decode_responses=True), ttl_seconds=60)
    return InMemoryIdempotencyStore()


def test_processed_and_emailed_are_tracked_separately(store):
    assert not store.has_processed("ABC123")
    store.mark_processed("ABC123")
    assert store.has_processed("ABC123")
    assert not store.has_emailed("ABC123")
    store.mark_emailed("ABC123")
    assert store.has_emailed("ABC123")
    assert not store.has_processed("OTHER")


def test_marking_twice_is_harmless(store):
    store.mark_processed("T1")
    store.mark_processed("T1")
    assert store.has_processed("T1")


def test_session_store_keeps_json_friendly_lists():
    session = {}
    ledger = SessionIdempotencyStore(session)
    ledger.mark_processed("B")
    ledger.mark_processed("A")
    ledger.mark_processed("B")
    assert session["processed_orders"] == ["A", "B"]


def test_session_store_keeps_only_recent_tokens():
    session = {}
    ledger = SessionIdempotencyStore(session, max_tokens=3)
    for token in ("T1", "T2", "T3", "T4", "T5"):
        ledger.mark_processed(token)
        ledger.mark_emailed(token)
    assert session["processed_orders"] == ["T3", "T4", "T5"]
    assert session["emailed_orders"] == ["T3", "T4", "T5"]
    assert ledger.has_processed("T5")
    assert not ledger.has_processed("T1")


def test_session_store_limit_comes_from_config(monkeypatch):
    monkeypatch.setattr("storefront.config.IDEMPOTENCY_SESSION_MAX_TOKENS", 2)
    session = {}
    ledger = SessionIdempotencyStore(session)
    for token in ("T1", "T2", "T3"):
        ledger.mark_processed(token)
    assert session["processed_orders"] == ["T2", "T3"]


def test_redis_store_sets_ttl():
    client = fakeredis.FakeRedis(decode_responses=True)
    RedisIdempotencyStore(client, ttl_seconds=120).mark_emailed("T9")
    assert 0 < client.ttl("order:T9:emailed") <= 120


def test_redis_read_failure_counts_as_not_processed():
    class _Broken:
        def exists(self, key):
            raise ConnectionError("down")

    assert RedisIdempotencyStore(_Broken()).has_processed("T") is False


def test_get_idempotency_store_defaults_to_session():
    assert isinstance(get_idempotency_store({}), SessionIdempotencyStore)


def test_get_idempotency_store_redis_backend(monkeypatch):
    monkeypatch.setattr("storefront.config.IDEMPOTENCY_BACKEND", "redis")
    monkeypatch.setattr("storefront.checkout.ledger._redis_client", fakeredis.FakeRedis(decode_responses=True))
    assert isinstance(get_idempotency_store({}), RedisIdempotencyStore)


def test_shipping_snapshot_round_trip_and_clear():
    session = {}
    address = ShippingAddress(name="Ada", address="1 Main", city="Toronto", state="ON", postal_code="M5V", country="CA")
    save_shipping_snapshot(session, address)
    assert load_shipping_snapshot(session) == address
    clear_shipping_snapshot(session)
    assert load_shipping_snapshot(session) is None


def test_invalid_shipping_snapshot_is_ignored():
    assert load_shipping_snapshot({"shipping_address": {"name": ""}}) is None
