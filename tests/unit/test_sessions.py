"""Unit tests for cookie signing and the session stores."""

import time
from unittest.mock import MagicMock, patch

import jwt
import pytest
import redis

from app.exceptions import SessionStoreError
from app.infrastructure.session_store import (
    InMemorySessionStore,
    RedisSessionStore,
    create_session_store,
)
from app.sessions import JWT_ALGORITHM, SessionManager

pytestmark = pytest.mark.unit

SECRET = "unit-test-secret-0123456789abcdef"


@pytest.fixture
def manager():
    return SessionManager(InMemorySessionStore(), secret=SECRET)


class TestSigning:
    def test_round_trip(self, manager):
        assert manager.unsign(manager.sign("abc")) == "abc"

    def test_cookie_is_hs256_jwt_with_expiry(self, manager):
        payload = jwt.decode(manager.sign("abc"), SECRET, algorithms=[JWT_ALGORITHM])

        assert payload["sid"] == "abc"
        assert payload["exp"] - payload["iat"] == manager.ttl_seconds

    def test_rejects_tampering(self, manager):
        header, body, _signature = manager.sign("abc").split(".")

        assert manager.unsign(f"{header}.{body}.forged") is None
        assert manager.unsign(f"{header}.{body}") is None
        assert manager.unsign("abc") is None
        assert manager.unsign("") is None

    def test_rejects_other_secret(self, manager):
        other = SessionManager(
            InMemorySessionStore(), secret="different-secret-0123456789abcdef"
        )

        assert other.unsign(manager.sign("abc")) is None

    def test_rejects_expired(self):
        expired = SessionManager(InMemorySessionStore(), secret=SECRET, ttl_seconds=-60)

        assert expired.unsign(expired.sign("abc")) is None

    def test_rejects_token_without_sid(self, manager):
        forged = jwt.encode(
            {"exp": int(time.time()) + 60}, SECRET, algorithm=JWT_ALGORITHM
        )

        assert manager.unsign(forged) is None

    def test_rejects_alg_none(self, manager):
        unsigned = jwt.encode(
            {"sid": "abc", "exp": int(time.time()) + 60}, "", algorithm="none"
        )

        assert manager.unsign(unsigned) is None


class TestInMemorySessionStore:
    def test_set_get_delete(self):
        store = InMemorySessionStore()
        store.set("t", 5, ttl_seconds=60)

        assert store.get("t") == 5
        store.delete("t")
        assert store.get("t") is None
        store.delete("t")

    def test_expiry(self):
        store = InMemorySessionStore()
        store.set("t", 5, ttl_seconds=0.05)

        time.sleep(0.1)

        assert store.get("t") is None
        assert len(store) == 0

    def test_abandoned_sessions_swept_on_write(self):
        store = InMemorySessionStore()
        clock = "app.infrastructure.session_store.time.monotonic"

        with patch(clock, return_value=0.0):
            for index in range(1000):
                store.set(f"abandoned-{index}", index, ttl_seconds=10)
        with patch(clock, return_value=10_000.0):
            store.set("fresh", 1, ttl_seconds=10)

        assert len(store) == 1
        with patch(clock, return_value=10_001.0):
            assert store.get("fresh") == 1

    def test_clear(self):
        store = InMemorySessionStore()
        store.set("a", 1, 60)
        store.set("b", 2, 60)

        store.clear()

        assert len(store) == 0


class TestRedisSessionStore:
    def test_uses_prefixed_keys_and_setex(self):
        client = MagicMock()
        store = RedisSessionStore("redis://unused", client=client)

        store.set("tok", 42, 3600)

        client.setex.assert_called_once_with("employee-api:session:tok", 3600, "42")

    def test_get_parses_employee_id(self):
        client = MagicMock()
        client.get.return_value = "42"
        store = RedisSessionStore("redis://unused", client=client)

        assert store.get("tok") == 42

    def test_get_missing(self):
        client = MagicMock()
        client.get.return_value = None

        assert RedisSessionStore("redis://unused", client=client).get("tok") is None

    def test_malformed_value_is_discarded(self):
        client = MagicMock()
        client.get.return_value = "not-a-number"
        store = RedisSessionStore("redis://unused", client=client)

        assert store.get("tok") is None
        client.delete.assert_called_once_with("employee-api:session:tok")

    def test_redis_errors_surface(self):
        client = MagicMock()
        client.get.side_effect = redis.ConnectionError("down")
        store = RedisSessionStore("redis://unused", client=client)

        with pytest.raises(SessionStoreError):
            store.get("tok")


def test_create_session_store_defaults_to_memory(settings):
    assert isinstance(create_session_store(settings), InMemorySessionStore)


def test_create_session_store_redis(settings_factory):
    settings = settings_factory(
        session_backend="redis", redis_url="redis://localhost:6379/0"
    )

    assert isinstance(create_session_store(settings), RedisSessionStore)


def test_session_store_outage_is_500(build_client, make_employee, login, monkeypatch):
    client = build_client()
    login(client, make_employee().id)
    store = client.app.state.container.sessions.store
    monkeypatch.setattr(
        store, "get", MagicMock(side_effect=SessionStoreError("store down"))
    )

    response = client.get("/protected")

    assert response.status_code == 500
    assert "store down" not in response.text
