from __future__ import annotations
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from evolvefit.services.kv_store import (
    InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore, StorageError, build_store, user_key,
)


def test_json_round_trip_and_defaults():
    store = InMemoryKeyValueStore()
    assert store.load_json("missing", default=[]) == []
    assert store.save_json("k", {"a": [1, 2]}) is True
    assert store.load_json("k") == {"a": [1, 2]}


def test_unserializable_value_is_reported_not_raised():
    store = InMemoryKeyValueStore()
    circular = []
    circular.append(circular)
    assert store.save_json("k", circular) is False
    assert store.get("k") is None


def test_user_key():
    assert user_key("evolvefit_user_contest_state", "u1") == "evolvefit_user_contest_state_u1"


def test_build_store_backends():
    assert isinstance(build_store("memory"), InMemoryKeyValueStore)
    assert isinstance(build_store("redis"), RedisKeyValueStore)
    with pytest.raises(ValueError):
        build_store("sqlite")


class _DownClient:
    def get(self, key):
        raise RedisConnectionError("connection refused")

    def set(self, key, value):
        raise RedisConnectionError("connection refused")


def test_redis_errors_become_defaults():
    store = RedisKeyValueStore("redis://localhost:1/0")
    store._client = _DownClient()
    with pytest.raises(StorageError):
        store.get("k")
    assert store.load_json("k", default={"fallback": True}) == {"fallback": True}
    assert store.save_json("k", {"x": 1}) is False


def test_base_store_is_abstract():
    with pytest.raises(TypeError):
        KeyValueStore()

    class _ReadOnly(KeyValueStore):
        def get(self, key):
            return None

    with pytest.raises(TypeError):
        _ReadOnly()
