from __future__ import annotations
import json
from abc import ABC, abstractmethod
from typing import Any
import structlog
from redis import Redis
from redis.exceptions import RedisError
from evolvefit.config import settings

log = structlog.get_logger()

# Fixed keys; per-user keys are built as f"{PREFIX}_{user_id}"
POSTS_KEY = "evolvefit_posts"
COMMENTS_KEY = "evolvefit_post_comments"
LIKES_KEY = "evolvefit_post_likes"
CONTESTS_KEY = "evolvefit_contests"
SUBMISSIONS_KEY = "evolvefit_contest_submissions"
VOTES_KEY = "evolvefit_contest_votes"
LEADERBOARD_KEY = "evolvefit_leaderboard"
USER_CONTEST_STATE_PREFIX = "evolvefit_user_contest_state"
USER_REWARDS_PREFIX = "evolvefit_user_rewards"


class StorageError(Exception):
    pass


class KeyValueStore(ABC):
    """String key -> string value. Subclasses raise StorageError on backend failure."""

    @abstractmethod
    def get(self, key: str) -> str | None: ...

    @abstractmethod
    def set(self, key: str, value: str) -> None: ...

    def load_json(self, key: str, default: Any = None) -> Any:
        """
        Parse the JSON blob under `key`.
        Missing keys, backend errors and bad JSON all come back as `default`.
        """
        try:
            raw = self.get(key)
        except StorageError as e:
            log.warning("kv_load_failed", key=key, error=str(e))
            return default
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError as e:
            log.warning("kv_decode_failed", key=key, error=str(e))
            return default

    def save_json(self, key: str, value: Any) -> bool:
        """Serialize and write. Returns False (and logs) instead of raising."""
        try:
            self.set(key, json.dumps(value, default=str))
        except (StorageError, TypeError, ValueError) as e:
            log.warning("kv_save_failed", key=key, error=str(e))
            return False
        return True


class InMemoryKeyValueStore(KeyValueStore):
    def __init__(self):
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class RedisKeyValueStore(KeyValueStore):
    def __init__(self, url: str, namespace: str = ""):
        self._client = Redis.from_url(url, decode_responses=True)
        self._ns = namespace

    def _k(self, key: str) -> str:
        return f"{self._ns}{key}"

    def get(self, key: str) -> str | None:
        try:
            return self._client.get(self._k(key))
        except RedisError as e:
            raise StorageError(str(e)) from e

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._k(key), value)
        except RedisError as e:
            raise StorageError(str(e)) from e


def build_store(backend: str | None = None) -> KeyValueStore:
    backend = (backend or settings.kv_backend).lower()
    if backend == "redis":
        return RedisKeyValueStore(settings.redis_url)
    if backend != "memory":
        raise ValueError(f"unknown KV_BACKEND: {backend}")
    return InMemoryKeyValueStore()


def user_key(prefix: str, user_id: str) -> str:
    return f"{prefix}_{user_id}"
