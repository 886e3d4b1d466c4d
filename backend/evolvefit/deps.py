from __future__ import annotations
from functools import lru_cache
from evolvefit.realtime.broadcaster import Broadcaster, broadcaster
from evolvefit.services.genai import ModelClient
from evolvefit.services.kv_store import KeyValueStore, build_store


@lru_cache(maxsize=1)
def get_store() -> KeyValueStore:
    return build_store()


def get_broadcaster() -> Broadcaster:
    return broadcaster


@lru_cache(maxsize=1)
def get_model_client() -> ModelClient:
    return ModelClient()
