import os

os.environ.setdefault("KV_BACKEND", "memory")
os.environ.setdefault("REALTIME_MAX_DELAY_MS", "5")
os.environ["GEMINI_API_KEY"] = ""

import asyncio
import pytest
from evolvefit.main import app
from evolvefit.deps import get_broadcaster, get_model_client, get_store
from evolvefit.realtime.broadcaster import Broadcaster
from evolvefit.services.kv_store import InMemoryKeyValueStore


class FakeModel:
    """Stands in for the hosted model; records prompts and replays canned text."""

    def __init__(self, reply: str = "{}", configured: bool = True, error: Exception | None = None):
        self.reply = reply
        self.configured = configured
        self.error = error
        self.calls: list[dict] = []

    async def generate(self, prompt, media=None):
        self.calls.append({"prompt": prompt, "media": media})
        if self.error:
            raise self.error
        return self.reply

    async def chat(self, history, message):
        self.calls.append({"history": history, "message": message})
        if self.error:
            raise self.error
        return self.reply


async def settle(seconds: float = 0.05):
    """Let delayed broadcast deliveries run."""
    await asyncio.sleep(seconds)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def bus():
    return Broadcaster(max_delay_ms=5)


@pytest.fixture
def fake_model():
    return FakeModel()


@pytest.fixture
def wired(store, bus, fake_model):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_broadcaster] = lambda: bus
    app.dependency_overrides[get_model_client] = lambda: fake_model
    yield app
    app.dependency_overrides.clear()
