"""
In-process publish/subscribe registry.

Listeners register per channel; `broadcast()` stamps a message, keeps it in a
bounded buffer and hands it to every listener on that channel after an
independent random delay, so listener order is not stable. Everything runs on
the current event loop; nothing crosses process boundaries.
"""
from __future__ import annotations
import asyncio
import inspect
import random
import time
from typing import Any, Awaitable, Callable, Union
import structlog

from evolvefit.config import settings
from evolvefit.schemas.realtime import BroadcastMessage, MessageType

log = structlog.get_logger()

Listener = Callable[[BroadcastMessage], Union[None, Awaitable[None]]]


def now_ms() -> int:
    return int(time.time() * 1000)


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class Subscription:
    def __init__(self, registry: "Broadcaster", channel: str, callback: Listener):
        self.channel = channel
        self.callback = callback
        self._registry = registry
        self.active = True

    def unsubscribe(self) -> None:
        # safe to call more than once
        if not self.active:
            return
        self.active = False
        self._registry._remove(self.channel, self.callback)


class Broadcaster:
    def __init__(
        self,
        *,
        max_delay_ms: int | None = None,
        buffer_cap: int | None = None,
        buffer_keep: int | None = None,
        rng: random.Random | None = None,
    ):
        self.max_delay_ms = settings.realtime_max_delay_ms if max_delay_ms is None else max_delay_ms
        self.buffer_cap = settings.realtime_buffer_cap if buffer_cap is None else buffer_cap
        self.buffer_keep = settings.realtime_buffer_keep if buffer_keep is None else buffer_keep
        self._rng = rng or random.Random()
        self._subscribers: dict[str, set[Listener]] = {}
        self._buffer: list[BroadcastMessage] = []
        self.total_broadcasts = 0

    # ---------- registry ----------

    def subscribe(self, channel: str, callback: Listener) -> Subscription:
        self._subscribers.setdefault(channel, set()).add(callback)
        log.debug("realtime_subscribe", channel=channel, listeners=len(self._subscribers[channel]))
        return Subscription(self, channel, callback)

    def _remove(self, channel: str, callback: Listener) -> None:
        subs = self._subscribers.get(channel)
        if not subs:
            return
        subs.discard(callback)
        if not subs:
            del self._subscribers[channel]
        log.debug("realtime_unsubscribe", channel=channel, listeners=len(subs))

    def is_subscribed(self, channel: str, callback: Listener) -> bool:
        return callback in self._subscribers.get(channel, ())

    def listener_count(self, channel: str) -> int:
        return len(self._subscribers.get(channel, ()))

    def channels(self) -> list[str]:
        return sorted(self._subscribers)

    # ---------- publish ----------

    def broadcast(self, channel: str, type: MessageType, data: Any = None) -> BroadcastMessage:
        message = BroadcastMessage(type=type, timestamp=now_ms(), data=data)
        self._append(message)
        self.total_broadcasts += 1

        listeners = list(self._subscribers.get(channel, ()))
        log.debug("realtime_broadcast", channel=channel, type=type, listeners=len(listeners))
        if not listeners:
            return message

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        for callback in listeners:
            if loop is None:
                self._deliver(channel, callback, message)
                continue
            delay = self._rng.random() * self.max_delay_ms / 1000.0
            loop.call_later(delay, self._deliver, channel, callback, message)
        return message

    def _append(self, message: BroadcastMessage) -> None:
        # abrupt halving, not a sliding window
        if len(self._buffer) >= self.buffer_cap:
            self._buffer = self._buffer[max(0, len(self._buffer) - self.buffer_keep):]
        self._buffer.append(message)

    def _deliver(self, channel: str, callback: Listener, message: BroadcastMessage) -> None:
        if not self.is_subscribed(channel, callback):
            return
        try:
            result = callback(message)
        except Exception:
            log.exception("realtime_listener_failed", channel=channel, type=message.type)
            return
        if not inspect.isawaitable(result):
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # inline delivery outside any loop: run the awaitable to completion here
            try:
                asyncio.run(_await(result))
            except Exception:
                log.exception("realtime_listener_failed", channel=channel, type=message.type)
            return
        # coroutines become tasks; futures and other awaitables are wrapped
        task = asyncio.ensure_future(result)
        task.add_done_callback(lambda t: self._task_done(t, channel, message))

    @staticmethod
    def _task_done(task: asyncio.Future, channel: str, message: BroadcastMessage) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("realtime_listener_failed", channel=channel, type=message.type, error=repr(exc))

    # ---------- buffer ----------

    def get_buffer(self, channel: str) -> list[BroadcastMessage]:
        """Buffered messages whose type contains `channel` (substring match)."""
        return [m for m in self._buffer if channel in m.type]

    def buffer_size(self) -> int:
        return len(self._buffer)

    def clear(self) -> None:
        self._subscribers.clear()
        self._buffer = []
        self.total_broadcasts = 0


broadcaster = Broadcaster()
