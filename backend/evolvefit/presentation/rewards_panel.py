from __future__ import annotations
from typing import Any, Callable

from evolvefit.realtime.broadcaster import Broadcaster, Subscription, broadcaster
from evolvefit.schemas.realtime import BroadcastMessage
from evolvefit.schemas.rewards import RewardsView
from evolvefit.services.contest_state import CONTESTS_CHANNEL, get_user_total_points
from evolvefit.services.kv_store import KeyValueStore
from evolvefit.services.rewards import get_total_user_points, get_user_rank, get_user_rewards


class RewardsPanel:
    """Rank and reward summary for one user; re-renders on that user's leaderboard events."""

    def __init__(
        self,
        store: KeyValueStore,
        user_id: str,
        *,
        bus: Broadcaster = broadcaster,
        on_render: Callable[[RewardsView], Any] | None = None,
    ):
        self.store = store
        self.user_id = user_id
        self.bus = bus
        self.on_render = on_render
        self.view: RewardsView | None = None
        self.renders = 0
        self._sub: Subscription | None = None

    def render(self) -> RewardsView:
        entry = get_user_rank(self.store, self.user_id)
        self.view = RewardsView(
            user_id=self.user_id,
            rank=entry.rank if entry else None,
            points=entry.points if entry else 0,
            total_points=get_total_user_points(self.store, self.user_id),
            contest_points=get_user_total_points(self.store, self.user_id),
            rewards=get_user_rewards(self.store, self.user_id),
        )
        self.renders += 1
        if self.on_render is not None:
            self.on_render(self.view)
        return self.view

    def mount(self) -> RewardsView:
        if self._sub is None:
            self._sub = self.bus.subscribe(CONTESTS_CHANNEL, self._on_message)
        return self.render()

    def unmount(self) -> None:
        if self._sub is not None:
            self._sub.unsubscribe()
            self._sub = None

    def _on_message(self, message: BroadcastMessage) -> None:
        data = message.data or {}
        if message.type == "leaderboard" and data.get("userId") == self.user_id:
            self.render()
