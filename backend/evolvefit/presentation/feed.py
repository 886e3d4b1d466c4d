"""
Server-side view model for the live community feed.

Keeps exactly one comment subscription and one like subscription per loaded
post. `sync()` reconciles subscriptions against the current post list, so a
growing or shrinking list never leaves duplicate or orphaned listeners.
"""
from __future__ import annotations
from typing import Any, Callable
import structlog

from evolvefit.realtime.broadcaster import Broadcaster, Subscription, broadcaster
from evolvefit.schemas.community import Comment, FeedPost
from evolvefit.services import change_feed, community
from evolvefit.services.kv_store import KeyValueStore

log = structlog.get_logger()


class RealtimeFeed:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        bus: Broadcaster = broadcaster,
        on_change: Callable[[list[FeedPost]], Any] | None = None,
    ):
        self.store = store
        self.bus = bus
        self.on_change = on_change
        self.posts: list[FeedPost] = []
        self.loading = True
        self.error: str | None = None
        self._feed_sub: Subscription | None = None
        self._comment_subs: dict[str, Subscription] = {}
        self._like_subs: dict[str, Subscription] = {}

    # ---------- lifecycle ----------

    def start(self) -> "RealtimeFeed":
        if self._feed_sub is None:
            self._feed_sub = change_feed.subscribe_to_feed(self._on_new_post, bus=self.bus)
        try:
            rows = [p for p in community.get_posts(self.store) if p.get("moderationStatus", "approved") == "approved"]
            self.posts = [FeedPost.model_validate(r) for r in rows]
        except ValueError as e:
            self.error = str(e)
            log.warning("feed_load_failed", error=self.error)
        self.sync()
        self.loading = False
        return self

    def close(self) -> None:
        if self._feed_sub is not None:
            self._feed_sub.unsubscribe()
            self._feed_sub = None
        for sub in [*self._comment_subs.values(), *self._like_subs.values()]:
            sub.unsubscribe()
        self._comment_subs.clear()
        self._like_subs.clear()

    def set_posts(self, posts: list[FeedPost]) -> None:
        self.posts = list(posts)
        self.sync()
        self._notify()

    def sync(self) -> None:
        ids = {p.id for p in self.posts}
        for post_id in ids - self._comment_subs.keys():
            self._comment_subs[post_id] = change_feed.subscribe_to_comments(
                post_id, lambda row, pid=post_id: self._on_comment(pid, row), bus=self.bus,
            )
        for post_id in ids - self._like_subs.keys():
            self._like_subs[post_id] = change_feed.subscribe_to_likes(
                self.store, post_id, lambda count, pid=post_id: self._on_likes(pid, count), bus=self.bus,
            )
        for stale in set(self._comment_subs) - ids:
            self._comment_subs.pop(stale).unsubscribe()
        for stale in set(self._like_subs) - ids:
            self._like_subs.pop(stale).unsubscribe()

    def subscription_count(self) -> int:
        return len(self._comment_subs) + len(self._like_subs)

    # ---------- handlers ----------

    def _on_new_post(self, row: dict[str, Any]) -> None:
        post = FeedPost.model_validate(row)
        if any(p.id == post.id for p in self.posts):
            return
        self.posts = [post, *self.posts]
        self.sync()
        self._notify()

    def _on_comment(self, post_id: str, row: dict[str, Any]) -> None:
        comment = Comment.model_validate(row)
        for p in self.posts:
            if p.id == post_id:
                p.comments.append(comment)
                p.comments_count += 1
        self._notify()

    def _on_likes(self, post_id: str, count: int) -> None:
        for p in self.posts:
            if p.id == post_id:
                p.likes_count = count
        self._notify()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change(self.posts)

    def render(self) -> list[dict[str, Any]]:
        return [p.model_dump(by_alias=True) for p in self.posts]
