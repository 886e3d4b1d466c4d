"""
Row-insert notifications for community tables.

Three logical subscriptions: approved post inserts, comment inserts for one
post, and like inserts for one post (delivered as the current like count).
Producers persist the row first, then notify.
"""
from __future__ import annotations
from typing import Any, Callable
import structlog

from evolvefit.realtime.broadcaster import Broadcaster, Subscription, broadcaster
from evolvefit.schemas.realtime import BroadcastMessage
from evolvefit.services import community
from evolvefit.services.kv_store import KeyValueStore

log = structlog.get_logger()

FEED_CHANNEL = "community_feed"


def comments_channel(post_id: str) -> str:
    return f"post_{post_id}_comments"


def likes_channel(post_id: str) -> str:
    return f"post_{post_id}_likes"

# ---------- subscribe ----------

def subscribe_to_feed(callback: Callable[[dict[str, Any]], Any], *, bus: Broadcaster = broadcaster) -> Subscription:
    def _on_insert(message: BroadcastMessage):
        row = message.data or {}
        if row.get("moderationStatus") != "approved":
            return None
        return callback(row)

    return bus.subscribe(FEED_CHANNEL, _on_insert)


def subscribe_to_comments(
    post_id: str, callback: Callable[[dict[str, Any]], Any], *, bus: Broadcaster = broadcaster,
) -> Subscription:
    def _on_insert(message: BroadcastMessage):
        return callback(message.data or {})

    return bus.subscribe(comments_channel(post_id), _on_insert)


def subscribe_to_likes(
    store: KeyValueStore, post_id: str, callback: Callable[[int], Any], *, bus: Broadcaster = broadcaster,
) -> Subscription:
    def _on_insert(message: BroadcastMessage):
        # count is read at delivery time, not taken from the event
        return callback(community.get_like_count(store, post_id))

    return bus.subscribe(likes_channel(post_id), _on_insert)

# ---------- publish ----------

def publish_post_inserted(store: KeyValueStore, post: dict[str, Any], *, bus: Broadcaster = broadcaster) -> None:
    community.save_post(store, post)
    bus.broadcast(FEED_CHANNEL, "post", post)
    log.info("post_inserted", post_id=post.get("id"), status=post.get("moderationStatus"))


def publish_comment_inserted(store: KeyValueStore, comment: dict[str, Any], *, bus: Broadcaster = broadcaster) -> int:
    count = community.add_comment(store, comment)
    bus.broadcast(comments_channel(comment["postId"]), "comment", comment)
    return count


def publish_like_inserted(
    store: KeyValueStore, post_id: str, user_id: str, *, bus: Broadcaster = broadcaster,
) -> tuple[bool, int]:
    inserted, count = community.add_like(store, post_id, user_id)
    if inserted:
        bus.broadcast(likes_channel(post_id), "like", {"postId": post_id, "userId": user_id})
    return inserted, count
