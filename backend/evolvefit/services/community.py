from __future__ import annotations
from typing import Any, Callable
import structlog

from evolvefit.realtime.broadcaster import Broadcaster, Subscription, broadcaster, now_ms
from evolvefit.schemas.realtime import BroadcastMessage
from evolvefit.services.kv_store import KeyValueStore, POSTS_KEY, COMMENTS_KEY, LIKES_KEY

log = structlog.get_logger()

COMMUNITY_CHANNEL = "community"

# ---------- persisted rows ----------

def get_posts(store: KeyValueStore) -> list[dict[str, Any]]:
    raw = store.load_json(POSTS_KEY, [])
    return raw if isinstance(raw, list) else []


def get_post(store: KeyValueStore, post_id: str) -> dict[str, Any] | None:
    return next((p for p in get_posts(store) if str(p.get("id")) == str(post_id)), None)


def save_post(store: KeyValueStore, post: dict[str, Any]) -> None:
    """Newest first; replaces an existing row with the same id."""
    posts = [p for p in get_posts(store) if str(p.get("id")) != str(post.get("id"))]
    saved = store.save_json(POSTS_KEY, [post, *posts])
    log.info("post_saved", post_id=post.get("id"), saved=saved, total=len(posts) + 1)


def _update_post(store: KeyValueStore, post_id: str, **fields: Any) -> None:
    posts = get_posts(store)
    for p in posts:
        if str(p.get("id")) == str(post_id):
            p.update(fields)
    store.save_json(POSTS_KEY, posts)


def get_comments(store: KeyValueStore, post_id: str) -> list[dict[str, Any]]:
    raw = store.load_json(COMMENTS_KEY, {})
    if not isinstance(raw, dict):
        return []
    return list(raw.get(str(post_id), []))


def add_comment(store: KeyValueStore, comment: dict[str, Any]) -> int:
    raw = store.load_json(COMMENTS_KEY, {})
    if not isinstance(raw, dict):
        raw = {}
    pid = str(comment["postId"])
    raw.setdefault(pid, []).append(comment)
    store.save_json(COMMENTS_KEY, raw)
    _update_post(store, pid, commentsCount=len(raw[pid]))
    log.info("comment_added", post_id=pid, comments=len(raw[pid]))
    return len(raw[pid])


def get_like_count(store: KeyValueStore, post_id: str) -> int:
    raw = store.load_json(LIKES_KEY, {})
    if not isinstance(raw, dict):
        return 0
    return len(raw.get(str(post_id), []))


def add_like(store: KeyValueStore, post_id: str, user_id: str) -> tuple[bool, int]:
    """Returns (inserted, count). One like per (post, user)."""
    raw = store.load_json(LIKES_KEY, {})
    if not isinstance(raw, dict):
        raw = {}
    likers = raw.setdefault(str(post_id), [])
    if user_id in likers:
        log.info("like_ignored", post_id=post_id, user_id=user_id, reason="already_liked")
        return False, len(likers)
    likers.append(user_id)
    store.save_json(LIKES_KEY, raw)
    _update_post(store, post_id, likesCount=len(likers))
    log.info("like_added", post_id=post_id, user_id=user_id, likes=len(likers))
    return True, len(likers)

# ---------- announcements ----------

def broadcast_new_post(post: dict[str, Any], *, bus: Broadcaster = broadcaster) -> None:
    bus.broadcast(COMMUNITY_CHANNEL, "post", {"event": "new_post", "post": post, "timestamp": now_ms()})


def broadcast_comment(post_id: str, comment: dict[str, Any], *, bus: Broadcaster = broadcaster) -> None:
    bus.broadcast(COMMUNITY_CHANNEL, "comment", {
        "event": "new_comment", "postId": post_id, "comment": comment, "timestamp": now_ms(),
    })


def broadcast_like(post_id: str, likes: int, *, bus: Broadcaster = broadcaster) -> None:
    bus.broadcast(COMMUNITY_CHANNEL, "like", {
        "event": "post_liked", "postId": post_id, "likes": likes, "timestamp": now_ms(),
    })


def subscribe_to_community_feed(
    store: KeyValueStore, callback: Callable[[list[dict[str, Any]]], Any], *, bus: Broadcaster = broadcaster,
) -> Subscription:
    """Calls back with the full persisted post list whenever a post is announced."""
    def _on_message(message: BroadcastMessage):
        if message.type != "post":
            return None
        return callback(get_posts(store))

    return bus.subscribe(COMMUNITY_CHANNEL, _on_message)
