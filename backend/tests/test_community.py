from __future__ import annotations
import pytest
from evolvefit.services import change_feed, community
from conftest import settle


def _post(pid: str, status: str = "approved") -> dict:
    return {"id": pid, "userId": "u1", "content": f"post {pid}", "moderationStatus": status}


def test_announcements_use_community_channel(bus):
    community.broadcast_new_post(_post("p1"), bus=bus)
    community.broadcast_comment("p1", {"id": "c1"}, bus=bus)
    community.broadcast_like("p1", 3, bus=bus)
    assert [m.data["event"] for m in bus.get_buffer("")] == ["new_post", "new_comment", "post_liked"]
    like = bus.get_buffer("like")[0]
    assert like.data["postId"] == "p1" and like.data["likes"] == 3


@pytest.mark.asyncio
async def test_feed_subscriber_gets_persisted_posts_on_post_events(store, bus):
    seen = []
    community.subscribe_to_community_feed(store, seen.append, bus=bus)
    community.save_post(store, _post("p1"))
    community.broadcast_new_post(_post("p1"), bus=bus)
    community.broadcast_like("p1", 1, bus=bus)
    await settle()
    assert len(seen) == 1
    assert [p["id"] for p in seen[0]] == ["p1"]


def test_save_post_is_newest_first_and_replaces(store):
    community.save_post(store, _post("p1"))
    community.save_post(store, _post("p2"))
    community.save_post(store, {**_post("p1"), "content": "edited"})
    posts = community.get_posts(store)
    assert [p["id"] for p in posts] == ["p1", "p2"]
    assert posts[0]["content"] == "edited"


def test_likes_are_unique_per_user(store):
    community.save_post(store, _post("p1"))
    assert community.add_like(store, "p1", "u1") == (True, 1)
    assert community.add_like(store, "p1", "u1") == (False, 1)
    assert community.add_like(store, "p1", "u2") == (True, 2)
    assert community.get_post(store, "p1")["likesCount"] == 2


@pytest.mark.asyncio
async def test_feed_subscription_only_forwards_approved(store, bus):
    got = []
    change_feed.subscribe_to_feed(got.append, bus=bus)
    change_feed.publish_post_inserted(store, _post("p1", "pending"), bus=bus)
    change_feed.publish_post_inserted(store, _post("p2"), bus=bus)
    await settle()
    assert [r["id"] for r in got] == ["p2"]
    assert len(community.get_posts(store)) == 2


@pytest.mark.asyncio
async def test_comment_subscription_is_scoped_to_post(store, bus):
    community.save_post(store, _post("p1"))
    community.save_post(store, _post("p2"))
    got = []
    change_feed.subscribe_to_comments("p1", got.append, bus=bus)
    change_feed.publish_comment_inserted(store, {"id": "c1", "postId": "p1", "userId": "u", "content": "nice"}, bus=bus)
    change_feed.publish_comment_inserted(store, {"id": "c2", "postId": "p2", "userId": "u", "content": "ok"}, bus=bus)
    await settle()
    assert [c["id"] for c in got] == ["c1"]
    assert community.get_post(store, "p1")["commentsCount"] == 1


@pytest.mark.asyncio
async def test_like_subscription_reports_current_count(store, bus):
    community.save_post(store, _post("p1"))
    counts = []
    change_feed.subscribe_to_likes(store, "p1", counts.append, bus=bus)
    change_feed.publish_like_inserted(store, "p1", "u1", bus=bus)
    change_feed.publish_like_inserted(store, "p1", "u1", bus=bus)
    await settle()
    assert counts == [1]


class _LogRecorder:
    def __init__(self):
        self.events: list[tuple[str, dict]] = []

    def info(self, event, **kw):
        self.events.append((event, kw))


def test_persistence_steps_are_logged(store, monkeypatch):
    rec = _LogRecorder()
    monkeypatch.setattr(community, "log", rec)
    community.save_post(store, _post("p1"))
    community.add_comment(store, {"id": "c1", "postId": "p1", "content": "nice"})
    community.add_like(store, "p1", "u1")
    community.add_like(store, "p1", "u1")
    assert [e for e, _ in rec.events] == ["post_saved", "comment_added", "like_added", "like_ignored"]
    assert rec.events[0][1]["saved"] is True
    assert rec.events[2][1]["likes"] == 1
