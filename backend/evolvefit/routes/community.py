from __future__ import annotations
import uuid
from datetime import datetime, timezone as dt_tz
from fastapi import APIRouter, Depends, HTTPException, status

from evolvefit.deps import get_broadcaster, get_store
from evolvefit.realtime.broadcaster import Broadcaster
from evolvefit.schemas.community import CommentCreate, Comment, LikeCreate, LikeResult, Post
from evolvefit.services import change_feed, community
from evolvefit.services.kv_store import KeyValueStore

router = APIRouter(prefix="/community", tags=["community"])


def _now_iso() -> str:
    return datetime.now(dt_tz.utc).isoformat()


@router.get("/posts")
async def list_posts(store: KeyValueStore = Depends(get_store)):
    return community.get_posts(store)


@router.post("/posts", status_code=status.HTTP_201_CREATED)
async def create_post(
    post: Post,
    store: KeyValueStore = Depends(get_store),
    bus: Broadcaster = Depends(get_broadcaster),
):
    if community.get_post(store, post.id):
        raise HTTPException(status_code=409, detail="Post already exists")
    if not post.created_at:
        post.created_at = _now_iso()
    row = post.model_dump(mode="json", by_alias=True)
    change_feed.publish_post_inserted(store, row, bus=bus)
    community.broadcast_new_post(row, bus=bus)
    return row


@router.get("/posts/{post_id}/comments")
async def list_comments(post_id: str, store: KeyValueStore = Depends(get_store)):
    return community.get_comments(store, post_id)


@router.post("/posts/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: str,
    payload: CommentCreate,
    store: KeyValueStore = Depends(get_store),
    bus: Broadcaster = Depends(get_broadcaster),
):
    if not community.get_post(store, post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    comment = Comment(
        id=str(uuid.uuid4()), post_id=post_id, user_id=payload.user_id,
        content=payload.content, created_at=_now_iso(),
    ).model_dump(by_alias=True)
    change_feed.publish_comment_inserted(store, comment, bus=bus)
    community.broadcast_comment(post_id, comment, bus=bus)
    return comment


@router.post("/posts/{post_id}/likes", response_model=LikeResult)
async def like_post(
    post_id: str,
    payload: LikeCreate,
    store: KeyValueStore = Depends(get_store),
    bus: Broadcaster = Depends(get_broadcaster),
):
    if not community.get_post(store, post_id):
        raise HTTPException(status_code=404, detail="Post not found")
    inserted, count = change_feed.publish_like_inserted(store, post_id, payload.user_id, bus=bus)
    if inserted:
        community.broadcast_like(post_id, count, bus=bus)
    return LikeResult(post_id=post_id, likes=count)
