from __future__ import annotations
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field

Category = Literal["Milestone", "Nutrition", "General"]
ModerationStatus = Literal["pending", "approved", "rejected"]


class _Camel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")


class Comment(_Camel):
    id: str
    post_id: str = Field(alias="postId")
    user_id: str = Field(alias="userId")
    content: str
    created_at: str | None = Field(default=None, alias="createdAt")


class Post(_Camel):
    id: str
    user_id: str = Field(alias="userId")
    content: str
    image_url: str | None = Field(default=None, alias="imageUrl")
    tags: list[str] = Field(default_factory=list)
    category: Category = "General"
    created_at: str | None = Field(default=None, alias="createdAt")
    likes_count: int = Field(default=0, alias="likesCount")
    comments_count: int = Field(default=0, alias="commentsCount")
    moderation_status: ModerationStatus = Field(default="approved", alias="moderationStatus")
    is_verified: bool = Field(default=False, alias="isVerified")


class FeedPost(_Camel):
    id: str
    user_id: str = Field(alias="userId")
    content: str
    image_url: str | None = Field(default=None, alias="imageUrl")
    created_at: str | None = Field(default=None, alias="createdAt")
    likes_count: int = Field(default=0, alias="likesCount")
    comments_count: int = Field(default=0, alias="commentsCount")
    is_liked: bool = Field(default=False, alias="isLiked")
    comments: list[Comment] = Field(default_factory=list)


class CommentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    content: str = Field(min_length=1)


class LikeCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")


class LikeResult(BaseModel):
    post_id: str = Field(serialization_alias="postId")
    likes: int
