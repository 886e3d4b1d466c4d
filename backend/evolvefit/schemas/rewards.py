from __future__ import annotations
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field

RewardType = Literal["post_approved", "contest_win", "community_points", "milestone"]


class _Camel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class UserReward(_Camel):
    id: str
    reward_type: str = Field(alias="rewardType")
    points: int
    description: str
    created_at: str = Field(alias="createdAt")


class LeaderboardEntry(_Camel):
    user_id: str = Field(alias="userId")
    username: str
    rank: int = 0
    points: int = 0
    posts_count: int = Field(default=0, alias="postsCount")
    wins_count: int = Field(default=0, alias="winsCount")
    verified_count: int = Field(default=0, alias="verifiedCount")
    avatar: str | None = None


class RewardCreate(_Camel):
    reward_type: RewardType = Field(alias="rewardType")
    points: int


class RewardsView(_Camel):
    user_id: str = Field(alias="userId")
    rank: int | None = None
    points: int = 0
    total_points: int = Field(default=0, alias="totalPoints")
    contest_points: int | float = Field(default=0, alias="contestPoints")
    rewards: list[UserReward] = Field(default_factory=list)
