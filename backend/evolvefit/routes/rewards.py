from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query, status

from evolvefit.deps import get_store
from evolvefit.schemas.rewards import LeaderboardEntry, RewardCreate, UserReward
from evolvefit.services.kv_store import KeyValueStore
from evolvefit.services.rewards import (
    add_reward, get_leaderboard, get_total_user_points, get_user_rank, get_user_rewards, upsert_leaderboard_entry,
)

router = APIRouter(prefix="/rewards", tags=["rewards"])


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def leaderboard(
    limit: int = Query(default=50, ge=1, le=500),
    store: KeyValueStore = Depends(get_store),
):
    return get_leaderboard(store, limit)


@router.get("/leaderboard/{user_id}", response_model=LeaderboardEntry)
async def user_rank(user_id: str, store: KeyValueStore = Depends(get_store)):
    entry = get_user_rank(store, user_id)
    if not entry:
        raise HTTPException(status_code=404, detail="User not on leaderboard")
    return entry


@router.get("/users/{user_id}")
async def user_rewards(user_id: str, store: KeyValueStore = Depends(get_store)):
    rewards = get_user_rewards(store, user_id)
    return {
        "userId": user_id,
        "totalPoints": get_total_user_points(store, user_id),
        "rewards": [r.model_dump(by_alias=True) for r in rewards],
    }


@router.post("/users/{user_id}", response_model=UserReward, status_code=status.HTTP_201_CREATED)
async def create_reward(user_id: str, payload: RewardCreate, store: KeyValueStore = Depends(get_store)):
    return add_reward(store, user_id, payload.reward_type, payload.points)


@router.put("/leaderboard/{user_id}", response_model=LeaderboardEntry)
async def upsert_rank(user_id: str, entry: LeaderboardEntry, store: KeyValueStore = Depends(get_store)):
    if entry.user_id != user_id:
        raise HTTPException(status_code=400, detail="userId mismatch")
    upsert_leaderboard_entry(store, entry)
    return get_user_rank(store, user_id)
