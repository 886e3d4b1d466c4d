from __future__ import annotations
import uuid
from datetime import datetime, timezone as dt_tz
import structlog

from evolvefit.schemas.rewards import LeaderboardEntry, RewardType, UserReward
from evolvefit.services.kv_store import KeyValueStore, LEADERBOARD_KEY, USER_REWARDS_PREFIX, user_key

log = structlog.get_logger()

REWARD_DESCRIPTIONS: dict[str, str] = {
    "post_approved": "Post approved by moderators",
    "contest_win": "Contest victory",
    "community_points": "Community engagement",
    "milestone": "Milestone achievement",
}


def _describe(reward_type: str) -> str:
    return REWARD_DESCRIPTIONS.get(reward_type, "Community reward")


def _leaderboard_rows(store: KeyValueStore) -> list[dict]:
    raw = store.load_json(LEADERBOARD_KEY, [])
    return raw if isinstance(raw, list) else []


def upsert_leaderboard_entry(store: KeyValueStore, entry: LeaderboardEntry) -> None:
    rows = [r for r in _leaderboard_rows(store) if r.get("userId") != entry.user_id]
    rows.append(entry.model_dump(by_alias=True))
    store.save_json(LEADERBOARD_KEY, rows)


def add_reward(store: KeyValueStore, user_id: str, reward_type: RewardType, points: int) -> UserReward:
    reward = UserReward(
        id=str(uuid.uuid4()),
        reward_type=reward_type,
        points=int(points),
        description=_describe(reward_type),
        created_at=datetime.now(dt_tz.utc).isoformat(),
    )
    key = user_key(USER_REWARDS_PREFIX, user_id)
    rewards = store.load_json(key, [])
    if not isinstance(rewards, list):
        rewards = []
    rewards.append(reward.model_dump(by_alias=True))
    store.save_json(key, rewards)

    # only users that already have a leaderboard row get bumped
    rows = _leaderboard_rows(store)
    for r in rows:
        if r.get("userId") == user_id:
            r["points"] = int(r.get("points", 0)) + int(points)
            store.save_json(LEADERBOARD_KEY, rows)
            break

    log.info("reward_added", user_id=user_id, reward_type=reward_type, points=points)
    return reward


def get_user_rewards(store: KeyValueStore, user_id: str) -> list[UserReward]:
    raw = store.load_json(user_key(USER_REWARDS_PREFIX, user_id), [])
    if not isinstance(raw, list):
        return []
    out = [
        UserReward(
            id=str(r.get("id", "")),
            reward_type=r.get("rewardType", ""),
            points=int(r.get("points", 0)),
            description=_describe(r.get("rewardType", "")),
            created_at=r.get("createdAt", ""),
        )
        for r in raw
    ]
    out.sort(key=lambda r: r.created_at, reverse=True)
    return out


def get_total_user_points(store: KeyValueStore, user_id: str) -> int:
    return sum(r.points for r in get_user_rewards(store, user_id))


def get_leaderboard(store: KeyValueStore, limit: int = 50) -> list[LeaderboardEntry]:
    rows = sorted(_leaderboard_rows(store), key=lambda r: (-int(r.get("points", 0)), str(r.get("userId"))))
    return [
        LeaderboardEntry.model_validate({**r, "rank": idx + 1})
        for idx, r in enumerate(rows[:limit])
    ]


def get_user_rank(store: KeyValueStore, user_id: str) -> LeaderboardEntry | None:
    for entry in get_leaderboard(store, limit=len(_leaderboard_rows(store))):
        if entry.user_id == user_id:
            return entry
    return None
