from __future__ import annotations
from typing import Any
import structlog

from evolvefit.realtime.broadcaster import Broadcaster, broadcaster, now_ms
from evolvefit.schemas.contest import ContestSubmission, UserContestState
from evolvefit.services.kv_store import (
    KeyValueStore, SUBMISSIONS_KEY, USER_CONTEST_STATE_PREFIX, user_key,
)

log = structlog.get_logger()

CONTESTS_CHANNEL = "contests"

# ---------- load / save ----------

def get_user_contest_state(store: KeyValueStore, user_id: str) -> UserContestState:
    """Stored state for the user, or a fresh zero-point state (not persisted until saved)."""
    raw = store.load_json(user_key(USER_CONTEST_STATE_PREFIX, user_id))
    if isinstance(raw, dict):
        try:
            return UserContestState.model_validate({**raw, "userId": user_id})
        except ValueError as e:
            log.warning("contest_state_invalid", user_id=user_id, error=str(e))
    return UserContestState(user_id=user_id, total_points=0, last_updated=now_ms())


def save_user_contest_state(store: KeyValueStore, state: UserContestState) -> bool:
    state.last_updated = now_ms()
    return store.save_json(
        user_key(USER_CONTEST_STATE_PREFIX, state.user_id),
        state.model_dump(mode="json", by_alias=True),
    )

# ---------- mutations ----------

def accept_challenge(store: KeyValueStore, user_id: str, contest_id: str, *, bus: Broadcaster = broadcaster) -> bool:
    """One-way: returns False with no side effects if already accepted."""
    state = get_user_contest_state(store, user_id)
    if contest_id in state.accepted_contest_ids:
        return False

    state.accepted_contest_ids.add(contest_id)
    save_user_contest_state(store, state)

    bus.broadcast(CONTESTS_CHANNEL, "contest", {
        "event": "challenge_accepted",
        "userId": user_id,
        "contestId": contest_id,
        "timestamp": now_ms(),
    })
    log.info("challenge_accepted", user_id=user_id, contest_id=contest_id)
    return True


def award_contest_points(
    store: KeyValueStore, user_id: str, points: int | float, contest_id: str, *, bus: Broadcaster = broadcaster,
) -> int | float:
    """
    Add `points` to the running total and announce the new total.
    Points are not validated: negative or fractional awards go straight through.
    Read-modify-write with no lock; concurrent writers lose updates.
    """
    state = get_user_contest_state(store, user_id)
    state.total_points += points
    save_user_contest_state(store, state)

    bus.broadcast(CONTESTS_CHANNEL, "leaderboard", {
        "event": "points_awarded",
        "userId": user_id,
        "points": points,
        "contestId": contest_id,
        "totalPoints": state.total_points,
        "timestamp": now_ms(),
    })
    log.info("points_awarded", user_id=user_id, contest_id=contest_id, points=points, total=state.total_points)
    return state.total_points

# ---------- reads ----------

def has_accepted_contest(store: KeyValueStore, user_id: str, contest_id: str) -> bool:
    return contest_id in get_user_contest_state(store, user_id).accepted_contest_ids


def get_user_total_points(store: KeyValueStore, user_id: str) -> int | float:
    return get_user_contest_state(store, user_id).total_points

# ---------- submissions ----------

def get_contest_submissions(store: KeyValueStore) -> list[dict[str, Any]]:
    raw = store.load_json(SUBMISSIONS_KEY, [])
    return raw if isinstance(raw, list) else []


def save_contest_submission(store: KeyValueStore, submission: ContestSubmission, *, bus: Broadcaster = broadcaster) -> None:
    """Append-only; no dedupe, no cap."""
    record = submission.model_dump(mode="json", by_alias=True, exclude_none=True)
    submissions = get_contest_submissions(store)
    submissions.append(record)
    store.save_json(SUBMISSIONS_KEY, submissions)

    bus.broadcast(CONTESTS_CHANNEL, "contest", {
        "event": "submission_received",
        "submission": record,
        "timestamp": now_ms(),
    })
