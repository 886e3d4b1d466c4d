"""
Contest catalog: contest rows, their status, and per-submission voting.

Submissions themselves are written by the contest ledger; this module only
reads them back per contest and keeps their `votes` counter in step with the
vote rows.
"""
from __future__ import annotations
import uuid
from datetime import datetime, timezone as dt_tz
from typing import Any
import structlog

from evolvefit.realtime.broadcaster import Broadcaster, broadcaster, now_ms
from evolvefit.schemas.contest import Contest, ContestCreate, ContestStatus
from evolvefit.services.contest_state import CONTESTS_CHANNEL, get_contest_submissions
from evolvefit.services.kv_store import CONTESTS_KEY, KeyValueStore, SUBMISSIONS_KEY, VOTES_KEY

log = structlog.get_logger()


def _contest_rows(store: KeyValueStore) -> list[dict[str, Any]]:
    raw = store.load_json(CONTESTS_KEY, [])
    return raw if isinstance(raw, list) else []


def create_contest(store: KeyValueStore, data: ContestCreate, *, bus: Broadcaster = broadcaster) -> Contest:
    contest = Contest(
        **data.model_dump(),
        id=str(uuid.uuid4()),
        created_at=datetime.now(dt_tz.utc).isoformat(),
    )
    record = contest.model_dump(by_alias=True)
    store.save_json(CONTESTS_KEY, [record, *_contest_rows(store)])

    bus.broadcast(CONTESTS_CHANNEL, "contest", {"event": "contest_created", "contest": record, "timestamp": now_ms()})
    log.info("contest_created", contest_id=contest.id, status=contest.status)
    return contest


def get_contests(store: KeyValueStore) -> list[Contest]:
    """Newest first."""
    contests = []
    for row in _contest_rows(store):
        try:
            contests.append(Contest.model_validate(row))
        except ValueError as e:
            log.warning("contest_row_invalid", contest_id=row.get("id"), error=str(e))
    return sorted(contests, key=lambda c: c.created_at, reverse=True)


def get_contest(store: KeyValueStore, contest_id: str) -> Contest | None:
    return next((c for c in get_contests(store) if c.id == contest_id), None)


def update_contest_status(
    store: KeyValueStore, contest_id: str, status: ContestStatus, *, bus: Broadcaster = broadcaster,
) -> Contest | None:
    rows = _contest_rows(store)
    row = next((r for r in rows if r.get("id") == contest_id), None)
    if row is None:
        return None
    row["status"] = status
    store.save_json(CONTESTS_KEY, rows)

    bus.broadcast(CONTESTS_CHANNEL, "contest", {
        "event": "contest_status_changed", "contestId": contest_id, "status": status, "timestamp": now_ms(),
    })
    log.info("contest_status_changed", contest_id=contest_id, status=status)
    return Contest.model_validate(row)

# ---------- submissions & votes ----------

def get_submissions_for_contest(store: KeyValueStore, contest_id: str) -> list[dict[str, Any]]:
    """Most voted first."""
    rows = [s for s in get_contest_submissions(store) if s.get("contestId") == contest_id]
    return sorted(rows, key=lambda s: s.get("votes") or 0, reverse=True)


def vote_for_submission(store: KeyValueStore, submission_id: str, user_id: str) -> tuple[bool, int] | None:
    """
    Toggle the user's vote. Returns (voted, votes) where `voted` is False when
    an existing vote was withdrawn, or None if the submission is unknown.
    """
    submissions = get_contest_submissions(store)
    submission = next((s for s in submissions if s.get("id") == submission_id), None)
    if submission is None:
        return None

    votes = store.load_json(VOTES_KEY, {})
    if not isinstance(votes, dict):
        votes = {}
    voters = votes.setdefault(submission_id, [])
    voted = user_id not in voters
    if voted:
        voters.append(user_id)
    else:
        voters.remove(user_id)
    store.save_json(VOTES_KEY, votes)

    submission["votes"] = len(voters)
    store.save_json(SUBMISSIONS_KEY, submissions)
    log.info("submission_vote", submission_id=submission_id, user_id=user_id, voted=voted, votes=len(voters))
    return voted, len(voters)
