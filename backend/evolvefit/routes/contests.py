from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Path, status

from evolvefit.deps import get_broadcaster, get_store
from evolvefit.realtime.broadcaster import Broadcaster
from evolvefit.schemas.contest import (
    AcceptRequest, AcceptResponse, AwardRequest, AwardResponse, Contest, ContestCreate, ContestStatusUpdate,
    ContestSubmission, UserContestState, VoteRequest, VoteResponse,
)
from evolvefit.services.contest_state import (
    accept_challenge, award_contest_points, get_contest_submissions, get_user_contest_state,
    has_accepted_contest, save_contest_submission,
)
from evolvefit.services.contests import (
    create_contest, get_contest, get_contests, get_submissions_for_contest, update_contest_status,
    vote_for_submission,
)
from evolvefit.services.kv_store import KeyValueStore

router = APIRouter(prefix="/contests", tags=["contests"])


@router.post("/{contest_id}/accept", response_model=AcceptResponse)
async def accept(
    payload: AcceptRequest,
    contest_id: str = Path(...),
    store: KeyValueStore = Depends(get_store),
    bus: Broadcaster = Depends(get_broadcaster),
):
    ok = accept_challenge(store, payload.user_id, contest_id, bus=bus)
    return AcceptResponse(accepted=ok, contest_id=contest_id, user_id=payload.user_id)


@router.post("/{contest_id}/award", response_model=AwardResponse)
async def award(
    payload: AwardRequest,
    contest_id: str = Path(...),
    store: KeyValueStore = Depends(get_store),
    bus: Broadcaster = Depends(get_broadcaster),
):
    total = award_contest_points(store, payload.user_id, payload.points, contest_id, bus=bus)
    return AwardResponse(user_id=payload.user_id, contest_id=contest_id, points=payload.points, total_points=total)


@router.get("/users/{user_id}/state")
async def user_state(user_id: str, store: KeyValueStore = Depends(get_store)):
    state: UserContestState = get_user_contest_state(store, user_id)
    return state.model_dump(mode="json", by_alias=True)


@router.get("/{contest_id}/accepted/{user_id}")
async def accepted(contest_id: str, user_id: str, store: KeyValueStore = Depends(get_store)):
    return {"contestId": contest_id, "userId": user_id, "accepted": has_accepted_contest(store, user_id, contest_id)}


@router.post("/submissions", status_code=status.HTTP_201_CREATED)
async def submit(
    submission: ContestSubmission,
    store: KeyValueStore = Depends(get_store),
    bus: Broadcaster = Depends(get_broadcaster),
):
    save_contest_submission(store, submission, bus=bus)
    return submission.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("/submissions")
async def list_submissions(store: KeyValueStore = Depends(get_store)):
    return get_contest_submissions(store)

# ---------- catalog ----------

@router.post("", status_code=status.HTTP_201_CREATED)
async def create(
    payload: ContestCreate,
    store: KeyValueStore = Depends(get_store),
    bus: Broadcaster = Depends(get_broadcaster),
):
    contest = create_contest(store, payload, bus=bus)
    return contest.model_dump(by_alias=True)


@router.get("")
async def list_contests(store: KeyValueStore = Depends(get_store)):
    return [c.model_dump(by_alias=True) for c in get_contests(store)]


@router.patch("/{contest_id}/status")
async def set_status(
    payload: ContestStatusUpdate,
    contest_id: str = Path(...),
    store: KeyValueStore = Depends(get_store),
    bus: Broadcaster = Depends(get_broadcaster),
):
    contest = update_contest_status(store, contest_id, payload.status, bus=bus)
    if contest is None:
        raise HTTPException(status_code=404, detail="Contest not found")
    return contest.model_dump(by_alias=True)


@router.get("/{contest_id}/submissions")
async def contest_submissions(contest_id: str, store: KeyValueStore = Depends(get_store)):
    return get_submissions_for_contest(store, contest_id)


@router.post("/submissions/{submission_id}/vote", response_model=VoteResponse)
async def vote(payload: VoteRequest, submission_id: str = Path(...), store: KeyValueStore = Depends(get_store)):
    result = vote_for_submission(store, submission_id, payload.user_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Submission not found")
    voted, votes = result
    return VoteResponse(submission_id=submission_id, voted=voted, votes=votes)


@router.get("/{contest_id}")
async def contest_detail(contest_id: str, store: KeyValueStore = Depends(get_store)):
    contest: Contest | None = get_contest(store, contest_id)
    if contest is None:
        raise HTTPException(status_code=404, detail="Contest not found")
    return contest.model_dump(by_alias=True)
