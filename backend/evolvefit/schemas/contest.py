from __future__ import annotations
from typing import Literal
from pydantic import BaseModel, ConfigDict, Field, field_serializer


class UserContestState(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    accepted_contest_ids: set[str] = Field(default_factory=set, alias="acceptedContestIds")
    total_points: int | float = Field(default=0, alias="totalPoints")
    last_updated: int = Field(default=0, alias="lastUpdated")

    @field_serializer("accepted_contest_ids")
    def serialize_ids(self, value: set[str]) -> list[str]:
        return sorted(value)


class ContestSubmission(BaseModel):
    """Opaque to the ledger; extra keys are kept as-is."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str | None = None
    contest_id: str | None = Field(default=None, alias="contestId")
    user_id: str | None = Field(default=None, alias="userId")


class AcceptRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")


class AcceptResponse(BaseModel):
    accepted: bool
    contest_id: str = Field(serialization_alias="contestId")
    user_id: str = Field(serialization_alias="userId")


class AwardRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    points: int | float


class AwardResponse(BaseModel):
    user_id: str = Field(serialization_alias="userId")
    contest_id: str = Field(serialization_alias="contestId")
    points: int | float
    total_points: int | float = Field(serialization_alias="totalPoints")


ContestStatus = Literal["active", "ended"]


class ContestCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(min_length=1)
    description: str = ""
    theme: str = ""
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")
    status: ContestStatus = "active"
    created_by: str | None = Field(default=None, alias="createdBy")


class Contest(ContestCreate):
    id: str
    created_at: str = Field(alias="createdAt")


class ContestStatusUpdate(BaseModel):
    status: ContestStatus


class VoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")


class VoteResponse(BaseModel):
    submission_id: str = Field(serialization_alias="submissionId")
    voted: bool
    votes: int
