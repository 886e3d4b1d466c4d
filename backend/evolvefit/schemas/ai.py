from __future__ import annotations
from typing import Any
from pydantic import BaseModel, ConfigDict, Field


class _Camel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ContestInfo(_Camel):
    title: str
    description: str = ""
    rules: list[str] = Field(default_factory=list)


class ContestProofRequest(_Camel):
    media_base64: str = Field(alias="mediaBase64")
    media_type: str | None = Field(default="image", alias="mediaType")  # "image" | "video"
    contest: ContestInfo


class FoodRequest(_Camel):
    base64_image: str = Field(alias="base64Image")
    voice_context: str = Field(default="", alias="voiceContext")


class VerifyContentRequest(_Camel):
    content: str
    image_url: str | None = Field(default=None, alias="imageUrl")


class ChatTurn(_Camel):
    role: str
    content: str | None = ""


class TodaysLog(_Camel):
    meals: list[dict[str, Any]] = Field(default_factory=list)
    total_macros: Any = Field(default=None, alias="totalMacros")


class ChatRequest(_Camel):
    message: str
    history: list[ChatTurn] = Field(default_factory=list)
    user_profile: dict[str, Any] = Field(default_factory=dict, alias="userProfile")
    todays_log: TodaysLog = Field(default_factory=TodaysLog, alias="todaysLog")
    settings: dict[str, Any] | None = None


class PlanRequest(_Camel):
    type: str = "meal"  # anything but "workout" is a meal plan
    profile: dict[str, Any] | None = None
