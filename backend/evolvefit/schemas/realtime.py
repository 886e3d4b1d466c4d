from __future__ import annotations
from typing import Any, Literal
from pydantic import BaseModel, ConfigDict

MessageType = Literal["post", "comment", "like", "contest", "leaderboard", "admin-update"]


class BroadcastMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: MessageType
    timestamp: int  # wall-clock ms
    data: Any = None


class BufferResponse(BaseModel):
    channel: str
    count: int
    messages: list[BroadcastMessage]
