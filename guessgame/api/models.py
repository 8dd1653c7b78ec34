from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    answer: str
    # Opaque reference for the presentation layer (path under the asset dir).
    image: str = ""


class SessionPhase(StrEnum):
    idle = "idle"
    running = "running"
    # Only observable inside the end transition; settles to idle right away.
    ended = "ended"


class EndReason(StrEnum):
    wrong_answer = "wrong_answer"
    timeout = "timeout"
    pool_exhausted = "pool_exhausted"
    manual = "manual"
    # Selector ran dry while the used-set was not full (should never happen).
    selector_exhausted = "selector_exhausted"


class SessionSummary(BaseModel):
    reason: EndReason
    session_number: int

    # Answer of the item on display when the session ended.
    answer: str | None = None

    previous_rounds_correct: int
    max_rounds_correct: int
    elapsed_seconds: int
    rounds_correct: int


class SessionState(BaseModel):
    phase: SessionPhase = SessionPhase.idle

    # Answer order is kept for display; ids never repeat within a session.
    used_item_ids: list[str] = Field(default_factory=list)
    current_item: Item | None = None

    remaining_seconds: int = Field(default=0, ge=0)
    elapsed_seconds: int = Field(default=0, ge=0)

    rounds_correct: int = 0
    previous_rounds_correct: int = 0
    max_rounds_correct: int = 0

    sessions_played: int = 0
    last_summary: SessionSummary | None = None


class AnswerRequest(BaseModel):
    text: str = Field(..., max_length=200)


class SessionResponse(BaseModel):
    state: SessionState
    applied: bool
    summary: SessionSummary | None = None
