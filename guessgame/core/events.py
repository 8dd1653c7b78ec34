from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "SESSION_STARTED",
    "ANSWER_ACCEPTED",
    "ANSWER_REJECTED",
    "TIMER_TICKED",
    "SESSION_ENDED",
    "TRANSITION_IGNORED",
]


@dataclass(frozen=True, slots=True)
class SessionEvent:
    type: EventType
    session_number: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, session_number: int, payload: dict[str, Any] | None = None) -> "SessionEvent":
        return SessionEvent(
            type=type,
            session_number=session_number,
            payload=payload or {},
            ts=datetime.now(timezone.utc),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "session_number": self.session_number,
            "payload": self.payload,
            "ts": self.ts.isoformat(),
        }
