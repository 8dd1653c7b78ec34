from __future__ import annotations

import logging
import random
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from statemachine.exceptions import TransitionNotAllowed

from guessgame.api.models import EndReason, Item, SessionPhase, SessionState, SessionSummary
from guessgame.config import ROUND_SECONDS
from guessgame.core.events import EventType, SessionEvent
from guessgame.fsm import SessionFSM
from guessgame.selector import select_next

logger = logging.getLogger(__name__)


class PoolEmptyError(ValueError):
    pass


class InvalidTransitionError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class EngineResult:
    """Result of one engine operation.

    - `state`: a copy of the session state after the operation.
    - `applied`: False when the current phase did not allow the operation.
    - `summary`: set only by the call that ended the session.
    - `events`: what happened, in order, for broadcasting/logging.
    """

    state: SessionState
    applied: bool
    summary: SessionSummary | None = None
    events: list[SessionEvent] = field(default_factory=list)


def normalize_answer(text: str) -> str:
    return text.strip().casefold()


class SessionEngine:
    """Single source of truth for the quiz session.

    Drivers call `start`, `submit_answer`, `tick` and `end`, and render the
    returned state. Scheduling is the driver's job; `tick` is a plain call.
    """

    def __init__(
        self,
        *,
        pool: Sequence[Item],
        rng: random.Random | None = None,
        round_seconds: int = ROUND_SECONDS,
        strict: bool = False,
    ) -> None:
        ids = [item.id for item in pool]
        if len(set(ids)) != len(ids):
            raise ValueError("Item ids in the pool must be unique")
        if round_seconds <= 0:
            raise ValueError("round_seconds must be > 0")

        self._pool = tuple(pool)
        self._rng = rng if rng is not None else random.Random()
        self._round_seconds = round_seconds
        self._strict = strict

        self._state = SessionState(
            remaining_seconds=round_seconds,
            current_item=self._select(()),
        )
        self._fsm = SessionFSM(self._state)

    @property
    def pool(self) -> tuple[Item, ...]:
        return self._pool

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def state(self) -> SessionState:
        return self._state.model_copy(deep=True)

    def start(self) -> EngineResult:
        if not self._pool:
            logger.error("Cannot start a session: item pool is empty")
            raise PoolEmptyError("Cannot start a session with an empty item pool")

        if self._fsm.session_active:
            logger.warning("Restarting session %d while it is still running", self._state.sessions_played)

        self._fsm.session_started()

        s = self._state
        s.previous_rounds_correct = s.rounds_correct
        s.rounds_correct = 0
        s.used_item_ids = []
        s.elapsed_seconds = 0
        s.remaining_seconds = self._round_seconds
        s.sessions_played += 1
        s.current_item = self._select(())

        self._fsm.sync_phase_to_model()

        if s.current_item is None:
            logger.error("Selector returned nothing for a fresh session over %d items", len(self._pool))
            return self._finish(reason=EndReason.selector_exhausted)

        logger.info("Session %d started with %d items", s.sessions_played, len(self._pool))

        return self._result(
            [
                self._event(
                    "SESSION_STARTED",
                    {"item_id": s.current_item.id},
                )
            ]
        )

    def submit_answer(self, text: str) -> EngineResult:
        try:
            self._fsm.answer_submitted()
        except TransitionNotAllowed:
            return self._ignored("submit_answer")

        s = self._state
        current = s.current_item
        if current is None:
            logger.error("Session %d is running without a current item", s.sessions_played)
            return self._finish(reason=EndReason.selector_exhausted)

        if normalize_answer(text) != normalize_answer(current.answer):
            rejected = self._event("ANSWER_REJECTED", {"item_id": current.id})
            return self._finish(reason=EndReason.wrong_answer, events=[rejected])

        s.used_item_ids.append(current.id)
        s.rounds_correct += 1
        s.max_rounds_correct = max(s.max_rounds_correct, s.rounds_correct)
        accepted = self._event("ANSWER_ACCEPTED", {"item_id": current.id, "rounds_correct": s.rounds_correct})

        if len(s.used_item_ids) == len(self._pool):
            return self._finish(reason=EndReason.pool_exhausted, events=[accepted])

        nxt = self._select(s.used_item_ids)
        if nxt is None:
            logger.error(
                "Selector exhausted with %d of %d items used",
                len(s.used_item_ids),
                len(self._pool),
            )
            return self._finish(reason=EndReason.selector_exhausted, events=[accepted])

        s.current_item = nxt
        s.remaining_seconds = self._round_seconds
        return self._result([accepted])

    def tick(self) -> EngineResult:
        try:
            self._fsm.timer_ticked()
        except TransitionNotAllowed:
            # Late ticks after end are expected from interval timers.
            return self._ignored("tick", level=logging.DEBUG)

        s = self._state
        s.remaining_seconds = max(0, s.remaining_seconds - 1)
        s.elapsed_seconds += 1
        ticked = self._event(
            "TIMER_TICKED",
            {"remaining_seconds": s.remaining_seconds, "elapsed_seconds": s.elapsed_seconds},
        )

        if s.remaining_seconds == 0:
            return self._finish(reason=EndReason.timeout, events=[ticked])
        return self._result([ticked])

    def end(self) -> EngineResult:
        if not self._fsm.session_active:
            return self._ignored("end")
        return self._finish(reason=EndReason.manual)

    def _finish(self, *, reason: EndReason, events: Iterable[SessionEvent] = ()) -> EngineResult:
        s = self._state
        self._fsm.session_finished()
        self._fsm.sync_phase_to_model()

        summary = SessionSummary(
            reason=reason,
            session_number=s.sessions_played,
            answer=s.current_item.answer if s.current_item else None,
            previous_rounds_correct=s.previous_rounds_correct,
            max_rounds_correct=s.max_rounds_correct,
            elapsed_seconds=s.elapsed_seconds,
            rounds_correct=s.rounds_correct,
        )

        s.remaining_seconds = self._round_seconds
        s.elapsed_seconds = 0
        s.current_item = self._select(s.used_item_ids) or self._select(())
        s.last_summary = summary

        self._fsm.session_settled()
        self._fsm.sync_phase_to_model()

        logger.info(
            "Session %d ended (%s): %d correct, best %d",
            summary.session_number,
            reason.value,
            summary.rounds_correct,
            summary.max_rounds_correct,
        )

        ended = self._event("SESSION_ENDED", summary.model_dump(mode="json"))
        return self._result([*events, ended], summary=summary)

    def _ignored(self, operation: str, *, level: int = logging.WARNING) -> EngineResult:
        phase = self._state.phase.value
        if self._strict:
            raise InvalidTransitionError(f"{operation} is not allowed while session is {phase}")
        logger.log(level, "Ignoring %s while session is %s", operation, phase)
        return self._result(
            [self._event("TRANSITION_IGNORED", {"operation": operation, "phase": phase})],
            applied=False,
        )

    def _select(self, used_ids: Iterable[str]) -> Item | None:
        return select_next(self._pool, list(used_ids), rng=self._rng)

    def _event(self, type: EventType, payload: dict[str, Any]) -> SessionEvent:
        return SessionEvent.now(type=type, session_number=self._state.sessions_played, payload=payload)

    def _result(
        self,
        events: list[SessionEvent],
        *,
        applied: bool = True,
        summary: SessionSummary | None = None,
    ) -> EngineResult:
        return EngineResult(state=self.state, applied=applied, summary=summary, events=events)
