from __future__ import annotations

from statemachine import State, StateMachine

from guessgame.api.models import SessionPhase, SessionState


class SessionFSM(StateMachine):
    """FSM wrapper around SessionState.

    - phases: idle -> running -> ended -> idle
    - `ended` is transient; the engine settles back to idle in the same call.
    - the engine mutates state; the FSM only guards transitions.
    """

    idle = State(SessionPhase.idle.value, value=SessionPhase.idle.value, initial=True)
    running = State(SessionPhase.running.value, value=SessionPhase.running.value)
    ended = State(SessionPhase.ended.value, value=SessionPhase.ended.value)

    session_started = idle.to(running) | ended.to(running) | running.to.itself()
    answer_submitted = running.to.itself()
    timer_ticked = running.to.itself()
    session_finished = running.to(ended)
    session_settled = ended.to(idle)

    def __init__(self, session: SessionState):
        self.session = session
        super().__init__(start_value=session.phase.value)

    @property
    def session_active(self) -> bool:
        return self.current_state == self.running

    def sync_phase_to_model(self) -> None:
        self.session.phase = SessionPhase(str(self.current_state.value))
