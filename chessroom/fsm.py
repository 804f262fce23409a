from __future__ import annotations

from statemachine import State, StateMachine

from chessroom.api.models import Session, SessionPhase


class SessionFSM(StateMachine):
    """FSM wrapper around a room Session.

    - phases: in_progress -> game_over -> (reset) -> in_progress
    - the move processor and lifecycle helpers mutate the session; the FSM only guards transitions.
    """

    in_progress = State(
        SessionPhase.in_progress.value,
        value=SessionPhase.in_progress.value,
        initial=True,
    )
    game_over = State(SessionPhase.game_over.value, value=SessionPhase.game_over.value)

    finish = in_progress.to(game_over)
    restart = game_over.to(in_progress) | in_progress.to.itself()

    def __init__(self, session: Session):
        self.session = session
        super().__init__(start_value=session.phase.value)

    def sync_phase_to_model(self) -> None:
        self.session.phase = SessionPhase(str(self.current_state.value))
