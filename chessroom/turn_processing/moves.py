from __future__ import annotations

import logging
from dataclasses import dataclass

from chessroom.api.models import Color, LastMove, RejectionKind, Session, TerminalState
from chessroom.fsm import SessionFSM
from chessroom.rules import MoveIntent, RulesOracle
from chessroom.session_store import touch
from chessroom.turn_processing.validators import MOVE_PIPELINE, MoveRejected, ValidationContext, ValidatorPipeline


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AppliedMove:
    """Result of an accepted move.

    - `terminal_reached`: this move is the one that ended the game.
    """

    mover: Color
    last_move: LastMove
    terminal_reached: bool


def submit_move(
    *,
    session: Session,
    participant_id: str,
    intent: MoveIntent,
    oracle: RulesOracle,
    pipeline: ValidatorPipeline = MOVE_PIPELINE,
) -> AppliedMove:
    """Validate and apply one move intent.

    Raises MoveRejected without touching the session when any check fails:
    game over, not a seated player, wrong turn, then illegal move.
    """

    ctx = ValidationContext(room_id=session.room_id, participant_id=participant_id)
    pipeline.validate(ctx=ctx, session=session)

    evaluation = oracle.evaluate(position=session.position, history=session.history, intent=intent)
    if not evaluation.legal:
        raise MoveRejected(
            RejectionKind.illegal_move,
            f"Illegal move {intent.from_square}->{intent.to_square}",
        )

    fsm = SessionFSM(session)
    mover = session.turn

    session.position = evaluation.fen
    session.history.append(evaluation.uci)
    session.turn = mover.opposite
    # UCI is "<from><to>[promotion]", already normalized by the oracle.
    session.last_move = LastMove(
        from_square=evaluation.uci[:2],
        to_square=evaluation.uci[2:4],
        san=evaluation.san,
    )

    if evaluation.is_terminal:
        session.terminal = TerminalState(
            checkmate=evaluation.checkmate,
            stalemate=evaluation.stalemate,
            draw=evaluation.draw,
            winner=mover if evaluation.checkmate else None,
        )
        fsm.finish()
        fsm.sync_phase_to_model()

    touch(session)
    logger.info("Room %s: %s played %s", session.room_id, mover.value, evaluation.san)

    return AppliedMove(mover=mover, last_move=session.last_move, terminal_reached=evaluation.is_terminal)
