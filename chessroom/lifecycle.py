from __future__ import annotations

import logging
from datetime import datetime

from chessroom.api.models import STARTING_FEN, Color, Session
from chessroom.fsm import SessionFSM
from chessroom.seats import release_seat
from chessroom.session_store import touch, utc_now


logger = logging.getLogger(__name__)


def reset_session(*, session: Session) -> None:
    """Restart the game in place. Seats and joined participants are kept."""

    fsm = SessionFSM(session)

    session.position = STARTING_FEN
    session.turn = Color.white
    session.last_move = None
    session.terminal = None
    session.history.clear()

    fsm.restart()
    fsm.sync_phase_to_model()
    touch(session)
    logger.info("Room %s reset", session.room_id)


def leave_room(*, session: Session, participant_id: str, now: datetime | None = None) -> bool:
    """Remove a participant from the room, releasing its seat.

    Returns True if seat occupancy changed. Idempotent.
    """

    if participant_id not in session.participants:
        return False

    seats_changed = release_seat(session=session, participant_id=participant_id)
    del session.participants[participant_id]

    ts = now or utc_now()
    if not session.participants:
        session.idle_since = ts
    touch(session, now=ts)
    logger.info("Participant %s left room %s", participant_id, session.room_id)
    return seats_changed
