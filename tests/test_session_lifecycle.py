from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from statemachine.exceptions import TransitionNotAllowed

from chessroom.api.models import STARTING_FEN, Color, Role, SessionPhase, TerminalState
from chessroom.fsm import SessionFSM
from chessroom.lifecycle import leave_room, reset_session
from chessroom.rules import MoveIntent, PythonChessOracle
from chessroom.seats import assign_seat
from chessroom.session_store import SessionStore, new_session
from chessroom.turn_processing.moves import submit_move


T0 = datetime(2025, 1, 1, tzinfo=UTC)


def test_reset_restores_start_and_keeps_seats() -> None:
    session = new_session(room_id="R1")
    for pid in ("A", "B", "C"):
        assign_seat(session=session, participant_id=pid)
    submit_move(session=session, participant_id="A", intent=MoveIntent("e2", "e4"), oracle=PythonChessOracle())
    session.terminal = TerminalState(draw=True)
    session.phase = SessionPhase.game_over

    reset_session(session=session)

    assert session.position == STARTING_FEN
    assert session.turn == Color.white
    assert session.last_move is None
    assert session.terminal is None
    assert session.history == []
    assert session.phase == SessionPhase.in_progress
    assert session.seats == {Color.white: "A", Color.black: "B"}
    assert session.participants == {"A": Role.white, "B": Role.black, "C": Role.spectator}


def test_reset_of_fresh_session_is_harmless() -> None:
    session = new_session(room_id="R1")
    reset_session(session=session)
    assert session.phase == SessionPhase.in_progress
    assert session.position == STARTING_FEN


def test_fsm_refuses_to_finish_twice() -> None:
    session = new_session(room_id="R1")
    fsm = SessionFSM(session)
    fsm.finish()
    fsm.sync_phase_to_model()
    assert session.phase == SessionPhase.game_over

    with pytest.raises(TransitionNotAllowed):
        SessionFSM(session).finish()


def test_leave_releases_seat_and_marks_idle() -> None:
    session = new_session(room_id="R1", now=T0)
    assign_seat(session=session, participant_id="A")
    assign_seat(session=session, participant_id="B")
    session.idle_since = None

    assert leave_room(session=session, participant_id="A", now=T0) is True
    assert session.seats[Color.white] is None
    assert "A" not in session.participants
    assert session.idle_since is None

    assert leave_room(session=session, participant_id="B", now=T0 + timedelta(seconds=5)) is True
    assert session.participants == {}
    assert session.idle_since == T0 + timedelta(seconds=5)


def test_leave_is_idempotent() -> None:
    session = new_session(room_id="R1")
    assign_seat(session=session, participant_id="A")

    assert leave_room(session=session, participant_id="A") is True
    assert leave_room(session=session, participant_id="A") is False


def test_spectator_leaving_does_not_change_seats() -> None:
    session = new_session(room_id="R1")
    for pid in ("A", "B", "C"):
        assign_seat(session=session, participant_id=pid)

    assert leave_room(session=session, participant_id="C") is False
    assert "C" not in session.participants


def test_store_creates_lazily_and_lists_newest_first() -> None:
    store = SessionStore()
    assert store.get("R1") is None

    first = store.get_or_create("R1", now=T0)
    second = store.get_or_create("R2", now=T0 + timedelta(seconds=1))

    assert store.get_or_create("R1") is first
    assert [s.room_id for s in store.list_sessions()] == [second.room_id, first.room_id]
    assert len(store) == 2


def test_idle_rooms_respect_ttl_and_occupancy() -> None:
    store = SessionStore()
    store.get_or_create("empty", now=T0)
    watched = store.get_or_create("watched", now=T0)
    watched.participants["someone"] = Role.spectator

    assert store.idle_room_ids(ttl_s=60, now=T0 + timedelta(seconds=30)) == []
    assert store.idle_room_ids(ttl_s=60, now=T0 + timedelta(seconds=60)) == ["empty"]
    assert store.is_idle("watched", ttl_s=0, now=T0 + timedelta(days=1)) is False
    assert store.is_idle("missing", ttl_s=0) is False
