from __future__ import annotations

import itertools

import pytest

from chessroom.api.models import Color, ColorChoice, Role
from chessroom.seats import assign_seat, held_seat, release_seat, role_of
from chessroom.session_store import new_session


def test_auto_fills_white_then_black_then_spectators() -> None:
    session = new_session(room_id="R1")

    roles = [assign_seat(session=session, participant_id=pid).role for pid in ("a", "b", "c", "d")]

    assert roles == [Role.white, Role.black, Role.spectator, Role.spectator]
    assert session.seats == {Color.white: "a", Color.black: "b"}
    assert session.participants == {"a": Role.white, "b": Role.black, "c": Role.spectator, "d": Role.spectator}


def test_specific_color_is_honored_when_free() -> None:
    session = new_session(room_id="R1")

    first = assign_seat(session=session, participant_id="a", requested=ColorChoice.black)
    second = assign_seat(session=session, participant_id="b")

    assert first.role == Role.black
    assert second.role == Role.white


def test_occupied_color_falls_back_to_auto() -> None:
    session = new_session(room_id="R1")
    assign_seat(session=session, participant_id="a", requested=ColorChoice.white)

    fallback = assign_seat(session=session, participant_id="b", requested=ColorChoice.white)
    assert fallback.role == Role.black
    assert fallback.seats_changed is True

    spectator = assign_seat(session=session, participant_id="c", requested=ColorChoice.black)
    assert spectator.role == Role.spectator
    assert spectator.seats_changed is False


def test_participant_cannot_take_a_second_seat() -> None:
    session = new_session(room_id="R1")
    assign_seat(session=session, participant_id="a")

    with pytest.raises(ValueError):
        assign_seat(session=session, participant_id="a")


@pytest.mark.parametrize(
    "requests",
    list(itertools.product([ColorChoice.white, ColorChoice.black, ColorChoice.auto], repeat=4)),
)
def test_at_most_one_occupant_per_color(requests: tuple[ColorChoice, ...]) -> None:
    session = new_session(room_id="R1")
    roles = [
        assign_seat(session=session, participant_id=f"p{i}", requested=req).role for i, req in enumerate(requests)
    ]

    assert roles.count(Role.white) == 1
    assert roles.count(Role.black) == 1
    # Spectators only once both seats are taken.
    assert roles[:2].count(Role.spectator) == 0


def test_release_frees_seat_once() -> None:
    session = new_session(room_id="R1")
    assign_seat(session=session, participant_id="a")
    assign_seat(session=session, participant_id="b")

    assert release_seat(session=session, participant_id="a") is True
    assert session.seats[Color.white] is None
    assert held_seat(session=session, participant_id="a") is None

    # Second release is a no-op.
    assert release_seat(session=session, participant_id="a") is False


def test_release_for_spectator_or_stranger_changes_nothing() -> None:
    session = new_session(room_id="R1")
    for pid in ("a", "b", "c"):
        assign_seat(session=session, participant_id=pid)

    assert release_seat(session=session, participant_id="c") is False
    assert release_seat(session=session, participant_id="nobody") is False
    assert session.seats == {Color.white: "a", Color.black: "b"}


def test_freed_seat_is_reassigned() -> None:
    session = new_session(room_id="R1")
    for pid in ("a", "b", "c"):
        assign_seat(session=session, participant_id=pid)

    release_seat(session=session, participant_id="a")
    del session.participants["a"]

    assert assign_seat(session=session, participant_id="d").role == Role.white


def test_role_of_reports_current_role() -> None:
    session = new_session(room_id="R1")
    assign_seat(session=session, participant_id="a")
    assign_seat(session=session, participant_id="b")
    assign_seat(session=session, participant_id="c")

    assert role_of(session=session, participant_id="a") == Role.white
    assert role_of(session=session, participant_id="c") == Role.spectator
    assert role_of(session=session, participant_id="ghost") is None

    release_seat(session=session, participant_id="a")
    assert role_of(session=session, participant_id="a") == Role.spectator
