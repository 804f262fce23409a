from __future__ import annotations

import logging
from dataclasses import dataclass

from chessroom.api.models import Color, ColorChoice, Role, Session


logger = logging.getLogger(__name__)

# Auto assignment fills seats in this order.
SEAT_ORDER: tuple[Color, ...] = (Color.white, Color.black)


@dataclass(frozen=True, slots=True)
class SeatAssignment:
    role: Role
    seats_changed: bool


def role_of(*, session: Session, participant_id: str) -> Role | None:
    return session.participants.get(participant_id)


def held_seat(*, session: Session, participant_id: str) -> Color | None:
    for color in SEAT_ORDER:
        if session.seats[color] == participant_id:
            return color
    return None


def _occupy(session: Session, color: Color, participant_id: str) -> SeatAssignment:
    session.seats[color] = participant_id
    role = Role(color.value)
    session.participants[participant_id] = role
    return SeatAssignment(role=role, seats_changed=True)


def assign_seat(*, session: Session, participant_id: str, requested: ColorChoice = ColorChoice.auto) -> SeatAssignment:
    """Give `participant_id` a role in `session`.

    A specific color is honored when free. An occupied color degrades to auto
    assignment instead of failing the join: White, then Black, then Spectator.
    The caller is expected to have released any previous seat of this participant.
    """

    if held_seat(session=session, participant_id=participant_id) is not None:
        raise ValueError("Participant already holds a seat")

    if requested != ColorChoice.auto:
        color = Color(requested.value)
        if session.seats[color] is None:
            return _occupy(session, color, participant_id)
        logger.info(
            "Seat %s unavailable in room %s; auto-assigning participant %s",
            color.value,
            session.room_id,
            participant_id,
        )

    for color in SEAT_ORDER:
        if session.seats[color] is None:
            return _occupy(session, color, participant_id)

    session.participants[participant_id] = Role.spectator
    return SeatAssignment(role=Role.spectator, seats_changed=False)


def release_seat(*, session: Session, participant_id: str) -> bool:
    """Empty whatever seat the participant holds. Returns True if a seat changed.

    Safe to call repeatedly; spectators and unknown participants release nothing.
    """

    color = held_seat(session=session, participant_id=participant_id)
    if color is None:
        return False
    session.seats[color] = None
    if participant_id in session.participants:
        session.participants[participant_id] = Role.spectator
    return True
