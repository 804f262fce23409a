from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from chessroom.api.models import RejectionKind, Role, Session
from chessroom.seats import role_of


class MoveRejected(ValueError):
    """A move intent that must not change the session.

    Reported back to the requesting participant only.
    """

    def __init__(self, kind: RejectionKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    room_id: str
    participant_id: str


class TurnValidator(ABC):
    """A small, composable validation unit for an incoming move intent."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, session: Session) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class GameOverValidator(TurnValidator):
    """Deny every move once the session has reached a terminal state."""

    def validate(self, *, ctx: ValidationContext, session: Session) -> None:
        if session.terminal is not None:
            raise MoveRejected(RejectionKind.game_over, "Game is over")


@dataclass(frozen=True, slots=True)
class SeatedPlayerValidator(TurnValidator):
    """Only participants seated as White or Black may move."""

    def validate(self, *, ctx: ValidationContext, session: Session) -> None:
        role = role_of(session=session, participant_id=ctx.participant_id)
        if role is None or role == Role.spectator:
            raise MoveRejected(
                RejectionKind.not_a_player,
                f"Participant is not seated in room '{ctx.room_id}'",
            )


@dataclass(frozen=True, slots=True)
class TurnOwnerValidator(TurnValidator):
    """Only the color whose turn it is may move."""

    def validate(self, *, ctx: ValidationContext, session: Session) -> None:
        role = role_of(session=session, participant_id=ctx.participant_id)
        color = role.color if role is not None else None
        if color != session.turn:
            raise MoveRejected(
                RejectionKind.wrong_turn,
                f"Not your turn (expected {session.turn.value})",
            )


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[TurnValidator, ...]

    def validate(self, *, ctx: ValidationContext, session: Session) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, session=session)


# Cheapest checks first; legality is left to the rules oracle afterwards.
MOVE_PIPELINE = ValidatorPipeline(
    validators=(
        GameOverValidator(),
        SeatedPlayerValidator(),
        TurnOwnerValidator(),
    )
)
