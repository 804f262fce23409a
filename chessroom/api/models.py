from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


class Color(StrEnum):
    white = "white"
    black = "black"

    @property
    def short(self) -> str:
        return "w" if self is Color.white else "b"

    @property
    def opposite(self) -> Color:
        return Color.black if self is Color.white else Color.white


class ColorChoice(StrEnum):
    white = "white"
    black = "black"
    auto = "auto"


class Role(StrEnum):
    white = "white"
    black = "black"
    spectator = "spectator"

    @property
    def color(self) -> Color | None:
        if self is Role.spectator:
            return None
        return Color(self.value)


class RejectionKind(StrEnum):
    game_over = "GameOver"
    not_a_player = "NotAPlayer"
    wrong_turn = "WrongTurn"
    illegal_move = "IllegalMove"


class SessionPhase(StrEnum):
    in_progress = "in_progress"
    game_over = "game_over"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LastMove(_WireModel):
    from_square: str = Field(..., alias="from")
    to_square: str = Field(..., alias="to")
    san: str


class TerminalState(BaseModel):
    checkmate: bool = False
    stalemate: bool = False
    draw: bool = False
    winner: Color | None = None


def _empty_seats() -> dict[Color, str | None]:
    return {Color.white: None, Color.black: None}


class Session(BaseModel):
    """Authoritative state of one room.

    Only the seat manager, the move processor and the lifecycle helpers mutate it,
    always while the room lock is held.
    """

    room_id: str
    created_at: datetime
    last_updated_at: datetime

    position: str = STARTING_FEN
    turn: Color = Color.white
    seats: dict[Color, str | None] = Field(default_factory=_empty_seats)
    last_move: LastMove | None = None
    terminal: TerminalState | None = None
    phase: SessionPhase = SessionPhase.in_progress

    # UCI moves since the last reset; replayed by the rules oracle for repetition detection.
    history: list[str] = Field(default_factory=list)

    # participant_id -> role, for everybody currently joined (players and spectators).
    participants: dict[str, Role] = Field(default_factory=dict)

    # Set while nobody is joined; drives idle eviction.
    idle_since: datetime | None = None


# --- client -> server ---


class JoinMessage(_WireModel):
    type: Literal["join"]
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=128)
    color: ColorChoice = ColorChoice.auto


class MoveMessage(_WireModel):
    type: Literal["move"]
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=128)
    # Shape only; whether these name real squares is the rules oracle's call.
    from_square: str = Field(..., alias="from", max_length=8)
    to_square: str = Field(..., alias="to", max_length=8)
    promotion: str | None = Field(default="q", max_length=8)


class ResetMessage(_WireModel):
    type: Literal["reset"]
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=128)


class LeaveRoomMessage(_WireModel):
    type: Literal["leaveRoom"]
    room_id: str = Field(..., alias="roomId", min_length=1, max_length=128)


ClientMessage = Annotated[
    JoinMessage | MoveMessage | ResetMessage | LeaveRoomMessage,
    Field(discriminator="type"),
]

_client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


def parse_client_message(raw: str | bytes) -> ClientMessage:
    """Validate one inbound frame. Raises pydantic.ValidationError on anything malformed."""

    return _client_message_adapter.validate_json(raw)


# --- server -> client ---


class ServerEvent(_WireModel):
    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PlayersPayload(BaseModel):
    white: bool
    black: bool


class ColorAssignedEvent(ServerEvent):
    type: Literal["colorAssigned"] = "colorAssigned"
    color: Role


class StateEvent(ServerEvent):
    type: Literal["state"] = "state"
    fen: str
    turn: Literal["w", "b"]
    last_move: LastMove | None = Field(default=None, alias="lastMove")
    players: PlayersPayload | None = None


class PlayersEvent(ServerEvent):
    type: Literal["players"] = "players"
    white: bool
    black: bool


class GameOverEvent(ServerEvent):
    type: Literal["gameOver"] = "gameOver"
    checkmate: bool
    winner: Color | None = None
    stalemate: bool
    draw: bool

    def to_wire(self) -> dict[str, Any]:
        # `winner` is only present on checkmate.
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class MoveRejectedEvent(ServerEvent):
    type: Literal["moveRejected"] = "moveRejected"
    reason: RejectionKind
    message: str


class ErrorEvent(ServerEvent):
    type: Literal["error"] = "error"
    message: str


# --- REST ---


class RoomSummary(BaseModel):
    room_id: str
    players: PlayersPayload
    participants: int
    phase: SessionPhase
    created_at: datetime


class RoomListResponse(BaseModel):
    rooms: list[RoomSummary]


class RoomSnapshotResponse(BaseModel):
    room_id: str
    fen: str
    turn: Literal["w", "b"]
    last_move: LastMove | None = None
    players: PlayersPayload
    terminal: TerminalState | None = None
    history: list[str]
