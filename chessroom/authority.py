from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime

from chessroom.api.models import (
    ClientMessage,
    ColorAssignedEvent,
    ColorChoice,
    JoinMessage,
    LeaveRoomMessage,
    MoveMessage,
    MoveRejectedEvent,
    ResetMessage,
    Role,
)
from chessroom.broadcast import BroadcastCoordinator
from chessroom.lifecycle import leave_room, reset_session
from chessroom.lock import RoomLocks
from chessroom.rules import DEFAULT_PROMOTION, MoveIntent, PythonChessOracle, RulesOracle
from chessroom.seats import assign_seat
from chessroom.session_store import SessionStore, utc_now
from chessroom.settings import RoomSettings
from chessroom.turn_processing.moves import AppliedMove, submit_move
from chessroom.turn_processing.validators import MoveRejected
from chessroom.websocket_hub import Connection, ConnectionHub


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MoveResult:
    applied: AppliedMove | None = None
    rejection: MoveRejected | None = None

    @property
    def accepted(self) -> bool:
        return self.applied is not None


@dataclass(slots=True)
class RoomAuthority:
    """The single authority over every room in this process.

    Each operation:
    - takes the room lock
    - lazily creates the room's session
    - mutates it via the seat manager / move processor / lifecycle helpers
    - publishes the resulting events before releasing the lock

    A participant is joined to at most one room at a time.
    """

    settings: RoomSettings = field(default_factory=RoomSettings)
    store: SessionStore = field(default_factory=SessionStore)
    hub: ConnectionHub = field(default_factory=ConnectionHub)
    oracle: RulesOracle = field(default_factory=PythonChessOracle)
    locks: RoomLocks = field(default_factory=RoomLocks)
    _room_of: dict[str, str] = field(default_factory=dict)

    @property
    def broadcaster(self) -> BroadcastCoordinator:
        return BroadcastCoordinator(self.hub)

    def room_of(self, participant_id: str) -> str | None:
        return self._room_of.get(participant_id)

    # --- connections ---

    async def connect(self, participant_id: str, connection: Connection) -> None:
        await self.hub.register(participant_id, connection)

    async def disconnect(self, participant_id: str) -> None:
        """Transport went away: leave the current room (if any) and forget the connection."""

        room_id = self._room_of.get(participant_id)
        if room_id is not None:
            await self.leave(participant_id, room_id)
        await self.hub.unregister(participant_id)

    # --- operations ---

    async def handle(self, participant_id: str, message: ClientMessage) -> None:
        """Dispatch one validated client message."""

        if isinstance(message, JoinMessage):
            await self.join(participant_id, message.room_id, message.color)
        elif isinstance(message, MoveMessage):
            intent = MoveIntent(
                from_square=message.from_square,
                to_square=message.to_square,
                promotion=message.promotion or DEFAULT_PROMOTION,
            )
            await self.submit_move(participant_id, message.room_id, intent)
        elif isinstance(message, ResetMessage):
            await self.reset(participant_id, message.room_id)
        elif isinstance(message, LeaveRoomMessage):
            await self.leave(participant_id, message.room_id)
        else:
            raise ValueError(f"Unknown message: {message!r}")

    async def join(self, participant_id: str, room_id: str, color: ColorChoice = ColorChoice.auto) -> Role:
        previous = self._room_of.get(participant_id)
        if previous is not None and previous != room_id:
            await self.leave(participant_id, previous)

        async with self.locks.hold(room_id):
            session = self.store.get_or_create(room_id)
            broadcaster = self.broadcaster

            # Rejoining the same room gives up the old role first.
            seats_changed = leave_room(session=session, participant_id=participant_id)

            assignment = assign_seat(session=session, participant_id=participant_id, requested=color)
            seats_changed = seats_changed or assignment.seats_changed
            session.idle_since = None
            self._room_of[participant_id] = room_id
            logger.info("Participant %s joined room %s as %s", participant_id, room_id, assignment.role.value)

            await self.hub.send(participant_id, ColorAssignedEvent(color=assignment.role).to_wire())
            await broadcaster.send_snapshot(session, participant_id)
            if seats_changed:
                await broadcaster.publish_players(session, exclude=frozenset({participant_id}))

            return assignment.role

    async def submit_move(self, participant_id: str, room_id: str, intent: MoveIntent) -> MoveResult:
        async with self.locks.hold(room_id):
            session = self.store.get_or_create(room_id)
            broadcaster = self.broadcaster

            try:
                applied = submit_move(
                    session=session,
                    participant_id=participant_id,
                    intent=intent,
                    oracle=self.oracle,
                )
            except MoveRejected as e:
                logger.debug("Room %s: rejected move from %s: %s (%s)", room_id, participant_id, e.kind.value, e)
                await self.hub.send(participant_id, MoveRejectedEvent(reason=e.kind, message=str(e)).to_wire())
                return MoveResult(rejection=e)

            await broadcaster.publish_state(session)
            if applied.terminal_reached:
                logger.info("Room %s: game over %s", room_id, session.terminal)
                await broadcaster.publish_game_over(session)
            return MoveResult(applied=applied)

    async def reset(self, participant_id: str, room_id: str) -> None:
        async with self.locks.hold(room_id):
            session = self.store.get_or_create(room_id)
            reset_session(session=session)
            logger.info("Room %s reset by %s", room_id, participant_id)
            await self.broadcaster.publish_state(session)

    async def leave(self, participant_id: str, room_id: str) -> None:
        async with self.locks.hold(room_id):
            if self._room_of.get(participant_id) == room_id:
                del self._room_of[participant_id]

            session = self.store.get(room_id)
            if session is None:
                return
            if leave_room(session=session, participant_id=participant_id):
                await self.broadcaster.publish_players(session)

    # --- cleanup ---

    async def evict_idle_rooms(self, *, now: datetime | None = None) -> list[str]:
        """Drop rooms that nobody has joined for longer than the configured TTL."""

        ts = now or utc_now()
        ttl_s = self.settings.empty_room_ttl_s
        evicted: list[str] = []
        for room_id in self.store.idle_room_ids(ttl_s=ttl_s, now=ts):
            async with self.locks.hold(room_id):
                # Re-check under the lock; somebody may have joined meanwhile.
                if self.store.is_idle(room_id, ttl_s=ttl_s, now=ts):
                    self.store.discard(room_id)
                    evicted.append(room_id)
        if evicted:
            logger.info("Evicted %d idle room(s): %s", len(evicted), ", ".join(evicted))
        return evicted

    async def run_sweeper(self) -> None:
        """Evict idle rooms forever, every `sweep_interval_s` seconds. Cancel to stop."""

        while True:
            await asyncio.sleep(self.settings.sweep_interval_s)
            await self.evict_idle_rooms()
