"""Room-wide notifications built from the authoritative Session.

Callers hold the room lock while publishing, so every participant sees a room's
events in the order the changes were applied.
"""

from __future__ import annotations

from chessroom.api.models import (
    GameOverEvent,
    PlayersEvent,
    ServerEvent,
    Session,
    StateEvent,
    TerminalState,
)
from chessroom.session_store import players_payload
from chessroom.websocket_hub import ConnectionHub


def state_event(session: Session) -> StateEvent:
    return StateEvent(
        fen=session.position,
        turn=session.turn.short,
        last_move=session.last_move,
        players=players_payload(session),
    )


def players_event(session: Session) -> PlayersEvent:
    players = players_payload(session)
    return PlayersEvent(white=players.white, black=players.black)


def game_over_event(terminal: TerminalState) -> GameOverEvent:
    return GameOverEvent(
        checkmate=terminal.checkmate,
        winner=terminal.winner,
        stalemate=terminal.stalemate,
        draw=terminal.draw,
    )


class BroadcastCoordinator:
    def __init__(self, hub: ConnectionHub) -> None:
        self.hub = hub

    async def publish(self, session: Session, event: ServerEvent, *, exclude: frozenset[str] = frozenset()) -> None:
        """Deliver `event` to everybody currently joined to the session's room."""

        recipients = [pid for pid in session.participants if pid not in exclude]
        await self.hub.send_many(recipients, event.to_wire())

    async def publish_state(self, session: Session) -> None:
        await self.publish(session, state_event(session))

    async def publish_players(self, session: Session, *, exclude: frozenset[str] = frozenset()) -> None:
        await self.publish(session, players_event(session), exclude=exclude)

    async def publish_game_over(self, session: Session) -> None:
        if session.terminal is None:
            return
        await self.publish(session, game_over_event(session.terminal))

    async def send_snapshot(self, session: Session, participant_id: str) -> None:
        """Bring one (newly joined) participant up to date with the room."""

        await self.hub.send(participant_id, state_event(session).to_wire())
        if session.terminal is not None:
            await self.hub.send(participant_id, game_over_event(session.terminal).to_wire())
