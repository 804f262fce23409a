from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from chessroom.api.models import Color, PlayersPayload, Session


logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def new_session(*, room_id: str, now: datetime | None = None) -> Session:
    ts = now or utc_now()
    # A fresh room has nobody in it yet, so it is idle from the start.
    return Session(room_id=room_id, created_at=ts, last_updated_at=ts, idle_since=ts)


def touch(session: Session, *, now: datetime | None = None) -> None:
    session.last_updated_at = now or utc_now()


def players_payload(session: Session) -> PlayersPayload:
    return PlayersPayload(
        white=session.seats[Color.white] is not None,
        black=session.seats[Color.black] is not None,
    )


class SessionStore:
    """In-process room registry keyed by room id.

    Not synchronized on its own: callers hold the room lock for the key they touch.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._sessions

    def get(self, room_id: str) -> Session | None:
        return self._sessions.get(room_id)

    def get_or_create(self, room_id: str, *, now: datetime | None = None) -> Session:
        session = self._sessions.get(room_id)
        if session is None:
            session = new_session(room_id=room_id, now=now)
            self._sessions[room_id] = session
            logger.info("Created room %s", room_id)
        return session

    def discard(self, room_id: str) -> Session | None:
        return self._sessions.pop(room_id, None)

    def list_sessions(self) -> list[Session]:
        out = list(self._sessions.values())
        out.sort(key=lambda s: s.created_at, reverse=True)
        return out

    def is_idle(self, room_id: str, *, ttl_s: float, now: datetime | None = None) -> bool:
        """True if nobody has been joined to the room for at least `ttl_s` seconds."""

        session = self._sessions.get(room_id)
        if session is None or session.participants or session.idle_since is None:
            return False
        return session.idle_since <= (now or utc_now()) - timedelta(seconds=ttl_s)

    def idle_room_ids(self, *, ttl_s: float, now: datetime | None = None) -> list[str]:
        ts = now or utc_now()
        return sorted(room_id for room_id in self._sessions if self.is_idle(room_id, ttl_s=ttl_s, now=ts))
