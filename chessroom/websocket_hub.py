from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any, Protocol


logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything that can push a JSON payload to one participant (a FastAPI WebSocket in production)."""

    async def send_json(self, data: Any) -> None: ...


class ConnectionHub:
    """In-process registry of live participant connections.

    Contract:
      - register a connection under its participant id via `register(participant_id, connection)`.
      - push payloads with `send(participant_id, payload)` or `send_many(participant_ids, payload)`.

    Room membership lives on the Session; the hub only knows how to reach a participant.
    Payloads should be JSON-serializable dicts.
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._connections

    async def register(self, participant_id: str, connection: Connection) -> None:
        async with self._lock:
            self._connections[participant_id] = connection

    async def unregister(self, participant_id: str) -> None:
        async with self._lock:
            self._connections.pop(participant_id, None)

    async def send(self, participant_id: str, payload: dict[str, Any]) -> bool:
        """Deliver to one participant. Returns False if it is gone or the send failed."""

        async with self._lock:
            conn = self._connections.get(participant_id)

        if conn is None:
            logger.debug("Skipping %s for departed participant %s", payload.get("type"), participant_id)
            return False

        try:
            await conn.send_json(payload)
        except Exception:
            logger.warning("Dropping participant %s after failed send", participant_id, exc_info=True)
            async with self._lock:
                if self._connections.get(participant_id) is conn:
                    del self._connections[participant_id]
            return False
        return True

    async def send_many(self, participant_ids: Iterable[str], payload: dict[str, Any]) -> None:
        for participant_id in list(participant_ids):
            await self.send(participant_id, payload)
