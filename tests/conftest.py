from __future__ import annotations

from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from chessroom.authority import RoomAuthority
from chessroom.settings import RoomSettings


class FakeConnection:
    """Stands in for a WebSocket: records every JSON payload pushed to it."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    async def send_json(self, data: Any) -> None:
        self.sent.append(data)

    def types(self) -> list[str]:
        return [m["type"] for m in self.sent]

    def of_type(self, type_: str) -> list[dict[str, Any]]:
        return [m for m in self.sent if m["type"] == type_]

    def clear(self) -> None:
        self.sent.clear()


@pytest.fixture()
def fake_connection() -> type[FakeConnection]:
    return FakeConnection


@pytest.fixture()
def authority() -> RoomAuthority:
    return RoomAuthority(settings=RoomSettings(empty_room_ttl_s=60.0, sweep_interval_s=5.0))


@pytest.fixture()
def client(authority: RoomAuthority) -> Generator[TestClient, None, None]:
    """TestClient wired to the per-test authority instead of the process-wide one."""

    from chessroom.api.deps import get_authority
    from chessroom.main import app

    app.dependency_overrides[get_authority] = lambda: authority
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
