from __future__ import annotations

import asyncio

import pytest

from chessroom.lock import RoomLocks


@pytest.mark.asyncio
async def test_same_room_is_serialized() -> None:
    locks = RoomLocks()
    trace: list[str] = []

    async def op(name: str) -> None:
        async with locks.hold("R1"):
            trace.append(f"{name}:start")
            await asyncio.sleep(0.01)
            trace.append(f"{name}:end")

    await asyncio.gather(op("a"), op("b"))

    assert trace == ["a:start", "a:end", "b:start", "b:end"]


@pytest.mark.asyncio
async def test_different_rooms_do_not_block_each_other() -> None:
    locks = RoomLocks()
    entered = asyncio.Event()

    async def holder() -> None:
        async with locks.hold("R1"):
            await asyncio.wait_for(entered.wait(), timeout=1)

    async def other() -> None:
        async with locks.hold("R2"):
            entered.set()

    await asyncio.gather(holder(), other())


@pytest.mark.asyncio
async def test_lock_is_dropped_when_unused() -> None:
    locks = RoomLocks()

    async with locks.hold("R1"):
        assert "R1" in locks

    assert "R1" not in locks


@pytest.mark.asyncio
async def test_lock_released_on_error() -> None:
    locks = RoomLocks()

    with pytest.raises(RuntimeError):
        async with locks.hold("R1"):
            raise RuntimeError("boom")

    assert "R1" not in locks
    async with locks.hold("R1"):
        pass
