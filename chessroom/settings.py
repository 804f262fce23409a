from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class RoomSettings:
    # How long a room with nobody joined is kept before eviction.
    empty_room_ttl_s: float = 300.0
    # How often the background sweeper looks for idle rooms.
    sweep_interval_s: float = 30.0
    log_level: str = "INFO"


def _float_from_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {raw!r}")
    return value


def settings_from_env() -> RoomSettings:
    defaults = RoomSettings()
    sweep_interval_s = _float_from_env("CHESSROOM_SWEEP_INTERVAL_S", defaults.sweep_interval_s)
    if sweep_interval_s == 0:
        raise ValueError("CHESSROOM_SWEEP_INTERVAL_S must be > 0")
    return RoomSettings(
        empty_room_ttl_s=_float_from_env("CHESSROOM_EMPTY_ROOM_TTL_S", defaults.empty_room_ttl_s),
        sweep_interval_s=sweep_interval_s,
        log_level=os.environ.get("CHESSROOM_LOG_LEVEL", defaults.log_level).upper(),
    )
