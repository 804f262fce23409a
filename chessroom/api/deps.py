from __future__ import annotations

from chessroom.authority import RoomAuthority
from chessroom.settings import RoomSettings, settings_from_env


_AUTHORITY: RoomAuthority | None = None


def init_authority(*, settings: RoomSettings | None = None) -> RoomAuthority:
    """Create the process-wide room authority once.

    Safe to call multiple times; subsequent calls return the existing instance.
    """

    global _AUTHORITY
    if _AUTHORITY is None:
        _AUTHORITY = RoomAuthority(settings=settings or settings_from_env())
    return _AUTHORITY


def reset_authority_for_tests() -> None:
    global _AUTHORITY
    _AUTHORITY = None


def get_authority() -> RoomAuthority:
    return init_authority()
