from __future__ import annotations

import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from chessroom.api.deps import get_authority
from chessroom.api.models import (
    ErrorEvent,
    RoomListResponse,
    RoomSnapshotResponse,
    RoomSummary,
    parse_client_message,
)
from chessroom.authority import RoomAuthority
from chessroom.session_store import players_payload

router = APIRouter()
logger = logging.getLogger(__name__)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    loc = ".".join(str(p) for p in first.get("loc", ()))
    return f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))


@router.websocket("/ws")
async def room_channel_ws(websocket: WebSocket, authority: RoomAuthority = Depends(get_authority)) -> None:
    await websocket.accept()
    participant_id = uuid4().hex
    await authority.connect(participant_id, websocket)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            # Text and binary frames carry the same JSON.
            raw = frame.get("text") or frame.get("bytes")
            if raw is None:
                await websocket.send_json(ErrorEvent(message="Invalid message: empty frame").to_wire())
                continue
            try:
                message = parse_client_message(raw)
            except ValidationError as e:
                logger.debug("Malformed frame from %s: %s", participant_id, e.error_count())
                await websocket.send_json(ErrorEvent(message=f"Invalid message: {_describe(e)}").to_wire())
                continue
            await authority.handle(participant_id, message)
    except WebSocketDisconnect:
        await authority.disconnect(participant_id)
    except Exception:
        await authority.disconnect(participant_id)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/rooms", response_model=RoomListResponse)
async def list_rooms_route(authority: RoomAuthority = Depends(get_authority)) -> RoomListResponse:
    return RoomListResponse(
        rooms=[
            RoomSummary(
                room_id=s.room_id,
                players=players_payload(s),
                participants=len(s.participants),
                phase=s.phase,
                created_at=s.created_at,
            )
            for s in authority.store.list_sessions()
        ]
    )


@router.get("/rooms/{room_id}", response_model=RoomSnapshotResponse)
async def get_room_route(room_id: str, authority: RoomAuthority = Depends(get_authority)) -> RoomSnapshotResponse:
    # Reads never create rooms.
    session = authority.store.get(room_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return RoomSnapshotResponse(
        room_id=session.room_id,
        fen=session.position,
        turn=session.turn.short,
        last_move=session.last_move,
        players=players_payload(session),
        terminal=session.terminal,
        history=list(session.history),
    )
