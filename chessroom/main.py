import asyncio
import contextlib
import logging

from dotenv import load_dotenv
from fastapi import FastAPI

from chessroom.api.deps import get_authority
from chessroom.api.routes import router
from chessroom.settings import settings_from_env

# Existing environment wins over .env.
load_dotenv(override=False)

app = FastAPI(title="chessroom", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=settings_from_env().log_level)
logger = logging.getLogger(__name__)

_sweeper: asyncio.Task[None] | None = None


@app.on_event("startup")
async def _startup() -> None:
    global _sweeper
    # Same resolution as the routes, so an overridden authority is the one swept.
    provider = app.dependency_overrides.get(get_authority, get_authority)
    authority = provider()
    app.state.authority = authority
    _sweeper = asyncio.create_task(authority.run_sweeper())
    logger.info(
        "Room sweeper started (ttl=%ss, every %ss)",
        authority.settings.empty_room_ttl_s,
        authority.settings.sweep_interval_s,
    )


@app.on_event("shutdown")
async def _shutdown() -> None:
    global _sweeper
    if _sweeper is not None:
        _sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await _sweeper
        _sweeper = None


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "chessroom", "version": "0.1.0"}
