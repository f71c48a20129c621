"""Amuse gesture server: FastAPI entry point.

Start with::

    uv run uvicorn amuse_server.main:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .routes import gestures, playback, space, ws
from .services.gesture_map import GestureTable, resolve_table
from .state import AppState

# ── Logging ──────────────────────────────────────────────────────────

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s  %(name)-24s  %(levelname)-7s  %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger("amuse.main")


# ── App ──────────────────────────────────────────────────────────────


def create_app(
    table: GestureTable | None = None,
    space_open_timeout: float = config.SPACE_OPEN_TIMEOUT_S,
    history_size: int = config.DIAGNOSTIC_HISTORY,
) -> FastAPI:
    """Build the application and the state it owns."""
    state = AppState(
        table or resolve_table(config.GESTURE_TABLE),
        space_open_timeout=space_open_timeout,
        history_size=history_size,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await state.start()
        logger.info("Amuse server ready (gesture table %s)", state.session.table.name)
        try:
            yield
        finally:
            await state.shutdown()

    app = FastAPI(
        title="Amuse Server",
        description=(
            "Interprets hand-gesture matches from the Amuse headset app and "
            "turns them into playback and immersive-space commands."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.amuse = state

    # Allow all origins so the headset app and local tools can reach us.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(gestures.router)
    app.include_router(playback.router)
    app.include_router(space.router)
    app.include_router(ws.router)

    @app.get("/health")
    async def health() -> dict:
        """Simple health-check endpoint."""
        return {"status": "ok"}

    return app


app = create_app()
