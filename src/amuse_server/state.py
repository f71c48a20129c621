"""Application state for the Amuse gesture server.

Assembles the session, the player, the space controller, the dispatcher and
the gesture loop, and keeps a registry of connected WebSocket clients so
that any component can broadcast updates.  One instance is created per
FastAPI app and exposed to routes through ``get_app_state``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Coroutine

from fastapi import WebSocket
from fastapi.requests import HTTPConnection

from .dispatcher import CommandDispatcher
from .driver import GestureLoop, LoopState
from .models import Command, PlaybackState
from .services.gesture_map import GestureTable
from .services.player import QueuePlayer
from .services.space import RemoteSpaceController
from .session import SessionContext
from .streams import QueueGestureStream

logger = logging.getLogger("amuse.state")


class AppState:
    """Everything one running server instance owns."""

    def __init__(
        self,
        table: GestureTable,
        space_open_timeout: float = 10.0,
        history_size: int = 50,
    ) -> None:
        self.session = SessionContext(table, history_size=history_size)
        self.player = QueuePlayer(listener=self._on_playback_change)
        self.space = RemoteSpaceController(self.broadcast, timeout=space_open_timeout)
        self.dispatcher = CommandDispatcher(self.session, self.player, self.space)
        self.stream: QueueGestureStream | None = None
        self.gesture_loop: GestureLoop | None = None
        self._clients: list[WebSocket] = []
        self._background: set[asyncio.Task] = set()

    # ── Lifecycle ────────────────────────────────────────────────

    async def start(self) -> None:
        """Open a fresh gesture stream and start consuming it."""
        self.stream = QueueGestureStream()
        self.stream.attach()
        self.gesture_loop = GestureLoop(self.session, self.dispatcher, observer=self._on_gesture)
        self.gesture_loop.start(self.stream)

    async def shutdown(self) -> None:
        if self.stream is not None:
            self.stream.close()
        if self.gesture_loop is not None:
            await self.gesture_loop.stop()
        tasks = list(self._background)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    @property
    def accepting_gestures(self) -> bool:
        return (
            self.stream is not None
            and not self.stream.closed
            and self.gesture_loop is not None
            and self.gesture_loop.state is LoopState.RUNNING
        )

    # ── WebSocket client management ──────────────────────────────

    def register(self, ws: WebSocket) -> None:
        self._clients.append(ws)
        logger.info("WebSocket client connected (%d total)", len(self._clients))

    def unregister(self, ws: WebSocket) -> None:
        if ws in self._clients:
            self._clients.remove(ws)
        logger.info("WebSocket client disconnected (%d total)", len(self._clients))

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send a JSON message to every connected WebSocket client."""
        payload = json.dumps(message)
        stale: list[WebSocket] = []
        # Clients may unregister while a send is in flight.
        for ws in list(self._clients):
            try:
                await ws.send_text(payload)
            except Exception:
                stale.append(ws)
        for ws in stale:
            self.unregister(ws)

    # ── Hooks ────────────────────────────────────────────────────

    async def _on_gesture(self, identity: str, command: Command) -> None:
        await self.broadcast({
            "type": "gesture",
            "identity": identity,
            "command": command.kind.value,
            "space_state": self.session.space_state.value,
        })

    def _on_playback_change(self, action: str, state: PlaybackState) -> None:
        self._spawn(self.broadcast({
            "type": "playback",
            "action": action,
            "playback": state.to_dict(),
        }))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (e.g. called from a plain test); nobody to notify.
            coro.close()
            return
        task = loop.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    # ── Convenience helpers ──────────────────────────────────────

    def status(self) -> dict:
        """Return the current interaction state as a JSON-safe dict."""
        loop_state = self.gesture_loop.state if self.gesture_loop else LoopState.IDLE
        return {
            **self.session.snapshot(),
            "loop_state": loop_state.value,
            "playback": self.player.state().to_dict(),
            "pending_space_requests": self.space.pending,
        }


def get_app_state(conn: HTTPConnection) -> AppState:
    """FastAPI dependency returning the app's ``AppState``."""
    return conn.app.state.amuse
