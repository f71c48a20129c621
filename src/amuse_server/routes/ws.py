"""WebSocket /ws - real-time event stream to the headset app."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..state import AppState

logger = logging.getLogger("amuse.routes.ws")

router = APIRouter()


@router.websocket("/ws")
async def websocket_endpoint(ws: WebSocket) -> None:
    """Accept a WebSocket connection and keep it alive.

    On connect the server sends a status snapshot.  After that the client
    listens for broadcasts: ``open_space`` requests (answer them with
    ``POST /space/result``), ``gesture`` detections and ``playback``
    changes.  Messages sent by the client are logged and ignored.
    """
    state: AppState = ws.app.state.amuse
    await ws.accept()
    state.register(ws)

    try:
        await ws.send_text(json.dumps({"type": "status", "status": state.status()}))
    except Exception:
        state.unregister(ws)
        return

    try:
        while True:
            data = await ws.receive_text()
            logger.debug("WS received from client: %s", data[:200])
    except WebSocketDisconnect:
        pass
    finally:
        state.unregister(ws)
