"""GET /playback and PUT /playback/queue - the track queue gestures act on."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..models import Track
from ..state import AppState, get_app_state

logger = logging.getLogger("amuse.routes.playback")

router = APIRouter(prefix="/playback")


class TrackPayload(BaseModel):
    catalog_id: str
    title: str
    artist: str
    artwork_url: str | None = None


class QueuePayload(BaseModel):
    tracks: list[TrackPayload]
    start_index: int = Field(default=0, ge=0)
    autoplay: bool = False


@router.get("")
async def get_playback(state: AppState = Depends(get_app_state)) -> dict:
    return {
        "playback": state.player.state().to_dict(),
        "queue": [t.to_dict() for t in state.player.queue],
    }


@router.put("/queue")
async def put_queue(body: QueuePayload, state: AppState = Depends(get_app_state)) -> dict:
    """Replace the queue with the tracks the headset fetched from the catalog.

    With ``autoplay`` the track at ``start_index`` starts playing at once.
    """
    tracks = [Track(**t.model_dump()) for t in body.tracks]
    state.player.load(tracks, start_index=body.start_index)
    if body.autoplay and tracks:
        current = state.player.current_track()
        if current is not None:
            state.player.play(current)

    logger.info("Queue replaced via PUT - %d tracks", len(tracks))
    return {"status": "ok", "track_count": len(tracks), "playback": state.player.state().to_dict()}
