"""POST /gestures and GET /status: gesture intake and the diagnostic surface."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ..models import MatchType, RawGestureEvent
from ..state import AppState, get_app_state

logger = logging.getLogger("amuse.routes.gestures")

router = APIRouter()


class GestureEvent(BaseModel):
    """Payload sent by the headset app for every gesture match."""

    match: MatchType = MatchType.FULL
    package: str = ""
    name: str
    description: str = ""
    title: str | None = None
    stage: int | None = Field(default=None, ge=0)

    def to_raw(self) -> RawGestureEvent:
        return RawGestureEvent(
            self.match,
            self.package,
            self.name,
            stage=self.stage,
            description=self.description,
            title=self.title,
        )


@router.post("/gestures")
async def receive_gesture(
    event: GestureEvent, state: AppState = Depends(get_app_state),
) -> dict:
    """Queue a gesture match for the gesture loop.

    Partial and reset matches are accepted too; the loop drops them before
    classification.
    """
    try:
        raw = event.to_raw()
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    if not state.accepting_gestures:
        raise HTTPException(status_code=503, detail="gesture loop is not running")

    state.stream.push(raw)
    logger.debug("Queued %s match %s", raw.match.value, raw.name)
    return {"status": "queued", "match": raw.match.value}


@router.get("/status")
async def get_status(state: AppState = Depends(get_app_state)) -> dict:
    """Return space state, last detected gesture, playback and diagnostics."""
    return state.status()


@router.get("/gestures/table")
async def get_gesture_table(state: AppState = Depends(get_app_state)) -> dict:
    """Return the active identity -> command table."""
    return state.session.table.to_dict()
