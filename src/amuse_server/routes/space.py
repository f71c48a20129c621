"""POST /space/* - outcomes and lifecycle of the immersive space."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..models import SpaceOpenOutcome
from ..state import AppState, get_app_state

logger = logging.getLogger("amuse.routes.space")

router = APIRouter(prefix="/space")


class OpenResult(BaseModel):
    """Reply to an ``open_space`` broadcast."""

    request_id: str
    outcome: SpaceOpenOutcome


class Lifecycle(BaseModel):
    state: Literal["open", "closed"]


@router.post("/result")
async def open_result(body: OpenResult, state: AppState = Depends(get_app_state)) -> dict:
    """Settle a pending open request with the outcome seen on the headset."""
    if not state.space.resolve(body.request_id, body.outcome):
        return {"status": "ignored", "reason": f"no pending request {body.request_id}"}
    return {"status": "ok", "outcome": body.outcome.value}


@router.post("/lifecycle")
async def lifecycle(body: Lifecycle, state: AppState = Depends(get_app_state)) -> dict:
    """The immersive space appeared or was dismissed on the headset."""
    logger.info("Headset reports immersive space %s", body.state)
    if body.state == "open":
        state.session.notify_space_opened()
    else:
        state.session.notify_space_closed()
    return {"status": "ok", "space_state": state.session.space_state.value}
