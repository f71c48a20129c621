"""Immersive-space collaborator.

Only the headset can actually open the immersive space, so
``RemoteSpaceController.open`` publishes a request to the connected clients
and waits for one of them to report the outcome via ``POST /space/result``.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable, Protocol

from ..models import SpaceOpenOutcome

logger = logging.getLogger("amuse.services.space")

Publisher = Callable[[dict[str, Any]], Awaitable[None]]


class SpaceController(Protocol):
    async def open(self) -> SpaceOpenOutcome: ...


class RemoteSpaceController:
    """Round-trips open requests through the client connection."""

    def __init__(self, publish: Publisher, timeout: float = 10.0) -> None:
        self._publish = publish
        self._timeout = timeout
        self._pending: dict[str, asyncio.Future[SpaceOpenOutcome]] = {}

    @property
    def pending(self) -> list[str]:
        return list(self._pending)

    async def open(self) -> SpaceOpenOutcome:
        request_id = uuid.uuid4().hex
        future: asyncio.Future[SpaceOpenOutcome] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await self._publish({"type": "open_space", "request_id": request_id})
            logger.info("Requested immersive space open (%s)", request_id)
            return await asyncio.wait_for(future, self._timeout)
        except asyncio.TimeoutError:
            logger.warning("No open_space result within %.1f s (%s)", self._timeout, request_id)
            return SpaceOpenOutcome.ERROR
        except Exception:
            logger.exception("Could not publish open_space request")
            return SpaceOpenOutcome.ERROR
        finally:
            self._pending.pop(request_id, None)

    def resolve(self, request_id: str, outcome: SpaceOpenOutcome) -> bool:
        """Settle a pending request.  Returns False if it is unknown or already settled."""
        future = self._pending.get(request_id)
        if future is None or future.done():
            logger.info("Ignoring result for unknown request %s", request_id)
            return False
        future.set_result(outcome)
        return True
