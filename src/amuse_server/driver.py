"""Gesture loop: feeds a gesture stream through classification and dispatch.

One consumer per stream.  Each event is fully handled (filter, resolve
identity, classify, dispatch) before the next one is pulled, so the
session's space state needs no lock.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import AsyncIterable, Awaitable, Callable

from .dispatcher import CommandDispatcher
from .models import Command, RawGestureEvent, resolve_identity
from .session import SessionContext

logger = logging.getLogger("amuse.driver")

Observer = Callable[[str, Command], Awaitable[None]]


class LoopState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"
    CANCELLED = "cancelled"
    FAILED = "failed"


class GestureLoop:
    """Owns the lifetime of one gesture-stream subscription."""

    def __init__(
        self,
        session: SessionContext,
        dispatcher: CommandDispatcher,
        observer: Observer | None = None,
    ) -> None:
        self.session = session
        self.dispatcher = dispatcher
        self._observer = observer
        self._state = LoopState.IDLE
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    def start(self, source: AsyncIterable[RawGestureEvent]) -> asyncio.Task:
        """Run the loop in a background task and return it."""
        if self._state is not LoopState.IDLE:
            raise RuntimeError(f"gesture loop already {self._state.value}")
        self._state = LoopState.RUNNING
        self._task = asyncio.create_task(self.run(source), name="gesture-loop")
        self._task.add_done_callback(self._on_task_done)
        return self._task

    def _on_task_done(self, task: asyncio.Task) -> None:
        # Covers a cancel that lands before run() got to execute.
        if task.cancelled() and self._state is LoopState.RUNNING:
            self._state = LoopState.CANCELLED

    async def stop(self) -> None:
        """Cancel the background task and wait for it to wind down."""
        task = self._task
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def run(self, source: AsyncIterable[RawGestureEvent]) -> None:
        self._state = LoopState.RUNNING
        self.session.bind()
        logger.info("Gesture loop started (table=%s)", self.session.table.name)
        try:
            async for event in source:
                await self._handle_shielded(event)
        except asyncio.CancelledError:
            self._state = LoopState.CANCELLED
            logger.info("Gesture loop cancelled")
            raise
        except Exception:
            self._state = LoopState.FAILED
            logger.exception("Gesture loop failed")
            raise
        self._state = LoopState.STOPPED
        logger.info("Gesture stream ended; loop stopped")

    async def _handle_shielded(self, event: RawGestureEvent) -> None:
        # A cancel while an event is in flight waits for that event to finish.
        inner = asyncio.ensure_future(self.handle(event))
        try:
            await asyncio.shield(inner)
        except asyncio.CancelledError:
            if not inner.done():
                await asyncio.wait({inner})
            if not inner.cancelled() and inner.exception() is not None:
                logger.error("In-flight gesture failed during shutdown: %r", inner.exception())
            raise

    async def handle(self, event: RawGestureEvent) -> Command | None:
        """Process one raw event.  Returns the dispatched command, if any."""
        if not event.is_actionable:
            logger.debug(
                "Ignoring %s match %s (stage=%s)", event.match.value, event.name, event.stage,
            )
            return None

        identity = resolve_identity(event)
        self.session.last_detected_identity = identity
        command = self.session.table.classify(identity)
        logger.info("Gesture %r -> %s", identity, command.kind.value)
        await self.dispatcher.dispatch(command)

        if self._observer is not None:
            try:
                await self._observer(identity, command)
            except Exception:
                logger.exception("Gesture observer failed for %r", identity)
        return command
