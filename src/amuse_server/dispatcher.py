"""Apply semantic commands to the player and the immersive space.

Expected conditions (unknown gestures, a toggle while the space is busy,
nothing to resume, a failed open) are logged and recorded on the session;
they never raise to the caller.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .models import Command, CommandKind, DiagnosticKind, SpaceOpenOutcome, SpaceTransitionState
from .services.player import Player
from .services.space import SpaceController
from .session import SessionContext

logger = logging.getLogger("amuse.dispatcher")


class CommandDispatcher:
    """Guards and executes commands against the session's collaborators."""

    def __init__(self, session: SessionContext, player: Player, space: SpaceController) -> None:
        self.session = session
        self.player = player
        self.space = space

    async def dispatch(self, command: Command) -> None:
        handlers: dict[CommandKind, Callable[[Command], Awaitable[None]]] = {
            CommandKind.TOGGLE_IMMERSIVE_SPACE: self._toggle_immersive_space,
            CommandKind.SKIP_NEXT: self._skip_next,
            CommandKind.SKIP_PREVIOUS: self._skip_previous,
            CommandKind.TOGGLE_PLAY_PAUSE: self._toggle_play_pause,
            CommandKind.UNKNOWN: self._unknown,
        }
        await handlers[command.kind](command)

    # ── Immersive space ──────────────────────────────────────────

    async def _toggle_immersive_space(self, command: Command) -> None:
        state = self.session.space_state
        if state is not SpaceTransitionState.CLOSED:
            # Closing the space by gesture is not supported.
            logger.info("Immersive space is already %s; ignoring %r", state.value, command.identity)
            self.session.record(DiagnosticKind.GUARD_IGNORED, command.identity, f"space {state.value}")
            return

        self.session.set_space_state(SpaceTransitionState.IN_TRANSITION)
        try:
            outcome = await self.space.open()
        except asyncio.CancelledError:
            self._open_failed(command, "cancelled")
            raise
        except Exception:
            logger.exception("Immersive space open raised")
            outcome = SpaceOpenOutcome.ERROR

        if outcome is SpaceOpenOutcome.OPENED:
            # space_state becomes OPEN through the lifecycle hook.
            logger.info("Immersive space open accepted")
            return
        self._open_failed(command, outcome.value)

    def _open_failed(self, command: Command, reason: str) -> None:
        logger.warning("Immersive space did not open (%s)", reason)
        if self.session.space_state is SpaceTransitionState.IN_TRANSITION:
            self.session.set_space_state(SpaceTransitionState.CLOSED)
        self.session.record(DiagnosticKind.SPACE_OPEN_FAILED, command.identity, reason)

    # ── Playback ─────────────────────────────────────────────────

    async def _skip_next(self, command: Command) -> None:
        self.player.skip_next()

    async def _skip_previous(self, command: Command) -> None:
        self.player.skip_previous()

    async def _toggle_play_pause(self, command: Command) -> None:
        if self.player.is_playing():
            self.player.pause()
            return

        track = self.player.current_track()
        if track is None:
            logger.info("Nothing to resume for %r", command.identity)
            self.session.record(DiagnosticKind.NOTHING_TO_RESUME, command.identity)
            return
        self.player.resume(track)

    # ── Fallback ─────────────────────────────────────────────────

    async def _unknown(self, command: Command) -> None:
        logger.warning("Unknown gesture: %r", command.identity)
        self.session.record(DiagnosticKind.UNKNOWN_GESTURE, command.identity)
