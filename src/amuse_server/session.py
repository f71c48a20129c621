"""Per-session interaction state shared by the dispatcher and the gesture loop.

A ``SessionContext`` is created by the application assembly and handed to
the dispatcher and the driver; there is no module-level instance.  All
mutations happen on one asyncio event loop.  Lifecycle notifications from
the space controller that arrive on another thread are marshalled back onto
that loop before they touch ``space_state``.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque

from .models import Diagnostic, DiagnosticKind, SpaceTransitionState
from .services.gesture_map import GestureTable

logger = logging.getLogger("amuse.session")


class SessionContext:
    """Holds the immersive-space state, diagnostics and gesture table."""

    def __init__(self, table: GestureTable, history_size: int = 50) -> None:
        self.table = table
        self.space_state = SpaceTransitionState.CLOSED
        self.last_detected_identity: str | None = None
        self.diagnostics: deque[Diagnostic] = deque(maxlen=history_size)
        self._loop: asyncio.AbstractEventLoop | None = None

    # ── Execution context ────────────────────────────────────────

    def bind(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Attach the session to the loop that serializes its mutations."""
        self._loop = loop or asyncio.get_running_loop()

    def _on_bound_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    # ── Space lifecycle ──────────────────────────────────────────

    def set_space_state(self, state: SpaceTransitionState) -> None:
        if state is not self.space_state:
            logger.info("Immersive space %s -> %s", self.space_state.value, state.value)
        self.space_state = state

    def notify_space_opened(self) -> None:
        """Lifecycle hook: the immersive space finished opening."""
        self._post(SpaceTransitionState.OPEN)

    def notify_space_closed(self) -> None:
        """Lifecycle hook: the immersive space was dismissed."""
        self._post(SpaceTransitionState.CLOSED)

    def _post(self, state: SpaceTransitionState) -> None:
        loop = self._loop
        if loop is None or self._on_bound_loop() or loop.is_closed():
            self.set_space_state(state)
        else:
            loop.call_soon_threadsafe(self.set_space_state, state)

    # ── Diagnostics ──────────────────────────────────────────────

    def record(self, kind: DiagnosticKind, identity: str, detail: str = "") -> Diagnostic:
        diagnostic = Diagnostic(kind, identity, detail)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def diagnostics_of(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]

    def snapshot(self) -> dict:
        """Return a JSON-safe view for the status endpoint."""
        return {
            "space_state": self.space_state.value,
            "last_detected_identity": self.last_detected_identity,
            "gesture_table": self.table.name,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
