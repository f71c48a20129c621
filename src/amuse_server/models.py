"""Data models for gesture events, commands, playback and space state.

Raw events arrive from the hand-tracking client in three flavours (full,
partial and reset matches).  Only full matches are ever turned into a
:class:`Command`; the rest are informational.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from enum import Enum


class MatchType(str, Enum):
    """How far a gesture package got in recognising a hand pose."""

    FULL = "full"          # completed match, actionable
    PARTIAL = "partial"    # in progress, carries a stage number
    RESET = "reset"        # aborted


@dataclass(frozen=True)
class RawGestureEvent:
    """One emission from the gesture source.

    ``description`` and ``title`` come from the gesture package metadata and
    may be empty; ``name`` is always reported by the recogniser.
    """

    match: MatchType
    package_ref: str
    name: str
    stage: int | None = None
    description: str = ""
    title: str | None = None

    def __post_init__(self) -> None:
        if self.match is MatchType.PARTIAL and self.stage is None:
            raise ValueError("partial matches require a stage")
        if self.match is not MatchType.PARTIAL and self.stage is not None:
            raise ValueError(f"{self.match.value} matches do not carry a stage")

    @property
    def is_actionable(self) -> bool:
        return self.match is MatchType.FULL

    @classmethod
    def full(
        cls, package_ref: str, name: str, *, description: str = "", title: str | None = None,
    ) -> RawGestureEvent:
        return cls(MatchType.FULL, package_ref, name, description=description, title=title)

    @classmethod
    def partial(
        cls, package_ref: str, name: str, stage: int, *,
        description: str = "", title: str | None = None,
    ) -> RawGestureEvent:
        return cls(MatchType.PARTIAL, package_ref, name, stage=stage, description=description, title=title)

    @classmethod
    def reset(
        cls, package_ref: str, name: str, *, description: str = "", title: str | None = None,
    ) -> RawGestureEvent:
        return cls(MatchType.RESET, package_ref, name, description=description, title=title)


def resolve_identity(event: RawGestureEvent) -> str:
    """Return the string used to tell gestures apart.

    Order is fixed: description, then package title, then the raw name.
    """
    if event.description:
        return event.description
    if event.title:
        return event.title
    return event.name


# ── Commands ─────────────────────────────────────────────────────────


class CommandKind(str, Enum):
    TOGGLE_IMMERSIVE_SPACE = "toggle_immersive_space"
    SKIP_NEXT = "skip_next"
    SKIP_PREVIOUS = "skip_previous"
    TOGGLE_PLAY_PAUSE = "toggle_play_pause"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class Command:
    """A semantic command together with the identity it was derived from."""

    kind: CommandKind
    identity: str

    @classmethod
    def unknown(cls, identity: str) -> Command:
        return cls(CommandKind.UNKNOWN, identity)

    @property
    def is_unknown(self) -> bool:
        return self.kind is CommandKind.UNKNOWN


# ── Immersive space ──────────────────────────────────────────────────


class SpaceTransitionState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    IN_TRANSITION = "in_transition"


class SpaceOpenOutcome(str, Enum):
    OPENED = "opened"
    USER_CANCELLED = "user_cancelled"
    ERROR = "error"


# ── Playback ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Track:
    """A playable catalog entry."""

    catalog_id: str
    title: str
    artist: str
    artwork_url: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PlaybackState:
    track: Track | None = None
    is_playing: bool = False

    def to_dict(self) -> dict:
        return {
            "track": self.track.to_dict() if self.track else None,
            "is_playing": self.is_playing,
        }


# ── Diagnostics ──────────────────────────────────────────────────────


class DiagnosticKind(str, Enum):
    UNKNOWN_GESTURE = "unknown_gesture"
    GUARD_IGNORED = "guard_ignored"
    SPACE_OPEN_FAILED = "space_open_failed"
    NOTHING_TO_RESUME = "nothing_to_resume"


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    identity: str
    detail: str = ""
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "identity": self.identity,
            "detail": self.detail,
            "timestamp": round(self.timestamp, 3),
        }
