"""Map gesture identities to semantic commands.

Identities are the exact strings found in the gesture packages' metadata
(description, or title when the description is empty).  Matching is exact and
case-sensitive: the keys must stay byte-for-byte identical to what the
packages emit.

Two alternative configurations ship with the server:
- ``peace-sign`` (default): play/pause on the "Peace Sign" gesture
- ``spider-man``: play/pause on the "Spider-Man" gesture

A custom table can be supplied as a JSON file::

    {"name": "my-table", "gestures": {"Left fist": "toggle_immersive_space"}}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ValidationError, field_validator

from ..models import Command, CommandKind

logger = logging.getLogger("amuse.services.gesture_map")

OPEN_DASHBOARD = "Opening the dashboard"
LEFT_MIDDLE_CLICK = "Use your left thumb tip to click your left middle finger tip"
RING_THUMB_TOUCH = "Ring thumb tip touch"
PEACE_SIGN = "Peace Sign"
SPIDER_MAN = "Spider-Man"

# The left-middle-click package reports its description with a trailing
# object replacement character.
LEFT_MIDDLE_CLICK_AS_EMITTED = LEFT_MIDDLE_CLICK + "\ufffc"


class GestureTableError(ValueError):
    """Raised when a gesture table cannot be built or loaded."""


class GestureTable:
    """Immutable identity -> command lookup."""

    def __init__(self, name: str, entries: Mapping[str, CommandKind]) -> None:
        for identity, kind in entries.items():
            if not isinstance(identity, str) or not identity:
                raise GestureTableError(f"{name}: gesture identities must be non-empty strings")
            if kind is CommandKind.UNKNOWN:
                raise GestureTableError(f"{name}: {identity!r} cannot map to 'unknown'")
        self.name = name
        self._entries: Mapping[str, CommandKind] = MappingProxyType(dict(entries))

    @property
    def entries(self) -> Mapping[str, CommandKind]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def classify(self, identity: str) -> Command:
        """Return the command for *identity*, or ``Command.unknown``."""
        kind = self._entries.get(identity)
        if kind is None:
            return Command.unknown(identity)
        return Command(kind, identity)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "gestures": {identity: kind.value for identity, kind in self._entries.items()},
        }

    def __repr__(self) -> str:
        return f"GestureTable({self.name!r}, {len(self)} gestures)"


def _base_entries(play_pause_identity: str) -> dict[str, CommandKind]:
    return {
        OPEN_DASHBOARD: CommandKind.TOGGLE_IMMERSIVE_SPACE,
        LEFT_MIDDLE_CLICK: CommandKind.SKIP_PREVIOUS,
        LEFT_MIDDLE_CLICK_AS_EMITTED: CommandKind.SKIP_PREVIOUS,
        RING_THUMB_TOUCH: CommandKind.SKIP_NEXT,
        play_pause_identity: CommandKind.TOGGLE_PLAY_PAUSE,
    }


PEACE_SIGN_TABLE = GestureTable("peace-sign", _base_entries(PEACE_SIGN))
SPIDER_MAN_TABLE = GestureTable("spider-man", _base_entries(SPIDER_MAN))

BUILTIN_TABLES: dict[str, GestureTable] = {
    PEACE_SIGN_TABLE.name: PEACE_SIGN_TABLE,
    SPIDER_MAN_TABLE.name: SPIDER_MAN_TABLE,
}


class GestureTableFile(BaseModel):
    """On-disk layout of a custom gesture table."""

    name: str
    gestures: dict[str, CommandKind]

    @field_validator("gestures")
    @classmethod
    def _check_gestures(cls, value: dict[str, CommandKind]) -> dict[str, CommandKind]:
        if not value:
            raise ValueError("table must map at least one gesture")
        if any(kind is CommandKind.UNKNOWN for kind in value.values()):
            raise ValueError("'unknown' is not a valid target command")
        if any(not identity for identity in value):
            raise ValueError("gesture identities must be non-empty")
        return value


def load_table(path: Path) -> GestureTable:
    """Load and validate a JSON gesture table from *path*."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise GestureTableError(f"cannot read gesture table {path}: {exc}") from exc

    try:
        parsed = GestureTableFile.model_validate(raw)
    except ValidationError as exc:
        raise GestureTableError(f"invalid gesture table {path}: {exc}") from exc

    table = GestureTable(parsed.name, parsed.gestures)
    logger.info("Loaded gesture table %r from %s (%d gestures)", table.name, path, len(table))
    return table


def resolve_table(name_or_path: str) -> GestureTable:
    """Return a built-in table by name, or load *name_or_path* as a JSON file path."""
    builtin = BUILTIN_TABLES.get(name_or_path)
    if builtin is not None:
        return builtin
    path = Path(name_or_path)
    if path.suffix == ".json" or path.exists():
        return load_table(path)
    raise GestureTableError(
        f"unknown gesture table {name_or_path!r} (built-ins: {', '.join(sorted(BUILTIN_TABLES))})"
    )
