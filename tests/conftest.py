# tests/conftest.py
from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from amuse_server.dispatcher import CommandDispatcher
from amuse_server.models import RawGestureEvent, SpaceOpenOutcome, Track
from amuse_server.services.gesture_map import PEACE_SIGN_TABLE
from amuse_server.services.player import QueuePlayer
from amuse_server.session import SessionContext


class FakeSpace:
    """Space controller double: records calls and the state seen at call time."""

    def __init__(self, session: SessionContext) -> None:
        self.session = session
        self.outcome: SpaceOpenOutcome | Exception = SpaceOpenOutcome.OPENED
        self.gate: asyncio.Event | None = None
        self.calls = 0
        self.states_seen = []

    async def open(self) -> SpaceOpenOutcome:
        self.calls += 1
        self.states_seen.append(self.session.space_state)
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture
def session():
    return SessionContext(PEACE_SIGN_TABLE)


@pytest.fixture
def player():
    mock = MagicMock(spec=QueuePlayer)
    mock.is_playing.return_value = False
    mock.current_track.return_value = None
    return mock


@pytest.fixture
def space(session):
    return FakeSpace(session)


@pytest.fixture
def dispatcher(session, player, space):
    return CommandDispatcher(session, player, space)


@pytest.fixture
def track():
    return Track(catalog_id="1440857781", title="Redbone", artist="Childish Gambino")


@pytest.fixture
def full():
    def make(identity: str, **kwargs) -> RawGestureEvent:
        return RawGestureEvent.full("test.gesturecomposer", kwargs.pop("name", "test"), description=identity, **kwargs)
    return make


@pytest.fixture
def feed():
    async def events(*items):
        for item in items:
            yield item
    return events
