import asyncio
import json

import pytest

from amuse_server.services.gesture_map import PEACE_SIGN_TABLE
from amuse_server.state import AppState


class SlowClient:
    """WebSocket stand-in whose sends take a moment to complete."""

    def __init__(self, name, received, delay=0.01):
        self.name = name
        self.received = received
        self.delay = delay

    async def send_text(self, payload):
        await asyncio.sleep(self.delay)
        self.received.append((self.name, json.loads(payload)["type"]))


class BlockedClient:
    def __init__(self):
        self.cancelled = False

    async def send_text(self, payload):
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


@pytest.mark.asyncio
async def test_broadcast_reaches_clients_after_one_disconnects_mid_send():
    state = AppState(PEACE_SIGN_TABLE)
    received = []
    a = SlowClient("a", received)
    b = SlowClient("b", received)
    state.register(a)
    state.register(b)

    sending = asyncio.create_task(state.broadcast({"type": "open_space"}))
    await asyncio.sleep(0)
    state.unregister(a)
    await sending

    assert ("b", "open_space") in received


@pytest.mark.asyncio
async def test_failed_send_unregisters_client():
    class Gone:
        async def send_text(self, payload):
            raise ConnectionError("closed")

    state = AppState(PEACE_SIGN_TABLE)
    received = []
    state.register(Gone())
    state.register(SlowClient("b", received, delay=0))

    await state.broadcast({"type": "gesture"})
    await state.broadcast({"type": "gesture"})

    assert received == [("b", "gesture"), ("b", "gesture")]


@pytest.mark.asyncio
async def test_shutdown_waits_for_playback_broadcasts(track):
    state = AppState(PEACE_SIGN_TABLE)
    client = BlockedClient()
    state.register(client)

    state.player.play(track)
    await asyncio.sleep(0)
    tasks = list(state._background)
    assert tasks

    await state.shutdown()

    assert all(task.done() for task in tasks)
    assert client.cancelled
