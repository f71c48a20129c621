import asyncio

import pytest

from amuse_server.models import SpaceOpenOutcome
from amuse_server.services.space import RemoteSpaceController


@pytest.mark.asyncio
async def test_open_waits_for_client_result():
    published = []

    async def publish(message):
        published.append(message)

    controller = RemoteSpaceController(publish, timeout=1.0)
    task = asyncio.create_task(controller.open())
    await asyncio.sleep(0)

    [message] = published
    assert message["type"] == "open_space"
    assert controller.pending == [message["request_id"]]

    assert controller.resolve(message["request_id"], SpaceOpenOutcome.USER_CANCELLED)
    assert await task is SpaceOpenOutcome.USER_CANCELLED
    assert controller.pending == []


@pytest.mark.asyncio
async def test_open_times_out_as_error():
    async def publish(message):
        pass

    controller = RemoteSpaceController(publish, timeout=0.01)

    assert await controller.open() is SpaceOpenOutcome.ERROR
    assert controller.pending == []


@pytest.mark.asyncio
async def test_publish_failure_is_error():
    async def publish(message):
        raise ConnectionError("no clients")

    controller = RemoteSpaceController(publish, timeout=1.0)

    assert await controller.open() is SpaceOpenOutcome.ERROR


@pytest.mark.asyncio
async def test_resolve_unknown_or_settled_request():
    published = []

    async def publish(message):
        published.append(message)

    controller = RemoteSpaceController(publish, timeout=1.0)
    assert not controller.resolve("nope", SpaceOpenOutcome.OPENED)

    task = asyncio.create_task(controller.open())
    await asyncio.sleep(0)
    request_id = published[0]["request_id"]
    assert controller.resolve(request_id, SpaceOpenOutcome.OPENED)
    assert not controller.resolve(request_id, SpaceOpenOutcome.ERROR)
    assert await task is SpaceOpenOutcome.OPENED
