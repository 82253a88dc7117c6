import asyncio
import socket

import pytest
import pytest_asyncio
from fastapi import FastAPI

from stillpoint.lifecycle.api_server_wrapper import APIServerWrapper


@pytest_asyncio.fixture
async def api_wrapper():
    wrapper = APIServerWrapper(FastAPI(), host="127.0.0.1", port=8010)
    yield wrapper
    await wrapper.stop()


@pytest.mark.asyncio
async def test_start_and_stop(api_wrapper):
    task = asyncio.create_task(api_wrapper.start())
    await asyncio.sleep(0.2)

    assert api_wrapper.is_running

    await api_wrapper.stop()
    await asyncio.wait_for(task, timeout=2.0)

    assert not api_wrapper.is_running


@pytest.mark.asyncio
async def test_stop_without_start(api_wrapper):
    await api_wrapper.stop()
    assert not api_wrapper.is_running


@pytest.mark.asyncio
async def test_start_twice_rejected(api_wrapper):
    task = asyncio.create_task(api_wrapper.start())
    await asyncio.sleep(0.2)

    with pytest.raises(RuntimeError):
        await api_wrapper.start()

    await api_wrapper.stop()
    await asyncio.wait_for(task, timeout=2.0)


@pytest.mark.asyncio
async def test_start_cancelled_externally():
    wrapper = APIServerWrapper(FastAPI(), host="127.0.0.1", port=8012)

    task = asyncio.create_task(wrapper.start())
    await asyncio.sleep(0.1)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not wrapper.is_running
    await wrapper.stop()


@pytest.mark.asyncio
async def test_port_released_on_stop():
    wrapper = APIServerWrapper(FastAPI(), host="127.0.0.1", port=8011)

    task = asyncio.create_task(wrapper.start())
    await asyncio.sleep(0.2)

    await wrapper.stop()
    await asyncio.wait_for(task, timeout=2.0)

    s = socket.socket()
    s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    s.bind(("127.0.0.1", 8011))
    s.close()
