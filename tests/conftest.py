"""Shared fixtures for the bridged test suite."""
import anyio
import pytest

from bridged import create_bridge


async def _fn1(num, text):
    return f"{num},{text}"


async def _fn2():
    await anyio.sleep(0.01)


@pytest.fixture
def defaults():
    """Default implementations mirroring a small two-operation bridge."""
    return {"fn1": _fn1, "fn2": _fn2}


@pytest.fixture
def bridge(defaults):
    return create_bridge(defaults)
