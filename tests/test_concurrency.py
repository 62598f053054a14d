"""Tests for interleaved dispatch and mutation."""
from concurrent.futures import ThreadPoolExecutor

import anyio
import pytest

from bridged import create_bridge, override_depth


@pytest.mark.anyio
async def test_in_flight_dispatch_keeps_captured_implementation():
    started = anyio.Event()
    release = anyio.Event()

    async def slow(tag):
        started.set()
        await release.wait()
        return f"slow:{tag}"

    async def fast(tag):
        return f"fast:{tag}"

    bridge = create_bridge({"op": slow})
    results = {}

    async def first_call():
        results["first"] = await bridge.op("a")

    async with anyio.create_task_group() as tg:
        tg.start_soon(first_call)
        await started.wait()
        bridge.register("op", fast)
        assert await bridge.op("b") == "fast:b"
        release.set()

    assert results["first"] == "slow:a"


@pytest.mark.anyio
async def test_deregister_during_dispatch_does_not_affect_in_flight_call():
    started = anyio.Event()
    release = anyio.Event()

    async def default(tag):
        return f"default:{tag}"

    async def override(tag):
        started.set()
        await release.wait()
        return f"override:{tag}"

    bridge = create_bridge({"op": default})
    handle = bridge.register("op", override)
    results = {}

    async def in_flight():
        results["in_flight"] = await bridge.op("a")

    async with anyio.create_task_group() as tg:
        tg.start_soon(in_flight)
        await started.wait()
        handle()
        assert await bridge.op("b") == "default:b"
        release.set()

    assert results["in_flight"] == "override:a"


@pytest.mark.anyio
async def test_concurrent_dispatches_share_active_implementation():
    calls = []

    async def default(tag):
        await anyio.sleep(0)
        calls.append(tag)
        return tag

    bridge = create_bridge({"op": default})

    async with anyio.create_task_group() as tg:
        for tag in range(5):
            tg.start_soon(bridge.op, tag)

    assert sorted(calls) == [0, 1, 2, 3, 4]


def test_threaded_register_and_deregister_keep_stack_consistent():
    async def default():
        return "default"

    bridge = create_bridge({"op": default})
    implementations = [lambda i=i: i for i in range(200)]

    def churn(impl):
        handle = bridge.register("op", impl)
        handle()

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(churn, implementations))

    assert override_depth(bridge, "op") == 0
    assert anyio.run(bridge.op) == "default"
