import asyncio

import pytest

from konverge._cogs.aiokits.aiotime import sleep


async def test_full_delay_without_stopper(looptime):
    unslept = await sleep(10)
    assert unslept is None
    assert looptime == 10


async def test_full_delay_with_stopper_never_set(looptime):
    stopper = asyncio.Event()
    unslept = await sleep(10, stopper)
    assert unslept is None
    assert looptime == 10


async def test_stopper_set_midway_returns_the_remainder(looptime):
    stopper = asyncio.Event()
    asyncio.get_running_loop().call_later(7, stopper.set)
    unslept = await sleep(10, stopper)
    assert unslept == 3
    assert looptime == 7


async def test_stopper_set_in_advance_returns_immediately(looptime):
    stopper = asyncio.Event()
    stopper.set()
    unslept = await sleep(10, stopper)
    assert unslept == 10
    assert looptime == 0


@pytest.mark.parametrize('delay', [0, 0.0, -5])
async def test_nonpositive_delays_do_not_advance_the_time(looptime, delay):
    unslept = await sleep(delay)
    assert unslept is None
    assert looptime == 0


async def test_nonpositive_delays_yield_to_other_tasks(looptime):
    flag = asyncio.Event()
    asyncio.get_running_loop().call_soon(flag.set)
    await sleep(0)
    assert flag.is_set()
    assert looptime == 0


async def test_zero_delay_with_stopper_set_is_reported_as_stopped(looptime):
    stopper = asyncio.Event()
    stopper.set()
    unslept = await sleep(0, stopper)
    assert unslept == 0
    assert unslept is not None
    assert looptime == 0
