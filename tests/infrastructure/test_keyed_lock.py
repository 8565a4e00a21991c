"""Keyed Lock — per-key serialization without cross-key contention.

Tests cover:
    - Same key: second holder waits until the first releases
    - Different keys: held concurrently
    - Idle keys are dropped from the registry, including after cancellation
"""

import asyncio

import pytest

from crowdledger.infrastructure.keyed_lock import KeyedLock


async def test_same_key_is_serialized():
    locks = KeyedLock()
    order = []

    async def worker(name, hold_for):
        async with locks.hold("campaign-a"):
            order.append(f"{name}-in")
            await asyncio.sleep(hold_for)
            order.append(f"{name}-out")

    await asyncio.gather(worker("first", 0.02), worker("second", 0))
    assert order == ["first-in", "first-out", "second-in", "second-out"]


async def test_different_keys_do_not_block_each_other():
    locks = KeyedLock()
    entered_b = asyncio.Event()

    async def hold_a():
        async with locks.hold("campaign-a"):
            await asyncio.wait_for(entered_b.wait(), timeout=1)

    async def hold_b():
        async with locks.hold("campaign-b"):
            entered_b.set()

    await asyncio.gather(hold_a(), hold_b())


async def test_registry_drops_idle_keys():
    locks = KeyedLock()
    async with locks.hold("campaign-a"):
        assert locks.is_held("campaign-a")
        assert len(locks) == 1
    assert len(locks) == 0
    assert not locks.is_held("campaign-a")


async def test_cancelled_waiter_releases_its_slot():
    locks = KeyedLock()
    release = asyncio.Event()

    async def holder():
        async with locks.hold("k"):
            await release.wait()

    async def waiter():
        async with locks.hold("k"):
            pass

    holder_task = asyncio.create_task(holder())
    await asyncio.sleep(0)
    waiter_task = asyncio.create_task(waiter())
    await asyncio.sleep(0)
    waiter_task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter_task

    release.set()
    await holder_task
    assert len(locks) == 0
