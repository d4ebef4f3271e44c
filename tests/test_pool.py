"""Tests for HashingPool: bounded sync and async derivations."""

import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from hashfort import HashingPool, HashParameters, InvalidParameters, PasswordHash, Variant
from hashfort.core import hash as hash_module


class TestPoolConstruction:
    @pytest.mark.parametrize("value", [0, -3, True, 1.5])
    def test_bad_max_concurrent(self, value):
        with pytest.raises(InvalidParameters):
            HashingPool(value)

    def test_default_parameters(self):
        assert HashingPool(2).parameters == HashParameters.default()

    def test_for_memory_budget(self):
        params = HashParameters(memory_kib=8192)
        assert HashingPool.for_memory_budget(65536, params).max_concurrent == 8

    def test_for_memory_budget_admits_at_least_one(self):
        params = HashParameters(memory_kib=8192)
        assert HashingPool.for_memory_budget(100, params).max_concurrent == 1

    def test_for_memory_budget_validates(self):
        with pytest.raises(InvalidParameters):
            HashingPool.for_memory_budget(65536, HashParameters(memory_kib=0))


def _tracking_create(monkeypatch, delay: float = 0.02):
    """Wrap PasswordHash.with_salt to record peak concurrency."""
    state = {"active": 0, "peak": 0}
    lock = threading.Lock()
    original = PasswordHash.with_salt.__func__

    def _with_salt(cls, *args, **kwargs):
        with lock:
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
        try:
            threading.Event().wait(delay)
            return original(cls, *args, **kwargs)
        finally:
            with lock:
                state["active"] -= 1

    monkeypatch.setattr(hash_module.PasswordHash, "with_salt", classmethod(_with_salt))
    return state


class TestSyncPool:
    def test_create_and_verify(self, fast_params):
        pool = HashingPool(2, parameters=fast_params)
        stored = pool.create("correcthorse")
        assert len(stored) == fast_params.salt_length + fast_params.hash_length
        assert pool.verify(stored, "correcthorse") is True
        assert pool.verify(stored, "wronghorse") is False

    def test_variant_passed_through(self, fast_params):
        pool = HashingPool(1, parameters=fast_params)
        stored = pool.create("correcthorse", Variant.D)
        assert stored.verify("correcthorse", Variant.D, fast_params)

    def test_limits_concurrency(self, fast_params, monkeypatch):
        state = _tracking_create(monkeypatch)
        pool = HashingPool(2, parameters=fast_params)
        with ThreadPoolExecutor(max_workers=6) as executor:
            results = list(executor.map(lambda _: pool.create("pw"), range(6)))
        assert len(results) == 6
        assert state["peak"] <= 2


class TestAsyncPool:
    pytestmark = pytest.mark.asyncio

    async def test_acreate_and_averify(self, fast_params):
        pool = HashingPool(2, parameters=fast_params)
        stored = await pool.acreate("correcthorse")
        assert await pool.averify(stored, "correcthorse") is True
        assert await pool.averify(stored, "wronghorse") is False

    async def test_concurrent_hashes_are_distinct(self, fast_params):
        pool = HashingPool(3, parameters=fast_params)
        hashes = await asyncio.gather(*(pool.acreate("samepassword") for _ in range(5)))
        assert len({h.buffer for h in hashes}) == 5

    async def test_limits_concurrency(self, fast_params, monkeypatch):
        state = _tracking_create(monkeypatch)
        with ThreadPoolExecutor(max_workers=8) as executor:
            pool = HashingPool(2, parameters=fast_params, executor=executor)
            await asyncio.gather(*(pool.acreate("pw") for _ in range(6)))
        assert state["peak"] <= 2

    async def test_cancelled_call_keeps_its_slot(self, fast_params, monkeypatch):
        """A derivation abandoned by its caller still counts until it finishes."""
        state = _tracking_create(monkeypatch, delay=0.15)
        with ThreadPoolExecutor(max_workers=4) as executor:
            pool = HashingPool(1, parameters=fast_params, executor=executor)
            abandoned = asyncio.create_task(pool.acreate("pw"))
            await asyncio.sleep(0.05)
            abandoned.cancel()
            with pytest.raises(asyncio.CancelledError):
                await abandoned

            results = await asyncio.gather(*(pool.acreate("pw") for _ in range(3)))
        assert len(results) == 3
        assert state["peak"] <= 1

    async def test_cancelled_call_failure_is_not_leaked(self, monkeypatch):
        """A failing derivation whose caller was cancelled still frees its slot."""
        pool = HashingPool(1, parameters=HashParameters(iterations=0))
        started = threading.Event()
        original = PasswordHash.create.__func__

        def _slow_create(cls, *args, **kwargs):
            started.set()
            threading.Event().wait(0.05)
            return original(cls, *args, **kwargs)

        monkeypatch.setattr(hash_module.PasswordHash, "create", classmethod(_slow_create))
        task = asyncio.create_task(pool.acreate("pw"))
        await asyncio.to_thread(started.wait, 1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        with pytest.raises(InvalidParameters):
            await asyncio.wait_for(pool.acreate("pw"), timeout=2)

    async def test_sync_and_async_share_one_limit(self, fast_params, monkeypatch):
        state = _tracking_create(monkeypatch, delay=0.05)
        with ThreadPoolExecutor(max_workers=8) as executor:
            pool = HashingPool(1, parameters=fast_params, executor=executor)
            loop = asyncio.get_running_loop()
            await asyncio.gather(
                pool.acreate("pw"),
                pool.acreate("pw"),
                loop.run_in_executor(executor, pool.create, "pw"),
                loop.run_in_executor(executor, pool.create, "pw"),
            )
        assert state["peak"] <= 1
