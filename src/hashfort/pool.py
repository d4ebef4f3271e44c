"""Admission control for derivations: bounds how many run at once.

Every Argon2 derivation reserves ``memory_kib`` of RAM for its duration. Under load,
unbounded concurrency turns into memory exhaustion, so servers should route hashing
through a pool sized to the memory they can spare.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from concurrent.futures import Executor

from hashfort.config import HashParameters, Variant
from hashfort.core.entropy import SecureRandom
from hashfort.core.hash import PasswordHash
from hashfort.errors import InvalidParameters

logger = logging.getLogger("hashfort.pool")


class HashingPool:
    """Runs derivations with at most ``max_concurrent`` in flight.

    Every derivation, sync or async, runs inside one ``threading.BoundedSemaphore``,
    so mixing both APIs on a pool still admits at most ``max_concurrent``. Async
    callers run the derivation in ``executor`` (the loop's default executor when
    None) so the event loop never blocks, and an ``asyncio.Semaphore`` keeps them from
    queueing more executor jobs than there are slots. A cancelled async call keeps
    its slots until the derivation it started has finished.

    Args:
        max_concurrent: Upper bound on simultaneous derivations.
        parameters: Parameters used when a call does not pass its own.
        executor: Executor for the async API.
    """

    def __init__(
        self,
        max_concurrent: int,
        *,
        parameters: HashParameters | None = None,
        executor: Executor | None = None,
    ) -> None:
        if isinstance(max_concurrent, bool) or not isinstance(max_concurrent, int) or max_concurrent <= 0:
            raise InvalidParameters(f"max_concurrent must be a positive integer, got {max_concurrent!r}")
        self.max_concurrent = max_concurrent
        self.parameters = parameters or HashParameters.default()
        self._executor = executor
        self._slots = threading.BoundedSemaphore(max_concurrent)
        self._async_queue = asyncio.Semaphore(max_concurrent)

    @classmethod
    def for_memory_budget(
        cls,
        budget_kib: int,
        parameters: HashParameters | None = None,
        *,
        executor: Executor | None = None,
    ) -> HashingPool:
        """Size a pool so concurrent derivations fit in ``budget_kib`` of memory.

        Always admits at least one derivation. The limit covers sync and async
        calls together.
        """
        parameters = parameters or HashParameters.default()
        parameters.validate()
        max_concurrent = max(1, budget_kib // parameters.memory_footprint_kib)
        logger.debug(
            "Sizing hashing pool: budget=%d KiB, per-call=%d KiB, slots=%d",
            budget_kib,
            parameters.memory_footprint_kib,
            max_concurrent,
        )
        return cls(max_concurrent, parameters=parameters, executor=executor)

    # ------------------------------------------------------------------
    # Sync API
    # ------------------------------------------------------------------

    def _guarded(self, func, *args, **kwargs):
        with self._slots:
            return func(*args, **kwargs)

    def create(
        self,
        password: str | bytes,
        variant: Variant = Variant.ID,
        *,
        associated_data: bytes | None = None,
        known_secret: bytes | None = None,
        random: SecureRandom | None = None,
    ) -> PasswordHash:
        """Blocking :meth:`PasswordHash.create` behind the pool's limit."""
        return self._guarded(
            PasswordHash.create,
            password,
            variant,
            self.parameters,
            associated_data=associated_data,
            known_secret=known_secret,
            random=random,
        )

    def verify(
        self,
        stored: PasswordHash,
        password: str | bytes,
        variant: Variant = Variant.ID,
        *,
        associated_data: bytes | None = None,
        known_secret: bytes | None = None,
    ) -> bool:
        """Blocking :meth:`PasswordHash.verify` behind the pool's limit."""
        return self._guarded(
            stored.verify,
            password,
            variant,
            self.parameters,
            associated_data=associated_data,
            known_secret=known_secret,
        )

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    def _release_queue_slot(self, future: asyncio.Future) -> None:
        if not future.cancelled():
            # Marks a failure as retrieved when the awaiting caller was cancelled.
            future.exception()
        self._async_queue.release()

    async def _run(self, func, *args, **kwargs):
        await self._async_queue.acquire()
        try:
            loop = asyncio.get_running_loop()
            future = loop.run_in_executor(
                self._executor, functools.partial(self._guarded, func, *args, **kwargs)
            )
        except BaseException:
            self._async_queue.release()
            raise
        # Released when the executor job finishes, even if the caller is cancelled.
        future.add_done_callback(self._release_queue_slot)
        return await asyncio.shield(future)

    async def acreate(
        self,
        password: str | bytes,
        variant: Variant = Variant.ID,
        *,
        associated_data: bytes | None = None,
        known_secret: bytes | None = None,
        random: SecureRandom | None = None,
    ) -> PasswordHash:
        """Async :meth:`create`; the derivation runs in the executor."""
        return await self._run(
            PasswordHash.create,
            password,
            variant,
            self.parameters,
            associated_data=associated_data,
            known_secret=known_secret,
            random=random,
        )

    async def averify(
        self,
        stored: PasswordHash,
        password: str | bytes,
        variant: Variant = Variant.ID,
        *,
        associated_data: bytes | None = None,
        known_secret: bytes | None = None,
    ) -> bool:
        """Async :meth:`verify`; the derivation runs in the executor."""
        return await self._run(
            stored.verify,
            password,
            variant,
            self.parameters,
            associated_data=associated_data,
            known_secret=known_secret,
        )
