"""Salt generation: injectable secure random sources."""

import logging
import os
import random
from typing import Protocol, runtime_checkable

from hashfort.errors import RandomSourceUnavailable

logger = logging.getLogger("hashfort.entropy")


@runtime_checkable
class SecureRandom(Protocol):
    """Protocol for random sources used to generate salts.

    Implementations must be safe to call from several threads at once.
    """

    def fill(self, buffer: bytearray) -> None:
        """Overwrite every byte of ``buffer`` with random data.

        Raises:
            RandomSourceUnavailable: If no random data can be produced.
        """
        ...


class OSRandom:
    """The operating system CSPRNG (``os.urandom``). Used in production."""

    def fill(self, buffer: bytearray) -> None:
        try:
            buffer[:] = os.urandom(len(buffer))
        except (OSError, NotImplementedError) as exc:
            logger.error("OS random source unavailable: %s", type(exc).__name__)
            raise RandomSourceUnavailable("Operating system random source is unavailable") from exc


class SeededRandom:
    """Deterministic source for reproducible tests. Never use it for real hashes."""

    def __init__(self, seed: int) -> None:
        self._rng = random.Random(seed)

    def fill(self, buffer: bytearray) -> None:
        buffer[:] = self._rng.randbytes(len(buffer))


_default_source = OSRandom()


def random_bytes(length: int, source: SecureRandom | None = None) -> bytes:
    """Return ``length`` bytes drawn from ``source`` (the OS CSPRNG by default)."""
    buffer = bytearray(length)
    (source or _default_source).fill(buffer)
    if len(buffer) != length:
        raise RandomSourceUnavailable(
            f"Random source returned {len(buffer)} bytes, expected {length}"
        )
    return bytes(buffer)
