"""Test fixtures for HashFort.

Most tests use cheap parameters so Argon2 finishes in milliseconds. Tests that
check the default configuration build their own.
"""

import pytest

from hashfort import HashParameters, SeededRandom


@pytest.fixture
def fast_params() -> HashParameters:
    """1 pass over 64 KiB on one lane, 32-byte output."""
    return HashParameters(salt_length=16, hash_length=32, parallelism=1, iterations=1, memory_kib=64)


@pytest.fixture
def seeded_random() -> SeededRandom:
    return SeededRandom(1234)
