"""HashFort: Argon2 password hashes as constant-time comparable values."""

__version__ = "0.1.0"

from hashfort.config import HashParameters, Variant
from hashfort.core.encoding import EncodedHash
from hashfort.core.entropy import OSRandom, SecureRandom, SeededRandom
from hashfort.core.hash import PasswordHash, constant_time_equal
from hashfort.errors import (
    DerivationFailed,
    HashFortError,
    InvalidEncoding,
    InvalidParameters,
    RandomSourceUnavailable,
)
from hashfort.pool import HashingPool
from hashfort.utils.passwords import hash_password, needs_rehash, verify_password

__all__ = [
    "DerivationFailed",
    "EncodedHash",
    "HashFortError",
    "HashParameters",
    "HashingPool",
    "InvalidEncoding",
    "InvalidParameters",
    "OSRandom",
    "PasswordHash",
    "RandomSourceUnavailable",
    "SecureRandom",
    "SeededRandom",
    "Variant",
    "constant_time_equal",
    "hash_password",
    "needs_rehash",
    "verify_password",
]
