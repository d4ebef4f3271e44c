"""Self-describing hash strings in the PHC format argon2 tooling understands.

    $argon2id$v=19$m=8192,t=40,p=2$<salt>$<hash>

Salt and hash are standard base64 without padding. The string records the variant,
cost parameters and split point, so stored hashes stay verifiable after the
application's default parameters change.
"""

import base64
import binascii
import logging
from dataclasses import dataclass

from argon2 import extract_parameters
from argon2.exceptions import InvalidHashError
from argon2.low_level import ARGON2_VERSION

from hashfort.config import HashParameters, Variant
from hashfort.core.hash import PasswordHash
from hashfort.errors import InvalidEncoding

logger = logging.getLogger("hashfort.encoding")


@dataclass(frozen=True, slots=True)
class EncodedHash:
    """A decoded PHC string with everything needed to verify a password."""

    variant: Variant
    parameters: HashParameters
    password_hash: PasswordHash


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    return base64.b64decode(text + "=" * (-len(text) % 4), validate=True)


def encode(password_hash: PasswordHash, variant: Variant, parameters: HashParameters) -> str:
    """Render ``password_hash`` as a PHC string.

    Only the cost fields of ``parameters`` are written; salt and hash lengths come
    from ``password_hash`` itself.
    """
    return (
        f"${variant.value}$v={ARGON2_VERSION}"
        f"$m={parameters.memory_kib},t={parameters.iterations},p={parameters.parallelism}"
        f"${_b64encode(password_hash.salt)}${_b64encode(password_hash.hash)}"
    )


def decode(encoded: str) -> EncodedHash:
    """Parse a PHC string produced by :func:`encode` (or by argon2-cffi).

    Raises:
        InvalidEncoding: If the string is malformed or uses another Argon2 version.
    """
    try:
        params = extract_parameters(encoded)
    except (InvalidHashError, ValueError) as exc:
        logger.debug("Rejected malformed PHC string")
        raise InvalidEncoding("Not a valid Argon2 PHC string") from exc

    if params.version != ARGON2_VERSION:
        raise InvalidEncoding(f"Unsupported Argon2 version: {params.version}")

    parts = encoded.split("$")
    try:
        salt = _b64decode(parts[-2])
        digest = _b64decode(parts[-1])
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncoding("Salt or hash is not valid base64") from exc

    if not salt or not digest:
        raise InvalidEncoding("PHC string has an empty salt or hash")

    variant = Variant(parts[1])
    parameters = HashParameters(
        salt_length=len(salt),
        hash_length=len(digest),
        parallelism=params.parallelism,
        iterations=params.time_cost,
        memory_kib=params.memory_cost,
    )
    return EncodedHash(
        variant=variant,
        parameters=parameters,
        password_hash=PasswordHash.from_bytes(salt + digest, len(salt)),
    )


def needs_rehash(encoded: str, parameters: HashParameters | None = None) -> bool:
    """True if ``encoded`` was made with parameters other than ``parameters``.

    Lets callers upgrade stored hashes at the next successful login.
    """
    current = decode(encoded).parameters
    return current != (parameters or HashParameters.default())
