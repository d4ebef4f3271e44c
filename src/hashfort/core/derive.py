"""Argon2 derivation: the single call into the memory-hard primitive.

Uses the full ``argon2_context`` from argon2-cffi's low-level binding because the
high-level helpers do not expose associated data or a known secret.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from argon2.low_level import ARGON2_VERSION, core, error_to_str, ffi, lib

from hashfort.errors import DerivationFailed
from hashfort.utils import as_bytes

if TYPE_CHECKING:
    from hashfort.config import HashParameters, Variant

logger = logging.getLogger("hashfort.derive")


def _c_buffer(data: bytes | None):
    """Return a (pointer, length) pair. Absent and empty inputs both map to NULL/0."""
    if not data:
        return ffi.NULL, 0
    return ffi.new("uint8_t[]", data), len(data)


def derive(
    variant: Variant,
    password: str | bytes,
    salt: bytes,
    parameters: HashParameters,
    associated_data: bytes | None = None,
    known_secret: bytes | None = None,
) -> bytes:
    """Run Argon2 and return ``parameters.hash_length`` bytes.

    Args:
        variant: Which Argon2 flavour to run.
        password: The password. ``str`` is UTF-8 encoded; an empty password is valid.
        salt: The salt. Its length, not ``parameters.salt_length``, is what Argon2 sees.
        parameters: Cost settings. Validated before the primitive runs.
        associated_data: Optional non-secret context (e.g. a user id).
        known_secret: Optional application secret (pepper). Never stored.

    Raises:
        InvalidParameters: If ``parameters`` fail validation.
        DerivationFailed: If Argon2 rejects the inputs.
    """
    parameters.validate()

    hash_length = parameters.hash_length
    out = ffi.new("uint8_t[]", hash_length)
    pwd, pwd_len = _c_buffer(as_bytes(password))
    salt_buf, salt_len = _c_buffer(bytes(salt))
    ad, ad_len = _c_buffer(None if associated_data is None else as_bytes(associated_data))
    secret, secret_len = _c_buffer(None if known_secret is None else as_bytes(known_secret))

    ctx = ffi.new(
        "argon2_context *",
        dict(
            version=ARGON2_VERSION,
            out=out,
            outlen=hash_length,
            pwd=pwd,
            pwdlen=pwd_len,
            salt=salt_buf,
            saltlen=salt_len,
            secret=secret,
            secretlen=secret_len,
            ad=ad,
            adlen=ad_len,
            t_cost=parameters.iterations,
            m_cost=parameters.memory_kib,
            lanes=parameters.parallelism,
            threads=parameters.parallelism,
            allocate_cbk=ffi.NULL,
            free_cbk=ffi.NULL,
            flags=lib.ARGON2_DEFAULT_FLAGS,
        ),
    )

    logger.debug(
        "Deriving %s hash (t=%d, m=%d, p=%d, len=%d)",
        variant.value,
        parameters.iterations,
        parameters.memory_kib,
        parameters.parallelism,
        hash_length,
    )
    result = core(ctx, variant.argon2_type.value)
    if result != lib.ARGON2_OK:
        reason = error_to_str(result)
        logger.warning("Argon2 derivation failed with code %d", result)
        raise DerivationFailed(f"Argon2 rejected the inputs: {reason}")

    return bytes(ffi.buffer(ctx.out, hash_length))
