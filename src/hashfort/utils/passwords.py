"""Password hashing utilities: PHC strings in, PHC strings out."""

from hashfort.config import HashParameters, Variant
from hashfort.core import encoding
from hashfort.core.hash import PasswordHash


def hash_password(
    password: str | bytes,
    parameters: HashParameters | None = None,
    *,
    variant: Variant = Variant.ID,
    associated_data: bytes | None = None,
    known_secret: bytes | None = None,
) -> str:
    """Hash a password with a fresh salt.

    Args:
        password: The plain text password to hash.
        parameters: Cost settings (defaults to ``HashParameters.default()``).
        variant: Argon2 flavour, Argon2id unless told otherwise.
        associated_data: Optional context bound into the hash, e.g. a user id.
        known_secret: Optional application secret. Not part of the result.

    Returns:
        The self-describing PHC hash string.
    """
    parameters = parameters or HashParameters.default()
    password_hash = PasswordHash.create(
        password,
        variant,
        parameters,
        associated_data=associated_data,
        known_secret=known_secret,
    )
    return encoding.encode(password_hash, variant, parameters)


def verify_password(
    plain_password: str | bytes,
    hashed_password: str,
    *,
    associated_data: bytes | None = None,
    known_secret: bytes | None = None,
) -> bool:
    """Verify a password against a PHC hash string.

    The comparison is constant-time over the full salt and hash.

    Args:
        plain_password: The plain text password to verify.
        hashed_password: The stored PHC string.
        associated_data: The context used when the hash was made, if any.
        known_secret: The application secret used when the hash was made, if any.

    Returns:
        True if the password matches, False otherwise.

    Raises:
        InvalidEncoding: If ``hashed_password`` is not a PHC string.
    """
    stored = encoding.decode(hashed_password)
    return stored.password_hash.verify(
        plain_password,
        stored.variant,
        stored.parameters,
        associated_data=associated_data,
        known_secret=known_secret,
    )


def needs_rehash(hashed_password: str, parameters: HashParameters | None = None) -> bool:
    """True if ``hashed_password`` should be re-hashed with ``parameters``."""
    return encoding.needs_rehash(hashed_password, parameters)
