"""PasswordHash: an immutable salt || hash value with constant-time comparison."""

from __future__ import annotations

import dataclasses
import hmac
from dataclasses import dataclass, field

from hashfort.config import HashParameters, Variant
from hashfort.core.derive import derive
from hashfort.core.entropy import SecureRandom, random_bytes
from hashfort.errors import InvalidEncoding


def constant_time_equal(left: bytes, right: bytes) -> bool:
    """Compare two byte strings without short-circuiting on the first difference.

    Runs in time that depends only on the length of the inputs, never on the
    position of a mismatching byte (``hmac.compare_digest``). Inputs of different
    lengths compare unequal.
    """
    return hmac.compare_digest(left, right)


@dataclass(frozen=True, slots=True, eq=False)
class PasswordHash:
    """Salt and derived hash stored as one buffer: ``buffer[:salt_length]`` is the
    salt, the rest is the Argon2 output.

    The split point is not encoded in the buffer. Persist ``salt_length`` next to it
    (or a fixed application-wide value), or use :mod:`hashfort.core.encoding` for a
    self-describing string.

    Example:
        stored = PasswordHash.from_argon2id(b"my_secret_password")
        save(bytes(stored))
        ...
        stored = PasswordHash.from_bytes(load(), salt_length=16)
        stored.verify(b"my_secret_password", Variant.ID)
    """

    buffer: bytes = field(repr=False)
    salt_length: int

    def __post_init__(self) -> None:
        if not isinstance(self.buffer, bytes):
            object.__setattr__(self, "buffer", bytes(self.buffer))
        if isinstance(self.salt_length, bool) or not isinstance(self.salt_length, int):
            raise InvalidEncoding("salt_length must be an integer")
        if self.salt_length <= 0:
            raise InvalidEncoding(f"salt_length must be positive, got {self.salt_length}")
        if self.salt_length >= len(self.buffer):
            raise InvalidEncoding(
                f"salt_length={self.salt_length} leaves no hash in a {len(self.buffer)}-byte buffer"
            )

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @property
    def hash_length(self) -> int:
        return len(self.buffer) - self.salt_length

    @property
    def salt(self) -> bytes:
        return self.buffer[: self.salt_length]

    @property
    def hash(self) -> bytes:
        return self.buffer[self.salt_length :]

    def __bytes__(self) -> bytes:
        return self.buffer

    def __len__(self) -> int:
        return len(self.buffer)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        password: str | bytes,
        variant: Variant = Variant.ID,
        parameters: HashParameters | None = None,
        *,
        associated_data: bytes | None = None,
        known_secret: bytes | None = None,
        random: SecureRandom | None = None,
    ) -> PasswordHash:
        """Hash ``password`` under a fresh random salt.

        Two calls with identical arguments return different values because the salt
        differs each time.

        Raises:
            InvalidParameters: If ``parameters`` are unusable.
            RandomSourceUnavailable: If no salt can be generated.
            DerivationFailed: If Argon2 rejects the inputs.
        """
        parameters = parameters or HashParameters.default()
        parameters.validate()
        salt = random_bytes(parameters.salt_length, random)
        return cls.with_salt(
            password,
            salt,
            variant,
            parameters,
            associated_data=associated_data,
            known_secret=known_secret,
        )

    @classmethod
    def with_salt(
        cls,
        password: str | bytes,
        salt: bytes,
        variant: Variant = Variant.ID,
        parameters: HashParameters | None = None,
        *,
        associated_data: bytes | None = None,
        known_secret: bytes | None = None,
    ) -> PasswordHash:
        """Hash ``password`` under a caller-supplied salt.

        ``parameters.salt_length`` is ignored; the split follows ``len(salt)``.
        """
        parameters = parameters or HashParameters.default()
        salt = bytes(salt)
        digest = derive(
            variant,
            password,
            salt,
            parameters,
            associated_data=associated_data,
            known_secret=known_secret,
        )
        return cls(buffer=salt + digest, salt_length=len(salt))

    @classmethod
    def from_argon2d(cls, password: str | bytes, parameters: HashParameters | None = None, **kwargs) -> PasswordHash:
        """Hash ``password`` with Argon2d. Keyword arguments as for :meth:`create`."""
        return cls.create(password, Variant.D, parameters, **kwargs)

    @classmethod
    def from_argon2i(cls, password: str | bytes, parameters: HashParameters | None = None, **kwargs) -> PasswordHash:
        """Hash ``password`` with Argon2i. Keyword arguments as for :meth:`create`."""
        return cls.create(password, Variant.I, parameters, **kwargs)

    @classmethod
    def from_argon2id(cls, password: str | bytes, parameters: HashParameters | None = None, **kwargs) -> PasswordHash:
        """Hash ``password`` with Argon2id. Keyword arguments as for :meth:`create`."""
        return cls.create(password, Variant.ID, parameters, **kwargs)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview, salt_length: int) -> PasswordHash:
        """Rebuild a stored hash. The bytes are copied, not re-derived.

        Raises:
            InvalidEncoding: If ``salt_length`` is not inside the buffer.
        """
        return cls(buffer=bytes(data), salt_length=salt_length)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    def matches(self, other: PasswordHash) -> bool:
        """Constant-time comparison of the full buffers (salt and hash)."""
        return constant_time_equal(self.buffer, other.buffer)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PasswordHash):
            return NotImplemented
        return self.matches(other)

    def __hash__(self) -> int:
        return hash(self.buffer)

    def verify(
        self,
        password: str | bytes,
        variant: Variant = Variant.ID,
        parameters: HashParameters | None = None,
        *,
        associated_data: bytes | None = None,
        known_secret: bytes | None = None,
    ) -> bool:
        """Check ``password`` against this stored hash.

        Re-derives under the stored salt and compares the result in constant time.
        ``variant``, the cost fields of ``parameters``, ``associated_data`` and
        ``known_secret`` must be the ones used at creation. Salt and hash lengths
        are taken from this value.
        """
        parameters = dataclasses.replace(
            parameters or HashParameters.default(),
            salt_length=self.salt_length,
            hash_length=self.hash_length,
        )
        candidate = PasswordHash.with_salt(
            password,
            self.salt,
            variant,
            parameters,
            associated_data=associated_data,
            known_secret=known_secret,
        )
        return self.matches(candidate)
