"""HashFort errors: one exception type per failure kind.

Messages describe what went wrong with the configuration or encoding. They never
carry password, salt, secret or hash bytes.
"""


class HashFortError(Exception):
    """Base hashing error with a machine-readable code."""

    code = "hashfort_error"

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)


class InvalidParameters(HashFortError):
    """Non-positive or mutually incompatible HashParameters fields."""

    code = "invalid_parameters"


class RandomSourceUnavailable(HashFortError):
    """The secure random source could not produce a salt."""

    code = "random_source_unavailable"


class DerivationFailed(HashFortError):
    """The Argon2 primitive rejected its inputs."""

    code = "derivation_failed"


class InvalidEncoding(HashFortError):
    """Stored bytes or an encoded hash cannot be split into salt and hash."""

    code = "invalid_encoding"
