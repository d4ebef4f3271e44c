"""HashFort configuration: Argon2 variants and cost parameters."""

from dataclasses import dataclass
from enum import Enum

from argon2.low_level import Type

from hashfort.errors import InvalidParameters

# Argon2 needs at least 8 KiB of memory per lane.
MIN_MEMORY_PER_LANE_KIB = 8


class Variant(Enum):
    """Argon2 flavour, valued by its PHC identifier."""

    D = "argon2d"
    I = "argon2i"  # noqa: E741
    ID = "argon2id"

    @property
    def argon2_type(self) -> Type:
        return _ARGON2_TYPES[self]

    @classmethod
    def from_name(cls, name: str) -> "Variant":
        """Look up a variant by PHC identifier ("argon2id") or short code ("id")."""
        key = name.strip().lower()
        if not key.startswith("argon2"):
            key = f"argon2{key}"
        for variant in cls:
            if variant.value == key:
                return variant
        raise ValueError(
            f"Unknown Argon2 variant: '{name}'. "
            f"Valid variants: {', '.join(v.value for v in cls)}"
        )


_ARGON2_TYPES = {
    Variant.D: Type.D,
    Variant.I: Type.I,
    Variant.ID: Type.ID,
}


@dataclass(frozen=True, slots=True)
class HashParameters:
    """Cost and length settings for one Argon2 derivation.

    Defaults are calibrated for interactive logins. Every field can be overridden:

    Example:
        HashParameters()                          # All defaults
        HashParameters(iterations=10)             # Cheaper time cost
        HashParameters(memory_kib=65536, parallelism=4)

    Instances are immutable, so one object can be shared by concurrent derivations.
    Ranges are checked by :meth:`validate` when a derivation runs, never clamped.
    """

    salt_length: int = 16
    hash_length: int = 128
    parallelism: int = 2
    iterations: int = 40
    memory_kib: int = 8192

    @classmethod
    def default(cls) -> "HashParameters":
        return cls()

    @property
    def memory_footprint_kib(self) -> int:
        """Memory a single derivation reserves while it runs."""
        return self.memory_kib

    def validate(self) -> None:
        """Raise InvalidParameters unless every field is usable by Argon2."""
        for field_name in ("salt_length", "hash_length", "parallelism", "iterations", "memory_kib"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidParameters(f"{field_name} must be an integer, got {type(value).__name__}")
            if value <= 0:
                raise InvalidParameters(f"{field_name} must be positive, got {value}")

        minimum = MIN_MEMORY_PER_LANE_KIB * self.parallelism
        if self.memory_kib < minimum:
            raise InvalidParameters(
                f"memory_kib={self.memory_kib} is too small for parallelism={self.parallelism} "
                f"(need at least {minimum})"
            )
