"""
Codec configuration.

Limits that govern token validity. Key material is deliberately absent:
callers supply keys to the codec directly and are responsible for storing
them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields

# Defaults
DEFAULT_MAX_AGE = 86400 * 30  # 30 days
DEFAULT_MAX_LENGTH = 4096  # browsers cap a single cookie near 4 KiB
DEFAULT_CLOCK_SKEW = 60

ENV_PREFIX = "SECURECOOKIE_"


@dataclass(frozen=True)
class CodecOptions:
    """Validity limits for a codec.

    Attributes:
        max_age: Maximum token age in seconds (0 = unlimited)
        min_age: Minimum token age in seconds (0 = no minimum)
        max_length: Maximum token length in characters (0 = unlimited)
        clock_skew: Seconds a timestamp may run ahead of the local clock
    """

    max_age: int = DEFAULT_MAX_AGE
    min_age: int = 0
    max_length: int = DEFAULT_MAX_LENGTH
    clock_skew: int = DEFAULT_CLOCK_SKEW

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{f.name} must be an integer, got {value!r}")
            if value < 0:
                raise ValueError(f"{f.name} must be >= 0, got {value}")
        if self.max_age and self.min_age > self.max_age:
            raise ValueError(
                f"min_age ({self.min_age}) must not exceed max_age ({self.max_age})"
            )

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> CodecOptions:
        """Load options from environment variables.

        Reads ``{prefix}MAX_AGE``, ``{prefix}MIN_AGE``, ``{prefix}MAX_LENGTH``
        and ``{prefix}CLOCK_SKEW``. Unset variables keep their defaults.

        Raises:
            ValueError: If a variable is set but not a non-negative integer
        """
        values: dict[str, int] = {}
        for f in fields(cls):
            name = f"{prefix}{f.name.upper()}"
            raw = os.environ.get(name)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[f.name] = int(raw)
            except ValueError:
                raise ValueError(
                    f"Environment variable {name} must be an integer, got {raw!r}"
                ) from None
        return cls(**values)
