"""Key generation helper."""

from __future__ import annotations

from .cipher import random_bytes


def generate_random_key(length: int) -> bytes:
    """Generate a random key of ``length`` bytes from the OS CSPRNG.

    Suitable for hash keys (32 or 64 bytes) and AES block keys (16, 24
    or 32 bytes). The key is returned, never stored.

    Raises:
        ValueError: If length is not positive
        RandomSourceError: If the random source fails
    """
    if length <= 0:
        raise ValueError(f"Key length must be positive, got {length}")
    return random_bytes(length)
