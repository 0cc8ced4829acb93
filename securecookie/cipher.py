"""
Symmetric encryption for token payloads.

Payloads are encrypted with a block cipher in CTR mode. A fresh IV is drawn
from the OS CSPRNG for every call and prepended to the ciphertext:

    IV (block size) || ciphertext

CTR keystream reuse leaks plaintext, so a failing random source aborts the
call instead of falling back to anything weaker.
"""

from __future__ import annotations

import os

from cryptography.hazmat.primitives.ciphers import BlockCipherAlgorithm, Cipher, algorithms, modes

from .errors import DecryptionError, KeyConfigurationError, RandomSourceError

DEFAULT_BLOCK_ALGORITHM: type[BlockCipherAlgorithm] = algorithms.AES

# AES accepts 512-bit keys only for XTS
_CTR_KEY_SIZES = {
    algorithms.AES: frozenset({16, 24, 32}),
}


def random_bytes(length: int) -> bytes:
    """Read bytes from the OS CSPRNG.

    Raises:
        RandomSourceError: If the random source fails or comes up short
    """
    try:
        data = os.urandom(length)
    except (OSError, NotImplementedError) as e:
        raise RandomSourceError(stage="random", cause=e) from e
    if len(data) != length:
        raise RandomSourceError("short read from the random source", stage="random")
    return data


class BlockCipher:
    """Block cipher in CTR mode bound to one key."""

    def __init__(
        self,
        key: bytes,
        algorithm: type[BlockCipherAlgorithm] = DEFAULT_BLOCK_ALGORITHM,
    ) -> None:
        key_sizes = _CTR_KEY_SIZES.get(algorithm)
        if key_sizes is None:
            key_sizes = frozenset(bits // 8 for bits in getattr(algorithm, "key_sizes", ()))
        if len(key) not in key_sizes:
            raise KeyConfigurationError(
                f"block key must be one of {sorted(key_sizes)} bytes, got {len(key)}",
                stage="cipher",
            )
        try:
            self._algorithm = algorithm(key)
        except (TypeError, ValueError) as e:
            raise KeyConfigurationError(stage="cipher", cause=e) from e
        self.block_size = self._algorithm.block_size // 8

    @property
    def name(self) -> str:
        return self._algorithm.name

    def encrypt(self, plaintext: bytes) -> bytes:
        """Encrypt plaintext, returning IV || ciphertext."""
        iv = random_bytes(self.block_size)
        encryptor = Cipher(self._algorithm, modes.CTR(iv)).encryptor()
        return iv + encryptor.update(plaintext) + encryptor.finalize()

    def decrypt(self, data: bytes) -> bytes:
        """Decrypt IV || ciphertext.

        Raises:
            DecryptionError: If no ciphertext follows the IV
        """
        if len(data) <= self.block_size:
            raise DecryptionError("ciphertext shorter than one block", stage="decrypt")
        iv, ciphertext = data[: self.block_size], data[self.block_size :]
        decryptor = Cipher(self._algorithm, modes.CTR(iv)).decryptor()
        return decryptor.update(ciphertext) + decryptor.finalize()

    def __repr__(self) -> str:
        return f"BlockCipher({self.name}-CTR)"


def encrypt(key: bytes, plaintext: bytes) -> bytes:
    """Encrypt with the default block cipher."""
    return BlockCipher(key).encrypt(plaintext)


def decrypt(key: bytes, data: bytes) -> bytes:
    """Decrypt with the default block cipher."""
    return BlockCipher(key).decrypt(data)
