"""
Message authentication for token envelopes.

The MAC binds the token name to the signed fields so that a token issued
for one slot cannot be replayed into another. The context is:

    BE32(len(name)) || name || data

Verification is delegated to ``cryptography``'s HMAC.verify, which compares
tags in constant time.
"""

from __future__ import annotations

import struct

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, hmac

from .errors import AuthenticationError, EncodingError, KeyConfigurationError

DEFAULT_HASH_ALGORITHM: type[hashes.HashAlgorithm] = hashes.SHA256


def mac_context(name: str, data: bytes) -> bytes:
    """Build the authenticated context for a token.

    Args:
        name: Token name (e.g. cookie name)
        data: Signed token fields

    Returns:
        Length-prefixed name followed by the data

    Raises:
        EncodingError: If the name is not encodable as UTF-8
    """
    try:
        name_bytes = name.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError("token name is not valid UTF-8", stage="mac", cause=e) from e
    return struct.pack(">I", len(name_bytes)) + name_bytes + data


def _hmac(key: bytes, algorithm: type[hashes.HashAlgorithm]) -> hmac.HMAC:
    return hmac.HMAC(key, algorithm())


def check_hash_algorithm(key: bytes, algorithm: type[hashes.HashAlgorithm]) -> None:
    """Confirm that an HMAC can be built from ``key`` and ``algorithm``.

    Variable-length digests such as BLAKE2b and the SHAKE family need
    constructor arguments and are rejected here.

    Raises:
        KeyConfigurationError: If the algorithm cannot key an HMAC
    """
    try:
        _hmac(key, algorithm)
    except (TypeError, ValueError, UnsupportedAlgorithm) as e:
        raise KeyConfigurationError(
            f"unsupported hash algorithm: {algorithm.__name__}", stage="mac", cause=e
        ) from e


def create_mac(
    key: bytes,
    name: str,
    data: bytes,
    algorithm: type[hashes.HashAlgorithm] = DEFAULT_HASH_ALGORITHM,
) -> bytes:
    """Compute the MAC tag over name and data."""
    h = _hmac(key, algorithm)
    h.update(mac_context(name, data))
    return h.finalize()


def verify_mac(
    key: bytes,
    name: str,
    data: bytes,
    tag: bytes,
    algorithm: type[hashes.HashAlgorithm] = DEFAULT_HASH_ALGORITHM,
) -> None:
    """Verify a MAC tag in constant time.

    Raises:
        AuthenticationError: If the tag does not match
    """
    try:
        context = mac_context(name, data)
    except EncodingError as e:
        raise AuthenticationError("unencodable name", stage="verify", cause=e) from e
    h = _hmac(key, algorithm)
    h.update(context)
    try:
        h.verify(tag)
    except InvalidSignature as e:
        raise AuthenticationError("mac mismatch", stage="verify", cause=e) from e
