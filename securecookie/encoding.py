"""
Transport-safe byte encoding.

Tokens travel in cookies, headers and URLs, so every byte sequence is
rendered with the URL-safe base64 alphabet and no padding. The alphabet
never contains FIELD_DELIMITER, which is what makes the ``|`` separated
token fields unambiguous.
"""

from __future__ import annotations

import base64
import binascii
import re

from .errors import DecodingError

# Separator between token fields
FIELD_DELIMITER = "|"

# URL-safe base64 alphabet, unpadded
URLSAFE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
_ALPHABET_RE = re.compile(r"\A[A-Za-z0-9_-]+\Z")

if FIELD_DELIMITER in URLSAFE_ALPHABET:
    raise RuntimeError("field delimiter collides with the base64url alphabet")


def encode(data: bytes) -> str:
    """Encode bytes as unpadded URL-safe base64.

    Args:
        data: Bytes to encode

    Returns:
        ASCII string drawn from ``[A-Za-z0-9_-]``
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def decode(value: str | bytes) -> bytes:
    """Decode an unpadded URL-safe base64 string.

    Padding characters, whitespace, characters outside the URL-safe
    alphabet, lengths that cannot occur in unpadded base64 and encodings
    with non-zero trailing bits are all rejected. A string that decodes to
    zero bytes is rejected too.

    Args:
        value: Encoded string

    Returns:
        Decoded bytes (never empty)

    Raises:
        DecodingError: If the input is not valid unpadded base64url
    """
    if isinstance(value, bytes):
        try:
            value = value.decode("ascii")
        except UnicodeDecodeError as e:
            raise DecodingError("non-ascii input", stage="decode", cause=e) from e

    if not value:
        raise DecodingError("empty input", stage="decode")
    if not _ALPHABET_RE.match(value):
        raise DecodingError("invalid base64url alphabet", stage="decode")
    if len(value) % 4 == 1:
        raise DecodingError("invalid base64url length", stage="decode")

    padded = value + "=" * (-len(value) % 4)
    try:
        data = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise DecodingError("invalid base64url data", stage="decode", cause=e) from e

    if not data:
        raise DecodingError("decoded to zero bytes", stage="decode")
    # Unused trailing bits must be zero so each byte string has one encoding
    if encode(data) != value:
        raise DecodingError("non-canonical base64url", stage="decode")
    return data
