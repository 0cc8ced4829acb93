"""
Secure Cookie Envelope Codec

Encodes a value into an authenticated, optionally encrypted token and
decodes it back. Token layout (before the outer base64url pass):

    encrypted:    b64(IV) | b64(ciphertext) | timestamp | b64(MAC)
    unencrypted:  b64(payload) | timestamp | b64(MAC)

The MAC covers the token name and every field before it, so the IV,
ciphertext and timestamp are all authenticated. On decode the MAC is
verified before the timestamp is interpreted, before anything is decrypted
and before anything is deserialized.
"""

from __future__ import annotations

import dataclasses
import re
import time
from collections.abc import Callable
from typing import Any

import structlog
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers import BlockCipherAlgorithm

from . import encoding
from .cipher import DEFAULT_BLOCK_ALGORITHM, BlockCipher
from .config import CodecOptions
from .encoding import FIELD_DELIMITER
from .errors import (
    DecodingError,
    DecryptionError,
    EncodingError,
    ExpiredError,
    KeyConfigurationError,
    SecureCookieError,
    TimestampInFutureError,
    TooLongError,
)
from .mac import DEFAULT_HASH_ALGORITHM, check_hash_algorithm, create_mac, verify_mac
from .serializers import PickleSerializer, Serializer

log = structlog.get_logger()

# Field counts including the MAC
ENCRYPTED_FIELD_COUNT = 4
PLAIN_FIELD_COUNT = 3

_TIMESTAMP_RE = re.compile(r"\A[0-9]{1,19}\Z")


def _require_bytes(key: Any, what: str) -> bytes:
    if not isinstance(key, (bytes, bytearray, memoryview)):
        raise KeyConfigurationError(f"{what} must be bytes, got {type(key).__name__}")
    return bytes(key)


class SecureCookie:
    """Encodes and decodes authenticated tokens with one pair of keys.

    Instances hold no mutable state and may be shared between threads.

    Args:
        hash_key: Key for the MAC (required, 32 or 64 bytes recommended)
        block_key: Optional encryption key; its presence enables encryption
        options: Validity limits (defaults to CodecOptions())
        serializer: Value serializer (defaults to PickleSerializer())
        hash_algorithm: cryptography hash class for the HMAC (default SHA256)
        block_algorithm: cryptography block cipher class (default AES)
        clock: Callable returning the current time in epoch seconds
    """

    def __init__(
        self,
        hash_key: bytes,
        block_key: bytes | None = None,
        *,
        options: CodecOptions | None = None,
        serializer: Serializer | None = None,
        hash_algorithm: type[hashes.HashAlgorithm] | None = None,
        block_algorithm: type[BlockCipherAlgorithm] | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        if hash_key is None:
            raise KeyConfigurationError("hash key is not set")
        self._hash_key = _require_bytes(hash_key, "hash key")
        if not self._hash_key:
            raise KeyConfigurationError("hash key is not set")

        self._hash_algorithm = hash_algorithm or DEFAULT_HASH_ALGORITHM
        if not (
            isinstance(self._hash_algorithm, type)
            and issubclass(self._hash_algorithm, hashes.HashAlgorithm)
        ):
            raise KeyConfigurationError(f"unsupported hash algorithm: {self._hash_algorithm!r}")
        check_hash_algorithm(self._hash_key, self._hash_algorithm)

        self._block_key: bytes | None = None
        self._block_algorithm = block_algorithm or DEFAULT_BLOCK_ALGORITHM
        self._cipher: BlockCipher | None = None
        if block_key is not None:
            self._block_key = _require_bytes(block_key, "block key")
            self._cipher = BlockCipher(self._block_key, self._block_algorithm)

        self._options = options if options is not None else CodecOptions()
        self._serializer = serializer if serializer is not None else PickleSerializer()
        self._clock = clock or time.time

        log.debug(
            "codec_created",
            encryption=self.encrypts,
            hash=self._hash_algorithm.name,
            max_age=self._options.max_age,
            max_length=self._options.max_length,
            serializer=type(self._serializer).__name__,
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def encrypts(self) -> bool:
        """True when a block key is configured."""
        return self._cipher is not None

    @property
    def options(self) -> CodecOptions:
        return self._options

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @property
    def field_count(self) -> int:
        return ENCRYPTED_FIELD_COUNT if self.encrypts else PLAIN_FIELD_COUNT

    def with_options(self, **changes: Any) -> SecureCookie:
        """Return a copy of this codec with some options replaced.

        Example:
            session_codec = codec.with_options(max_age=3600, max_length=0)
        """
        return type(self)(
            self._hash_key,
            self._block_key,
            options=dataclasses.replace(self._options, **changes),
            serializer=self._serializer,
            hash_algorithm=self._hash_algorithm,
            block_algorithm=self._block_algorithm,
            clock=self._clock,
        )

    def _now(self) -> int:
        return int(self._clock())

    # -------------------------------------------------------------------------
    # Encode
    # -------------------------------------------------------------------------

    def encode(self, name: str, value: Any) -> str:
        """Encode a value into a token bound to ``name``.

        Args:
            name: Token name (e.g. the cookie name)
            value: Value accepted by the configured serializer

        Returns:
            Token string safe for cookies, headers and URLs

        Raises:
            SerializationError: If the value cannot be serialized
            EncodingError: If a token field comes out empty or the name is not UTF-8
            RandomSourceError: If no IV could be drawn
            TooLongError: If the token exceeds max_length
        """
        payload = self._serializer.serialize(value)
        timestamp = self._now()

        if self._cipher is not None:
            data = self._cipher.encrypt(payload)
            iv, ciphertext = data[: self._cipher.block_size], data[self._cipher.block_size :]
            fields = [encoding.encode(iv), encoding.encode(ciphertext)]
        else:
            fields = [encoding.encode(payload)]
        fields.append(str(timestamp))

        if not all(fields):
            raise EncodingError("empty token field", stage="encode")

        signed = FIELD_DELIMITER.join(fields).encode("ascii")
        mac = create_mac(self._hash_key, name, signed, self._hash_algorithm)
        token = encoding.encode(
            signed + FIELD_DELIMITER.encode("ascii") + encoding.encode(mac).encode("ascii")
        )

        max_length = self._options.max_length
        if max_length and len(token) > max_length:
            raise TooLongError(
                f"the value is too long: {len(token)} > {max_length}", stage="encode"
            )
        return token

    # -------------------------------------------------------------------------
    # Decode
    # -------------------------------------------------------------------------

    def decode(self, name: str, token: str, target: Any = None) -> Any:
        """Decode a token produced by ``encode`` under the same name.

        Args:
            name: Token name the value was encoded with
            token: Token string
            target: Optional destination (see serializers.apply_target)

        Returns:
            The decoded value, or ``target`` filled with it

        Raises:
            TooLongError: If the token exceeds max_length
            DecodingError: If the token is malformed
            AuthenticationError: If the MAC does not verify
            ExpiredError: If the token is older than max_age
            TimestampInFutureError: If the token is newer than allowed
            DecryptionError: If the ciphertext is malformed
            SerializationError: If the payload does not fit the target
        """
        try:
            return self._decode(name, token, target)
        except SecureCookieError as e:
            log.debug(
                "decode_rejected",
                name=name,
                stage=e.stage,
                error=type(e).__name__,
                token_length=len(token) if isinstance(token, (str, bytes)) else None,
            )
            raise

    def _decode(self, name: str, token: str, target: Any) -> Any:
        max_length = self._options.max_length
        if max_length and len(token) > max_length:
            raise TooLongError(
                f"the value is too long: {len(token)} > {max_length}", stage="length"
            )

        raw = encoding.decode(token)
        try:
            text = raw.decode("ascii")
        except UnicodeDecodeError as e:
            raise DecodingError("non-ascii token body", stage="split", cause=e) from e

        parts = text.split(FIELD_DELIMITER)
        if len(parts) != self.field_count:
            raise DecodingError(
                f"expected {self.field_count} fields, got {len(parts)}", stage="split"
            )
        if not all(parts):
            raise DecodingError("empty token field", stage="split")

        # Authenticate before interpreting anything else
        signed = FIELD_DELIMITER.join(parts[:-1]).encode("ascii")
        tag = encoding.decode(parts[-1])
        verify_mac(self._hash_key, name, signed, tag, self._hash_algorithm)

        self._check_timestamp(parts[-2])

        if self._cipher is not None:
            iv = encoding.decode(parts[0])
            ciphertext = encoding.decode(parts[1])
            if len(iv) != self._cipher.block_size:
                raise DecryptionError("invalid IV length", stage="decrypt")
            payload = self._cipher.decrypt(iv + ciphertext)
        else:
            payload = encoding.decode(parts[0])

        return self._serializer.deserialize(payload, target)

    def _check_timestamp(self, field: str) -> None:
        if not _TIMESTAMP_RE.match(field):
            raise DecodingError("invalid timestamp", stage="timestamp")
        timestamp = int(field)
        now = self._now()
        options = self._options

        if timestamp > now + options.clock_skew:
            raise TimestampInFutureError("the timestamp is in the future", stage="timestamp")
        if options.min_age and timestamp > now - options.min_age:
            raise TimestampInFutureError(stage="timestamp")
        if options.max_age and now - timestamp > options.max_age:
            raise ExpiredError(stage="timestamp")

    def __repr__(self) -> str:
        return (
            f"SecureCookie(encryption={self.encrypts}, hash={self._hash_algorithm.name}, "
            f"options={self._options!r}, serializer={self._serializer!r})"
        )
