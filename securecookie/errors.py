"""
Secure Cookie Error Types

Every failure raised by the codec derives from SecureCookieError. Errors are
classified the same way across the package:

- usage: the caller configured or invoked the codec incorrectly
- decode: the token could not be turned back into a value
- internal: an unexpected failure inside a primitive (serializer, RNG)

Errors that an adversary can trigger by probing tokens (bad encoding, bad
MAC, bad ciphertext) share one public message. The failing stage is kept on
the ``stage`` attribute for server-side diagnostics only.
"""

from __future__ import annotations

from collections.abc import Iterator

# Public message for failures an attacker can provoke with a forged token
INVALID_VALUE_MESSAGE = "the value is not valid"


class SecureCookieError(Exception):
    """Base class for all codec errors."""

    is_usage = False
    is_decode = False
    is_internal = False

    default_message = "secure cookie error"

    def __init__(
        self,
        message: str | None = None,
        *,
        stage: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message or self.default_message)
        self.stage = stage
        self.cause = cause


class KeyConfigurationError(SecureCookieError, ValueError):
    """Missing or malformed key material, or an unsupported algorithm."""

    is_usage = True
    default_message = "invalid key configuration"


class SerializationError(SecureCookieError):
    """The value could not be serialized, or did not match the target shape."""

    is_internal = True
    default_message = "the value could not be serialized"


class ValueTypeError(SerializationError, TypeError):
    """A serializer was given a value or target of the wrong type."""

    is_internal = False
    is_usage = True
    default_message = "the value has an unsupported type"


class EncodingError(SecureCookieError):
    """A token field could not be encoded."""

    is_internal = True
    default_message = "the value could not be encoded"


class DecodingError(EncodingError):
    """The token is not well formed."""

    is_internal = False
    is_decode = True

    def __str__(self) -> str:
        return INVALID_VALUE_MESSAGE


class AuthenticationError(SecureCookieError):
    """The MAC did not match."""

    is_decode = True

    def __str__(self) -> str:
        return INVALID_VALUE_MESSAGE


class DecryptionError(SecureCookieError):
    """The ciphertext could not be decrypted."""

    is_decode = True

    def __str__(self) -> str:
        return INVALID_VALUE_MESSAGE


class ExpiredError(SecureCookieError):
    """The token timestamp is outside the validity window."""

    is_decode = True
    default_message = "the timestamp is expired"


class TimestampInFutureError(ExpiredError):
    """The token timestamp is too new or ahead of the local clock."""

    default_message = "the timestamp is too new"


class TooLongError(SecureCookieError):
    """The token exceeds the configured maximum length."""

    is_decode = True
    default_message = "the value is too long"


class RandomSourceError(SecureCookieError):
    """The operating system CSPRNG failed to produce bytes."""

    is_internal = True
    default_message = "failed to read from the random source"


class NoCodecsConfiguredError(SecureCookieError):
    """A rotation call was given no codecs."""

    is_usage = True
    default_message = "no codecs provided"


class MultiError(SecureCookieError):
    """Aggregate of the per-codec failures from a rotation decode.

    Classification flags are true if any member error has the flag set.
    """

    def __init__(self, errors: list[SecureCookieError]) -> None:
        self.errors = list(errors)
        super().__init__(self._summary(), stage="rotation")

    def _summary(self) -> str:
        if not self.errors:
            return "(0 errors)"
        first = str(self.errors[0])
        if len(self.errors) == 1:
            return first
        return f"{first} (and {len(self.errors) - 1} other errors)"

    @property
    def is_usage(self) -> bool:  # type: ignore[override]
        return any(e.is_usage for e in self.errors)

    @property
    def is_decode(self) -> bool:  # type: ignore[override]
        return any(e.is_decode for e in self.errors)

    @property
    def is_internal(self) -> bool:  # type: ignore[override]
        return any(e.is_internal for e in self.errors)

    def __iter__(self) -> Iterator[SecureCookieError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)
