"""
Error Taxonomy Tests

Tests error classification flags, the shared public message and the
MultiError aggregate.
"""

from __future__ import annotations

import pytest

from securecookie import (
    AuthenticationError,
    DecodingError,
    DecryptionError,
    EncodingError,
    ExpiredError,
    KeyConfigurationError,
    MultiError,
    NoCodecsConfiguredError,
    RandomSourceError,
    SecureCookieError,
    SerializationError,
    TimestampInFutureError,
    TooLongError,
    ValueTypeError,
)


class TestClassification:
    """Test the usage/decode/internal flags."""

    @pytest.mark.parametrize(
        ("error_cls", "usage", "decode", "internal"),
        [
            (KeyConfigurationError, True, False, False),
            (NoCodecsConfiguredError, True, False, False),
            (ValueTypeError, True, False, False),
            (SerializationError, False, False, True),
            (EncodingError, False, False, True),
            (RandomSourceError, False, False, True),
            (DecodingError, False, True, False),
            (AuthenticationError, False, True, False),
            (DecryptionError, False, True, False),
            (ExpiredError, False, True, False),
            (TimestampInFutureError, False, True, False),
            (TooLongError, False, True, False),
        ],
    )
    def test_flags(
        self, error_cls: type[SecureCookieError], usage: bool, decode: bool, internal: bool
    ) -> None:
        error = error_cls()
        assert (error.is_usage, error.is_decode, error.is_internal) == (usage, decode, internal)
        assert isinstance(error, SecureCookieError)

    def test_decoding_error_is_encoding_error(self) -> None:
        """DecodingError can be caught as EncodingError."""
        assert issubclass(DecodingError, EncodingError)

    def test_cause_and_stage(self) -> None:
        """Underlying exceptions and stages are kept on the error."""
        cause = ValueError("boom")
        error = SerializationError(stage="serialize", cause=cause)
        assert error.cause is cause
        assert error.stage == "serialize"
        assert str(error) == "the value could not be serialized"


class TestMultiError:
    """Test the rotation aggregate."""

    def test_empty(self) -> None:
        error = MultiError([])
        assert str(error) == "(0 errors)"
        assert not error.is_decode
        assert len(error) == 0

    def test_single(self) -> None:
        error = MultiError([ExpiredError()])
        assert str(error) == "the timestamp is expired"
        assert error.is_decode

    def test_flags_from_members(self) -> None:
        """Flags are the union of member flags."""
        error = MultiError([AuthenticationError(), RandomSourceError()])
        assert error.is_decode
        assert error.is_internal
        assert not error.is_usage
        assert str(error) == "the value is not valid (and 1 other errors)"
