"""
Malformed Token Tests

Tests that garbage, truncated and structurally wrong tokens are rejected
with a typed SecureCookieError and never crash the decoder, in both
authentication-only and encrypted configurations.
"""

from __future__ import annotations

from pathlib import Path

import json5
import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from lib.tamper import std_b64, url_b64
from securecookie import SecureCookie, SecureCookieError, encoding

# Mark all tests in this module as adversarial
pytestmark = pytest.mark.adversarial


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(scope="module")
def malformed_vectors() -> dict:
    """Load malformed token vectors from JSON5 file."""
    vectors_path = Path(__file__).parent.parent / "vectors" / "malformed_tokens.json5"
    with vectors_path.open() as f:
        return json5.load(f)


def _variants(body: bytes) -> list[str]:
    variants = [std_b64(body), url_b64(body)]
    if body:
        variants.append(encoding.encode(body))
    return variants


# =============================================================================
# Vector-driven rejection
# =============================================================================


class TestMalformedBodies:
    """Encoded garbage bodies are rejected."""

    def test_known_invalid_cookies(self) -> None:
        """The classic invalid inputs fail under a hash-only codec."""
        s = SecureCookie(b"12345")
        for value in ["", " ", "\n", "||", "|||", "cookie"]:
            for encoded in (std_b64(value.encode()), url_b64(value.encode())):
                with pytest.raises(SecureCookieError) as exc_info:
                    s.decode("name", encoded)
                assert exc_info.value.is_decode

    def test_all_bodies_rejected(self, malformed_vectors: dict, codec: SecureCookie) -> None:
        """Every vector body fails in every encoding variant."""
        for vector in malformed_vectors["bodies"]:
            for token in _variants(vector["body"].encode()):
                with pytest.raises(SecureCookieError):
                    codec.decode("name", token)

    def test_all_raw_tokens_rejected(self, malformed_vectors: dict, codec: SecureCookie) -> None:
        """Every raw token vector fails."""
        for vector in malformed_vectors["tokens"]:
            with pytest.raises(SecureCookieError) as exc_info:
                codec.decode("name", vector["token"])
            assert exc_info.value.is_decode, vector["name"]

    def test_non_ascii_body(self, codec: SecureCookie) -> None:
        """A body with non-ASCII bytes is rejected."""
        with pytest.raises(SecureCookieError):
            codec.decode("name", encoding.encode(b"\xff|\xfe|\xfd"))


# =============================================================================
# Fuzzing
# =============================================================================


@pytest.mark.slow
class TestFuzzedInput:
    """Arbitrary input never escapes as an untyped exception."""

    @given(text=st.text(max_size=200))
    @settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_arbitrary_text(self, codec: SecureCookie, text: str) -> None:
        """Random strings are rejected with SecureCookieError."""
        with pytest.raises(SecureCookieError):
            codec.decode("name", text)

    @given(body=st.binary(min_size=1, max_size=200))
    @settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_arbitrary_bodies(self, codec: SecureCookie, body: bytes) -> None:
        """Random bodies that pass the outer decoding are still rejected."""
        with pytest.raises(SecureCookieError):
            codec.decode("name", encoding.encode(body))

    @given(
        fields=st.lists(
            st.text(alphabet=encoding.URLSAFE_ALPHABET + "0123456789", max_size=30),
            min_size=1,
            max_size=6,
        )
    )
    @settings(max_examples=200, suppress_health_check=[HealthCheck.function_scoped_fixture])
    def test_arbitrary_field_layouts(self, codec: SecureCookie, fields: list[str]) -> None:
        """Delimited bodies of any shape fail authentication or parsing."""
        token = encoding.encode("|".join(fields).encode("ascii") or b"|")
        with pytest.raises(SecureCookieError):
            codec.decode("name", token)
