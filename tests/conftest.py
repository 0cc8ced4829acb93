"""
Pytest configuration and fixtures for the secure cookie test suite.

This module provides:
- Deterministic key fixtures for reproducible cryptographic tests
- A controllable clock for expiry and clock-skew tests
- Ready-made codecs in authentication-only and encrypted modes
"""

from __future__ import annotations

import pytest
import structlog

from lib.clock import FrozenClock
from lib.keys import block_key, hash_key
from securecookie import CodecOptions, SecureCookie

# Configure structlog for tests
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.dev.ConsoleRenderer(),
    ],
)
log = structlog.get_logger()

# =============================================================================
# Key fixtures
# =============================================================================


@pytest.fixture(scope="session")
def test_hash_key() -> bytes:
    """Deterministic 64-byte HMAC key.

    Well-known test key that should NEVER be used in production.
    """
    return hash_key("primary")


@pytest.fixture(scope="session")
def test_block_key() -> bytes:
    """Deterministic 32-byte AES key."""
    return block_key("primary")


# =============================================================================
# Codec fixtures
# =============================================================================


@pytest.fixture
def clock() -> FrozenClock:
    """Frozen clock starting at EPOCH_START."""
    return FrozenClock()


@pytest.fixture
def plain_codec(test_hash_key: bytes, clock: FrozenClock) -> SecureCookie:
    """Authentication-only codec."""
    return SecureCookie(test_hash_key, clock=clock)


@pytest.fixture
def encrypted_codec(
    test_hash_key: bytes, test_block_key: bytes, clock: FrozenClock
) -> SecureCookie:
    """Codec with AES-256-CTR encryption."""
    return SecureCookie(test_hash_key, test_block_key, clock=clock)


@pytest.fixture(params=["plain", "encrypted"])
def codec(
    request: pytest.FixtureRequest,
    plain_codec: SecureCookie,
    encrypted_codec: SecureCookie,
) -> SecureCookie:
    """Both codec modes, for tests that must hold regardless of configuration."""
    return plain_codec if request.param == "plain" else encrypted_codec


@pytest.fixture
def short_lived_options() -> CodecOptions:
    """One-hour validity window with no skew tolerance."""
    return CodecOptions(max_age=3600, clock_skew=0)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "adversarial: security/fuzzing tests")


def pytest_report_header(config):
    """Add secure cookie info to pytest header."""
    from securecookie import __version__

    return [f"securecookie: {__version__}"]
