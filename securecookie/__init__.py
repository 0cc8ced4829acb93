"""
Secure Cookie: tamper-evident, optionally encrypted tokens.

Values are serialized, stamped with a timestamp, optionally encrypted with
AES-CTR, authenticated with HMAC and rendered as URL-safe base64 so they can
live in cookies, headers or URLs.

Example usage:
    from securecookie import SecureCookie, generate_random_key

    codec = SecureCookie(generate_random_key(64), generate_random_key(32))

    token = codec.encode("session", {"user_id": 42})
    value = codec.decode("session", token)

Key rotation:
    from securecookie import codecs_from_pairs, decode_multi, encode_multi

    codecs = codecs_from_pairs(new_hash, new_block, old_hash, old_block)
    token = encode_multi("session", value, codecs)
    value = decode_multi("session", token, codecs)
"""

from .codec import SecureCookie
from .config import CodecOptions
from .errors import (
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
from .keys import generate_random_key
from .multi import codecs_from_pairs, decode_multi, encode_multi
from .serializers import JSONSerializer, NopSerializer, PickleSerializer, Serializer

__version__ = "1.0.0"

__all__ = [
    "SecureCookie",
    "CodecOptions",
    "Serializer",
    "PickleSerializer",
    "JSONSerializer",
    "NopSerializer",
    "generate_random_key",
    "codecs_from_pairs",
    "encode_multi",
    "decode_multi",
    "SecureCookieError",
    "KeyConfigurationError",
    "SerializationError",
    "ValueTypeError",
    "EncodingError",
    "DecodingError",
    "AuthenticationError",
    "DecryptionError",
    "ExpiredError",
    "TimestampInFutureError",
    "TooLongError",
    "RandomSourceError",
    "NoCodecsConfiguredError",
    "MultiError",
]
