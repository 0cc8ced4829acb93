"""
Key rotation across several codecs.

Tokens are always issued by the first codec. Decoding tries each codec in
order, so tokens issued under an older key stay valid until they expire
while new tokens move to the new key.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from .codec import SecureCookie
from .config import CodecOptions
from .errors import MultiError, NoCodecsConfiguredError, SecureCookieError

log = structlog.get_logger()


def codecs_from_pairs(
    *keys: bytes | None,
    options: CodecOptions | None = None,
    **kwargs: Any,
) -> list[SecureCookie]:
    """Build codecs from alternating hash and block keys.

    Keys are taken in pairs ``(hash_key, block_key)``. A trailing hash key
    without a partner gets no block key, as does a pair whose block key is
    None.

    Example:
        codecs = codecs_from_pairs(new_hash, new_block, old_hash, old_block)

    Args:
        keys: Alternating hash and block keys, newest first
        options: Validity limits applied to every codec
        kwargs: Extra SecureCookie keyword arguments (serializer, clock, ...)

    Returns:
        List of codecs in the given order
    """
    codecs = []
    for i in range(0, len(keys), 2):
        hash_key = keys[i]
        block_key = keys[i + 1] if i + 1 < len(keys) else None
        codecs.append(SecureCookie(hash_key, block_key, options=options, **kwargs))
    return codecs


def encode_multi(name: str, value: Any, codecs: Sequence[SecureCookie]) -> str:
    """Encode a value with the first codec.

    Raises:
        NoCodecsConfiguredError: If ``codecs`` is empty
    """
    if not codecs:
        raise NoCodecsConfiguredError(stage="rotation")
    return codecs[0].encode(name, value)


def decode_multi(
    name: str,
    token: str,
    codecs: Sequence[SecureCookie],
    target: Any = None,
) -> Any:
    """Decode a token with the first codec that accepts it.

    Raises:
        NoCodecsConfiguredError: If ``codecs`` is empty
        MultiError: If every codec rejects the token
    """
    if not codecs:
        raise NoCodecsConfiguredError(stage="rotation")

    errors: list[SecureCookieError] = []
    for index, codec in enumerate(codecs):
        try:
            value = codec.decode(name, token, target)
        except SecureCookieError as e:
            errors.append(e)
            continue
        if index:
            log.debug("decoded_with_older_codec", name=name, codec_index=index)
        return value

    raise MultiError(errors)
