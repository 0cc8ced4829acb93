"""
Value Serializers

A serializer turns an application value into bytes and back. The codec
treats it as a capability with exactly two operations and never inspects
the bytes it produces. Three implementations are provided:

- PickleSerializer: general-purpose binary serializer (the default)
- JSONSerializer: JSON text, for values shared with non-Python services
- NopSerializer: raw bytes passthrough for pre-serialized data

Deserialization runs only after the token MAC has been verified, so the
bytes handed to ``deserialize`` were produced by a holder of the hash key.

The optional ``target`` mirrors decoding into a caller-provided
destination: a type to check against, or a mutable container (dict, list,
object with attributes) that is filled in place and returned.
"""

from __future__ import annotations

import dataclasses
import json
import pickle
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from .errors import SerializationError, ValueTypeError

# =============================================================================
# Serializer Interface
# =============================================================================


@runtime_checkable
class Serializer(Protocol):
    """Converts values to and from bytes."""

    def serialize(self, value: Any) -> bytes:
        ...

    def deserialize(self, data: bytes, target: Any = None) -> Any:
        ...


def apply_target(value: Any, target: Any) -> Any:
    """Check a decoded value against the caller's destination.

    Args:
        value: Freshly deserialized value
        target: None, a type, or a mutable destination to fill

    Returns:
        The value, or the filled destination

    Raises:
        SerializationError: If the value does not fit the destination
    """
    if target is None:
        return value

    if isinstance(target, type):
        if not isinstance(value, target):
            raise SerializationError(
                f"decoded {type(value).__name__}, expected {target.__name__}",
                stage="deserialize",
            )
        return value

    if isinstance(target, dict):
        if not isinstance(value, Mapping):
            raise SerializationError(
                f"cannot decode {type(value).__name__} into dict", stage="deserialize"
            )
        target.clear()
        target.update(value)
        return target

    if isinstance(target, list):
        if not isinstance(value, (list, tuple)):
            raise SerializationError(
                f"cannot decode {type(value).__name__} into list", stage="deserialize"
            )
        target[:] = value
        return target

    if type(value) is type(target) and hasattr(target, "__dict__"):
        vars(target).update(vars(value))
        return target

    raise SerializationError(
        f"cannot decode {type(value).__name__} into {type(target).__name__}",
        stage="deserialize",
    )


# =============================================================================
# Implementations
# =============================================================================


class PickleSerializer:
    """Self-describing binary serializer backed by pickle."""

    def __init__(self, protocol: int = pickle.HIGHEST_PROTOCOL) -> None:
        self.protocol = protocol

    def serialize(self, value: Any) -> bytes:
        try:
            return pickle.dumps(value, protocol=self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError, RecursionError) as e:
            raise SerializationError(stage="serialize", cause=e) from e

    def deserialize(self, data: bytes, target: Any = None) -> Any:
        try:
            value = pickle.loads(data)
        except (
            pickle.UnpicklingError,
            EOFError,
            AttributeError,
            ImportError,
            IndexError,
            KeyError,
            TypeError,
            ValueError,
            RecursionError,
        ) as e:
            raise SerializationError(stage="deserialize", cause=e) from e
        return apply_target(value, target)

    def __repr__(self) -> str:
        return f"PickleSerializer(protocol={self.protocol})"


class JSONSerializer:
    """Compact JSON serializer.

    Dataclass instances are serialized as objects, and a dataclass type
    passed as ``target`` is rebuilt from the decoded object.
    """

    def serialize(self, value: Any) -> bytes:
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            value = dataclasses.asdict(value)
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError, RecursionError) as e:
            raise SerializationError(stage="serialize", cause=e) from e

    def deserialize(self, data: bytes, target: Any = None) -> Any:
        try:
            value = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            raise SerializationError(stage="deserialize", cause=e) from e

        if isinstance(target, type) and dataclasses.is_dataclass(target):
            if not isinstance(value, dict):
                raise SerializationError(
                    f"cannot build {target.__name__} from {type(value).__name__}",
                    stage="deserialize",
                )
            try:
                return target(**value)
            except TypeError as e:
                raise SerializationError(stage="deserialize", cause=e) from e

        return apply_target(value, target)

    def __repr__(self) -> str:
        return "JSONSerializer()"


class NopSerializer:
    """Passes raw bytes through untouched.

    ``serialize`` accepts only bytes-like values. ``deserialize`` accepts
    no target, the ``bytes`` type, or a ``bytearray`` slot to fill.
    """

    def serialize(self, value: Any) -> bytes:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise ValueTypeError("the value is not bytes", stage="serialize")
        return bytes(value)

    def deserialize(self, data: bytes, target: Any = None) -> Any:
        if target is None or target is bytes:
            return bytes(data)
        if isinstance(target, bytearray):
            target[:] = data
            return target
        raise ValueTypeError("the target is not a bytearray", stage="deserialize")

    def __repr__(self) -> str:
        return "NopSerializer()"
