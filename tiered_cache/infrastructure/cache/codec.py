"""
Value Codec

Turns structured values into the text stored in both tiers and back.

    encode(value) -> str
    decode(text, target) -> value

Strings pass through untouched so that a plain-text value written by one
process reads back byte-for-byte in another. Everything else is JSON
(orjson), and typed reads are validated with a pydantic TypeAdapter, which
covers builtins, generics (dict[str, int], list[Model]), dataclasses and
pydantic models alike.
"""

from functools import lru_cache
from typing import Any, Protocol, TypeVar

import orjson
from pydantic import BaseModel, TypeAdapter, ValidationError

from tiered_cache.core.exceptions import CacheDecodeError, CacheError

T = TypeVar("T")


class Codec(Protocol):
    """Encode/decode capability used by the façade and the Redis adapter."""

    def encode(self, value: Any) -> str: ...

    def decode(self, text: str | None, target: type[T]) -> T | None: ...


def _default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    raise TypeError(f"Type is not JSON serializable: {type(value).__name__}")


@lru_cache(maxsize=256)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


class JsonCodec:
    """
    orjson-backed codec.

    Usage:
        codec = JsonCodec()
        text = codec.encode({"id": 1})          # '{"id":1}'
        user = codec.decode(text, dict[str, int])
    """

    def encode(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, bytes):
            return value.decode("utf-8")
        try:
            return orjson.dumps(value, default=_default).decode("utf-8")
        except TypeError as e:
            raise CacheError(
                f"Value is not serializable: {e}",
                details={"type": type(value).__name__},
            ) from e

    def decode(self, text: str | None, target: type[T]) -> T | None:
        if text is None:
            return None
        if target is str:
            return text
        try:
            return _adapter(target).validate_json(text)
        except (ValidationError, ValueError) as e:
            raise CacheDecodeError(
                f"Stored value does not match {getattr(target, '__name__', target)!s}",
                details={"target": str(target), "error": str(e)},
            ) from e
