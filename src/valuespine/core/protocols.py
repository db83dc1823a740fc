"""Marshaling protocols implemented by the value types.

Values are immutable, so decoding is a classmethod that returns a new value
rather than a method that fills in the receiver.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextMarshaler(Protocol):
    """Canonical text round-trip."""

    def marshal_text(self) -> bytes: ...

    @classmethod
    def unmarshal_text(cls, data: bytes | str): ...


@runtime_checkable
class BinaryMarshaler(Protocol):
    """Fixed-width binary round-trip."""

    def marshal_binary(self) -> bytes: ...

    @classmethod
    def unmarshal_binary(cls, data: bytes): ...


@runtime_checkable
class JSONMarshaler(Protocol):
    """JSON document round-trip."""

    def marshal_json(self) -> bytes: ...

    @classmethod
    def unmarshal_json(cls, data: bytes | str): ...


__all__ = [
    "TextMarshaler",
    "BinaryMarshaler",
    "JSONMarshaler",
]
