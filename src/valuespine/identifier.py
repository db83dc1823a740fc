"""
UUIDs as two 64-bit halves.

:class:`UUID` reads and writes the canonical hyphenated form
(``123e4567-e89b-12d3-a456-426614174000``) and the URN form
(``urn:uuid:123e4567-...``). It converts to and from :class:`uuid.UUID`
for interop with the rest of the standard library.

Examples:
    >>> u = parse("urn:uuid:123E4567-E89B-12D3-A456-426614174000")
    >>> str(u)
    '123e4567-e89b-12d3-a456-426614174000'
    >>> u.version(), u.variant()
    (1, 1)
    >>> f"{u:u}"
    'urn:uuid:123e4567-e89b-12d3-a456-426614174000'
"""

from __future__ import annotations

import uuid as _uuid
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from enum import IntFlag
from typing import Union

from valuespine.core.errors import (
    FieldRangeError,
    InvalidDigitError,
    MarshalError,
    ParseError,
    URNFormatDisabledError,
)
from valuespine.core.logging import get_logger
from valuespine.core.settings import ValueSpineSettings, get_settings
from valuespine.core.strategy import StrategySlot
from valuespine.core.text import TextInput, as_text, check_length, reject

logger = get_logger(__name__)

NAMESPACE = "uu"
MAX_UINT64 = 2**64 - 1

URN_PREFIX = "urn:uuid:"
ID_LENGTH = 36

# offsets of the 16 hex digit pairs in the canonical form
_STARTS = (0, 2, 4, 6, 9, 11, 14, 16, 19, 21, 24, 26, 28, 30, 32, 34)
_HYPHENS = (8, 13, 18, 23)
_LOWER_HEX = "0123456789abcdef"
_UPPER_HEX = "ABCDEF"


class Format(IntFlag):
    URN = 1
    """Prefix the output with ``urn:uuid:``."""


class Rule(IntFlag):
    DISABLE_URN = 1
    DISABLE_UPPER_CASE_DIGITS = 2


@dataclass(frozen=True, slots=True, order=True)
class UUID:
    """128-bit identifier held as its higher and lower 64-bit halves."""

    higher: int = 0
    lower: int = 0

    def __post_init__(self) -> None:
        for name in ("higher", "lower"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_UINT64:
                raise FieldRangeError(f"{name} half out of range: {value}").with_context(
                    namespace=NAMESPACE, func="UUID"
                )

    def version(self) -> int:
        return (self.higher >> 12) & 0xF

    def variant(self) -> int:
        """Number of leading one bits of the variant field (0 to 3)."""
        for n, mask in enumerate((1 << 63, 1 << 62, 1 << 61)):
            if not self.lower & mask:
                return n
        return 3

    def is_zero(self) -> bool:
        return self.higher == 0 and self.lower == 0

    def urn(self) -> str:
        return bytes(default_formatter(None, self, Format.URN)).decode()

    def to_uuid(self) -> _uuid.UUID:
        return _uuid.UUID(int=self.higher << 64 | self.lower)

    def marshal_text(self, *, strategy: IDStrategy | None = None) -> bytes:
        try:
            return bytes(_resolve(strategy).formatter(None, self, Format(0)))
        except Exception as e:
            raise MarshalError("uu.UUID.marshal_text", e) from e

    @classmethod
    def unmarshal_text(cls, data: TextInput, *, strategy: IDStrategy | None = None) -> UUID:
        s = _resolve(strategy)
        try:
            return s.parser("UUID.unmarshal_text", data, s.rule, s.max_input_length)
        except ParseError:
            raise
        except Exception as e:
            raise MarshalError("uu.UUID.unmarshal_text", e) from e

    def to_string(self, f: Format = Format(0), *, strategy: IDStrategy | None = None) -> str:
        try:
            out = _resolve(strategy).formatter(None, self, f)
        except Exception as e:
            logger.debug("formatter_failed", namespace=NAMESPACE, error=str(e))
            out = default_formatter(None, self, f)
        return bytes(out).decode()

    def __str__(self) -> str:
        return self.to_string()

    def __format__(self, spec: str) -> str:
        if spec in ("", "s"):
            return self.to_string()
        if spec == "u":
            return self.to_string(Format.URN)
        raise ValueError(f"unsupported format spec {spec!r} for UUID")


ZERO = UUID()


def from_uuid(u: _uuid.UUID) -> UUID:
    return UUID(u.int >> 64, u.int & MAX_UINT64)


def random_id() -> UUID:
    """Random version 4, variant 1 identifier."""
    return from_uuid(_uuid.uuid4())


# =============================================================================
# FORMAT / PARSE
# =============================================================================

Buffer = Union[bytes, bytearray, None]


def default_formatter(buf: Buffer, u: UUID, f: Format = Format(0)) -> bytearray:
    out = buf if isinstance(buf, bytearray) else bytearray(buf or b"")
    if f & Format.URN:
        out += URN_PREFIX.encode()
    out += b"%08x-%04x-%04x-%04x-%012x" % (
        u.higher >> 32,
        (u.higher >> 16) & 0xFFFF,
        u.higher & 0xFFFF,
        u.lower >> 48,
        u.lower & 0xFFFFFFFFFFFF,
    )
    return out


def _has_urn_prefix(text: str) -> bool:
    return text[:3].lower() == "urn" and text[3:len(URN_PREFIX)] == URN_PREFIX[3:]


def _digit(ch: str, allow_upper_case: bool) -> int | None:
    value = _LOWER_HEX.find(ch)
    if value >= 0:
        return value
    if allow_upper_case and ch in _UPPER_HEX:
        return _UPPER_HEX.index(ch) + 10
    return None


def default_parser(func: str, data: TextInput, rule: Rule = Rule(0), max_input_length: int = 0) -> UUID:
    text, length = as_text(data)
    check_length(NAMESPACE, func, length, max_input_length)

    n = len(text)
    if n == ID_LENGTH:
        offset = 0
    elif n == ID_LENGTH + len(URN_PREFIX):
        if rule & Rule.DISABLE_URN:
            raise reject(NAMESPACE, func, text, URNFormatDisabledError())
        if not _has_urn_prefix(text):
            raise reject(NAMESPACE, func, text)
        offset = len(URN_PREFIX)
    else:
        raise reject(NAMESPACE, func, text)

    if any(text[offset + i] != "-" for i in _HYPHENS):
        raise reject(NAMESPACE, func, text)

    allow_upper_case = not rule & Rule.DISABLE_UPPER_CASE_DIGITS
    value = 0
    for start in _STARTS:
        for ch in text[offset + start:offset + start + 2]:
            digit = _digit(ch, allow_upper_case)
            if digit is None:
                raise reject(NAMESPACE, func, text, InvalidDigitError(ch))
            value = value << 4 | digit
    return UUID(value >> 64, value & MAX_UINT64)


def parse(data: TextInput, rule: Rule | None = None, *, strategy: IDStrategy | None = None) -> UUID:
    s = _resolve(strategy)
    return s.parser("parse", data, s.rule if rule is None else rule, s.max_input_length)


# =============================================================================
# STRATEGY
# =============================================================================

IDFormatter = Callable[[Buffer, UUID, Format], bytearray]
IDParser = Callable[[str, TextInput, Rule, int], UUID]


@dataclass(frozen=True, slots=True)
class IDStrategy:
    formatter: IDFormatter = default_formatter
    parser: IDParser = default_parser
    max_input_length: int = 45
    rule: Rule = Rule(0)

    def with_changes(self, **changes) -> IDStrategy:
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: ValueSpineSettings | None = None) -> IDStrategy:
        settings = settings or get_settings()
        return cls(max_input_length=settings.uuid_max_input_length)


_slot: StrategySlot[IDStrategy] = StrategySlot("uuid", IDStrategy.from_settings)


def _resolve(strategy: IDStrategy | None) -> IDStrategy:
    return strategy if strategy is not None else _slot.get()


def get_strategy() -> IDStrategy:
    return _slot.get()


def set_strategy(strategy: IDStrategy) -> IDStrategy:
    return _slot.set(strategy)


def reset_strategy() -> None:
    _slot.reset()


def override_strategy(strategy: IDStrategy) -> AbstractContextManager[IDStrategy]:
    return _slot.override(strategy)


__all__ = [
    "UUID",
    "Format",
    "Rule",
    "ZERO",
    "URN_PREFIX",
    "from_uuid",
    "random_id",
    "default_formatter",
    "default_parser",
    "parse",
    "IDStrategy",
    "get_strategy",
    "set_strategy",
    "reset_strategy",
    "override_strategy",
]
