"""
Roman numerals.

:class:`Number` is an ``int`` in 0..2**64-1 that reads and writes roman
numerals. Parsing is case-insensitive and accepts both the subtractive
(``IV``, ``XC``) and the additive (``IIII``, ``LXXXX``) spellings; output is
subtractive unless one of the ``Format.LONG*`` flags asks otherwise.
Thousands are written as repeated ``M``; zero is the empty string.

Examples:
    >>> parse("mcmxcix")
    Number(1999)
    >>> Number(1999).to_string(Format.LONG)
    'MDCCCCLXXXXVIIII'
    >>> f"{Number(14):r}"
    'xiv'
"""

from __future__ import annotations

import re
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from enum import IntFlag
from typing import Union

from valuespine.core.errors import FieldRangeError, MarshalError, ParseError
from valuespine.core.logging import get_logger
from valuespine.core.settings import ValueSpineSettings, get_settings
from valuespine.core.strategy import StrategySlot
from valuespine.core.text import TextInput, as_text, check_length, reject

logger = get_logger(__name__)

NAMESPACE = "roman"
MAX_UINT64 = 2**64 - 1
THOUSAND = "M"

_pattern = re.compile(r"\A(M*)(D?C{0,4}|CD|CM)(L?X{0,4}|XL|XC)(V?I{0,4}|IV|IX)\Z", re.IGNORECASE | re.ASCII)

HUNDREDS = ("", "C", "CC", "CCC", "CD", "D", "DC", "DCC", "DCCC", "CM")
TENS = ("", "X", "XX", "XXX", "XL", "L", "LX", "LXX", "LXXX", "XC")
UNITS = ("", "I", "II", "III", "IV", "V", "VI", "VII", "VIII", "IX")

# (unit, five, ten) per group after the thousands
_GROUPS = ((100, "D", "M"), (10, "L", "C"), (1, "V", "X"))


class Format(IntFlag):
    """Formatter flags; each ``LONG*`` flag spells one digit additively."""

    LONG4 = 1  # IIII
    LONG40 = 2  # XXXX
    LONG400 = 4  # CCCC
    LONG9 = 8  # VIIII
    LONG90 = 16  # LXXXX
    LONG900 = 32  # DCCCC
    LOWER_CASE = 64

    LONG4X = LONG4 | LONG40 | LONG400
    LONG9X = LONG9 | LONG90 | LONG900
    LONG = LONG4X | LONG9X


class Rule(IntFlag):
    DISABLE_EMPTY_AS_ZERO = 1
    """Reject empty input instead of reading it as zero."""


class Number(int):
    """Unsigned 64-bit integer with a roman numeral text form."""

    def __new__(cls, value: int = 0):
        n = super().__new__(cls, value)
        if not 0 <= n <= MAX_UINT64:
            raise FieldRangeError(f"roman number out of range: {int(n)}").with_context(namespace=NAMESPACE, func="Number")
        return n

    def marshal_text(self, *, strategy: NumberStrategy | None = None) -> bytes:
        s = _resolve(strategy)
        try:
            return bytes(s.formatter(None, self, s.default_format))
        except Exception as e:
            raise MarshalError("roman.Number.marshal_text", e) from e

    @classmethod
    def unmarshal_text(cls, data: TextInput, *, strategy: NumberStrategy | None = None) -> Number:
        s = _resolve(strategy)
        try:
            return s.parser("Number.unmarshal_text", data, s.rule, s.max_input_length)
        except ParseError:
            raise
        except Exception as e:
            raise MarshalError("roman.Number.unmarshal_text", e) from e

    def to_string(self, f: Format | None = None, *, strategy: NumberStrategy | None = None) -> str:
        s = _resolve(strategy)
        if f is None:
            f = s.default_format
        try:
            out = s.formatter(None, self, f)
        except Exception as e:
            logger.debug("formatter_failed", namespace=NAMESPACE, error=str(e))
            out = default_formatter(None, self, f)
        return bytes(out).decode()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Number({int(self)})"

    def __format__(self, spec: str) -> str:
        """``L`` long, ``l`` long lower case, ``R`` short, ``r`` short lower case, ``s`` default."""
        if spec in ("", "s"):
            return self.to_string()
        try:
            f = _verbs[spec]
        except KeyError:
            raise ValueError(f"unsupported format spec {spec!r} for Number") from None
        return self.to_string(f)


_verbs = {
    "L": Format.LONG,
    "l": Format.LONG | Format.LOWER_CASE,
    "R": Format(0),
    "r": Format.LOWER_CASE,
}


# =============================================================================
# FORMAT
# =============================================================================

Buffer = Union[bytes, bytearray, None]


def default_formatter(buf: Buffer, n: int, f: Format = Format(0)) -> bytearray:
    """Append ``n`` in roman numerals to ``buf``; zero appends nothing."""
    out = buf if isinstance(buf, bytearray) else bytearray(buf or b"")
    if n == 0:
        return out
    thousands, rest = divmod(int(n), 1000)
    hundreds, rest = divmod(rest, 100)
    tens, units = divmod(rest, 10)
    text = (
        THOUSAND * thousands
        + _digit(hundreds, HUNDREDS, f & Format.LONG400, "CCCC", f & Format.LONG900, "DCCCC")
        + _digit(tens, TENS, f & Format.LONG40, "XXXX", f & Format.LONG90, "LXXXX")
        + _digit(units, UNITS, f & Format.LONG4, "IIII", f & Format.LONG9, "VIIII")
    )
    if f & Format.LOWER_CASE:
        text = text.lower()
    out += text.encode()
    return out


def _digit(value: int, table: tuple[str, ...], long4: int, four: str, long9: int, nine: str) -> str:
    if value == 4 and long4:
        return four
    if value == 9 and long9:
        return nine
    return table[value]


# =============================================================================
# PARSE
# =============================================================================


def _check_input(func: str, data: TextInput, rule: Rule, max_input_length: int) -> str | None:
    """Return the input text, or None for empty input that reads as zero."""
    text, length = as_text(data)
    if not text:
        if rule & Rule.DISABLE_EMPTY_AS_ZERO:
            raise reject(NAMESPACE, func)
        return None
    check_length(NAMESPACE, func, length, max_input_length)
    return text


def _parse_group(group: str, unit: int, five: str, ten: str) -> int:
    n = len(group)
    if n == 0:
        return 0
    if group[0] == five:
        return (4 + n) * unit
    if n == 1:
        return unit
    if group[1] == five:
        return 4 * unit
    if group[1] == ten:
        return 9 * unit
    return n * unit


def default_parser(func: str, data: TextInput, rule: Rule = Rule(0), max_input_length: int = 0) -> Number:
    text = _check_input(func, data, rule, max_input_length)
    if text is None:
        return Number(0)
    match = _pattern.match(text)
    if match is None:
        raise reject(NAMESPACE, func, text)

    thousands, *groups = match.groups()
    value = len(thousands) * 1000
    for group, (unit, five, ten) in zip(groups, _GROUPS):
        value += _parse_group(group.upper(), unit, five, ten)
    if value > MAX_UINT64:
        raise reject(NAMESPACE, func, text, FieldRangeError("number overflows uint64"))
    return Number(value)


def parse(data: TextInput, rule: Rule | None = None, *, strategy: NumberStrategy | None = None) -> Number:
    s = _resolve(strategy)
    return s.parser("parse", data, s.rule if rule is None else rule, s.max_input_length)


def valid(data: TextInput, rule: Rule | None = None, *, strategy: NumberStrategy | None = None) -> None:
    """Check that ``data`` is a roman numeral without converting it.

    Raises:
        ParseError: The input is too long, empty under
            ``Rule.DISABLE_EMPTY_AS_ZERO``, or not a roman numeral
    """
    s = _resolve(strategy)
    text = _check_input("valid", data, s.rule if rule is None else rule, s.max_input_length)
    if text is not None and _pattern.match(text) is None:
        raise reject(NAMESPACE, "valid", text)


# =============================================================================
# STRATEGY
# =============================================================================

NumberFormatter = Callable[[Buffer, int, Format], bytearray]
NumberParser = Callable[[str, TextInput, Rule, int], Number]


@dataclass(frozen=True, slots=True)
class NumberStrategy:
    formatter: NumberFormatter = default_formatter
    parser: NumberParser = default_parser
    max_input_length: int = 128
    rule: Rule = Rule(0)
    default_format: Format = Format(0)

    def with_changes(self, **changes) -> NumberStrategy:
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: ValueSpineSettings | None = None) -> NumberStrategy:
        settings = settings or get_settings()
        return cls(max_input_length=settings.roman_max_input_length)


_slot: StrategySlot[NumberStrategy] = StrategySlot("roman", NumberStrategy.from_settings)


def _resolve(strategy: NumberStrategy | None) -> NumberStrategy:
    return strategy if strategy is not None else _slot.get()


def get_strategy() -> NumberStrategy:
    return _slot.get()


def set_strategy(strategy: NumberStrategy) -> NumberStrategy:
    return _slot.set(strategy)


def reset_strategy() -> None:
    _slot.reset()


def override_strategy(strategy: NumberStrategy) -> AbstractContextManager[NumberStrategy]:
    return _slot.override(strategy)


__all__ = [
    "Number",
    "Format",
    "Rule",
    "default_formatter",
    "default_parser",
    "parse",
    "valid",
    "NumberStrategy",
    "get_strategy",
    "set_strategy",
    "reset_strategy",
    "override_strategy",
]
