"""
Calendar date value type.

A :class:`Date` is a year, month and day without time or zone, rendered in
ISO 8601 extended (``2002-08-07``) or basic (``20020807``) form. It is
backed by :class:`datetime.date`, so years are limited to 1..9999; the zero
date is 0001-01-01.

Manifesto:
    - **Immutable and ordered:** Frozen dataclass, field order is date order
    - **Normalizing constructor:** :func:`new` rolls over out-of-range months
      and days the way calendar arithmetic does (2020-02-30 is 2020-03-01)
    - **Strict text:** Mixed separators (``2020-0807``) are rejected
    - **Versioned binary form:** ``[1][year int32 BE][month][day]``

Examples:
    >>> d = new(2002, Month.AUGUST, 7)
    >>> str(d.add(2, 2, 1))
    '2004-10-08'
    >>> parse("20020807") == d
    True
    >>> f"{d:b}"
    '20020807'
    >>> filter_from_to(d, None).contains(today())
    True

Tags:
    date, iso-8601, calendar, value-object, binary-encoding, value-spine
"""

from __future__ import annotations

import re
import struct
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from datetime import date as _date
from enum import IntEnum, IntFlag
from typing import Protocol, Union

from valuespine.core.errors import (
    BasicFormatDisabledError,
    DateRangeError,
    InvalidLengthError,
    InvalidRangeError,
    MarshalError,
    ParseError,
    UnsupportedVersionError,
)
from valuespine.core.logging import get_logger
from valuespine.core.settings import ValueSpineSettings, get_settings
from valuespine.core.strategy import StrategySlot
from valuespine.core.text import TextInput, as_text, check_length, reject

logger = get_logger(__name__)

NAMESPACE = "date"
BINARY_VERSION = 1
BINARY_LENGTH = 7  # version(1) + year(4) + month(1) + day(1)

_pattern = re.compile(r"\A([0-9]{4,9})-?(1[0-2]|0[0-9])-?(3[01]|[0-2][0-9])\Z")


class Month(IntEnum):
    JANUARY = 1
    FEBRUARY = 2
    MARCH = 3
    APRIL = 4
    MAY = 5
    JUNE = 6
    JULY = 7
    AUGUST = 8
    SEPTEMBER = 9
    OCTOBER = 10
    NOVEMBER = 11
    DECEMBER = 12


class Format(IntFlag):
    BASIC = 1
    """``YYYYMMDD`` instead of ``YYYY-MM-DD``."""


class Rule(IntFlag):
    DISABLE_BASIC = 1
    """Reject the ``YYYYMMDD`` form."""


@dataclass(frozen=True, slots=True, order=True)
class Date:
    """Calendar date (year 1..9999)."""

    year: int = 1
    month: int = 1
    day: int = 1

    def __post_init__(self) -> None:
        try:
            _date(self.year, self.month, self.day)
        except (TypeError, ValueError) as e:
            raise DateRangeError(f"date out of range ({e})").with_context(namespace=NAMESPACE, func="Date") from e

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def ymd(self) -> tuple[int, Month, int]:
        return self.year, Month(self.month), self.day

    def is_zero(self) -> bool:
        return self == ZERO

    def to_date(self) -> _date:
        return _date(self.year, self.month, self.day)

    def to_datetime(self) -> datetime:
        """Midnight UTC of this date."""
        return datetime(self.year, self.month, self.day, tzinfo=UTC)

    # -------------------------------------------------------------------------
    # Arithmetic
    # -------------------------------------------------------------------------

    def add(self, years: int = 0, months: int = 0, days: int = 0) -> Date:
        """Add years, months and days, normalizing like :func:`new`."""
        return new(self.year + years, self.month + months, self.day + days)

    def add_duration(self, duration: timedelta) -> Date:
        """Add ``duration`` to midnight of this date and keep the date part."""
        try:
            return from_datetime(self.to_datetime() + duration)
        except OverflowError as e:
            raise DateRangeError().with_context(namespace=NAMESPACE, func="Date.add_duration") from e

    def sub(self, other: Date) -> timedelta:
        return self.to_date() - other.to_date()

    def days_between(self, other: Date) -> int:
        """Whole days from ``other`` to ``self`` (negative when ``self`` is earlier)."""
        return self.sub(other).days

    # -------------------------------------------------------------------------
    # Binary
    # -------------------------------------------------------------------------

    def marshal_binary(self) -> bytes:
        return struct.pack(">Bi2B", BINARY_VERSION, self.year, self.month, self.day)

    @classmethod
    def unmarshal_binary(cls, data: bytes) -> Date:
        subject = "date.Date.unmarshal_binary"
        if not data:
            raise MarshalError(subject, InvalidLengthError("invalid length: empty data"))
        if data[0] != BINARY_VERSION:
            raise MarshalError(
                subject,
                UnsupportedVersionError(f"unsupported version: expected {BINARY_VERSION} instead of {data[0]}"),
            )
        if len(data) != BINARY_LENGTH:
            raise MarshalError(
                subject,
                InvalidLengthError(f"invalid length: expected {BINARY_LENGTH} instead of {len(data)}"),
            )
        _, year, month, day = struct.unpack(">Bi2B", bytes(data))
        try:
            return cls(year, month, day)
        except DateRangeError as e:
            raise MarshalError(subject, e) from e

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def marshal_text(self, *, strategy: DateStrategy | None = None) -> bytes:
        try:
            return bytes(_resolve(strategy).formatter(None, self, Format(0)))
        except Exception as e:
            raise MarshalError("date.Date.marshal_text", e) from e

    @classmethod
    def unmarshal_text(cls, data: TextInput, *, strategy: DateStrategy | None = None) -> Date:
        s = _resolve(strategy)
        try:
            return s.parser("Date.unmarshal_text", data, s.rule, s.max_input_length)
        except ParseError:
            raise
        except Exception as e:
            raise MarshalError("date.Date.unmarshal_text", e) from e

    def to_string(self, f: Format = Format(0), *, strategy: DateStrategy | None = None) -> str:
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
        if spec == "b":
            return self.to_string(Format.BASIC)
        raise ValueError(f"unsupported format spec {spec!r} for Date")


ZERO = Date()


def new(year: int, month: int, day: int) -> Date:
    """Build a date, rolling over out-of-range months and days.

    Raises:
        DateRangeError: The normalized year is outside 1..9999
    """
    y, m = divmod(year * 12 + (month - 1), 12)
    try:
        d = _date(y, m + 1, 1) + timedelta(days=day - 1)
    except (ValueError, OverflowError) as e:
        raise DateRangeError().with_context(namespace=NAMESPACE, func="new") from e
    return Date(d.year, d.month, d.day)


def today() -> Date:
    return from_date(_date.today())


def from_date(d: _date) -> Date:
    return Date(d.year, d.month, d.day)


def from_datetime(dt: datetime) -> Date:
    """Date part of ``dt`` in its own zone."""
    return Date(dt.year, dt.month, dt.day)


# =============================================================================
# FORMAT / PARSE
# =============================================================================

Buffer = Union[bytes, bytearray, None]


def default_formatter(buf: Buffer, d: Date, f: Format = Format(0)) -> bytearray:
    out = buf if isinstance(buf, bytearray) else bytearray(buf or b"")
    if f & Format.BASIC:
        out += b"%04d%02d%02d" % (d.year, d.month, d.day)
    else:
        out += b"%04d-%02d-%02d" % (d.year, d.month, d.day)
    return out


def default_parser(func: str, data: TextInput, rule: Rule = Rule(0), max_input_length: int = 0) -> Date:
    text, length = as_text(data)
    if not text:
        raise reject(NAMESPACE, func)
    check_length(NAMESPACE, func, length, max_input_length)

    match = _pattern.match(text)
    if match is None:
        raise reject(NAMESPACE, func, text)

    n = len(text)
    if (sep2 := text[n - 3] == "-") or text[n - 5] == "-":
        # YYYY-MMDD and YYYYMM-DD
        if not sep2 or text[n - 6] != "-":
            raise reject(NAMESPACE, func, text)
    elif rule & Rule.DISABLE_BASIC:
        raise reject(NAMESPACE, func, text, BasicFormatDisabledError())

    year, month, day = (int(group) for group in match.groups())
    try:
        return new(year, month, day)
    except DateRangeError as e:
        raise reject(NAMESPACE, func, text, e) from e


def parse(data: TextInput, rule: Rule | None = None, *, strategy: DateStrategy | None = None) -> Date:
    """Parse ``YYYY-MM-DD`` or, unless disabled, ``YYYYMMDD``."""
    s = _resolve(strategy)
    return s.parser("parse", data, s.rule if rule is None else rule, s.max_input_length)


# =============================================================================
# FILTERS
# =============================================================================


class Filter(Protocol):
    def contains(self, d: Date) -> bool: ...


@dataclass(frozen=True, slots=True)
class NoFilter:
    def contains(self, d: Date) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class DateFilter:
    date: Date

    def contains(self, d: Date) -> bool:
        return d == self.date


@dataclass(frozen=True, slots=True)
class FromFilter:
    from_: Date

    def contains(self, d: Date) -> bool:
        return self.from_ <= d


@dataclass(frozen=True, slots=True)
class ToFilter:
    to: Date

    def contains(self, d: Date) -> bool:
        return d <= self.to


@dataclass(frozen=True, slots=True)
class FromToFilter:
    from_: Date
    to: Date

    def contains(self, d: Date) -> bool:
        return self.from_ <= d <= self.to


def filter_from_to(from_: Date | None = None, to: Date | None = None) -> Filter:
    """Inclusive date filter; either bound may be ``None`` for an open end.

    Raises:
        InvalidRangeError: ``from_`` is after ``to``
    """
    if from_ is None:
        return NoFilter() if to is None else ToFilter(to)
    if to is None:
        return FromFilter(from_)
    if from_ == to:
        return DateFilter(from_)
    if from_ > to:
        raise InvalidRangeError(f"date.filter_from_to: invalid from or to: {from_} > {to}")
    return FromToFilter(from_, to)


# =============================================================================
# STRATEGY
# =============================================================================

DateFormatter = Callable[[Buffer, Date, Format], bytearray]
DateParser = Callable[[str, TextInput, Rule, int], Date]


@dataclass(frozen=True, slots=True)
class DateStrategy:
    formatter: DateFormatter = default_formatter
    parser: DateParser = default_parser
    max_input_length: int = 10
    rule: Rule = Rule(0)

    def with_changes(self, **changes) -> DateStrategy:
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: ValueSpineSettings | None = None) -> DateStrategy:
        settings = settings or get_settings()
        return cls(max_input_length=settings.date_max_input_length)


_slot: StrategySlot[DateStrategy] = StrategySlot("date", DateStrategy.from_settings)


def _resolve(strategy: DateStrategy | None) -> DateStrategy:
    return strategy if strategy is not None else _slot.get()


def get_strategy() -> DateStrategy:
    return _slot.get()


def set_strategy(strategy: DateStrategy) -> DateStrategy:
    return _slot.set(strategy)


def reset_strategy() -> None:
    _slot.reset()


def override_strategy(strategy: DateStrategy) -> AbstractContextManager[DateStrategy]:
    return _slot.override(strategy)


__all__ = [
    "Date",
    "Month",
    "Format",
    "Rule",
    "ZERO",
    "new",
    "today",
    "from_date",
    "from_datetime",
    "default_formatter",
    "default_parser",
    "parse",
    "Filter",
    "NoFilter",
    "DateFilter",
    "FromFilter",
    "ToFilter",
    "FromToFilter",
    "filter_from_to",
    "DateStrategy",
    "get_strategy",
    "set_strategy",
    "reset_strategy",
    "override_strategy",
]
