"""
Byte sizes.

:class:`Size` is an ``int`` byte count in 0..2**64-1 with a human text form
(``1 KiB``, ``1 000 kB``), a JSON number form, a JSON string form and a JSON
object form (``{"value": 1, "unit": "KiB"}``).

Manifesto:
    - **Lossless text:** Output uses the largest binary unit that divides
      the size exactly, so ``1025`` stays ``1025B``
    - **Forgiving input:** Spaces, underscores and non-breaking spaces
      between digits are ignored (``"1 048_576 B"``)
    - **Bounded JSON:** Objects with more than ``max_object_keys`` keys are
      rejected before any value is converted

Units:
    ::

        B
        kB  MB  GB  TB  PB  EB  (ZB YB zero only)      powers of 1000
        KiB MiB GiB TiB PiB EiB (ZiB YiB zero only)    powers of 1024

Examples:
    >>> parse("1 KiB")
    Size(1024)
    >>> Size(11_111_111).pretty_string()
    '11 111 111 B'
    >>> Size(3 * 1024**2).marshal_json()
    b'{"value":3,"unit":"MiB"}'
    >>> unmarshal_json('{"Value": 2, "unit": "kB"}')
    Size(2000)

Tags:
    size, bytes, units, json, value-object, value-spine
"""

from __future__ import annotations

import json
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import dataclass, replace
from enum import IntFlag
from typing import Union

from valuespine.core.errors import (
    DuplicatedKeyError,
    ExpectedObjectError,
    FieldRangeError,
    InvalidTypeError,
    InvalidUnitError,
    InvalidValueError,
    MarshalError,
    MissingKeyError,
    ObjectFormDisabledError,
    ObjectTooBigError,
    ParseError,
    StringFormDisabledError,
    UnitDisabledError,
)
from valuespine.core.logging import get_logger
from valuespine.core.settings import ValueSpineSettings, get_settings
from valuespine.core.strategy import StrategySlot
from valuespine.core.text import TextInput, as_text, check_length, reject

logger = get_logger(__name__)

NAMESPACE = "size"
MAX_UINT64 = 2**64 - 1

BYTE = "B"
KILOBYTE, MEGABYTE, GIGABYTE, TERABYTE, PETABYTE, EXABYTE, ZETTABYTE, YOTTABYTE = (
    "kB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB",
)
KIBIBYTE, MEBIBYTE, GIBIBYTE, TEBIBYTE, PEBIBYTE, EXBIBYTE, ZEBIBYTE, YOBIBYTE = (
    "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB", "YiB",
)

OBJECT_KEY_VALUE = "value"
OBJECT_KEY_UNIT = "unit"

SHORTEN_UNITS = (BYTE, KIBIBYTE, MEBIBYTE, GIBIBYTE, TEBIBYTE, PEBIBYTE)

UNIT_VALUES = {
    BYTE: 1,
    KILOBYTE: 1000,
    MEGABYTE: 1000**2,
    GIGABYTE: 1000**3,
    TERABYTE: 1000**4,
    PETABYTE: 1000**5,
    EXABYTE: 1000**6,
    KIBIBYTE: 1024,
    MEBIBYTE: 1024**2,
    GIBIBYTE: 1024**3,
    TEBIBYTE: 1024**4,
    PEBIBYTE: 1024**5,
    EXBIBYTE: 1024**6,
}

# zetta and yotta units only fit zero
ZERO_UNITS = frozenset(UNIT_VALUES) | {"", ZETTABYTE, YOTTABYTE, ZEBIBYTE, YOBIBYTE}


class Format(IntFlag):
    PRETTY = 1
    """Separate groups of three digits and the unit with a space."""
    HTML = 2
    """With ``PRETTY``, separate with ``&nbsp;`` instead."""


class Rule(IntFlag):
    DISABLE_UNIT = 1
    ENABLE_JSON_STRING_FORM = 2
    ENABLE_JSON_OBJECT_FORM = 4

    JSON = ENABLE_JSON_STRING_FORM | ENABLE_JSON_OBJECT_FORM


DEFAULT_RULE = Rule.JSON


class Size(int):
    """Unsigned 64-bit byte count."""

    def __new__(cls, value: int = 0):
        n = super().__new__(cls, value)
        if not 0 <= n <= MAX_UINT64:
            raise FieldRangeError(f"size out of range: {int(n)}").with_context(namespace=NAMESPACE, func="Size")
        return n

    def shorten(self) -> tuple[int, str]:
        """Return the value in the largest binary unit that divides it exactly."""
        v = int(self)
        if v == 0:
            return 0, BYTE
        for unit in SHORTEN_UNITS:
            if v & 0x3FF:
                return v, unit
            v >>= 10
        return v, EXBIBYTE

    def bytes_string(self) -> str:
        return str(int(self))

    def pretty_string(self, *, strategy: SizeStrategy | None = None) -> str:
        return bytes(_resolve(strategy).formatter(None, self, Format.PRETTY)).decode()

    def pretty_html(self, *, strategy: SizeStrategy | None = None) -> str:
        return bytes(_resolve(strategy).formatter(None, self, Format.PRETTY | Format.HTML)).decode()

    def to_string(self, f: Format = Format(0), *, strategy: SizeStrategy | None = None) -> str:
        try:
            return bytes(_resolve(strategy).formatter(None, self, f)).decode()
        except Exception as e:
            logger.debug("formatter_failed", namespace=NAMESPACE, error=str(e))
            return self.bytes_string()

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Size({int(self)})"

    def __format__(self, spec: str) -> str:
        """``s`` plain, ``p`` pretty, ``h`` pretty HTML, ``d`` bytes; other specs format the integer."""
        if spec in ("", "s"):
            return self.to_string()
        if spec == "p":
            return self.to_string(Format.PRETTY)
        if spec == "h":
            return self.to_string(Format.PRETTY | Format.HTML)
        return format(int(self), spec)

    # -------------------------------------------------------------------------
    # Marshaling
    # -------------------------------------------------------------------------

    def _marshal_text(self, s: SizeStrategy) -> bytes:
        if s.disable_text_unit:
            return self.bytes_string().encode()
        return bytes(s.formatter(None, self, Format(0)))

    def marshal_text(self, *, strategy: SizeStrategy | None = None) -> bytes:
        try:
            return self._marshal_text(_resolve(strategy))
        except Exception as e:
            raise MarshalError("size.Size.marshal_text", e) from e

    @classmethod
    def unmarshal_text(cls, data: TextInput, *, strategy: SizeStrategy | None = None) -> Size:
        s = _resolve(strategy)
        try:
            return s.parser(
                "Size.unmarshal_text", data, s.rule & Rule.DISABLE_UNIT, s.max_input_length, s.max_object_keys
            )
        except ParseError:
            raise
        except Exception as e:
            raise MarshalError("size.Size.unmarshal_text", e) from e

    def marshal_json(self, *, strategy: SizeStrategy | None = None) -> bytes:
        """Object form unless disabled, then string form unless disabled, then a number."""
        s = _resolve(strategy)
        if not s.disable_json_object_form:
            value, unit = self.shorten()
            return b'{"%s":%d,"%s":"%s"}' % (
                OBJECT_KEY_VALUE.encode(),
                value,
                OBJECT_KEY_UNIT.encode(),
                unit.encode(),
            )
        if not s.disable_json_string_form:
            try:
                return b'"' + self._marshal_text(s) + b'"'
            except Exception as e:
                raise MarshalError("size.Size.marshal_json", e) from e
        return self.bytes_string().encode()

    @classmethod
    def unmarshal_json(cls, data: TextInput, *, strategy: SizeStrategy | None = None) -> Size:
        s = _resolve(strategy)
        try:
            return s.parser("Size.unmarshal_json", data, s.rule, s.max_input_length, s.max_object_keys)
        except ParseError:
            raise
        except Exception as e:
            raise MarshalError("size.Size.unmarshal_json", e) from e


def new(value: int | float, unit: str = "") -> Size:
    """Build a size from ``value`` in ``unit`` (bytes when ``unit`` is empty).

    Raises:
        InvalidUnitError: Unknown unit, or a zetta/yotta unit with a non-zero value
        InvalidValueError: Negative, fractional or too large for 64 bits
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"size.new: expected int or float, got {type(value).__name__}")
    if value == 0:
        if unit not in ZERO_UNITS:
            raise InvalidUnitError(unit)
        return Size(0)
    if isinstance(value, float) and not value.is_integer() or value < 0:
        raise InvalidValueError(value, unit)
    if unit == "":
        multiplier = 1
    else:
        try:
            multiplier = UNIT_VALUES[unit]
        except KeyError:
            raise InvalidUnitError(unit) from None
    n = int(value) * multiplier
    if n > MAX_UINT64:
        raise InvalidValueError(value, unit)
    return Size(n)


# =============================================================================
# FORMAT
# =============================================================================

Buffer = Union[bytes, bytearray, None]


def default_formatter(buf: Buffer, s: Size, f: Format = Format(0)) -> bytearray:
    out = buf if isinstance(buf, bytearray) else bytearray(buf or b"")
    value, unit = Size(s).shorten()
    digits = str(value)
    offset = 3 - len(digits) % 3
    separator = b""
    if f & Format.PRETTY:
        separator = b"&nbsp;" if f & Format.HTML else b" "
    for i, digit in enumerate(digits):
        out += digit.encode()
        if (i + offset) % 3 == 2:
            out += separator
    out += unit.encode()
    return out


# =============================================================================
# PARSE
# =============================================================================

_SPACE = " "
_NBSP = "\u00a0"


def prepare_number(text: str) -> tuple[str, str]:
    """Split ``text`` into its digits and the unit that follows them.

    Spaces are dropped anywhere; underscores and non-breaking spaces only
    after the first digit. A single trailing space is trimmed from the unit.
    """
    number = []
    for i, ch in enumerate(text):
        if ch == _SPACE:
            continue
        if number and ch in ("_", _NBSP):
            continue
        if "0" <= ch <= "9":
            number.append(ch)
            continue
        return "".join(number), text[i:].removesuffix(_SPACE)
    return "".join(number), ""


_MAX_DIGITS = len(str(MAX_UINT64))


def _to_uint64(digits: str) -> int | None:
    """Convert an ASCII digit run, or return None when it overflows 64 bits."""
    significant = digits.lstrip("0")
    if len(significant) > _MAX_DIGITS:
        return None
    value = int(significant or "0")
    return value if value <= MAX_UINT64 else None


def _parse_plain(func: str, text: str, rule: Rule) -> Size:
    number, unit = prepare_number(text)
    if not number:
        raise reject(NAMESPACE, func, text)
    value = _to_uint64(number)
    if value is None:
        raise reject(NAMESPACE, func, text, InvalidValueError(number, ""))
    if unit == "":
        return Size(value)
    if rule & Rule.DISABLE_UNIT:
        raise reject(NAMESPACE, func, text, UnitDisabledError())
    try:
        return new(value, unit)
    except (InvalidUnitError, InvalidValueError) as e:
        raise reject(NAMESPACE, func, text, e) from e


class _JSONNumber(str):
    """JSON number kept as its source text."""


class _JSONObject(list):
    """Key-value pairs of a JSON object, in document order."""


def _decode_object(pairs: list[tuple[str, object]]) -> _JSONObject:
    return _JSONObject(pairs)


def _object_size(pairs: _JSONObject, max_object_keys: int) -> Size:
    if max_object_keys and len(pairs) > max_object_keys:
        raise ObjectTooBigError(len(pairs), max_object_keys)
    value = unit = None
    for key, item in pairs:
        match key.lower():
            case "value":
                if value is not None:
                    raise DuplicatedKeyError(OBJECT_KEY_VALUE)
                if not isinstance(item, _JSONNumber):
                    raise InvalidTypeError(f"expected number instead of {_json_type(item)} for value")
                if not item.isdigit() or not item.isascii():
                    raise InvalidValueError(item, "")
                value = item
            case "unit":
                if unit is not None:
                    raise DuplicatedKeyError(OBJECT_KEY_UNIT)
                if type(item) is not str:
                    raise InvalidTypeError(f"expected string instead of {_json_type(item)} for unit")
                unit = item
    if value is None:
        raise MissingKeyError(OBJECT_KEY_VALUE)
    if unit is None:
        raise MissingKeyError(OBJECT_KEY_UNIT)
    n = _to_uint64(value)
    if n is None:
        raise InvalidValueError(value, unit)
    return new(n, unit)


def _json_type(item: object) -> str:
    if isinstance(item, _JSONNumber):
        return "number"
    if isinstance(item, _JSONObject):
        return "object"
    if isinstance(item, str):
        return "string"
    if isinstance(item, bool):
        return "bool"
    if item is None:
        return "null"
    return "array"


def _parse_json(func: str, text: str, rule: Rule, max_object_keys: int) -> Size:
    try:
        doc = json.loads(
            text,
            object_pairs_hook=_decode_object,
            parse_int=_JSONNumber,
            parse_float=_JSONNumber,
            parse_constant=_JSONNumber,
        )
    except json.JSONDecodeError as e:
        raise reject(NAMESPACE, func, text, e) from e

    if isinstance(doc, _JSONObject):
        if not rule & Rule.ENABLE_JSON_OBJECT_FORM:
            raise reject(NAMESPACE, func, text, ObjectFormDisabledError())
        try:
            return _object_size(doc, max_object_keys)
        except (ObjectTooBigError, DuplicatedKeyError, MissingKeyError, InvalidTypeError,
                InvalidUnitError, InvalidValueError) as e:
            raise reject(NAMESPACE, func, text, e) from e
    if isinstance(doc, _JSONNumber):
        return _parse_plain(func, doc, Rule(0))
    if isinstance(doc, str):
        if not rule & Rule.ENABLE_JSON_STRING_FORM:
            raise reject(NAMESPACE, func, text, StringFormDisabledError())
        return _parse_plain(func, doc, Rule(0))
    if isinstance(doc, list):
        raise reject(NAMESPACE, func, text, ExpectedObjectError())
    raise reject(NAMESPACE, func, text, InvalidTypeError(f"unexpected type {_json_type(doc)}"))


def default_parser(
    func: str,
    data: TextInput,
    rule: Rule = Rule(0),
    max_input_length: int = 0,
    max_object_keys: int = 16,
) -> Size:
    """Parse plain text, or JSON when ``rule`` enables a JSON form."""
    text, length = as_text(data)
    check_length(NAMESPACE, func, length, max_input_length)
    if rule & Rule.JSON:
        return _parse_json(func, text, rule, max_object_keys)
    return _parse_plain(func, text, rule)


def parse(data: TextInput, rule: Rule | None = None, *, strategy: SizeStrategy | None = None) -> Size:
    """Parse text such as ``"1 KiB"``; ``rule`` defaults to the strategy's unit rule."""
    s = _resolve(strategy)
    if rule is None:
        rule = s.rule & Rule.DISABLE_UNIT
    return s.parser("parse", data, rule, s.max_input_length, s.max_object_keys)


def parse_json(data: TextInput, rule: Rule | None = None, *, strategy: SizeStrategy | None = None) -> Size:
    """Parse a JSON number, string or object; ``rule`` defaults to the strategy's rule."""
    s = _resolve(strategy)
    return s.parser("parse_json", data, s.rule if rule is None else rule, s.max_input_length, s.max_object_keys)


def unmarshal_json(data: TextInput, *, strategy: SizeStrategy | None = None) -> Size:
    return Size.unmarshal_json(data, strategy=strategy)


# =============================================================================
# STRATEGY
# =============================================================================

SizeFormatter = Callable[[Buffer, Size, Format], bytearray]
SizeParser = Callable[[str, TextInput, Rule, int, int], Size]


@dataclass(frozen=True, slots=True)
class SizeStrategy:
    """Formatter, parser, limits and marshal switches for :class:`Size`.

    The parser is called as
    ``parser(func, data, rule, max_input_length, max_object_keys)``.
    """

    formatter: SizeFormatter = default_formatter
    parser: SizeParser = default_parser
    max_input_length: int = 128
    max_object_keys: int = 16
    rule: Rule = DEFAULT_RULE
    disable_text_unit: bool = False
    disable_json_string_form: bool = False
    disable_json_object_form: bool = False

    def with_changes(self, **changes) -> SizeStrategy:
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: ValueSpineSettings | None = None) -> SizeStrategy:
        settings = settings or get_settings()
        return cls(
            max_input_length=settings.size_max_input_length,
            max_object_keys=settings.size_max_object_keys,
        )


_slot: StrategySlot[SizeStrategy] = StrategySlot("size", SizeStrategy.from_settings)


def _resolve(strategy: SizeStrategy | None) -> SizeStrategy:
    return strategy if strategy is not None else _slot.get()


def get_strategy() -> SizeStrategy:
    return _slot.get()


def set_strategy(strategy: SizeStrategy) -> SizeStrategy:
    return _slot.set(strategy)


def reset_strategy() -> None:
    _slot.reset()


def override_strategy(strategy: SizeStrategy) -> AbstractContextManager[SizeStrategy]:
    return _slot.override(strategy)


__all__ = [
    "Size",
    "Format",
    "Rule",
    "DEFAULT_RULE",
    "new",
    "default_formatter",
    "default_parser",
    "prepare_number",
    "parse",
    "parse_json",
    "unmarshal_json",
    "SizeStrategy",
    "get_strategy",
    "set_strategy",
    "reset_strategy",
    "override_strategy",
]
