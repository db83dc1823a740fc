"""
Parsing of version text.

Pipeline:
    1. coerce input (``str`` or bytes-like) and check the length ceiling
    2. reject empty input
    3. gate the surface form: ``v1.2.3`` is the tag form, ``1.2.3`` the plain one
    4. match the grammar (one generic error for any mismatch)
    5. convert major, minor and patch to unsigned 64-bit integers

Every failure is a :class:`~valuespine.core.errors.ParseError` naming the
entry point, for example ``sem.parse_tag: "1.2.3": expected tag form``.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import IntFlag

from valuespine.core.errors import (
    ExpectedTagFormError,
    InvalidMajorError,
    InvalidMinorError,
    InvalidPatchError,
    TagFormNotAllowedError,
)
from valuespine.core.text import TextInput, as_text, check_length, reject
from valuespine.semver import grammar
from valuespine.semver.version import MAX_UINT64, NAMESPACE, Ver, _resolve


class Form(IntFlag):
    """Surface forms a parser entry point accepts."""

    VERSION = 1
    TAG = 2
    ANY = VERSION | TAG


class Rule(IntFlag):
    """Leniency rules for the rule-driven entry point."""

    DISABLE_TAG = 1
    """Reject the ``v``-prefixed tag form."""


Parser = Callable[[str, TextInput, Form, int], Ver]

_field_errors = (InvalidMajorError, InvalidMinorError, InvalidPatchError)

# The grammar forbids leading zeros, so a longer field cannot fit in 64 bits.
_MAX_FIELD_DIGITS = len(str(MAX_UINT64))


def default_parser(func: str, data: TextInput, forms: Form, max_input_length: int = 0) -> Ver:
    """Parse ``data`` accepting only ``forms``; errors are attributed to ``func``."""
    text, length = as_text(data)
    check_length(NAMESPACE, func, length, max_input_length)
    if not text:
        raise reject(NAMESPACE, func)

    if text.startswith(grammar.TAG_PREFIX):
        if not forms & Form.TAG:
            raise reject(NAMESPACE, func, text, TagFormNotAllowedError())
        body = text[len(grammar.TAG_PREFIX):]
    else:
        if not forms & Form.VERSION:
            raise reject(NAMESPACE, func, text, ExpectedTagFormError())
        body = text

    match = grammar.match_version(body)
    if match is None:
        raise reject(NAMESPACE, func, text)

    fields = []
    for group, error in zip(match.groups()[:3], _field_errors):
        if len(group) > _MAX_FIELD_DIGITS:
            raise reject(NAMESPACE, func, text, error())
        value = int(group)
        if value > MAX_UINT64:
            raise reject(NAMESPACE, func, text, error())
        fields.append(value)

    return Ver(*fields, match.group(4) or "", match.group(5) or "")


def _forms(rule: Rule) -> Form:
    return Form.VERSION if rule & Rule.DISABLE_TAG else Form.ANY


def parse_version(data: TextInput, *, strategy=None) -> Ver:
    """Parse the plain form only (``1.2.3``)."""
    s = _resolve(strategy)
    return s.parser("parse_version", data, Form.VERSION, s.max_input_length)


def parse_tag(data: TextInput, *, strategy=None) -> Ver:
    """Parse the tag form only (``v1.2.3``)."""
    s = _resolve(strategy)
    return s.parser("parse_tag", data, Form.TAG, s.max_input_length)


def parse(data: TextInput, *, strategy=None) -> Ver:
    """Parse either form."""
    s = _resolve(strategy)
    return s.parser("parse", data, Form.ANY, s.max_input_length)


def parse_text(data: TextInput, rule: Rule | None = None, *, strategy=None) -> Ver:
    """Parse either form unless ``rule`` (default: the strategy's rule) disables tags."""
    s = _resolve(strategy)
    if rule is None:
        rule = s.rule
    return s.parser("parse_text", data, _forms(rule), s.max_input_length)


__all__ = [
    "Form",
    "Rule",
    "Parser",
    "default_parser",
    "parse_version",
    "parse_tag",
    "parse",
    "parse_text",
]
