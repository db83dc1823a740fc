"""
Test support utilities for value-spine tests.

Table helpers shared by the per-type test modules.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from valuespine.core.errors import ParseError, has_cause


def assert_text_round_trip(value: Any, parse: Callable[[Any], Any]) -> bytes:
    """
    Marshal ``value`` to text and read it back both ways.

    Returns:
        The marshaled text, for further assertions
    """
    text = value.marshal_text()
    assert parse(text) == value, f"parse({text!r}) != {value!r}"
    assert type(value).unmarshal_text(text) == value
    return text


def assert_parse_fails(
    parse: Callable[[Any], Any],
    data: Any,
    message: str | None = None,
    cause: type[BaseException] | None = None,
) -> ParseError:
    """
    Assert that ``parse(data)`` raises :class:`ParseError`.

    Args:
        parse: Parse entry point under test
        data: Input to reject
        message: Exact rendered message, when given
        cause: Error type expected somewhere in the cause chain, when given
    """
    with pytest.raises(ParseError) as exc_info:
        parse(data)
    if message is not None:
        assert str(exc_info.value) == message
    if cause is not None:
        assert has_cause(exc_info.value, cause), f"{cause.__name__} not in cause chain of {exc_info.value!r}"
    return exc_info.value
