"""Input coercion shared by every parser.

Parsers accept ``str`` as well as byte-like input. Rather than keeping one
copy of each parser per input type, input is coerced once with
:func:`as_text`, which also reports the length the input ceiling applies to.
"""

from __future__ import annotations

from typing import Union

from valuespine.core.errors import InputTooLongError, ParseError
from valuespine.core.logging import get_logger

logger = get_logger(__name__)

TextInput = Union[str, bytes, bytearray, memoryview]


def as_text(data: TextInput) -> tuple[str, int]:
    """Return ``(text, length)`` for ``data``.

    Byte input is decoded as UTF-8 with surrogate escapes, so invalid bytes
    survive as unmatched characters and fail the grammar instead of the
    decoder. Its length is the raw byte count.
    """
    if isinstance(data, str):
        return data, len(data)
    if isinstance(data, (bytes, bytearray, memoryview)):
        raw = bytes(data)
        return raw.decode("utf-8", errors="surrogateescape"), len(raw)
    raise TypeError(f"expected str or bytes-like input, got {type(data).__name__}")


def reject(namespace: str, func: str, input: str = "", cause: BaseException | None = None) -> ParseError:
    """Build the :class:`ParseError` for rejected input and log it at debug level."""
    error = ParseError(namespace, func, input, cause)
    logger.debug(
        "parse_rejected",
        namespace=namespace,
        func=func,
        reason=str(cause) if cause is not None else error.default_messages.get(namespace),
    )
    return error


def check_length(namespace: str, func: str, length: int, limit: int) -> None:
    """Fail fast when ``length`` exceeds ``limit``; a zero limit disables the check.

    The offending input is left out of the error on purpose.
    """
    if limit > 0 and length > limit:
        raise reject(namespace, func, "", InputTooLongError(length, limit))


__all__ = [
    "TextInput",
    "as_text",
    "reject",
    "check_length",
]
