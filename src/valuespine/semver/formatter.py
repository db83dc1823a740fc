"""Rendering of versions into text."""

from __future__ import annotations

from collections.abc import Callable
from enum import IntFlag
from typing import TYPE_CHECKING, Union

from valuespine.semver.grammar import TAG_PREFIX

if TYPE_CHECKING:
    from valuespine.semver.version import Ver


class Format(IntFlag):
    """Formatter flags."""

    TAG = 1
    """Prefix the output with the ``v`` tag marker."""


Buffer = Union[bytes, bytearray, None]
Formatter = Callable[[Buffer, "Ver", Format], bytearray]


def default_formatter(buf: Buffer, v: Ver, f: Format = Format(0)) -> bytearray:
    """Append the text form of ``v`` to ``buf`` and return the buffer.

    A ``bytearray`` is extended in place, so callers can compose output
    behind a prefix without copying. Pre-release and build are written
    verbatim; nothing is re-validated here.

    Examples:
        >>> default_formatter(bytearray(b"tag="), Ver(1, 2, 3, "rc.1"), Format.TAG)
        bytearray(b'tag=v1.2.3-rc.1')
    """
    out = buf if isinstance(buf, bytearray) else bytearray(buf or b"")
    if f & Format.TAG:
        out += TAG_PREFIX.encode()
    out += b"%d.%d.%d" % (v.major, v.minor, v.patch)
    if v.pre_release:
        out += b"-"
        out += v.pre_release.encode("utf-8", "surrogateescape")
    if v.build:
        out += b"+"
        out += v.build.encode("utf-8", "surrogateescape")
    return out


__all__ = [
    "Format",
    "Formatter",
    "default_formatter",
]
