"""Surface syntax of semantic versions (https://semver.org, 2.0.0).

Patterns are built once from named fragments and compiled with ``\\A``/``\\Z``
anchors, so a trailing newline never sneaks past ``$``.
"""

from __future__ import annotations

import re

TAG_PREFIX = "v"

DIGIT = r"[0-9]"
DIGITS = DIGIT + r"+"
NON_DIGIT = r"[A-Za-z\-]"
IDENT = r"[0-9A-Za-z\-]"
NUM_IDENT = r"0|[1-9][0-9]*"
ALPHANUM_IDENT = r"(?:" + IDENT + r"*" + NON_DIGIT + IDENT + r"*)"
VERSION_CORE = r"(" + NUM_IDENT + r")\.(" + NUM_IDENT + r")\.(" + NUM_IDENT + r")"
PRE_RELEASE_IDENT = r"(?:" + ALPHANUM_IDENT + r"|(?:" + NUM_IDENT + r"))"
PRE_RELEASE = PRE_RELEASE_IDENT + r"(?:\." + PRE_RELEASE_IDENT + r")*"
BUILD_IDENT = r"(?:" + ALPHANUM_IDENT + r"|" + DIGITS + r")"
BUILD = BUILD_IDENT + r"(?:\." + BUILD_IDENT + r")*"
SEMVER = VERSION_CORE + r"(?:-(" + PRE_RELEASE + r"))?(?:\+(" + BUILD + r"))?"

_version = re.compile(r"\A" + SEMVER + r"\Z")
_pre_release = re.compile(r"\A" + PRE_RELEASE + r"\Z")
_build = re.compile(r"\A" + BUILD + r"\Z")
_digits = re.compile(r"\A" + DIGITS + r"\Z")


def match_version(text: str) -> re.Match[str] | None:
    """Match a plain version; groups are major, minor, patch, pre-release, build."""
    return _version.match(text)


def is_pre_release(text: str) -> bool:
    return _pre_release.match(text) is not None


def is_build(text: str) -> bool:
    return _build.match(text) is not None


def is_numeric(identifier: str) -> bool:
    """True for an all-ASCII-digit identifier (leading zeros allowed)."""
    return _digits.match(identifier) is not None


__all__ = [
    "TAG_PREFIX",
    "match_version",
    "is_pre_release",
    "is_build",
    "is_numeric",
]
