"""
Version precedence.

Pre-release precedence follows SemVer 2.0 section 11:

    - no pre-release beats any pre-release (``1.0.0-rc.1 < 1.0.0``)
    - identifiers compare left to right
    - numeric identifiers compare numerically (``beta.2 < beta.11``)
    - numeric identifiers sort below alphanumeric ones (``alpha.1 < alpha.beta``)
    - alphanumeric identifiers compare in ASCII order
    - more identifiers win when all preceding ones are equal (``alpha < alpha.1``)

The text-level helpers parse both operands first and wrap a parse failure in
:class:`~valuespine.core.errors.CompareError`.
"""

from __future__ import annotations

from collections.abc import Callable

from valuespine.core.errors import CompareError, ParseError
from valuespine.semver import grammar
from valuespine.semver.parser import parse, parse_tag, parse_version
from valuespine.semver.version import Ver, _sign

PreReleaseComparator = Callable[[str, str], int]


def default_compare_pre_release(a: str, b: str) -> int:
    """Return -1, 0 or 1 as pre-release ``a`` has lower, equal or higher precedence than ``b``."""
    if a == b:
        return 0
    if not a:
        return 1
    if not b:
        return -1

    # skip the common prefix, then back up to the identifier it ends in
    i, n = 0, min(len(a), len(b))
    while i < n and a[i] == b[i]:
        i += 1
    start = a.rfind(".", 0, i) + 1

    left = a[start:].split(".")
    right = b[start:].split(".")
    for x, y in zip(left, right):
        result = _compare_identifier(x, y)
        if result:
            return result
    return _sign(len(left) - len(right))


def _compare_identifier(x: str, y: str) -> int:
    x_numeric, y_numeric = grammar.is_numeric(x), grammar.is_numeric(y)
    if x_numeric and y_numeric:
        return _sign(int(x) - int(y))
    if x_numeric:
        return -1
    if y_numeric:
        return 1
    return (x > y) - (x < y)


def _parse_both(func: str, parser, a, b, strategy) -> tuple[Ver, Ver]:
    try:
        return parser(a, strategy=strategy), parser(b, strategy=strategy)
    except ParseError as e:
        raise CompareError(f"sem.{func}", e) from e


def compare_version(a, b, *, strategy=None) -> int:
    """Parse two plain versions and compare them."""
    av, bv = _parse_both("compare_version", parse_version, a, b, strategy)
    return av.compare(bv, strategy=strategy)


def compare_tag(a, b, *, strategy=None) -> int:
    """Parse two tags and compare them."""
    av, bv = _parse_both("compare_tag", parse_tag, a, b, strategy)
    return av.compare(bv, strategy=strategy)


def compare(a, b, *, strategy=None) -> int:
    """Parse two versions in either form and compare them."""
    av, bv = _parse_both("compare", parse, a, b, strategy)
    return av.compare(bv, strategy=strategy)


def latest_version(a, b, *, strategy=None) -> Ver:
    return parse_version(a, strategy=strategy).latest(parse_version(b, strategy=strategy), strategy=strategy)


def latest_tag(a, b, *, strategy=None) -> Ver:
    return parse_tag(a, strategy=strategy).latest(parse_tag(b, strategy=strategy), strategy=strategy)


def latest(a, b, *, strategy=None) -> Ver:
    return parse(a, strategy=strategy).latest(parse(b, strategy=strategy), strategy=strategy)


__all__ = [
    "PreReleaseComparator",
    "default_compare_pre_release",
    "compare_version",
    "compare_tag",
    "compare",
    "latest_version",
    "latest_tag",
    "latest",
]
