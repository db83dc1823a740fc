"""
Semantic version value type.

A :class:`Ver` is five immutable fields: ``major``, ``minor`` and ``patch``
(unsigned 64-bit integers) plus the ``pre_release`` and ``build`` strings,
where the empty string means "absent".

Manifesto:
    - **Immutable:** Frozen dataclass with slots; derivations return new values
    - **Parseable is not valid:** A directly constructed value is checked
      with :meth:`Ver.validate`, parsed values are valid by construction
    - **Precedence ignores build:** Ordering follows SemVer 2.0 section 11,
      while ``==`` compares every field
    - **Display never fails:** ``str()`` falls back to the default formatter
      if an installed one raises

Comparison convention:
    ``a.compare(b)`` is "self minus other": ``-1`` when ``a`` has lower
    precedence than ``b``, ``0`` for equal precedence and ``1`` when ``a``
    has higher precedence. The pre-release comparator of the strategy uses
    the same convention.

Examples:
    >>> v = Ver(1, 2, 3, "rc.1", "build.7")
    >>> str(v)
    '1.2.3-rc.1+build.7'
    >>> v.string_tag()
    'v1.2.3-rc.1+build.7'
    >>> v.next_minor()
    Ver(major=1, minor=3, patch=0, pre_release='', build='')
    >>> Ver(1, 0, 0, "alpha") < Ver(1, 0, 0)
    True
    >>> f"{v:t}"
    'v1.2.3-rc.1+build.7'

Tags:
    semver, version, value-object, immutable, ordering, value-spine
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from valuespine.core.errors import (
    InvalidBuildError,
    InvalidMajorError,
    InvalidMinorError,
    InvalidPatchError,
    InvalidPreReleaseError,
    MarshalError,
    ParseError,
)
from valuespine.core.logging import get_logger
from valuespine.semver import grammar

if TYPE_CHECKING:
    from valuespine.core.text import TextInput
    from valuespine.semver.strategy import VersionStrategy

logger = get_logger(__name__)

NAMESPACE = "sem"
MAX_UINT64 = 2**64 - 1


def _resolve(strategy: VersionStrategy | None) -> VersionStrategy:
    if strategy is not None:
        return strategy
    from valuespine.semver.strategy import get_strategy

    return get_strategy()


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


@dataclass(frozen=True, slots=True)
class Ver:
    """Semantic version."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    pre_release: str = ""
    build: str = ""

    def __post_init__(self) -> None:
        for name, error in (
            ("major", InvalidMajorError),
            ("minor", InvalidMinorError),
            ("patch", InvalidPatchError),
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be int, got {type(value).__name__}")
            if not 0 <= value <= MAX_UINT64:
                raise error(f"invalid {name} ({value} is outside 0..2**64-1)").with_context(
                    namespace=NAMESPACE, func="Ver"
                )
        for name in ("pre_release", "build"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"{name} must be str, got {type(getattr(self, name)).__name__}")

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self) -> None:
        """Check pre-release and build against their grammars.

        Raises:
            InvalidPreReleaseError: Pre-release is set and malformed
            InvalidBuildError: Build is set and malformed
        """
        if self.pre_release and not grammar.is_pre_release(self.pre_release):
            raise InvalidPreReleaseError().with_context(namespace=NAMESPACE, func="Ver.validate")
        if self.build and not grammar.is_build(self.build):
            raise InvalidBuildError().with_context(namespace=NAMESPACE, func="Ver.validate")

    def is_valid(self) -> bool:
        try:
            self.validate()
        except (InvalidPreReleaseError, InvalidBuildError):
            return False
        return True

    def is_zero(self) -> bool:
        return self.major == 0 and self.minor == 0 and self.patch == 0 and not self.pre_release and not self.build

    # -------------------------------------------------------------------------
    # Derivations
    # -------------------------------------------------------------------------

    def core(self) -> Ver:
        """Return ``major.minor.patch`` without pre-release and build."""
        return Ver(self.major, self.minor, self.patch)

    def next_major(self) -> Ver:
        if self.major == MAX_UINT64:
            _fatal_overflow("major", self)
        return Ver(self.major + 1, 0, 0)

    def next_minor(self) -> Ver:
        if self.minor == MAX_UINT64:
            _fatal_overflow("minor", self)
        return Ver(self.major, self.minor + 1, 0)

    def next_patch(self) -> Ver:
        if self.patch == MAX_UINT64:
            _fatal_overflow("patch", self)
        return Ver(self.major, self.minor, self.patch + 1)

    def with_changes(self, **changes) -> Ver:
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    # -------------------------------------------------------------------------
    # Ordering
    # -------------------------------------------------------------------------

    def compare(self, other: Ver, *, strategy: VersionStrategy | None = None) -> int:
        """Return -1, 0 or 1 as ``self`` has lower, equal or higher precedence."""
        for a, b in (
            (self.major, other.major),
            (self.minor, other.minor),
            (self.patch, other.patch),
        ):
            if a != b:
                return _sign(a - b)
        return _resolve(strategy).compare_pre_release(self.pre_release, other.pre_release)

    def latest(self, other: Ver, *, strategy: VersionStrategy | None = None) -> Ver:
        """Return ``other`` if it has higher precedence, else ``self``."""
        if self.compare(other, strategy=strategy) < 0:
            return other
        return self

    def __lt__(self, other: Ver) -> bool:
        if isinstance(other, Ver):
            return self.compare(other) < 0
        return NotImplemented

    def __le__(self, other: Ver) -> bool:
        if isinstance(other, Ver):
            return self.compare(other) <= 0
        return NotImplemented

    def __gt__(self, other: Ver) -> bool:
        if isinstance(other, Ver):
            return self.compare(other) > 0
        return NotImplemented

    def __ge__(self, other: Ver) -> bool:
        if isinstance(other, Ver):
            return self.compare(other) >= 0
        return NotImplemented

    # -------------------------------------------------------------------------
    # Text
    # -------------------------------------------------------------------------

    def marshal_text(self, *, strategy: VersionStrategy | None = None) -> bytes:
        from valuespine.semver.formatter import Format

        try:
            return bytes(_resolve(strategy).formatter(None, self, Format(0)))
        except Exception as e:
            raise MarshalError("sem.Ver.marshal_text", e) from e

    @classmethod
    def unmarshal_text(cls, data: TextInput, *, strategy: VersionStrategy | None = None) -> Ver:
        """Parse ``data`` with the strategy's parser and rule."""
        from valuespine.semver.parser import parse_text

        try:
            return parse_text(data, strategy=strategy)
        except ParseError:
            raise
        except Exception as e:
            raise MarshalError("sem.Ver.unmarshal_text", e) from e

    def to_string(self, f=None, *, strategy: VersionStrategy | None = None) -> str:
        """Format with the strategy's formatter, falling back to the default one."""
        from valuespine.semver.formatter import Format, default_formatter

        if f is None:
            f = Format(0)
        try:
            out = _resolve(strategy).formatter(None, self, f)
        except Exception as e:
            logger.debug("formatter_failed", namespace=NAMESPACE, error=str(e))
            out = default_formatter(None, self, f)
        return bytes(out).decode("utf-8", "surrogateescape")

    def string_tag(self, *, strategy: VersionStrategy | None = None) -> str:
        from valuespine.semver.formatter import Format

        return self.to_string(Format.TAG, strategy=strategy)

    def __str__(self) -> str:
        return self.to_string()

    def __format__(self, spec: str) -> str:
        if spec in ("", "s"):
            return self.to_string()
        if spec == "t":
            return self.string_tag()
        raise ValueError(f"unsupported format spec {spec!r} for Ver")


ZERO = Ver()
ZERO_STRING = "0.0.0"
ZERO_STRING_TAG = "v0.0.0"


def new(major: int, minor: int, patch: int, *pre_release_and_build: str) -> Ver:
    """Build a version; at most two trailing strings (pre-release, build) are accepted.

    Raises:
        TypeError: More than two trailing strings were passed
    """
    if len(pre_release_and_build) > 2:
        logger.critical(
            "fatal_condition",
            namespace=NAMESPACE,
            reason="too many pre-release/build arguments",
            count=len(pre_release_and_build),
        )
        raise TypeError(f"sem.new: len(pre_release_and_build) > 2 (got {len(pre_release_and_build)})")
    return Ver(major, minor, patch, *pre_release_and_build)


def _fatal_overflow(field: str, v: Ver) -> None:
    logger.critical("fatal_condition", namespace=NAMESPACE, reason=f"{field} overflow", version=str(v))
    raise OverflowError(f"sem.Ver.next_{field}: {field} overflows uint64")


__all__ = [
    "Ver",
    "new",
    "ZERO",
    "ZERO_STRING",
    "ZERO_STRING_TAG",
    "MAX_UINT64",
]
