"""
Structured error types for value-spine.

Provides a hierarchy of typed errors shared by every value type (version,
date, roman numeral, byte size, UUID). Parse entry points never raise a bare
``ValueError``: they raise :class:`ParseError` carrying the originating
function, the offending input (when it is safe to echo) and the lower-level
cause that explains the rejection.

Manifesto:
    - **Typed causes:** Each rejection reason is its own class, so callers
      match on the cause instead of on the rendered message
    - **Safe messages:** Oversized input is never echoed back
    - **Error chaining:** The cause is kept both as ``cause`` and ``__cause__``
    - **Stable rendering:** ``"<namespace>.<func>: <quoted input>: <cause>"``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                      ValueSpineError                             │
        │               (category, context, cause)                         │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ParseError          MarshalError        CompareError            │
        │  (PARSE, wraps       (ENCODING, wraps    (PARSE, wraps           │
        │   a cause below)      any error)          a ParseError)          │
        │                                                                  │
        │  Causes:                                                         │
        │  InputTooLongError   FormNotAllowedError  FieldRangeError        │
        │                      ├ TagFormNotAllowed  ├ InvalidMajor/Minor/  │
        │                      ├ ExpectedTagForm    │  Patch               │
        │                      ├ BasicFormatDisabled└ DateRangeError       │
        │                      ├ URNFormatDisabled                         │
        │                      └ Unit/String/ObjectFormDisabled            │
        │                                                                  │
        │  ValidationError     EncodingError        JSON object errors     │
        │  ├ InvalidPreRelease ├ InvalidLength      ExpectedObject,        │
        │  ├ InvalidBuild      └ UnsupportedVersion MissingKey, ...        │
        │  ├ InvalidDigit                                                  │
        │  ├ InvalidUnit / InvalidValue                                    │
        │  └ InvalidRange                                                  │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    Matching on the cause rather than the message:

    >>> from valuespine import semver
    >>> try:
    ...     semver.parse_version("v1.2.3")
    ... except ParseError as e:
    ...     has_cause(e, TagFormNotAllowedError)
    True

    Rendering:

    >>> str(ParseError("sem", "parse_tag", "1.2.3", ExpectedTagFormError()))
    'sem.parse_tag: "1.2.3": expected tag form'

Tags:
    error-handling, exception-hierarchy, error-context, parsing,
    value-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

E = TypeVar("E", bound=BaseException)


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification.

    Attributes:
        PARSE: Input text or bytes could not be turned into a value
        VALIDATION: A value (or part of it) violates its grammar or range
        ENCODING: Marshal/unmarshal wrappers and binary layout errors
        CONFIG: Invalid settings or strategy configuration
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    PARSE = "PARSE"
    VALIDATION = "VALIDATION"
    ENCODING = "ENCODING"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        namespace: Value-type namespace (``sem``, ``date``, ``roman``, ``size``, ``uu``)
        func: Entry point that raised the error
        input: Offending input, ``None`` when it must not be echoed
        metadata: Additional key-value pairs
    """

    namespace: str | None = None
    func: str | None = None
    input: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["namespace", "func", "input"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ValueSpineError(Exception):
    """
    Base exception for all value-spine errors.

    Every error carries a category, a structured context and an optional
    cause. Subclasses set ``default_category`` and, for leaf causes, a
    ``default_message`` so they can be raised without arguments.

    Examples:
        >>> error = ValueSpineError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = ValueSpineError("Bad input").with_context(namespace="sem")
        >>> error.context.namespace
        'sem'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_message: str = "value-spine error"

    def __init__(
        self,
        message: str | None = None,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        message = message if message is not None else self.default_message
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ValueSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise InvalidUnitError("XB").with_context(namespace="size")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": str(self),
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self)!r}, category={self.category.value})"


# =============================================================================
# INPUT ERRORS
# =============================================================================


class InputTooLongError(ValueSpineError):
    """Input exceeds the configured length ceiling."""

    default_category = ErrorCategory.PARSE
    default_message = "input too long"

    def __init__(self, length: int, limit: int, **kwargs: Any):
        self.length = length
        self.limit = limit
        super().__init__(f"input too long ({length} > {limit})", **kwargs)


class FormNotAllowedError(ValueSpineError):
    """A surface form was recognized, but the active rules reject it."""

    default_category = ErrorCategory.PARSE
    default_message = "form not allowed"


class TagFormNotAllowedError(FormNotAllowedError):
    default_message = "tag form not allowed"


class ExpectedTagFormError(FormNotAllowedError):
    default_message = "expected tag form"


class BasicFormatDisabledError(FormNotAllowedError):
    default_message = "basic format disabled"


class URNFormatDisabledError(FormNotAllowedError):
    default_message = "urn format disabled"


class UnitDisabledError(FormNotAllowedError):
    default_message = "unit disabled"


class StringFormDisabledError(FormNotAllowedError):
    default_message = "string form disabled"


class ObjectFormDisabledError(FormNotAllowedError):
    default_message = "object form disabled"


class FieldRangeError(ValueSpineError):
    """A structurally matched field does not fit its target range."""

    default_category = ErrorCategory.VALIDATION
    default_message = "field out of range"


class InvalidMajorError(FieldRangeError):
    default_message = "invalid major"


class InvalidMinorError(FieldRangeError):
    default_message = "invalid minor"


class InvalidPatchError(FieldRangeError):
    default_message = "invalid patch"


class DateRangeError(FieldRangeError):
    default_message = "date out of range"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ValueSpineError):
    """A value, or a part of it, violates its grammar."""

    default_category = ErrorCategory.VALIDATION
    default_message = "invalid value"


class InvalidPreReleaseError(ValidationError):
    default_message = "invalid pre-release"


class InvalidBuildError(ValidationError):
    default_message = "invalid build"


class InvalidDigitError(ValidationError):
    """Invalid hexadecimal digit in a UUID."""

    def __init__(self, digit: str, **kwargs: Any):
        self.digit = digit
        if digit.isprintable() and not digit.isspace():
            message = f"invalid digit {digit!r} (U+{ord(digit):04X})"
        else:
            message = f"invalid digit U+{ord(digit):04X}"
        super().__init__(message, **kwargs)


class InvalidUnitError(ValidationError):
    """Unknown byte-size unit. The unit itself is kept as ``unit``."""

    def __init__(self, unit: str, **kwargs: Any):
        self.unit = unit
        super().__init__(f"invalid unit {quote(unit)}", **kwargs)


class InvalidValueError(ValidationError):
    """Combination of value and unit does not fit an unsigned 64-bit integer."""

    def __init__(self, value: Any, unit: str, **kwargs: Any):
        self.value = value
        self.unit = unit
        if unit == "":
            message = f"value {value} without unit is not suitable for uint64"
        else:
            message = f"value {value} with unit {quote(unit)} is not suitable for uint64"
        super().__init__(message, **kwargs)


class InvalidRangeError(ValidationError):
    default_message = "invalid from or to"


# =============================================================================
# JSON OBJECT ERRORS
# =============================================================================


class ExpectedObjectError(ValueSpineError):
    default_category = ErrorCategory.PARSE
    default_message = "expected number, string or object"


class InvalidTypeError(ValueSpineError):
    default_category = ErrorCategory.PARSE
    default_message = "invalid type"


class MissingKeyError(ValueSpineError):
    default_category = ErrorCategory.PARSE

    def __init__(self, key: str, **kwargs: Any):
        self.key = key
        super().__init__(f"missing {key} key", **kwargs)


class DuplicatedKeyError(ValueSpineError):
    default_category = ErrorCategory.PARSE

    def __init__(self, key: str, **kwargs: Any):
        self.key = key
        super().__init__(f"duplicated {key} key", **kwargs)


class UnexpectedKeyError(ValueSpineError):
    default_category = ErrorCategory.PARSE

    def __init__(self, key: str, **kwargs: Any):
        self.key = key
        super().__init__(f"unexpected key {quote(key)}", **kwargs)


class ObjectTooBigError(ValueSpineError):
    default_category = ErrorCategory.PARSE

    def __init__(self, keys: int, limit: int, **kwargs: Any):
        self.keys = keys
        self.limit = limit
        super().__init__(f"object too big ({keys} > {limit})", **kwargs)


# =============================================================================
# ENCODING ERRORS
# =============================================================================


class EncodingError(ValueSpineError):
    default_category = ErrorCategory.ENCODING
    default_message = "encoding error"


class InvalidLengthError(EncodingError):
    default_message = "invalid length"


class UnsupportedVersionError(EncodingError):
    default_message = "unsupported version"


# =============================================================================
# WRAPPERS
# =============================================================================


class ParseError(ValueSpineError, ValueError):
    """
    Error raised by every parse entry point.

    Input can be empty, as can the cause. Rendering is
    ``"<namespace>.<func>: <quoted input>: <cause>"``; the quoted input is
    omitted when empty and the cause falls back to ``default_message``.

    Examples:
        >>> str(ParseError("sem", "parse", ""))
        'sem.parse: invalid version'
        >>> str(ParseError("date", "default_parser", "x"))
        'date.default_parser: "x": invalid date'
    """

    default_category = ErrorCategory.PARSE

    default_messages: dict[str, str] = {
        "sem": "invalid version",
        "date": "invalid date",
        "roman": "invalid roman number",
        "size": "unable to parse",
        "uu": "invalid format",
    }

    # size renders its input as `parsing "<input>"`
    input_prefixes: dict[str, str] = {
        "size": "parsing ",
    }

    def __init__(
        self,
        namespace: str,
        func: str,
        input: str = "",
        cause: BaseException | None = None,
    ):
        self.namespace = namespace
        self.func = func
        self.input = input
        reason = str(cause) if cause is not None else self.default_messages.get(namespace, "invalid input")
        if input:
            prefix = self.input_prefixes.get(namespace, "")
            message = f"{namespace}.{func}: {prefix}{quote(input)}: {reason}"
        else:
            message = f"{namespace}.{func}: {reason}"
        super().__init__(
            message,
            context=ErrorContext(namespace=namespace, func=func, input=input or None),
            cause=cause,
        )


class MarshalError(ValueSpineError):
    """Component-qualified wrapper used by marshal/unmarshal methods."""

    default_category = ErrorCategory.ENCODING

    def __init__(self, subject: str, cause: BaseException):
        self.subject = subject
        super().__init__(f"{subject}: {cause}", cause=cause)


class CompareError(ValueSpineError):
    """Raised by text-level compare helpers when an operand does not parse."""

    default_category = ErrorCategory.PARSE

    def __init__(self, subject: str, cause: BaseException):
        self.subject = subject
        super().__init__(f"{subject}: {cause}", cause=cause)


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def quote(value: str) -> str:
    """Double-quote ``value`` with escapes, for error messages."""
    return json.dumps(value, ensure_ascii=False)


def find_cause(error: BaseException | None, error_type: type[E]) -> E | None:
    """Return the first error of ``error_type`` in the cause chain, or None."""
    seen: set[int] = set()
    while error is not None and id(error) not in seen:
        if isinstance(error, error_type):
            return error
        seen.add(id(error))
        error = getattr(error, "cause", None) or error.__cause__
    return None


def has_cause(error: BaseException | None, error_type: type[BaseException]) -> bool:
    """Check whether ``error`` or anything it wraps is an ``error_type``."""
    return find_cause(error, error_type) is not None


def categorize_error(error: BaseException) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, ValueSpineError):
        return error.category
    if isinstance(error, (OverflowError, TypeError)):
        return ErrorCategory.INTERNAL
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "ValueSpineError",
    # Input
    "InputTooLongError",
    "FormNotAllowedError",
    "TagFormNotAllowedError",
    "ExpectedTagFormError",
    "BasicFormatDisabledError",
    "URNFormatDisabledError",
    "UnitDisabledError",
    "StringFormDisabledError",
    "ObjectFormDisabledError",
    "FieldRangeError",
    "InvalidMajorError",
    "InvalidMinorError",
    "InvalidPatchError",
    "DateRangeError",
    # Validation
    "ValidationError",
    "InvalidPreReleaseError",
    "InvalidBuildError",
    "InvalidDigitError",
    "InvalidUnitError",
    "InvalidValueError",
    "InvalidRangeError",
    # JSON object
    "ExpectedObjectError",
    "InvalidTypeError",
    "MissingKeyError",
    "DuplicatedKeyError",
    "UnexpectedKeyError",
    "ObjectTooBigError",
    # Encoding
    "EncodingError",
    "InvalidLengthError",
    "UnsupportedVersionError",
    # Wrappers
    "ParseError",
    "MarshalError",
    "CompareError",
    # Utilities
    "quote",
    "find_cause",
    "has_cause",
    "categorize_error",
]
