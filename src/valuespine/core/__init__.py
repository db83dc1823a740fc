"""
Shared pipeline machinery for the value types.

Every value type in value-spine follows the same pipeline: coerce input,
check its length, match a grammar, convert fields, and wrap failures in a
:class:`~valuespine.core.errors.ParseError`. This package holds the parts of
that pipeline that do not depend on the value type.

Modules:
    errors     Typed error hierarchy, cause matching
    logging    structlog configuration and helpers
    settings   pydantic-settings backed limits
    strategy   Thread-safe process-wide strategy slots
    text       Input coercion and length checks
    protocols  Text/binary/JSON marshaling protocols
"""

from valuespine.core.errors import (
    CompareError,
    ErrorCategory,
    ErrorContext,
    MarshalError,
    ParseError,
    ValueSpineError,
    find_cause,
    has_cause,
)
from valuespine.core.logging import configure_logging, get_logger
from valuespine.core.protocols import BinaryMarshaler, JSONMarshaler, TextMarshaler
from valuespine.core.settings import ValueSpineSettings, clear_settings_cache, get_settings
from valuespine.core.strategy import StrategySlot, reset_all
from valuespine.core.text import as_text

__all__ = [
    "CompareError",
    "ErrorCategory",
    "ErrorContext",
    "MarshalError",
    "ParseError",
    "ValueSpineError",
    "find_cause",
    "has_cause",
    "configure_logging",
    "get_logger",
    "BinaryMarshaler",
    "JSONMarshaler",
    "TextMarshaler",
    "ValueSpineSettings",
    "clear_settings_cache",
    "get_settings",
    "StrategySlot",
    "reset_all",
    "as_text",
]
