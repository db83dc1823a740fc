"""Process-wide settings for value-spine.

Limits that would otherwise be mutable package-level variables
(maximum input lengths, JSON object key ceiling) are read from the
environment once, validated, and handed to the default strategies when they
are first created.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Negative limits are rejected at load time
    - **Environment-driven:** ``VALUESPINE_`` variables and ``.env`` files
    - **Sensible defaults:** Works out of the box

Examples:
    >>> from valuespine.core.settings import get_settings
    >>> get_settings().semver_max_input_length
    1024

    $ VALUESPINE_SEMVER_MAX_INPUT_LENGTH=0 python app.py   # disables the check

Tags:
    settings, configuration, pydantic, environment, value-spine
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ValueSpineSettings(BaseSettings):
    """Settings shared by every value type.

    Fields
    ──────
    semver_max_input_length : Longest accepted version text (0 disables)
    date_max_input_length   : Longest accepted date text
    roman_max_input_length  : Longest accepted roman numeral text
    size_max_input_length   : Longest accepted size text
    size_max_object_keys    : Most keys accepted in a JSON size object
    uuid_max_input_length   : Longest accepted UUID text
    log_level               : Structlog log level
    log_json                : Force JSON (True) or console (False) output
    """

    model_config = SettingsConfigDict(
        env_prefix="VALUESPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Input limits ─────────────────────────────────────────────
    semver_max_input_length: int = Field(default=1024, ge=0)
    date_max_input_length: int = Field(default=10, ge=0)
    roman_max_input_length: int = Field(default=128, ge=0)
    size_max_input_length: int = Field(default=128, ge=0)
    size_max_object_keys: int = Field(default=16, ge=0)
    uuid_max_input_length: int = Field(default=45, ge=0)

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None


_settings_cache: dict[str, ValueSpineSettings] = {}


def get_settings(*, force_reload: bool = False) -> ValueSpineSettings:
    """Load, validate, and cache a :class:`ValueSpineSettings` instance."""
    if not force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = ValueSpineSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()


__all__ = [
    "ValueSpineSettings",
    "get_settings",
    "clear_settings_cache",
]
