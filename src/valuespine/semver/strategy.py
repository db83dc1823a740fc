"""Replaceable version behavior and the process-wide slot holding it."""

from __future__ import annotations

from contextlib import AbstractContextManager
from dataclasses import dataclass, replace

from valuespine.core.settings import ValueSpineSettings, get_settings
from valuespine.core.strategy import StrategySlot
from valuespine.semver.compare import PreReleaseComparator, default_compare_pre_release
from valuespine.semver.formatter import Formatter, default_formatter
from valuespine.semver.parser import Parser, Rule, default_parser


@dataclass(frozen=True, slots=True)
class VersionStrategy:
    """Formatter, parser, pre-release comparator and limits for :class:`Ver`.

    Attributes:
        formatter: Appends a version to a buffer
        parser: ``(func, data, forms, max_input_length) -> Ver``
        compare_pre_release: Pre-release precedence, "self minus other"
        max_input_length: Longest accepted input; 0 disables the check
        rule: Rules applied by ``parse_text`` and ``Ver.unmarshal_text``
    """

    formatter: Formatter = default_formatter
    parser: Parser = default_parser
    compare_pre_release: PreReleaseComparator = default_compare_pre_release
    max_input_length: int = 1024
    rule: Rule = Rule(0)

    def with_changes(self, **changes) -> VersionStrategy:
        return replace(self, **changes)

    @classmethod
    def from_settings(cls, settings: ValueSpineSettings | None = None) -> VersionStrategy:
        settings = settings or get_settings()
        return cls(max_input_length=settings.semver_max_input_length)


_slot: StrategySlot[VersionStrategy] = StrategySlot("semver", VersionStrategy.from_settings)


def get_strategy() -> VersionStrategy:
    return _slot.get()


def set_strategy(strategy: VersionStrategy) -> VersionStrategy:
    """Install ``strategy`` process-wide and return the previous one."""
    return _slot.set(strategy)


def reset_strategy() -> None:
    _slot.reset()


def override_strategy(strategy: VersionStrategy) -> AbstractContextManager[VersionStrategy]:
    return _slot.override(strategy)


__all__ = [
    "VersionStrategy",
    "get_strategy",
    "set_strategy",
    "reset_strategy",
    "override_strategy",
]
