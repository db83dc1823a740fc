"""
Process-wide strategy slots.

Each value type bundles its replaceable behavior (formatter, parser, limits)
in an immutable strategy object. The strategy currently in effect for the
process lives in a :class:`StrategySlot`; every method that consults it also
accepts an explicit ``strategy=`` argument, so substitution can stay local
to a call site.

Manifesto:
    - **Explicit first:** Pass ``strategy=`` where you can
    - **Guarded:** Reads and swaps of the current strategy hold an RLock
    - **Lazy defaults:** The default strategy is built on first use, after
      settings are available
    - **Reversible:** ``set()`` returns the previous strategy and
      ``override()`` restores it on exit

Examples:
    >>> from valuespine import semver
    >>> custom = semver.get_strategy().with_changes(max_input_length=16)
    >>> with semver.override_strategy(custom):
    ...     semver.parse("1.2.3")
    Ver(major=1, minor=2, patch=3, pre_release='', build='')

Tags:
    strategy, configuration, thread-safe, value-spine
"""

from __future__ import annotations

import threading
import weakref
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

from valuespine.core.logging import get_logger

logger = get_logger(__name__)

S = TypeVar("S")


class StrategySlot(Generic[S]):
    """Thread-safe holder for the process-wide strategy of one value type.

    Args:
        name: Slot name used in log events (``semver``, ``date``, ...)
        factory: Builds the default strategy
    """

    def __init__(self, name: str, factory: Callable[[], S]):
        self.name = name
        self._factory = factory
        self._current: S | None = None
        self._lock = threading.RLock()
        _slots.add(self)

    def get(self) -> S:
        """Return the current strategy, building the default on first use."""
        with self._lock:
            if self._current is None:
                self._current = self._factory()
            return self._current

    def set(self, strategy: S) -> S:
        """Install ``strategy`` and return the one it replaces."""
        if strategy is None:
            raise TypeError(f"{self.name}: strategy must not be None")
        with self._lock:
            previous = self.get()
            self._current = strategy
        logger.info("strategy_installed", slot=self.name, strategy=type(strategy).__name__)
        return previous

    def reset(self) -> None:
        """Drop the current strategy; the next ``get()`` rebuilds the default."""
        with self._lock:
            self._current = None

    @contextmanager
    def override(self, strategy: S) -> Iterator[S]:
        """Install ``strategy`` for the duration of a with-block."""
        previous = self.set(strategy)
        try:
            yield strategy
        finally:
            with self._lock:
                self._current = previous
            logger.info("strategy_restored", slot=self.name)

    def __repr__(self) -> str:
        return f"StrategySlot({self.name!r})"


_slots: weakref.WeakSet[StrategySlot] = weakref.WeakSet()


def reset_all() -> None:
    """Reset every strategy slot to its lazily built default (mainly for testing)."""
    for slot in list(_slots):
        slot.reset()


__all__ = [
    "StrategySlot",
    "reset_all",
]
