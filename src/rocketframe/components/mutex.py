"""
Re-entrancy guard that detects unexpected cross-thread access.

The component model is single-writer. ``SafetyMutex`` does not serialize
anything; it only raises :class:`~rocketframe.errors.ConcurrencyError` when a
second thread touches a component that another thread is currently inside.
"""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from rocketframe.errors import ConcurrencyError

logger = logging.getLogger(__name__)


class SafetyMutex:
    """
    Per-component lock token.

    The mutex is re-entrant for the owning thread. Each ``lock(name)`` must be
    matched by an ``unlock(name)`` with the same name, innermost first.

    Examples
    --------
    >>> mutex = SafetyMutex()
    >>> with mutex.locked("mass"):
    ...     mutex.verify()
    """

    def __init__(self) -> None:
        self._owner: int | None = None
        self._stack: list[str] = []
        self._guard = threading.Lock()

    @property
    def is_locked(self) -> bool:
        return self._owner is not None

    def lock(self, name: str) -> None:
        """Enter a guarded section labelled ``name``."""
        current = threading.get_ident()
        with self._guard:
            if self._owner is not None and self._owner != current:
                raise ConcurrencyError(
                    f"'{name}' entered from thread {current} while thread "
                    f"{self._owner} is inside {self._stack}"
                )
            self._owner = current
            self._stack.append(name)

    def unlock(self, name: str) -> None:
        """Leave the innermost guarded section, which must be ``name``."""
        current = threading.get_ident()
        with self._guard:
            if self._owner != current or not self._stack:
                raise ConcurrencyError(f"unlock('{name}') without matching lock")
            top = self._stack.pop()
            if top != name:
                raise ConcurrencyError(f"unlock('{name}') does not match lock('{top}')")
            if not self._stack:
                self._owner = None

    def verify(self) -> None:
        """Raise if another thread is currently inside a guarded section."""
        owner = self._owner
        if owner is not None and owner != threading.get_ident():
            raise ConcurrencyError(f"access while thread {owner} is inside {self._stack}")

    @contextmanager
    def locked(self, name: str) -> Iterator[None]:
        self.lock(name)
        try:
            yield
        finally:
            self.unlock(name)
