"""
Change notification: event categories, events and the root-owned bus.

Every mutation of a component ends in exactly one call to
:meth:`ChangeBus.fire` on the bus of the tree's root. The bus keeps the
modification counters used for fail-fast iteration and delivers events to
registered listeners unless it is frozen.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from enum import IntFlag
from typing import TYPE_CHECKING, Callable, Iterator

from rocketframe.errors import BugError

if TYPE_CHECKING:
    from .base import RocketComponent

logger = logging.getLogger(__name__)


class ChangeType(IntFlag):
    """Bitmask of change categories carried by an event."""

    NONFUNCTIONAL = 1
    MASS = 2
    AERODYNAMIC = 4
    TREE = 8
    TREE_CHILDREN = 16
    GRAPHIC = 32
    BOTH = MASS | AERODYNAMIC


FUNCTIONAL = ChangeType.MASS | ChangeType.AERODYNAMIC | ChangeType.TREE


@dataclass(frozen=True)
class ComponentChangeEvent:
    """
    A change notification.

    Attributes
    ----------
    source : RocketComponent
        Component that changed (or the root, for merged batches)
    type : ChangeType
        Union of the change categories
    mod_id : int
        Bus modification counter at the time the event was fired
    """

    source: RocketComponent
    type: ChangeType
    mod_id: int = 0

    @property
    def is_mass_change(self) -> bool:
        return bool(self.type & ChangeType.MASS)

    @property
    def is_aerodynamic_change(self) -> bool:
        return bool(self.type & ChangeType.AERODYNAMIC)

    @property
    def is_tree_change(self) -> bool:
        return bool(self.type & ChangeType.TREE)

    @property
    def is_functional_change(self) -> bool:
        return bool(self.type & FUNCTIONAL)

    @property
    def is_only_nonfunctional(self) -> bool:
        return not self.is_functional_change

    def merge(self, other: ComponentChangeEvent) -> ComponentChangeEvent:
        """Union of two events. Different sources collapse to the root."""
        source = self.source if self.source is other.source else self.source.root
        return ComponentChangeEvent(source, self.type | other.type,
                                    max(self.mod_id, other.mod_id))

    def __str__(self) -> str:
        return f"ComponentChangeEvent[{self.type!r}, source={self.source.debug_name}]"


ChangeListener = Callable[[ComponentChangeEvent], None]


class ChangeBus:
    """
    Listener registry and modification counters of one component tree.

    A ``Rocket`` creates (or is handed) exactly one bus; every component in
    its tree forwards to it.

    Attributes
    ----------
    mod_id : int
        Incremented on every fired event, frozen or not
    mass_mod_id, aero_mod_id, tree_mod_id, functional_mod_id : int
        Value of ``mod_id`` at the last event of that category

    Examples
    --------
    >>> rocket = Rocket()
    >>> events = []
    >>> rocket.change_bus.add_listener(events.append)
    >>> with rocket.change_bus.frozen():
    ...     rocket.name = "A"
    ...     rocket.comment = "B"
    >>> len(events)
    1
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []
        self._freeze_count = 0
        self._pending: ComponentChangeEvent | None = None
        self.mod_id = 0
        self.mass_mod_id = 0
        self.aero_mod_id = 0
        self.tree_mod_id = 0
        self.functional_mod_id = 0

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: ChangeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listeners(self) -> list[ChangeListener]:
        return list(self._listeners)

    # -------------------------------------------------------------------------
    # Firing
    # -------------------------------------------------------------------------

    def fire(self, event: ComponentChangeEvent) -> None:
        """
        Record an event and deliver it, or merge it into the pending batch.

        Counters advance immediately so that in-flight iterators fail fast
        even while the bus is frozen.
        """
        self.mod_id += 1
        event = replace(event, mod_id=self.mod_id)
        if event.is_mass_change:
            self.mass_mod_id = self.mod_id
        if event.is_aerodynamic_change:
            self.aero_mod_id = self.mod_id
        if event.is_tree_change:
            self.tree_mod_id = self.mod_id
        if event.is_functional_change:
            self.functional_mod_id = self.mod_id

        if self._freeze_count > 0:
            self._pending = event if self._pending is None else self._pending.merge(event)
            return
        self._deliver(event)

    def _deliver(self, event: ComponentChangeEvent) -> None:
        logger.debug("Delivering %s to %d listener(s)", event, len(self._listeners))
        for listener in list(self._listeners):
            listener(event)

    # -------------------------------------------------------------------------
    # Freeze / thaw
    # -------------------------------------------------------------------------

    @property
    def is_frozen(self) -> bool:
        return self._freeze_count > 0

    def freeze(self) -> None:
        """Defer delivery until the matching :meth:`thaw`. Nests."""
        self._freeze_count += 1

    def thaw(self) -> None:
        """
        Release one freeze level; on the last one deliver the merged event.

        Raises
        ------
        BugError
            If called without a matching freeze.
        """
        if self._freeze_count <= 0:
            raise BugError("thaw() called on a bus that is not frozen")
        self._freeze_count -= 1
        if self._freeze_count == 0 and self._pending is not None:
            event, self._pending = self._pending, None
            self._deliver(event)

    @contextmanager
    def frozen(self) -> Iterator[ChangeBus]:
        """Freeze for the duration of a ``with`` block, thawing on any exit."""
        self.freeze()
        try:
            yield self
        finally:
            self.thaw()
