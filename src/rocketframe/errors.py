"""
Exception hierarchy for the component model.

Two broad families exist:

- ``BugError`` and its subclasses signal a defect in the caller or in the
  model itself (broken parent/child links, NaN positions, races, use of an
  invalidated component). They are never caught internally.
- ``ComponentTreeError`` signals an illegal structural request that was
  rejected before anything changed.
"""
from __future__ import annotations


class BugError(RuntimeError):
    """Internal invariant violation. Indicates a programming error."""


class ConcurrencyError(BugError):
    """A component was accessed from two threads at once."""


class InvalidatedComponentError(BugError):
    """A component that was replaced in place is still being used."""


class ComponentTreeError(ValueError):
    """
    Illegal structural request (re-parenting, cycles, incompatible child).

    The component tree is left unchanged when this is raised.
    """


class ConcurrentModificationError(RuntimeError):
    """The component tree changed while it was being iterated."""
