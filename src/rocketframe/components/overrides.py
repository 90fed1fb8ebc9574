"""
Ownership of mass, CG and CD overrides.

A component *owns* the override of a quantity over its subtree when both the
override and its "applies to subcomponents" flag are set. Every other node
is owned by its nearest owning ancestor, if any. The owner pointers stored on
components are a cache of :func:`resolve_override_owner` and are rewritten
only by :func:`cascade_override_owners`.
"""
from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import RocketComponent


class OverrideQuantity(Enum):
    """Quantities that can be overridden, with the flag attributes they use."""

    MASS = ("mass_overridden", "override_subcomponents_mass")
    CG = ("cg_overridden", "override_subcomponents_cg")
    CD = ("cd_overridden", "override_subcomponents_cd")

    @property
    def enabled_attr(self) -> str:
        return self.value[0]

    @property
    def subtree_attr(self) -> str:
        return self.value[1]


def owns_subtree(component: RocketComponent, quantity: OverrideQuantity) -> bool:
    """True when ``component`` overrides ``quantity`` for all its descendants."""
    return bool(getattr(component, quantity.enabled_attr)
                and getattr(component, quantity.subtree_attr))


def resolve_override_owner(component: RocketComponent,
                           quantity: OverrideQuantity) -> RocketComponent | None:
    """Nearest ancestor owning ``quantity``, or None."""
    node = component.parent
    while node is not None:
        if owns_subtree(node, quantity):
            return node
        node = node.parent
    return None


def is_overridden_by_ancestor(component: RocketComponent, quantity: OverrideQuantity) -> bool:
    """True if any ancestor owns ``quantity``."""
    parent = component.parent
    if parent is None:
        return False
    return owns_subtree(parent, quantity) or is_overridden_by_ancestor(parent, quantity)


def cascade_override_owners(component: RocketComponent, quantity: OverrideQuantity) -> None:
    """
    Recompute the owner pointers of ``component`` and its whole subtree.

    The walk is depth-first in child order. A descendant that owns the
    quantity itself becomes the owner of its own subtree, whatever its
    ancestors do, so withdrawing an ancestor's subtree override hands
    ownership back to such a descendant instead of clearing it.
    """
    component._overridden_by[quantity] = resolve_override_owner(component, quantity)
    owner = component if owns_subtree(component, quantity) else component._overridden_by[quantity]
    _cascade(component, quantity, owner)


def _cascade(node: RocketComponent, quantity: OverrideQuantity,
             owner: RocketComponent | None) -> None:
    for child in node._children:
        child._overridden_by[quantity] = owner
        _cascade(child, quantity, child if owns_subtree(child, quantity) else owner)
