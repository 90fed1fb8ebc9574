"""
Axial placement methods.

A component's stored ``axial_offset`` is interpreted through its
``AxialMethod`` to give the position of its fore end relative to the fore
end of its parent (the "position").
"""
from __future__ import annotations

from enum import Enum


class AxialMethod(Enum):
    """
    Anchor used to interpret an axial offset.

    ``as_position`` and ``as_offset`` are exact inverses for every member.
    The ``outer_length`` argument is the parent's length, except for AFTER,
    where it is the end of the reference sibling, and ABSOLUTE, where the
    caller translates between the rocket frame and the parent frame.

    ========= ==================================================
    Method    Position of the fore end
    ========= ==================================================
    ABSOLUTE  offset from the rocket tip
    AFTER     offset past the previous active sibling's end
    TOP       offset from the parent's fore end
    MIDDLE    centres aligned, plus offset
    BOTTOM    aft ends aligned, plus offset
    ========= ==================================================
    """

    ABSOLUTE = "absolute"
    AFTER = "after"
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"

    def as_position(self, offset: float, inner_length: float, outer_length: float) -> float:
        """Convert an offset into a parent-relative position [m]."""
        if self is AxialMethod.AFTER:
            return outer_length + offset
        if self is AxialMethod.MIDDLE:
            return offset + (outer_length - inner_length) / 2
        if self is AxialMethod.BOTTOM:
            return offset + (outer_length - inner_length)
        return offset

    def as_offset(self, position: float, inner_length: float, outer_length: float) -> float:
        """Convert a parent-relative position into an offset [m]."""
        if self is AxialMethod.AFTER:
            return position - outer_length
        if self is AxialMethod.MIDDLE:
            return position - (outer_length - inner_length) / 2
        if self is AxialMethod.BOTTOM:
            return position - (outer_length - inner_length)
        return position
