"""
Closed-form helpers for hollow cylinders (rings) and bounding boxes.

Unit inertias are moments of inertia of a 1 kg body about its own CG:
multiply by the mass to get the physical value [kg·m²].
"""
from __future__ import annotations

import math

from .coordinate import Coordinate


def safe_sqrt(value: float) -> float:
    """Square root that maps small negative round-off to zero."""
    if value <= 0.0:
        return 0.0
    return math.sqrt(value)


def ring_mass(outer_radius: float, inner_radius: float, length: float, density: float) -> float:
    """Mass of a hollow cylinder [kg]. Inverted radii give zero."""
    return math.pi * max(outer_radius ** 2 - inner_radius ** 2, 0.0) * length * density


def ring_volume(outer_radius: float, inner_radius: float, length: float) -> float:
    """Volume of a hollow cylinder [m³]."""
    return ring_mass(outer_radius, inner_radius, length, 1.0)


def ring_cg(outer_radius: float, inner_radius: float, x1: float, x2: float,
            density: float) -> Coordinate:
    """CG of a ring spanning [x1, x2], weighted with its mass."""
    return Coordinate((x1 + x2) / 2, 0.0, 0.0,
                      ring_mass(outer_radius, inner_radius, x2 - x1, density))


def ring_longitudinal_unit_inertia(outer_radius: float, inner_radius: float, length: float) -> float:
    """Unit inertia about a transverse axis through the CG: (3(ri²+ro²)+L²)/12."""
    return (3 * (inner_radius ** 2 + outer_radius ** 2) + length ** 2) / 12


def ring_rotational_unit_inertia(outer_radius: float, inner_radius: float) -> float:
    """Unit inertia about the symmetry axis: (ri²+ro²)/2."""
    return (inner_radius ** 2 + outer_radius ** 2) / 2


def add_bounding_box(bounds: list[Coordinate], x_min: float, x_max: float, r: float) -> None:
    """Append two opposite corners of a box of half-width r around the axis."""
    bounds.append(Coordinate(x_min, -r, -r))
    bounds.append(Coordinate(x_max, r, r))


def add_bound(bounds: list[Coordinate], x: float, r: float) -> None:
    """Append four points at radius r, 90° apart, at axial station x."""
    bounds.append(Coordinate(x, -r, -r))
    bounds.append(Coordinate(x, r, -r))
    bounds.append(Coordinate(x, r, r))
    bounds.append(Coordinate(x, -r, r))
