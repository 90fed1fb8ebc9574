"""Geometry primitives: coordinates, ring helpers, profiles and rotations."""

from .coordinate import NUL, ZERO, Coordinate
from .primitives import (
    add_bound,
    add_bounding_box,
    ring_cg,
    ring_longitudinal_unit_inertia,
    ring_mass,
    ring_rotational_unit_inertia,
    ring_volume,
    safe_sqrt,
)
from .shapes import Shape, solve_clip_length, transition_radius
from .transforms import axial_angles_to_vectors, rotate_points, rotation_from_angles

__all__ = [
    "Coordinate",
    "ZERO",
    "NUL",
    "safe_sqrt",
    "ring_mass",
    "ring_volume",
    "ring_cg",
    "ring_longitudinal_unit_inertia",
    "ring_rotational_unit_inertia",
    "add_bound",
    "add_bounding_box",
    "Shape",
    "solve_clip_length",
    "transition_radius",
    "axial_angles_to_vectors",
    "rotate_points",
    "rotation_from_angles",
]
