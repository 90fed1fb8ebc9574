"""
Body-of-revolution profile family for nose cones and transitions.

Every shape is a pure function ``radius(x, radius, length, param)`` giving
the profile radius at distance ``x`` from the tip of a body that starts at
zero radius and ends at ``radius`` after ``length``. All profiles are
monotonically non-decreasing on [0, length].

Boattails (shrinking transitions) are obtained by evaluating the profile
from the other end; see :func:`transition_radius`.

References
----------
.. [1] Crowell, G. A.: "The Descriptive Geometry of Nose Cones" (1996)
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .primitives import safe_sqrt

# Shape parameters below this are treated as degenerate
MIN_FEATURE = 0.001
POWER_EPSILON = 0.00001

# Clip solver: relative radius tolerance at the solved length, and bisection cap
CLIP_TOLERANCE = 1e-4
MAX_BISECTIONS = 200


def _conical(x: float, radius: float, length: float, param: float) -> float:
    return radius * x / length


def _ogive(x: float, radius: float, length: float, param: float) -> float:
    # Ogive is undefined for length < radius; scale the profile instead
    if length < radius:
        x = x * radius / length
        length = radius

    if param < MIN_FEATURE:
        return _conical(x, radius, length, param)

    rho = safe_sqrt((length ** 2 + radius ** 2)
                    * (((2 - param) * length) ** 2 + (param * radius) ** 2)
                    / (4 * (param * radius) ** 2))
    big_l = length / param
    y0 = safe_sqrt(rho ** 2 - big_l ** 2)
    return safe_sqrt(rho ** 2 - (big_l - x) ** 2) - y0


def _ellipsoid(x: float, radius: float, length: float, param: float) -> float:
    x = x * radius / length
    return safe_sqrt(2 * radius * x - x * x)


def _power(x: float, radius: float, length: float, param: float) -> float:
    if param <= POWER_EPSILON:
        return 0.0 if x <= POWER_EPSILON else radius
    return radius * (x / length) ** param


def _parabolic(x: float, radius: float, length: float, param: float) -> float:
    return radius * ((2 * x / length - param * (x / length) ** 2) / (2 - param))


def _haack(x: float, radius: float, length: float, param: float) -> float:
    theta = math.acos(min(max(1 - 2 * x / length, -1.0), 1.0))
    value = theta - math.sin(2 * theta) / 2
    if abs(param) > 1e-12:
        value += param * math.sin(theta) ** 3
    return radius * safe_sqrt(value / math.pi)


@dataclass(frozen=True)
class ShapeInfo:
    """Static description of one profile family."""

    label: str
    function: Callable[[float, float, float, float], float]
    clippable: bool = False
    uses_parameter: bool = False
    min_parameter: float = 0.0
    max_parameter: float = 1.0
    default_parameter: float = 0.0


class Shape(Enum):
    """
    Closed set of profile families.

    ========== ========== ========= ===============
    Shape      Clippable  Parameter Default
    ========== ========== ========= ===============
    CONICAL    no         -         -
    OGIVE      no         0..1      1.0 (tangent)
    ELLIPSOID  yes        -         -
    POWER      yes        0..1      0.5
    PARABOLIC  no         0..1      1.0
    HAACK      yes        0..1/3    0.0 (Von Karman)
    ========== ========== ========= ===============
    """

    CONICAL = "conical"
    OGIVE = "ogive"
    ELLIPSOID = "ellipsoid"
    POWER = "power"
    PARABOLIC = "parabolic"
    HAACK = "haack"

    @property
    def info(self) -> ShapeInfo:
        return _SHAPE_INFO[self]

    @property
    def label(self) -> str:
        return self.info.label

    @property
    def clippable(self) -> bool:
        return self.info.clippable

    @property
    def uses_parameter(self) -> bool:
        return self.info.uses_parameter

    @property
    def min_parameter(self) -> float:
        return self.info.min_parameter

    @property
    def max_parameter(self) -> float:
        return self.info.max_parameter

    @property
    def default_parameter(self) -> float:
        return self.info.default_parameter

    def clamp_parameter(self, param: float) -> float:
        return min(max(param, self.min_parameter), self.max_parameter)

    def radius(self, x: float, radius: float, length: float, param: float) -> float:
        """
        Profile radius at ``x`` for a body growing from 0 to ``radius``.

        Parameters
        ----------
        x : float
            Distance from the tip, 0 <= x <= length [m]
        radius : float
            Aft radius, >= 0 [m]
        length : float
            Profile length, > 0 [m]
        param : float
            Shape parameter within [min_parameter, max_parameter]

        Returns
        -------
        float
            Radius at x [m]

        Raises
        ------
        ValueError
            If x lies outside [0, length] or radius is negative.
        """
        if x < 0 or x > length:
            raise ValueError(f"x={x} outside profile range [0, {length}]")
        if radius < 0:
            raise ValueError(f"radius must be non-negative, got {radius}")
        return self.info.function(x, radius, length, param)

    @classmethod
    def from_name(cls, name: str) -> Shape:
        """Look up a shape by enum name, value or label (case-insensitive)."""
        key = name.strip().lower()
        for shape in cls:
            if key in (shape.name.lower(), shape.value, shape.label.lower()):
                return shape
        raise ValueError(f"Unknown shape '{name}'")

    def __str__(self) -> str:
        return self.label


_SHAPE_INFO: dict[Shape, ShapeInfo] = {
    Shape.CONICAL: ShapeInfo("Conical", _conical),
    Shape.OGIVE: ShapeInfo("Ogive", _ogive, uses_parameter=True, default_parameter=1.0),
    Shape.ELLIPSOID: ShapeInfo("Ellipsoid", _ellipsoid, clippable=True),
    Shape.POWER: ShapeInfo("Power series", _power, clippable=True, uses_parameter=True,
                           default_parameter=0.5),
    Shape.PARABOLIC: ShapeInfo("Parabolic series", _parabolic, uses_parameter=True,
                               default_parameter=1.0),
    Shape.HAACK: ShapeInfo("Haack series", _haack, clippable=True, uses_parameter=True,
                           max_parameter=1.0 / 3.0),
}


def solve_clip_length(shape: Shape, r1: float, r2: float, length: float, param: float,
                      precision: float = 1e-4, max_doublings: int = 10) -> float:
    """
    Solve the virtual extension that makes a clipped profile start at r1.

    Finds ``c`` such that ``shape.radius(c, r2, c + length, param) == r1``,
    i.e. the profile is extended forward by ``c`` so that the window
    [c, c + length] runs exactly from the smaller to the larger radius.

    The upper bound starts at ``length`` and is doubled (at most
    ``max_doublings`` times) until the profile exceeds r1 there; the root is
    then bisected until the bracket is narrower than ``precision`` and the
    radius at the midpoint matches r1 within ``CLIP_TOLERANCE`` (relative),
    or ``MAX_BISECTIONS`` steps have been taken.

    Parameters
    ----------
    shape : Shape
        Profile family (assumed monotonic)
    r1, r2 : float
        End radii; they are swapped if given in descending order [m]
    length : float
        Visible length of the transition [m]
    param : float
        Shape parameter
    precision : float
        Bisection tolerance [m]
    max_doublings : int
        Cap on upper-bound growth

    Returns
    -------
    float
        Clip length [m]. Exactly 0.0 when r1 == 0 or length <= 0.
    """
    if r1 > r2:
        r1, r2 = r2, r1
    if r1 == 0 or length <= 0:
        return 0.0

    lo, hi = 0.0, length
    doublings = 0
    while shape.radius(hi, r2, hi + length, param) - r1 < 0:
        lo = hi
        hi *= 2
        doublings += 1
        if doublings > max_doublings:
            break

    mid = (lo + hi) / 2
    for _ in range(MAX_BISECTIONS):
        mid = (lo + hi) / 2
        residual = shape.radius(mid, r2, mid + length, param) - r1
        if hi - lo < precision and abs(residual) <= CLIP_TOLERANCE * r1:
            return mid
        if residual > 0:
            hi = mid
        else:
            lo = mid
    return mid


def transition_radius(shape: Shape, x: float, fore_radius: float, aft_radius: float,
                      length: float, param: float, clip_length: float | None = None) -> float:
    """
    Outer radius of a transition between two arbitrary end radii.

    Outside [0, length] the nearest end radius is returned. When
    ``clip_length`` is given the profile is evaluated on the window
    [clip_length, clip_length + length] of the extended curve; otherwise the
    profile is scaled to the radius difference and offset by the smaller
    radius.
    """
    if x < 0:
        return fore_radius
    if x >= length:
        return aft_radius

    r1, r2 = fore_radius, aft_radius
    if r1 == r2:
        return r1
    if r1 > r2:
        x = length - x
        r1, r2 = r2, r1

    if clip_length is not None:
        return shape.radius(clip_length + x, r2, clip_length + length, param)
    return r1 + shape.radius(x, r2 - r1, length, param)
