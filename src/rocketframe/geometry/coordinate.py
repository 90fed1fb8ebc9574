"""
Weighted 3-D coordinate used for centres of gravity.

The ``weight`` slot carries the mass associated with the point, so that
several CGs can be combined with a mass-weighted average.
"""
from __future__ import annotations

from dataclasses import dataclass, replace

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Coordinate:
    """
    Immutable point (x, y, z) with an attached weight.

    Parameters
    ----------
    x, y, z : float
        Position [m]. x runs along the rocket axis, nose to tail.
    weight : float
        Mass associated with the point [kg]
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    weight: float = 0.0

    def add(self, other: Coordinate) -> Coordinate:
        """Component-wise sum. Weights are added as well."""
        return Coordinate(self.x + other.x, self.y + other.y, self.z + other.z,
                          self.weight + other.weight)

    def sub(self, other: Coordinate) -> Coordinate:
        """Component-wise difference of positions; keeps this weight."""
        return Coordinate(self.x - other.x, self.y - other.y, self.z - other.z, self.weight)

    def set_x(self, x: float) -> Coordinate:
        return replace(self, x=x)

    def set_weight(self, weight: float) -> Coordinate:
        return replace(self, weight=weight)

    def average(self, other: Coordinate) -> Coordinate:
        """
        Mass-weighted average of two coordinates.

        If both weights are zero the plain midpoint is returned with zero
        weight instead of dividing by zero.
        """
        total = self.weight + other.weight
        if abs(total) < 1e-12:
            return Coordinate((self.x + other.x) / 2, (self.y + other.y) / 2,
                              (self.z + other.z) / 2, 0.0)
        return Coordinate(
            (self.x * self.weight + other.x * other.weight) / total,
            (self.y * self.weight + other.y * other.weight) / total,
            (self.z * self.weight + other.z * other.weight) / total,
            total,
        )

    def to_array(self) -> NDArray[np.float64]:
        """Position as a (3,) float array (the weight is dropped)."""
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr, weight: float = 0.0) -> Coordinate:
        a = np.asarray(arr, dtype=np.float64)
        return cls(float(a[0]), float(a[1]), float(a[2]), weight)

    def __str__(self) -> str:
        return f"({self.x:.4f}, {self.y:.4f}, {self.z:.4f}; w={self.weight:.4f})"


ZERO = Coordinate(0.0, 0.0, 0.0, 0.0)
NUL = Coordinate(float("nan"), float("nan"), float("nan"), float("nan"))
