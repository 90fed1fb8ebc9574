"""
Validation helpers for geometry and physical parameters.

Hard violations raise ``ValueError``; questionable but usable values issue a
``RuntimeWarning``.
"""
from __future__ import annotations

import math
import warnings


def validate_finite(value: float, name: str) -> None:
    """Reject NaN and infinities."""
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value}")


def validate_non_negative(value: float, name: str) -> None:
    """
    Validate that a length, radius, thickness or mass is usable.

    Raises
    ------
    ValueError
        If the value is NaN, infinite or below zero
    """
    validate_finite(value, name)
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


def validate_shape_parameter(value: float, low: float, high: float, name: str) -> float:
    """
    Clamp a shape parameter into [low, high], warning when clamping.

    Returns
    -------
    float
        The clamped value
    """
    validate_finite(value, name)
    if value < low or value > high:
        clamped = min(max(value, low), high)
        warnings.warn(
            f"{name}={value} outside [{low}, {high}]; using {clamped}",
            RuntimeWarning,
            stacklevel=3,
        )
        return clamped
    return value
