"""
Model-wide tunables.

A ``Rocket`` carries its own ``ModelPreferences``; components that are not
attached to a rocket fall back to ``DEFAULT_PREFERENCES``.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ModelPreferences:
    """
    Numerical settings shared by every component of one rocket.

    Attributes
    ----------
    default_mach : float
        Mach number used when the natural CD of a component is evaluated
        for the override fields [-]
    clip_precision : float
        Bisection tolerance of the transition clip-length solver [m]
    clip_max_doublings : int
        Maximum number of times the clip-length upper bound is doubled
    position_epsilon : float
        Axial positions closer than this to zero snap to zero [m]
    min_feature : float
        Shoulders shorter than this are ignored in mass calculations [m]
    profile_divisions : int
        Number of intervals used to integrate body-of-revolution profiles
    """

    default_mach: float = 0.3
    clip_precision: float = 1e-4
    clip_max_doublings: int = 10
    position_epsilon: float = 1e-6
    min_feature: float = 0.001
    profile_divisions: int = 128

    def __post_init__(self):
        if self.clip_precision <= 0:
            raise ValueError(f"clip_precision must be positive, got {self.clip_precision}")
        if self.profile_divisions < 2:
            raise ValueError(f"profile_divisions must be at least 2, got {self.profile_divisions}")


DEFAULT_PREFERENCES = ModelPreferences()
