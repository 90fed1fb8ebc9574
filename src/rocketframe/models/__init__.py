"""External collaborator contracts: aerodynamics and flight configuration."""

from .aerodynamics import AerodynamicCalculator, AerodynamicForces, FlightConditions
from .configuration import FlightConfiguration, Motor

__all__ = [
    "AerodynamicCalculator",
    "AerodynamicForces",
    "FlightConditions",
    "FlightConfiguration",
    "Motor",
]
