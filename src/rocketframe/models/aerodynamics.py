"""
Contract with the aerodynamic force solver.

The component model does not compute aerodynamics itself. A ``Rocket`` may
carry any object implementing :class:`AerodynamicCalculator`; components
query it for their natural drag coefficient.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rocketframe.components.base import RocketComponent
    from .configuration import FlightConfiguration


@dataclass(frozen=True)
class FlightConditions:
    """
    Free-stream conditions for one force evaluation.

    Parameters
    ----------
    configuration : FlightConfiguration | None
        Active flight configuration
    aoa : float
        Angle of attack [rad]
    theta : float
        Wind direction (roll position of the wind) [rad]
    mach : float
        Mach number [-]
    roll_rate : float
        Roll rate [rad/s]
    """

    configuration: Any = None
    aoa: float = 0.0
    theta: float = 0.0
    mach: float = 0.3
    roll_rate: float = 0.0


@dataclass
class AerodynamicForces:
    """Per-component force and coefficient breakdown."""

    component: Any = None
    cd: float = 0.0
    pressure_cd: float = 0.0
    base_cd: float = 0.0
    friction_cd: float = 0.0
    cn: float = 0.0
    cm: float = 0.0


@runtime_checkable
class AerodynamicCalculator(Protocol):
    """Anything that can decompose forces per component."""

    def get_force_analysis(
        self,
        configuration: FlightConfiguration,
        conditions: FlightConditions,
        warnings: set[str],
    ) -> Mapping[RocketComponent, AerodynamicForces]:
        ...
