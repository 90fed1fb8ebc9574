"""
Flight configuration: which stages fly and which motors are loaded.

Components and stages are referenced by id so that a configuration survives
identity-preserving copies of the rocket.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rocketframe.components.base import RocketComponent


@dataclass(frozen=True)
class Motor:
    """
    Minimal motor description used by motor-mount diagnostics.

    Parameters
    ----------
    designation : str
        Motor designation, e.g. "G80"
    length : float
        Motor case length [m]
    max_thrust : float
        Peak thrust [N]
    """

    designation: str
    length: float = 0.0
    max_thrust: float = 0.0

    def __str__(self) -> str:
        return self.designation


class FlightConfiguration:
    """
    Stage activity and motor assignment for one flight.

    Parameters
    ----------
    name : str
        Display name of the configuration

    Examples
    --------
    >>> config = FlightConfiguration()
    >>> config.set_stage_active(booster, False)     # doctest: +SKIP
    >>> config.is_component_active(booster_tube)    # doctest: +SKIP
    False
    """

    def __init__(self, name: str = "Default") -> None:
        self.name = name
        self._inactive_stages: set[str] = set()
        self._motors: dict[str, Motor] = {}

    def is_stage_active(self, stage: RocketComponent) -> bool:
        return stage.id not in self._inactive_stages

    def set_stage_active(self, stage: RocketComponent, active: bool) -> None:
        if active:
            self._inactive_stages.discard(stage.id)
        else:
            self._inactive_stages.add(stage.id)

    def set_all_stages_active(self) -> None:
        self._inactive_stages.clear()

    def is_component_active(self, component: RocketComponent) -> bool:
        """A component is active when its stage (if any) is active."""
        stage = component.stage
        return stage is None or self.is_stage_active(stage)

    def set_motor(self, mount: RocketComponent, motor: Motor | None) -> None:
        if motor is None:
            self._motors.pop(mount.id, None)
        else:
            self._motors[mount.id] = motor

    def motor_for(self, mount: RocketComponent) -> Motor | None:
        return self._motors.get(mount.id)

    @property
    def motor_count(self) -> int:
        return len(self._motors)

    def copy(self) -> FlightConfiguration:
        clone = FlightConfiguration(self.name)
        clone._inactive_stages = set(self._inactive_stages)
        clone._motors = dict(self._motors)
        return clone

    def remap_ids(self, mapping: dict[str, str]) -> None:
        """Follow components whose ids were regenerated by a copy."""
        self._inactive_stages = {mapping.get(i, i) for i in self._inactive_stages}
        self._motors = {mapping.get(i, i): m for i, m in self._motors.items()}

    def __repr__(self) -> str:
        return (f"FlightConfiguration(name='{self.name}', "
                f"inactive={len(self._inactive_stages)}, motors={len(self._motors)})")
