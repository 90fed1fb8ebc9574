"""
Assemblies: the rocket root and its stages.

Assemblies have no physical substance of their own. Their length spans
their children, and their mass, CG and inertias are zero unless overridden.
"""
from __future__ import annotations

import logging

from rocketframe.config import DEFAULT_PREFERENCES, ModelPreferences
from rocketframe.geometry import ZERO, Coordinate
from rocketframe.models.aerodynamics import AerodynamicCalculator
from rocketframe.models.configuration import FlightConfiguration

from .axial import AxialMethod
from .base import _RUNTIME_KEYS, RocketComponent
from .events import ChangeBus, ChangeType

logger = logging.getLogger(__name__)


class ComponentAssembly(RocketComponent):
    """Grouping node whose length spans its children."""

    @property
    def length(self) -> float:
        self._check_state()
        end = 0.0
        for child in self._children:
            end = max(end, float(child._position[0]) + child.length)
        return end

    @property
    def component_mass(self) -> float:
        return 0.0

    @property
    def component_cg(self) -> Coordinate:
        return ZERO

    @property
    def longitudinal_unit_inertia(self) -> float:
        return 0.0

    @property
    def rotational_unit_inertia(self) -> float:
        return 0.0

    @property
    def allows_children(self) -> bool:
        return True

    @property
    def component_bounds(self) -> list[Coordinate]:
        return []

    @property
    def is_aerodynamic(self) -> bool:
        return False

    @property
    def is_massive(self) -> bool:
        return False


class AxialStage(ComponentAssembly):
    """
    One stage of the rocket, stacked after the previous stage.

    Renaming a stage is reported as a tree change because stage names
    appear in configuration listings.
    """

    _rename_change = ChangeType.TREE

    def __init__(self) -> None:
        super().__init__(AxialMethod.AFTER)

    @property
    def component_name(self) -> str:
        return "Stage"

    def is_compatible(self, component_type) -> bool:
        from .body import BodyComponent

        cls = component_type if isinstance(component_type, type) else type(component_type)
        return issubclass(cls, BodyComponent)


class Rocket(ComponentAssembly):
    """
    Root of a component tree.

    Parameters
    ----------
    change_bus : ChangeBus | None
        Bus shared by the whole tree. A new bus is created if omitted.
    preferences : ModelPreferences | None
        Numerical settings; defaults to ``DEFAULT_PREFERENCES``
    configuration : FlightConfiguration | None
        Selected flight configuration; a default one is created if omitted
    aerodynamic_calculator : AerodynamicCalculator | None
        Solver used for the natural CD of components

    Attributes
    ----------
    change_bus : ChangeBus
        Listener registry and modification counters
    stages : list[AxialStage]
        Stages in tree order

    Examples
    --------
    >>> rocket = Rocket()
    >>> sustainer = AxialStage()
    >>> rocket.add_child(sustainer)
    >>> rocket.stage_count
    1
    """

    def __init__(
        self,
        change_bus: ChangeBus | None = None,
        preferences: ModelPreferences | None = None,
        configuration: FlightConfiguration | None = None,
        aerodynamic_calculator: AerodynamicCalculator | None = None,
    ) -> None:
        super().__init__(AxialMethod.ABSOLUTE)
        self._bus = change_bus if change_bus is not None else ChangeBus()
        self._preferences = preferences if preferences is not None else DEFAULT_PREFERENCES
        self._configuration = configuration if configuration is not None else FlightConfiguration()
        self._aerodynamic_calculator = aerodynamic_calculator

    @property
    def component_name(self) -> str:
        return "Rocket"

    def is_compatible(self, component_type) -> bool:
        cls = component_type if isinstance(component_type, type) else type(component_type)
        return issubclass(cls, AxialStage)

    # -------------------------------------------------------------------------
    # Owned collaborators
    # -------------------------------------------------------------------------

    @property
    def _change_bus(self) -> ChangeBus:
        return self._bus

    @property
    def change_bus(self) -> ChangeBus:
        return self._bus

    @property
    def preferences(self) -> ModelPreferences:
        return self._preferences

    @preferences.setter
    def preferences(self, value: ModelPreferences) -> None:
        self._preferences = value
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def selected_configuration(self) -> FlightConfiguration:
        return self._configuration

    @selected_configuration.setter
    def selected_configuration(self, configuration: FlightConfiguration) -> None:
        self._configuration = configuration
        self.fire_component_change_event(ChangeType.TREE)

    @property
    def aerodynamic_calculator(self) -> AerodynamicCalculator | None:
        return self._aerodynamic_calculator

    @aerodynamic_calculator.setter
    def aerodynamic_calculator(self, calculator: AerodynamicCalculator | None) -> None:
        self._aerodynamic_calculator = calculator
        self.fire_component_change_event(ChangeType.AERODYNAMIC)

    def set_stage_active(self, stage: AxialStage, active: bool) -> None:
        """Activate or deactivate a stage in the selected configuration."""
        self._configuration.set_stage_active(stage, active)
        self.fire_component_change_event(ChangeType.TREE)

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    @property
    def stages(self) -> list[AxialStage]:
        return self.sub_stages

    @property
    def stage_count(self) -> int:
        return len(self.sub_stages)

    # -------------------------------------------------------------------------
    # Freeze / thaw shortcuts
    # -------------------------------------------------------------------------

    def freeze(self) -> None:
        self._bus.freeze()

    def thaw(self) -> None:
        self._bus.thaw()

    # -------------------------------------------------------------------------
    # Copying
    # -------------------------------------------------------------------------

    def _reset_runtime_state(self) -> None:
        super()._reset_runtime_state()
        self._bus = ChangeBus()
        self._configuration = self._configuration.copy()

    def _ids_regenerated(self, mapping: dict[str, str]) -> None:
        self._configuration.remap_ids(mapping)

    def _runtime_keys(self) -> frozenset[str]:
        return _RUNTIME_KEYS | {"_bus"}

    def load_from(self, src: Rocket) -> None:
        """
        Replace this rocket's design with ``src`` in place.

        Every former descendant and every node of ``src`` is invalidated;
        listeners registered on this rocket receive one tree change event.
        """
        with self._bus.frozen():
            stale = self.copy_from(src)
            self._configuration = self._configuration.copy()
            logger.debug("Loaded %s into %s, invalidating %d components",
                         src.debug_name, self.debug_name, len(stale))
            self.fire_component_change_event(ChangeType.TREE | ChangeType.BOTH)
        for component in stale:
            component.invalidate()

    # -------------------------------------------------------------------------
    # Debug
    # -------------------------------------------------------------------------

    def to_debug_tree(self) -> str:
        text = super().to_debug_tree()
        return text + f"   {self._configuration!r}\n"
