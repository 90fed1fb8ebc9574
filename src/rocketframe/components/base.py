"""
Base class of every node in the component tree.

``RocketComponent`` owns the tree structure (parent link and ordered
children), axial placement, instancing, the mass/CG/CD overrides and the
forwarding of change events to the root's :class:`ChangeBus`.

Concrete categories implement the physical primitives (``component_mass``,
``component_cg``, unit inertias, bounds) and declare which children they
accept.
"""
from __future__ import annotations

import copy as _copy
import logging
import math
import uuid
import warnings
from abc import ABC, abstractmethod
from contextlib import contextmanager, nullcontext
from typing import TYPE_CHECKING, Any, Iterator

import numpy as np
from numpy.typing import NDArray

from rocketframe.config import DEFAULT_PREFERENCES, ModelPreferences
from rocketframe.errors import (
    BugError,
    ComponentTreeError,
    ConcurrentModificationError,
    InvalidatedComponentError,
)
from rocketframe.geometry import Coordinate, rotate_points
from rocketframe.models.aerodynamics import FlightConditions
from rocketframe.utils.validation import validate_finite, validate_non_negative

from .axial import AxialMethod
from .events import ChangeBus, ChangeType, ComponentChangeEvent
from .mutex import SafetyMutex
from .overrides import OverrideQuantity, cascade_override_owners, is_overridden_by_ancestor

if TYPE_CHECKING:
    from .preset import ComponentPreset
    from .rocket import AxialStage, Rocket

logger = logging.getLogger(__name__)

# Attributes that describe a node's place in a tree or its runtime state
# rather than its design; never copied between components.
_RUNTIME_KEYS = frozenset({
    "_mutex", "_parent", "_children", "_config_listeners", "_bypass",
    "_invalidated", "_overridden_by", "_local_mod_id",
})


class RocketComponent(ABC):
    """
    A node of the component tree.

    Parameters
    ----------
    axial_method : AxialMethod
        Initial placement method

    Attributes
    ----------
    id : str
        Process-unique identifier (uuid4). Preserved by
        :meth:`copy_with_original_id`, regenerated by :meth:`copy`.
    name : str
        Display name; a blank name resets to :attr:`component_name`
    axial_method : AxialMethod
        Anchor used to interpret :attr:`axial_offset`
    axial_offset : float
        Offset along the parent axis [m]
    position : NDArray[np.float64]
        Fore-end position relative to the parent's fore end (3,) [m]

    Notes
    -----
    All mutations end in :meth:`fire_component_change_event`, which
    refreshes positions and caches of the whole tree and then forwards the
    event to the root's bus. A node flagged with ``bypass_change_event``
    (a config listener replica) never fires.

    Examples
    --------
    >>> rocket = Rocket()
    >>> stage = AxialStage()
    >>> rocket.add_child(stage)
    >>> tube = BodyTube(length=0.5, outer_radius=0.03)
    >>> stage.add_child(tube)
    >>> tube.component_locations
    array([[0., 0., 0.]])
    """

    # Change type fired when the component is renamed
    _rename_change = ChangeType.NONFUNCTIONAL

    def __init__(self, axial_method: AxialMethod = AxialMethod.AFTER) -> None:
        self._mutex = SafetyMutex()
        self._id = str(uuid.uuid4())
        self._parent: RocketComponent | None = None
        self._children: list[RocketComponent] = []

        self._name = self.component_name
        self._comment = ""
        self._visible = True

        self._length = 0.0
        self._axial_method = axial_method
        self._axial_offset = 0.0
        self._position = np.zeros(3, dtype=np.float64)

        self._override_mass = 0.0
        self._mass_overridden = False
        self._override_subcomponents_mass = False
        self._override_cg_x = 0.0
        self._cg_overridden = False
        self._override_subcomponents_cg = False
        self._override_cd = 0.0
        self._cd_overridden = False
        self._override_subcomponents_cd = False
        self._overridden_by: dict[OverrideQuantity, RocketComponent | None] = {
            q: None for q in OverrideQuantity
        }

        self._preset: ComponentPreset | None = None
        self._ignore_preset_clearing = False

        self._bypass = False
        self._config_listeners: list[RocketComponent] = []
        self._invalidated: str | None = None
        self._local_mod_id = 0

    # =========================================================================
    # Category primitives
    # =========================================================================

    @property
    @abstractmethod
    def component_name(self) -> str:
        """Default display name of this category."""

    @property
    @abstractmethod
    def component_mass(self) -> float:
        """Mass computed from geometry and material [kg]."""

    @property
    @abstractmethod
    def component_cg(self) -> Coordinate:
        """CG in the component frame, weighted with :attr:`component_mass`."""

    @property
    @abstractmethod
    def longitudinal_unit_inertia(self) -> float:
        """Transverse moment of inertia of a 1 kg body about its CG [m²]."""

    @property
    @abstractmethod
    def rotational_unit_inertia(self) -> float:
        """Axial moment of inertia of a 1 kg body [m²]."""

    @property
    @abstractmethod
    def allows_children(self) -> bool:
        ...

    @abstractmethod
    def is_compatible(self, component_type) -> bool:
        """
        Whether a child of the given type (or component) may be added.

        Parameters
        ----------
        component_type : type | RocketComponent
            Candidate class or instance
        """

    @property
    @abstractmethod
    def component_bounds(self) -> list[Coordinate]:
        """Points bounding the component in its own frame."""

    @property
    @abstractmethod
    def is_aerodynamic(self) -> bool:
        ...

    @property
    @abstractmethod
    def is_massive(self) -> bool:
        ...

    # =========================================================================
    # Identity and metadata
    # =========================================================================

    @property
    def id(self) -> str:
        return self._id

    @property
    def debug_name(self) -> str:
        return f"{self._name} ({self._id[:8]})"

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(self) is not type(other):
            return False
        return self._id == other._id

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._id))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self._name}', id='{self._id[:8]}')"

    @property
    def name(self) -> str:
        self._check_state()
        return self._name

    @name.setter
    def name(self, value: str | None) -> None:
        self._mirror("name", value)
        if value is None or not value.strip():
            value = self.component_name
        if value == self._name:
            return
        self._name = value
        self.fire_component_change_event(self._rename_change)

    @property
    def comment(self) -> str:
        self._check_state()
        return self._comment

    @comment.setter
    def comment(self, value: str | None) -> None:
        self._mirror("comment", value)
        value = "" if value is None else value
        if value == self._comment:
            return
        self._comment = value
        self.fire_component_change_event(ChangeType.NONFUNCTIONAL)

    @property
    def visible(self) -> bool:
        self._check_state()
        return self._visible

    @visible.setter
    def visible(self, value: bool) -> None:
        self._mirror("visible", value)
        if bool(value) == self._visible:
            return
        self._visible = bool(value)
        self.fire_component_change_event(ChangeType.GRAPHIC)

    @property
    def preferences(self) -> ModelPreferences:
        rocket = self.rocket
        return rocket.preferences if rocket is not None else DEFAULT_PREFERENCES

    # =========================================================================
    # Geometry and placement
    # =========================================================================

    @property
    def length(self) -> float:
        self._check_state()
        return self._length

    @length.setter
    def length(self, value: float) -> None:
        self._mirror("length", value)
        validate_non_negative(value, "length")
        if value == self._length:
            return
        self._length = float(value)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def axial_method(self) -> AxialMethod:
        self._check_state()
        return self._axial_method

    @axial_method.setter
    def axial_method(self, method: AxialMethod) -> None:
        """Change the anchor, re-basing the offset so the component stays put."""
        self._mirror("axial_method", method)
        if method is self._axial_method:
            return
        self._axial_offset = self.get_axial_offset(method)
        self._axial_method = method
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def axial_offset(self) -> float:
        self._check_state()
        return self._axial_offset

    @axial_offset.setter
    def axial_offset(self, value: float) -> None:
        self._mirror("axial_offset", value)
        self._set_axial_offset(self._axial_method, float(value))
        self.fire_component_change_event(ChangeType.BOTH)

    def set_axial_offset(self, method: AxialMethod, offset: float) -> None:
        """Set method and offset together; the component moves."""
        self._mirror("axial_method", method)
        self._mirror("axial_offset", offset)
        self._set_axial_offset(method, float(offset))
        self.fire_component_change_event(ChangeType.BOTH)

    def get_axial_offset(self, method: AxialMethod) -> float:
        """Current position expressed as an offset under ``method``."""
        self._check_state()
        x = float(self._position[0])
        if self._parent is None:
            return x
        if method is AxialMethod.ABSOLUTE:
            return float(self.component_locations[0][0])
        if method is AxialMethod.AFTER:
            return method.as_offset(x, self.length, self._after_reference_end())
        return method.as_offset(x, self.length, self._parent.length)

    @property
    def position(self) -> NDArray[np.float64]:
        self._check_state()
        return self._position.copy()

    @property
    def x(self) -> float:
        self._check_state()
        return float(self._position[0])

    def update(self) -> None:
        """Recompute the position from method, offset and lengths."""
        self._set_axial_offset(self._axial_method, self._axial_offset)

    def _set_axial_offset(self, method: AxialMethod, requested: float) -> None:
        parent = self._parent
        if parent is None:
            new_x = requested
        elif method is AxialMethod.ABSOLUTE:
            new_x = requested - float(parent.component_locations[0][0])
        elif method is AxialMethod.AFTER:
            new_x = method.as_position(requested, self.length, self._after_reference_end())
        else:
            new_x = method.as_position(requested, self.length, parent.length)

        if math.isnan(new_x):
            raise BugError(f"Computed NaN position for {self.debug_name} "
                           f"(method={method.name}, offset={requested})")
        if abs(new_x) < self.preferences.position_epsilon:
            new_x = 0.0

        self._axial_method = method
        self._axial_offset = requested
        self._position[0] = new_x

    def _after_reference_end(self) -> float:
        """End of the previous active sibling, or 0 at the parent's fore end."""
        parent = self._parent
        index = parent.child_position(self)
        configuration = self._selected_configuration()
        for sibling in reversed(parent._children[:index]):
            if configuration is None or configuration.is_component_active(sibling):
                return float(sibling._position[0]) + sibling.length
        return 0.0

    def _selected_configuration(self):
        rocket = self.rocket
        return rocket.selected_configuration if rocket is not None else None

    # =========================================================================
    # Instancing and coordinate transforms
    # =========================================================================

    @property
    def instance_count(self) -> int:
        return 1

    @instance_count.setter
    def instance_count(self, value: int) -> None:
        warnings.warn(
            f"{type(self).__name__} is a single-instance component; "
            f"ignoring instance_count={value}",
            RuntimeWarning,
            stacklevel=2,
        )

    @property
    def instance_offsets(self) -> NDArray[np.float64]:
        """Per-instance offsets from the component position (I, 3) [m]."""
        return np.zeros((self.instance_count, 3), dtype=np.float64)

    @property
    def instance_angles(self) -> NDArray[np.float64]:
        """Per-instance rotation angles about x, y, z (I, 3) [rad]."""
        return np.zeros((self.instance_count, 3), dtype=np.float64)

    @property
    def instance_locations(self) -> NDArray[np.float64]:
        """Instance positions relative to the parent's fore end (I, 3) [m]."""
        return self.instance_offsets + self._position

    @property
    def component_locations(self) -> NDArray[np.float64]:
        """
        Absolute positions of every instance (P*I, 3) [m].

        Entry ``pi + P*ii`` is instance ``ii`` placed on parent instance
        ``pi``, rotated by that parent instance's angles.
        """
        self._check_state()
        instance_locations = self.instance_locations
        if self._parent is None:
            return instance_locations

        parent_locations = self._parent.component_locations
        parent_angles = self._parent.component_angles
        n_parent = len(parent_locations)
        n_instance = len(instance_locations)

        if n_parent == 1 and n_instance == 1 and not np.any(parent_angles[0]):
            return parent_locations + instance_locations

        result = np.empty((n_parent * n_instance, 3), dtype=np.float64)
        for pi in range(n_parent):
            rotated = rotate_points(parent_angles[pi], instance_locations)
            for ii in range(n_instance):
                result[pi + n_parent * ii] = parent_locations[pi] + rotated[ii]
        return result

    @property
    def component_angles(self) -> NDArray[np.float64]:
        """Absolute angles of every instance, same ordering as locations."""
        instance_angles = self.instance_angles
        if self._parent is None:
            return instance_angles
        parent_angles = self._parent.component_angles
        n_parent = len(parent_angles)
        n_instance = len(instance_angles)
        result = np.empty((n_parent * n_instance, 3), dtype=np.float64)
        for pi in range(n_parent):
            for ii in range(n_instance):
                result[pi + n_parent * ii] = parent_angles[pi] + instance_angles[ii]
        return result

    def to_absolute(self, c: Coordinate | NDArray[np.float64]) -> NDArray[np.float64]:
        """
        Convert a point in this component's frame to the rocket frame.

        Returns
        -------
        NDArray[np.float64]
            One row per instance (N, 3)
        """
        point = c.to_array() if isinstance(c, Coordinate) else np.asarray(c, dtype=np.float64)
        return self.component_locations + point

    def to_relative(self, c: Coordinate | NDArray[np.float64],
                    dest: RocketComponent | None) -> NDArray[np.float64]:
        """
        Convert a point in this frame to the frame of ``dest``.

        Every (source instance, destination instance) pair yields a row,
        ordered ``s * D + d``. ``dest=None`` means the rocket frame.
        """
        absolute = self.to_absolute(c)
        if dest is None:
            return absolute
        dest_locations = dest.component_locations
        return (absolute[:, np.newaxis, :] - dest_locations[np.newaxis, :, :]).reshape(-1, 3)

    def split_instances(self) -> list[RocketComponent]:
        """
        Replace this multi-instance component by one copy per instance.

        The copies take this component's place among its siblings, each with
        a single instance at the location of the instance it replaces, named
        ``"<name> #k"`` and carrying ``1/n`` of the override mass. Config
        listeners of the same category are released and split as well. The
        whole operation reaches listeners of the rocket as one event.

        Returns
        -------
        list[RocketComponent]
            The new components in order, or ``[self]`` when there is nothing
            to split (single instance or no parent).
        """
        self._check_state()
        count = self.instance_count
        parent = self._parent
        if count <= 1 or parent is None:
            return [self]

        pieces: list[RocketComponent] = []
        with self._frozen_root():
            index = parent.child_position(self)
            name = self.name
            share = self.override_mass / count
            parent.remove_child(self)
            for i in range(count):
                piece = self.copy()
                piece._isolate_instance(i)
                piece.name = f"{name} #{i + 1}"
                piece.override_mass = share
                parent.add_child(piece, index + i)
                pieces.append(piece)

            for listener in list(self._config_listeners):
                if isinstance(listener, type(self)):
                    self.remove_config_listener(listener)
                    listener.split_instances()
            logger.debug("Split %s into %d components", self.debug_name, count)
            parent.fire_component_change_event(ChangeType.TREE)
        return pieces

    def _isolate_instance(self, index: int) -> None:
        """Reduce a fresh copy to instance ``index`` of the original."""

    # =========================================================================
    # Effective physical values
    # =========================================================================

    @property
    def mass(self) -> float:
        """Effective mass: the override if enabled, else the computed mass [kg]."""
        self._check_state()
        return self._override_mass if self._mass_overridden else self.component_mass

    @property
    def section_mass(self) -> float:
        """Effective mass of this component and its subtree [kg]."""
        total = self.mass
        if self._mass_overridden and self._override_subcomponents_mass:
            return total
        for child in self._children:
            total += child.section_mass
        return total

    @property
    def cg(self) -> Coordinate:
        """Effective CG in the component frame, weighted with :attr:`mass`."""
        self._check_state()
        cg = self.component_cg
        if self._cg_overridden:
            cg = cg.set_x(self._override_cg_x)
        return cg.set_weight(self.mass)

    @property
    def longitudinal_inertia(self) -> float:
        return self.longitudinal_unit_inertia * self.mass

    @property
    def rotational_inertia(self) -> float:
        return self.rotational_unit_inertia * self.mass

    def component_cd(self, aoa: float = 0.0, theta: float = 0.0,
                     mach: float | None = None, roll_rate: float = 0.0) -> float:
        """
        Natural drag coefficient from the rocket's aerodynamic calculator.

        Returns 0.0 when the component is not in a rocket or no calculator is
        attached.
        """
        rocket = self.rocket
        if rocket is None or rocket.aerodynamic_calculator is None:
            return 0.0
        if mach is None:
            mach = self.preferences.default_mach
        conditions = FlightConditions(rocket.selected_configuration, aoa, theta, mach, roll_rate)
        solver_warnings: set[str] = set()
        forces = rocket.aerodynamic_calculator.get_force_analysis(
            rocket.selected_configuration, conditions, solver_warnings)
        for message in sorted(solver_warnings):
            logger.debug("Aerodynamic warning for %s: %s", self.debug_name, message)
        result = forces.get(self)
        return 0.0 if result is None else float(result.cd)

    # =========================================================================
    # Overrides
    # =========================================================================

    @property
    def override_mass(self) -> float:
        """Override mass [kg]; tracks the computed mass while disabled."""
        self._check_state()
        if not self._mass_overridden:
            self._override_mass = self.component_mass
        return self._override_mass

    @override_mass.setter
    def override_mass(self, value: float) -> None:
        self._mirror("override_mass", value)
        value = max(float(value), 0.0)
        if value == self._override_mass:
            return
        self._override_mass = value
        self.fire_component_change_event(
            ChangeType.MASS if self._mass_overridden else ChangeType.NONFUNCTIONAL)

    @property
    def mass_overridden(self) -> bool:
        self._check_state()
        return self._mass_overridden

    @mass_overridden.setter
    def mass_overridden(self, value: bool) -> None:
        self._set_override_flag(OverrideQuantity.MASS, "_mass_overridden", value)

    @property
    def override_subcomponents_mass(self) -> bool:
        self._check_state()
        return self._override_subcomponents_mass

    @override_subcomponents_mass.setter
    def override_subcomponents_mass(self, value: bool) -> None:
        self._set_subtree_flag(OverrideQuantity.MASS, "_override_subcomponents_mass", value)

    @property
    def override_cg_x(self) -> float:
        """Override CG position [m]; tracks the computed CG while disabled."""
        self._check_state()
        if not self._cg_overridden:
            self._override_cg_x = self.component_cg.x
        return self._override_cg_x

    @override_cg_x.setter
    def override_cg_x(self, value: float) -> None:
        self._mirror("override_cg_x", value)
        validate_finite(value, "override_cg_x")
        if value == self._override_cg_x:
            return
        self._override_cg_x = float(value)
        self.fire_component_change_event(
            ChangeType.MASS if self._cg_overridden else ChangeType.NONFUNCTIONAL)

    @property
    def override_cg(self) -> Coordinate:
        return self.component_cg.set_x(self.override_cg_x)

    @property
    def cg_overridden(self) -> bool:
        self._check_state()
        return self._cg_overridden

    @cg_overridden.setter
    def cg_overridden(self, value: bool) -> None:
        self._set_override_flag(OverrideQuantity.CG, "_cg_overridden", value)

    @property
    def override_subcomponents_cg(self) -> bool:
        self._check_state()
        return self._override_subcomponents_cg

    @override_subcomponents_cg.setter
    def override_subcomponents_cg(self, value: bool) -> None:
        self._set_subtree_flag(OverrideQuantity.CG, "_override_subcomponents_cg", value)

    @property
    def override_cd(self) -> float:
        """Override drag coefficient; tracks the computed CD while disabled."""
        self._check_state()
        if not self._cd_overridden:
            self._override_cd = self.component_cd()
        return self._override_cd

    @override_cd.setter
    def override_cd(self, value: float) -> None:
        self._mirror("override_cd", value)
        validate_finite(value, "override_cd")
        if value == self._override_cd:
            return
        self._override_cd = float(value)
        if self._cd_overridden:
            if self._override_subcomponents_cd:
                cascade_override_owners(self, OverrideQuantity.CD)
            self.fire_component_change_event(ChangeType.AERODYNAMIC)
        else:
            self.fire_component_change_event(ChangeType.NONFUNCTIONAL)

    @property
    def cd_overridden(self) -> bool:
        self._check_state()
        return self._cd_overridden

    @cd_overridden.setter
    def cd_overridden(self, value: bool) -> None:
        self._set_override_flag(OverrideQuantity.CD, "_cd_overridden", value)

    @property
    def override_subcomponents_cd(self) -> bool:
        self._check_state()
        return self._override_subcomponents_cd

    @override_subcomponents_cd.setter
    def override_subcomponents_cd(self, value: bool) -> None:
        self._set_subtree_flag(OverrideQuantity.CD, "_override_subcomponents_cd", value)

    @property
    def override_subcomponents_enabled(self) -> bool:
        """True if any of the three overrides applies to subcomponents."""
        self._check_state()
        return (self._override_subcomponents_mass or self._override_subcomponents_cg
                or self._override_subcomponents_cd)

    def set_subcomponents_overridden(self, value: bool) -> None:
        """Set the subtree flag of mass, CG and CD at once (one event)."""
        with self._frozen_root():
            self.override_subcomponents_mass = value
            self.override_subcomponents_cg = value
            self.override_subcomponents_cd = value

    @property
    def mass_overridden_by(self) -> RocketComponent | None:
        return self._overridden_by[OverrideQuantity.MASS]

    @property
    def cg_overridden_by(self) -> RocketComponent | None:
        return self._overridden_by[OverrideQuantity.CG]

    @property
    def cd_overridden_by(self) -> RocketComponent | None:
        return self._overridden_by[OverrideQuantity.CD]

    def overridden_by(self, quantity: OverrideQuantity) -> RocketComponent | None:
        return self._overridden_by[quantity]

    @property
    def is_mass_overridden_by_ancestor(self) -> bool:
        return is_overridden_by_ancestor(self, OverrideQuantity.MASS)

    @property
    def is_cg_overridden_by_ancestor(self) -> bool:
        return is_overridden_by_ancestor(self, OverrideQuantity.CG)

    @property
    def is_cd_overridden_by_ancestor(self) -> bool:
        return is_overridden_by_ancestor(self, OverrideQuantity.CD)

    def _set_override_flag(self, quantity: OverrideQuantity, attr: str, value: bool) -> None:
        self._mirror(quantity.enabled_attr, value)
        value = bool(value)
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        cascade_override_owners(self, quantity)
        self.fire_component_change_event(
            ChangeType.AERODYNAMIC if quantity is OverrideQuantity.CD else ChangeType.MASS)

    def _set_subtree_flag(self, quantity: OverrideQuantity, attr: str, value: bool) -> None:
        self._mirror(quantity.subtree_attr, value)
        value = bool(value)
        if getattr(self, attr) == value:
            return
        setattr(self, attr, value)
        cascade_override_owners(self, quantity)
        base = ChangeType.AERODYNAMIC if quantity is OverrideQuantity.CD else ChangeType.MASS
        self.fire_component_change_event(base | ChangeType.TREE_CHILDREN)

    # =========================================================================
    # Presets
    # =========================================================================

    @property
    def preset(self) -> ComponentPreset | None:
        return self._preset

    def load_preset(self, preset: ComponentPreset | None) -> None:
        """
        Apply catalog values to this component.

        Raises
        ------
        ValueError
            If the preset describes a different component category.
        """
        if preset is None:
            self.clear_preset()
            return
        if not isinstance(self, preset.component_type):
            raise ValueError(f"Preset for {preset.component_type.__name__} cannot be "
                             f"applied to {type(self).__name__}")
        with self._frozen_root():
            self._ignore_preset_clearing = True
            try:
                self._load_from_preset(preset)
            finally:
                self._ignore_preset_clearing = False
            self._preset = preset
            self.fire_component_change_event(ChangeType.NONFUNCTIONAL)

    def _load_from_preset(self, preset: ComponentPreset) -> None:
        """Copy catalog values into fields. Subclasses extend this."""
        from .preset import PresetKey

        if preset.has(PresetKey.MASS):
            mass = preset.get(PresetKey.MASS)
            if mass > 0:
                self.override_mass = mass
                self.mass_overridden = True

    def clear_preset(self) -> None:
        if self._preset is None or self._ignore_preset_clearing:
            return
        self._preset = None
        self.fire_component_change_event(ChangeType.NONFUNCTIONAL)

    # =========================================================================
    # Copying and invalidation
    # =========================================================================

    def copy(self) -> RocketComponent:
        """Deep copy of this subtree with fresh ids."""
        clone = self.copy_with_original_id()
        mapping: dict[str, str] = {}
        for node in clone._walk():
            new_id = str(uuid.uuid4())
            mapping[node._id] = new_id
            node._id = new_id
        for node in clone._walk():
            node._ids_regenerated(mapping)
        return clone

    def copy_with_original_id(self) -> RocketComponent:
        """Deep copy of this subtree keeping every id. The copy is a new root."""
        self._check_state()
        clone = self._copy_subtree()
        for quantity in OverrideQuantity:
            cascade_override_owners(clone, quantity)
        clone._update_tree()
        return clone

    def _copy_subtree(self) -> RocketComponent:
        clone = _copy.copy(self)
        clone._reset_runtime_state()
        for child in self._children:
            child_clone = child._copy_subtree()
            child_clone._parent = clone
            clone._children.append(child_clone)
        return clone

    def _reset_runtime_state(self) -> None:
        """Give a shallow copy its own structural and runtime state."""
        self._mutex = SafetyMutex()
        self._parent = None
        self._children = []
        self._config_listeners = []
        self._bypass = False
        self._invalidated = None
        self._local_mod_id = 0
        self._position = self._position.copy()
        self._overridden_by = {q: None for q in OverrideQuantity}

    def _ids_regenerated(self, mapping: dict[str, str]) -> None:
        """Hook called on every node after :meth:`copy` assigned new ids."""

    def copy_from(self, src: RocketComponent) -> list[RocketComponent]:
        """
        Replace this root's design and children with those of ``src``.

        Returns
        -------
        list[RocketComponent]
            The former descendants of this component and every node of
            ``src``. They must be invalidated by the caller.

        Raises
        ------
        ComponentTreeError
            If this component has a parent.
        """
        self._check_state()
        if self._parent is not None:
            raise ComponentTreeError(f"copy_from called on non-root {self.debug_name}")

        stale = list(self.iterator(return_self=False))
        for child in self._children:
            child._parent = None
        self._children = []
        for child in src._children:
            child_clone = child.copy_with_original_id()
            child_clone._parent = self
            self._children.append(child_clone)
        self.check_component_structure()
        src.check_component_structure()

        for key, value in vars(src).items():
            if key in self._runtime_keys():
                continue
            setattr(self, key, _copy_value(value))
        for quantity in OverrideQuantity:
            cascade_override_owners(self, quantity)
        self._update_tree()

        stale.extend(src._walk())
        return stale

    def _runtime_keys(self) -> frozenset[str]:
        return _RUNTIME_KEYS

    def invalidate(self) -> None:
        """Mark this component permanently unusable."""
        self._invalidated = f"{type(self).__name__} {self._id} was invalidated by copy_from"

    @property
    def is_invalidated(self) -> bool:
        return self._invalidated is not None

    @property
    def mutex(self) -> SafetyMutex:
        return self._mutex

    def _check_state(self) -> None:
        if self._invalidated is not None:
            raise InvalidatedComponentError(self._invalidated)
        self._mutex.verify()

    # =========================================================================
    # Config listeners (multi-component editing)
    # =========================================================================

    def add_config_listener(self, listener: RocketComponent) -> bool:
        """
        Mirror every property change of this component onto ``listener``.

        The listener stops firing its own change events while registered.
        """
        if listener is None or listener is self or listener in self._config_listeners:
            return False
        self._config_listeners.append(listener)
        listener._bypass = True
        return True

    def remove_config_listener(self, listener: RocketComponent) -> None:
        if listener in self._config_listeners:
            self._config_listeners.remove(listener)
            listener._bypass = False

    def clear_config_listeners(self) -> None:
        for listener in self._config_listeners:
            listener._bypass = False
        self._config_listeners = []

    @property
    def config_listeners(self) -> list[RocketComponent]:
        return list(self._config_listeners)

    @property
    def bypass_change_event(self) -> bool:
        return self._bypass

    @bypass_change_event.setter
    def bypass_change_event(self, value: bool) -> None:
        self._bypass = bool(value)

    def _mirror(self, attr: str, value: Any) -> None:
        for listener in self._config_listeners:
            prop = getattr(type(listener), attr, None)
            if isinstance(prop, property) and prop.fset is not None:
                setattr(listener, attr, value)

    # =========================================================================
    # Change events
    # =========================================================================

    @property
    def _change_bus(self) -> ChangeBus | None:
        return None

    def fire_component_change_event(self, change_type: ChangeType) -> None:
        """
        Refresh the tree and forward a change event to the root's bus.

        Only the component's own caches are dropped while the bypass flag
        is set. Detached trees whose root has no bus are still refreshed.
        """
        self._check_state()
        self._component_changed()
        if self._bypass:
            return
        root = self.root
        root._update_tree()
        bus = root._change_bus
        if bus is None:
            root._local_mod_id += 1
            return
        bus.fire(ComponentChangeEvent(self, ChangeType(change_type)))

    def _component_changed(self) -> None:
        """Drop cached values. Called on every node before each event."""

    def _update_tree(self) -> None:
        for node in self._walk():
            node._component_changed()
            node.update()

    @contextmanager
    def _frozen_root(self) -> Iterator[None]:
        bus = self.root._change_bus
        with bus.frozen() if bus is not None else nullcontext():
            yield

    @property
    def modification_id(self) -> int:
        """Modification counter of the tree this component belongs to."""
        root = self.root
        bus = root._change_bus
        return bus.mod_id if bus is not None else root._local_mod_id

    # =========================================================================
    # Tree structure
    # =========================================================================

    @property
    def parent(self) -> RocketComponent | None:
        self._check_state()
        return self._parent

    @property
    def children(self) -> list[RocketComponent]:
        self._check_state()
        return list(self._children)

    @property
    def child_count(self) -> int:
        return len(self._children)

    def get_child(self, index: int) -> RocketComponent:
        return self._children[index]

    def child_position(self, child: RocketComponent) -> int:
        """Index of ``child`` by identity, or -1."""
        for index, candidate in enumerate(self._children):
            if candidate is child:
                return index
        return -1

    def add_child(self, child: RocketComponent, index: int | None = None) -> None:
        """
        Insert ``child`` at ``index`` (default: last).

        Raises
        ------
        IndexError
            If index is outside [0, child_count].
        ComponentTreeError
            If the child already has a parent, would create a cycle, or is
            not accepted by this category.
        """
        self._check_state()
        with self._mutex.locked("add_child"):
            if index is None:
                index = len(self._children)
            if not 0 <= index <= len(self._children):
                raise IndexError(f"child index {index} out of range 0..{len(self._children)}")
            if child._parent is not None:
                raise ComponentTreeError(
                    f"{child.debug_name} already has parent {child._parent.debug_name}")
            if child is self or child.is_ancestor(self):
                raise ComponentTreeError(
                    f"Adding {child.debug_name} to {self.debug_name} would create a cycle")
            if not self.is_compatible(child):
                raise ComponentTreeError(
                    f"{type(self).__name__} does not accept {type(child).__name__} children")

            self._children.insert(index, child)
            child._parent = self
            for quantity in OverrideQuantity:
                cascade_override_owners(child, quantity)
            self.check_component_structure()
            child.check_component_structure()
            logger.debug("Added %s to %s at %d", child.debug_name, self.debug_name, index)

        self.fire_component_change_event(_subtree_change_type(child))

    def remove_child(self, child: RocketComponent | int) -> bool:
        """
        Remove a child by reference or by index.

        Returns False if the reference is not a child of this component.
        """
        self._check_state()
        with self._mutex.locked("remove_child"):
            if isinstance(child, int):
                child = self._children[child]
            index = self.child_position(child)
            if index < 0:
                return False
            del self._children[index]
            child._parent = None
            for quantity in OverrideQuantity:
                cascade_override_owners(child, quantity)
            self.check_component_structure()
            child.check_component_structure()
            logger.debug("Removed %s from %s", child.debug_name, self.debug_name)

        self.fire_component_change_event(_subtree_change_type(child))
        return True

    def move_child(self, child: RocketComponent, index: int) -> bool:
        """Reorder a child within this component. Owners are unaffected."""
        self._check_state()
        with self._mutex.locked("move_child"):
            current = self.child_position(child)
            if current < 0:
                return False
            if not 0 <= index < len(self._children):
                raise IndexError(f"child index {index} out of range 0..{len(self._children) - 1}")
            del self._children[current]
            self._children.insert(index, child)
            self.check_component_structure()
            logger.debug("Moved %s to %d", child.debug_name, index)

        self.fire_component_change_event(ChangeType.TREE)
        return True

    def detach(self) -> bool:
        """Remove this component from its parent, if any."""
        if self._parent is None:
            return False
        return self._parent.remove_child(self)

    def check_component_structure(self) -> None:
        """
        Verify parent/child links around this node by identity.

        Raises
        ------
        BugError
            On any inconsistency or a cycle through parent links.
        """
        if self._parent is not None:
            occurrences = sum(1 for c in self._parent._children if c is self)
            if occurrences != 1:
                raise BugError(f"{self.debug_name} appears {occurrences} times in its "
                               f"parent {self._parent.debug_name}")
        seen: set[int] = set()
        for child in self._children:
            if child._parent is not self:
                raise BugError(f"Child {child.debug_name} of {self.debug_name} has "
                               f"parent {child._parent!r}")
            if id(child) in seen:
                raise BugError(f"{child.debug_name} occurs twice in {self.debug_name}")
            seen.add(id(child))
        visited = {id(self)}
        node = self._parent
        while node is not None:
            if id(node) in visited:
                raise BugError(f"Cycle through parent links at {self.debug_name}")
            visited.add(id(node))
            node = node._parent

    # =========================================================================
    # Navigation
    # =========================================================================

    @property
    def root(self) -> RocketComponent:
        node = self
        while node._parent is not None:
            node = node._parent
        return node

    @property
    def rocket(self) -> Rocket | None:
        from .rocket import Rocket

        root = self.root
        return root if isinstance(root, Rocket) else None

    @property
    def stage(self) -> AxialStage | None:
        """Nearest enclosing stage (this component if it is one)."""
        from .rocket import AxialStage

        node: RocketComponent | None = self
        while node is not None:
            if isinstance(node, AxialStage):
                return node
            node = node._parent
        return None

    @property
    def stage_number(self) -> int:
        """Index of :attr:`stage` among the root's stages, or -1."""
        stage = self.stage
        if stage is None:
            return -1
        for number, candidate in enumerate(self.root.sub_stages):
            if candidate is stage:
                return number
        return -1

    @property
    def sub_stages(self) -> list[AxialStage]:
        """Stages strictly below this component, in tree order."""
        from .rocket import AxialStage

        return [c for c in self._walk() if c is not self and isinstance(c, AxialStage)]

    @property
    def parents(self) -> list[RocketComponent]:
        """Ancestors from the parent up to the root."""
        result = []
        node = self._parent
        while node is not None:
            result.append(node)
            node = node._parent
        return result

    @property
    def all_children(self) -> list[RocketComponent]:
        """Every descendant in depth-first order."""
        return [c for c in self._walk() if c is not self]

    def contains_child(self, component: RocketComponent) -> bool:
        return any(c is component for c in self._walk() if c is not self)

    def is_ancestor(self, other: RocketComponent) -> bool:
        """True if this component is a (strict) ancestor of ``other``."""
        node = other._parent
        while node is not None:
            if node is self:
                return True
            node = node._parent
        return False

    def find_component(self, component_id: str) -> RocketComponent | None:
        for node in self._walk():
            if node._id == component_id:
                return node
        return None

    def next_component(self) -> RocketComponent | None:
        """Next component in depth-first order, or None."""
        if self._children:
            return self._children[0]
        current = self
        parent = self._parent
        while parent is not None:
            index = parent.child_position(current)
            if index < len(parent._children) - 1:
                return parent._children[index + 1]
            current = parent
            parent = current._parent
        return None

    def previous_component(self) -> RocketComponent | None:
        """Previous component in depth-first order, or None at the root."""
        if self._parent is None:
            return None
        index = self._parent.child_position(self)
        if index == 0:
            return self._parent
        node = self._parent._children[index - 1]
        while node._children:
            node = node._children[-1]
        return node

    def _walk(self) -> Iterator[RocketComponent]:
        """Unchecked depth-first traversal including self."""
        yield self
        for child in list(self._children):
            yield from child._walk()

    def iterator(self, return_self: bool = True) -> Iterator[RocketComponent]:
        """
        Depth-first iteration that fails fast on modification.

        Raises
        ------
        ConcurrentModificationError
            If the tree's modification counter changes during iteration.
        """
        expected = self.modification_id
        for node in self._walk():
            if not return_self and node is self:
                continue
            if self.modification_id != expected:
                raise ConcurrentModificationError(
                    f"Tree of {self.debug_name} modified during iteration")
            yield node
        if self.modification_id != expected:
            raise ConcurrentModificationError(
                f"Tree of {self.debug_name} modified during iteration")

    def __iter__(self) -> Iterator[RocketComponent]:
        return self.iterator(return_self=True)

    # =========================================================================
    # Debug output
    # =========================================================================

    def to_debug_string(self) -> str:
        return f'{type(self).__name__}["{self._name}", {self._id}]'

    def debug_detail(self) -> str:
        return (f"{self.to_debug_string()} length={self.length:.4f} "
                f"method={self._axial_method.name} offset={self._axial_offset:.4f} "
                f"x={self.x:.4f} instances={self.instance_count}")

    def to_debug_tree(self) -> str:
        """Multi-line dump of the subtree: names, lengths, positions."""
        lines = [
            "   ====== ====== ====== ====== ====== ====== ====== ======",
            f"     {'[Name]':<38}{'[Length]':>10}  {'[Rel Pos]':>26}  {'[Abs Pos]':>26}",
        ]
        self._debug_tree_rows("", lines)
        return "\n".join(lines) + "\n"

    def _debug_tree_rows(self, prefix: str, lines: list[str]) -> None:
        locations = self.component_locations
        lines.append(f"{prefix + self._name:<42}; {self.length:8.4f}; "
                     f"{_fmt(self._position):>26}; {_fmt(locations[0]):>26};")
        if len(locations) > 1:
            relative = self.instance_locations
            for i, location in enumerate(locations):
                rel = relative[i % len(relative)]
                lines.append(f"{prefix}    [{i + 1:2d}/{len(locations):2d}]"
                             f"{'':<{max(30 - len(prefix), 0)}}; {'':8}; "
                             f"{_fmt(rel):>26}; {_fmt(location):>26};")
        for child in self._children:
            child._debug_tree_rows(prefix + "    ", lines)


def _subtree_change_type(component: RocketComponent) -> ChangeType:
    """TREE plus MASS/AERODYNAMIC if any node of the subtree is massive/aerodynamic."""
    change = ChangeType.TREE
    for node in component._walk():
        if node.is_aerodynamic:
            change |= ChangeType.AERODYNAMIC
        if node.is_massive:
            change |= ChangeType.MASS
    return change


def _fmt(point) -> str:
    return f"({point[0]:.4f}, {point[1]:.4f}, {point[2]:.4f})"


def attach(parent: RocketComponent, child: RocketComponent, index: int | None = None) -> None:
    """Functional form of :meth:`RocketComponent.add_child`."""
    parent.add_child(child, index)


def detach(component: RocketComponent) -> bool:
    """Functional form of :meth:`RocketComponent.detach`."""
    return component.detach()


def move(component: RocketComponent, new_index: int) -> bool:
    """Move ``component`` to ``new_index`` within its current parent."""
    if component.parent is None:
        return False
    return component.parent.move_child(component, new_index)


def _copy_value(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return value.copy()
    if isinstance(value, (list, dict, set)):
        return _copy.copy(value)
    return value
