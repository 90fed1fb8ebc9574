"""
External body components: bodies of revolution and body tubes.

``SymmetricComponent`` derives volume, CG and unit inertias of an arbitrary
profile by integrating thin slices along the axis with
``scipy.integrate.trapezoid``. Body tubes use the closed-form ring formulas.
"""
from __future__ import annotations

import logging
from abc import abstractmethod

import numpy as np
from scipy.integrate import trapezoid

from rocketframe.geometry import (
    Coordinate,
    add_bound,
    ring_cg,
    ring_longitudinal_unit_inertia,
    ring_mass,
    ring_rotational_unit_inertia,
)
from rocketframe.utils.validation import validate_non_negative

from .axial import AxialMethod
from .base import RocketComponent
from .events import ChangeType
from .material import DEFAULT_BULK_MATERIAL, Material

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 0.025
DEFAULT_THICKNESS = 0.002

# Volumes below this are treated as empty [m³]
EPSILON_VOLUME = 1e-15


class BodyComponent(RocketComponent):
    """A component forming part of the outer body; stacked AFTER by default."""

    def __init__(self) -> None:
        super().__init__(AxialMethod.AFTER)

    @property
    def allows_children(self) -> bool:
        return True

    def is_compatible(self, component_type) -> bool:
        from .internal import InternalComponent

        cls = component_type if isinstance(component_type, type) else type(component_type)
        return issubclass(cls, InternalComponent)

    @property
    def is_aerodynamic(self) -> bool:
        return True

    @property
    def is_massive(self) -> bool:
        return True


class SymmetricComponent(BodyComponent):
    """
    Axisymmetric body described by an outer radius profile.

    Parameters
    ----------
    length : float
        Axial length [m]
    thickness : float
        Wall thickness [m]; ignored when ``filled``
    material : Material
        Bulk material
    filled : bool
        Solid body instead of a shell

    Notes
    -----
    Mass properties are cached and dropped on every change event. The
    integration resolution comes from ``ModelPreferences.profile_divisions``.
    """

    def __init__(self, length: float, thickness: float = DEFAULT_THICKNESS,
                 material: Material = DEFAULT_BULK_MATERIAL, filled: bool = False) -> None:
        super().__init__()
        validate_non_negative(length, "length")
        validate_non_negative(thickness, "thickness")
        self._length = float(length)
        self._thickness = float(thickness)
        self._material = material
        self._filled = filled
        self._cache: dict[str, object] = {}

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    @abstractmethod
    def radius(self, x: float) -> float:
        """Outer radius at ``x`` from the fore end [m]."""

    @property
    @abstractmethod
    def fore_radius(self) -> float:
        ...

    @property
    @abstractmethod
    def aft_radius(self) -> float:
        ...

    def _radius_function(self):
        """Outer radius as a function of x with the current end radii frozen."""
        return self.radius

    def inner_radius_at(self, x: float) -> float:
        """Inner radius at ``x``; zero for filled bodies [m]."""
        if self._filled:
            return 0.0
        return max(self.radius(x) - self._thickness, 0.0)

    # -------------------------------------------------------------------------
    # Design parameters
    # -------------------------------------------------------------------------

    @property
    def thickness(self) -> float:
        return self._thickness

    @thickness.setter
    def thickness(self, value: float) -> None:
        self._mirror("thickness", value)
        validate_non_negative(value, "thickness")
        if value == self._thickness:
            return
        self._thickness = float(value)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def filled(self) -> bool:
        return self._filled

    @filled.setter
    def filled(self, value: bool) -> None:
        self._mirror("filled", value)
        if bool(value) == self._filled:
            return
        self._filled = bool(value)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def material(self) -> Material:
        return self._material

    @material.setter
    def material(self, value: Material) -> None:
        self._mirror("material", value)
        if value == self._material:
            return
        self._material = value
        self.clear_preset()
        self.fire_component_change_event(ChangeType.MASS)

    # -------------------------------------------------------------------------
    # Mass properties
    # -------------------------------------------------------------------------

    def _component_changed(self) -> None:
        self._cache = {}

    def _reset_runtime_state(self) -> None:
        super()._reset_runtime_state()
        self._cache = {}

    def _profile_properties(self) -> tuple[float, float, float, float]:
        """
        Integrate the profile.

        Returns
        -------
        tuple
            (volume [m³], cg_x [m], longitudinal unit inertia [m²],
            rotational unit inertia [m²])
        """
        cached = self._cache.get("profile")
        if cached is not None:
            return cached

        length = self.length
        if length <= 0:
            result = (0.0, 0.0, 0.0, 0.0)
            self._cache["profile"] = result
            return result

        xs = np.linspace(0.0, length, self.preferences.profile_divisions + 1)
        radius = self._radius_function()
        outer = np.array([radius(x) for x in xs])
        inner = np.zeros_like(outer) if self._filled else np.maximum(outer - self._thickness, 0.0)
        area = np.pi * np.maximum(outer ** 2 - inner ** 2, 0.0)
        volume = float(trapezoid(area, xs))

        if volume < EPSILON_VOLUME:
            result = (0.0, length / 2, 0.0, 0.0)
        else:
            cg_x = float(trapezoid(area * xs, xs)) / volume
            sum_sq = outer ** 2 + inner ** 2
            longitudinal = float(trapezoid(area * (sum_sq / 4 + (xs - cg_x) ** 2), xs)) / volume
            rotational = float(trapezoid(area * sum_sq / 2, xs)) / volume
            result = (volume, cg_x, longitudinal, rotational)
        self._cache["profile"] = result
        return result

    @property
    def component_volume(self) -> float:
        return self._profile_properties()[0]

    @property
    def component_mass(self) -> float:
        return self._profile_properties()[0] * self._material.density

    @property
    def component_cg(self) -> Coordinate:
        volume, cg_x, _, _ = self._profile_properties()
        return Coordinate(cg_x, 0.0, 0.0, volume * self._material.density)

    @property
    def longitudinal_unit_inertia(self) -> float:
        return self._profile_properties()[2]

    @property
    def rotational_unit_inertia(self) -> float:
        return self._profile_properties()[3]

    @property
    def component_bounds(self) -> list[Coordinate]:
        bounds: list[Coordinate] = []
        add_bound(bounds, 0.0, self.fore_radius)
        add_bound(bounds, self.length, self.aft_radius)
        return bounds

    # -------------------------------------------------------------------------
    # Neighbours (automatic radii)
    # -------------------------------------------------------------------------

    def _front_auto_radius(self) -> float:
        """Radius offered to an automatic neighbour in front, or -1."""
        return self.fore_radius

    def _rear_auto_radius(self) -> float:
        """Radius offered to an automatic neighbour behind, or -1."""
        return self.aft_radius

    def _body_sequence(self) -> list[SymmetricComponent]:
        from .rocket import ComponentAssembly

        return [c for c in self.root._walk()
                if isinstance(c, SymmetricComponent) and isinstance(c.parent, ComponentAssembly)]

    @property
    def previous_symmetric_component(self) -> SymmetricComponent | None:
        sequence = self._body_sequence()
        for index, component in enumerate(sequence):
            if component is self:
                return sequence[index - 1] if index > 0 else None
        return None

    @property
    def next_symmetric_component(self) -> SymmetricComponent | None:
        sequence = self._body_sequence()
        for index, component in enumerate(sequence):
            if component is self:
                return sequence[index + 1] if index + 1 < len(sequence) else None
        return None

    def _auto_radius(self, prefer_previous: bool = True) -> float:
        """Radius matching the adjacent body components, or the default."""
        previous = self.previous_symmetric_component
        following = self.next_symmetric_component
        candidates = [
            previous._rear_auto_radius() if previous is not None else -1.0,
            following._front_auto_radius() if following is not None else -1.0,
        ]
        if not prefer_previous:
            candidates.reverse()
        for radius in candidates:
            if radius >= 0:
                return radius
        return DEFAULT_RADIUS


class BodyTube(SymmetricComponent):
    """
    Cylindrical body tube.

    Parameters
    ----------
    length : float
        Tube length [m]
    outer_radius : float | None
        Outer radius [m]. None makes the radius automatic: it follows the
        previous (or next) body component.
    thickness : float
        Wall thickness [m]
    material : Material
        Tube material

    Examples
    --------
    >>> tube = BodyTube(length=0.3, outer_radius=0.025, thickness=0.001)
    >>> round(tube.inner_radius, 4)
    0.024
    """

    def __init__(self, length: float = 8 * DEFAULT_RADIUS, outer_radius: float | None = DEFAULT_RADIUS,
                 thickness: float = DEFAULT_THICKNESS,
                 material: Material = DEFAULT_BULK_MATERIAL) -> None:
        super().__init__(length, thickness, material)
        self._auto_radius_enabled = outer_radius is None
        self._outer_radius = DEFAULT_RADIUS if outer_radius is None else float(outer_radius)

    @property
    def component_name(self) -> str:
        return "Body tube"

    @property
    def outer_radius(self) -> float:
        if self._auto_radius_enabled:
            return self._auto_radius()
        return self._outer_radius

    @outer_radius.setter
    def outer_radius(self, value: float) -> None:
        self._mirror("outer_radius", value)
        validate_non_negative(value, "outer_radius")
        if value == self._outer_radius and not self._auto_radius_enabled:
            return
        self._auto_radius_enabled = False
        self._outer_radius = float(value)
        if self._thickness > self._outer_radius:
            self._thickness = self._outer_radius
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def outer_radius_automatic(self) -> bool:
        return self._auto_radius_enabled

    @outer_radius_automatic.setter
    def outer_radius_automatic(self, value: bool) -> None:
        self._mirror("outer_radius_automatic", value)
        if bool(value) == self._auto_radius_enabled:
            return
        self._auto_radius_enabled = bool(value)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def inner_radius(self) -> float:
        if self._filled:
            return 0.0
        return max(self.outer_radius - self._thickness, 0.0)

    @inner_radius.setter
    def inner_radius(self, value: float) -> None:
        self.thickness = max(self.outer_radius - value, 0.0)

    def radius(self, x: float) -> float:
        return self.outer_radius

    @property
    def fore_radius(self) -> float:
        return self.outer_radius

    @property
    def aft_radius(self) -> float:
        return self.outer_radius

    def _front_auto_radius(self) -> float:
        return -1.0 if self._auto_radius_enabled else self._outer_radius

    def _rear_auto_radius(self) -> float:
        return -1.0 if self._auto_radius_enabled else self._outer_radius

    @property
    def component_volume(self) -> float:
        return ring_mass(self.outer_radius, self.inner_radius, self.length, 1.0)

    @property
    def component_mass(self) -> float:
        return ring_mass(self.outer_radius, self.inner_radius, self.length, self._material.density)

    @property
    def component_cg(self) -> Coordinate:
        return ring_cg(self.outer_radius, self.inner_radius, 0.0, self.length,
                       self._material.density)

    @property
    def longitudinal_unit_inertia(self) -> float:
        return ring_longitudinal_unit_inertia(self.outer_radius, self.inner_radius, self.length)

    @property
    def rotational_unit_inertia(self) -> float:
        return ring_rotational_unit_inertia(self.outer_radius, self.inner_radius)

    def _load_from_preset(self, preset) -> None:
        from .preset import PresetKey

        if preset.has(PresetKey.OUTER_DIAMETER):
            self.outer_radius = preset[PresetKey.OUTER_DIAMETER] / 2
        if preset.has(PresetKey.INNER_DIAMETER):
            self.inner_radius = preset[PresetKey.INNER_DIAMETER] / 2
        if preset.has(PresetKey.LENGTH):
            self.length = preset[PresetKey.LENGTH]
        if preset.has(PresetKey.MATERIAL):
            self.material = preset[PresetKey.MATERIAL]
        if preset.has(PresetKey.FILLED):
            self.filled = preset[PresetKey.FILLED]
        super()._load_from_preset(preset)
