"""
Internal components: parts carried inside the body.

Internal components are positioned from the TOP of their parent by default
and do not contribute to aerodynamics.
"""
from __future__ import annotations

import logging
import math

import numpy as np
from numpy.typing import NDArray

from rocketframe.geometry import (
    Coordinate,
    add_bounding_box,
    axial_angles_to_vectors,
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


class InternalComponent(RocketComponent):
    """Base of components mounted inside a body component."""

    def __init__(self) -> None:
        super().__init__(AxialMethod.TOP)

    @property
    def is_aerodynamic(self) -> bool:
        return False

    @property
    def is_massive(self) -> bool:
        return True


class InnerTube(InternalComponent):
    """
    Inner tube, optionally clustered in a ring pattern, usable as motor mount.

    Parameters
    ----------
    length : float
        Tube length [m]
    outer_radius : float
        Outer radius of one tube [m]
    thickness : float
        Wall thickness [m]
    cluster_count : int
        Number of tubes in the ring pattern
    cluster_radius : float
        Distance of each tube's axis from the parent axis [m]
    cluster_rotation : float
        Roll angle of the first tube [rad]
    material : Material
        Tube material

    Notes
    -----
    Instance ``i`` sits at roll angle ``cluster_rotation + 2πi/n``. A single
    tube ignores ``cluster_radius`` and sits ``radial_position`` off the axis
    at roll angle ``radial_direction`` (centred by default). Mass and
    inertias cover all tubes of the cluster; unit inertias are taken about
    the parent axis.

    Examples
    --------
    >>> mmt = InnerTube(length=0.1, outer_radius=0.0125, cluster_count=3,
    ...                 cluster_radius=0.02)
    >>> mmt.instance_offsets.shape
    (3, 3)
    """

    def __init__(self, length: float = 0.07, outer_radius: float = 0.0095,
                 thickness: float = 0.0005, cluster_count: int = 1,
                 cluster_radius: float = 0.0, cluster_rotation: float = 0.0,
                 material: Material = DEFAULT_BULK_MATERIAL) -> None:
        super().__init__()
        validate_non_negative(length, "length")
        validate_non_negative(outer_radius, "outer_radius")
        validate_non_negative(thickness, "thickness")
        if cluster_count < 1:
            raise ValueError(f"cluster_count must be at least 1, got {cluster_count}")
        self._length = float(length)
        self._outer_radius = float(outer_radius)
        self._thickness = float(thickness)
        self._cluster_count = int(cluster_count)
        self._cluster_radius = float(cluster_radius)
        self._cluster_rotation = float(cluster_rotation)
        self._radial_position = 0.0
        self._radial_direction = 0.0
        self._material = material
        self._motor_mount = False
        self._motor_overhang = 0.0

    @property
    def component_name(self) -> str:
        return "Inner tube"

    @property
    def allows_children(self) -> bool:
        return True

    def is_compatible(self, component_type) -> bool:
        cls = component_type if isinstance(component_type, type) else type(component_type)
        return issubclass(cls, InternalComponent)

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    @property
    def outer_radius(self) -> float:
        return self._outer_radius

    @outer_radius.setter
    def outer_radius(self, value: float) -> None:
        self._mirror("outer_radius", value)
        validate_non_negative(value, "outer_radius")
        if value == self._outer_radius:
            return
        self._outer_radius = float(value)
        self._thickness = min(self._thickness, self._outer_radius)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def thickness(self) -> float:
        return self._thickness

    @thickness.setter
    def thickness(self, value: float) -> None:
        self._mirror("thickness", value)
        validate_non_negative(value, "thickness")
        value = min(float(value), self._outer_radius)
        if value == self._thickness:
            return
        self._thickness = value
        self.clear_preset()
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def inner_radius(self) -> float:
        return max(self._outer_radius - self._thickness, 0.0)

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
    # Cluster
    # -------------------------------------------------------------------------

    @property
    def instance_count(self) -> int:
        return self._cluster_count

    @instance_count.setter
    def instance_count(self, value: int) -> None:
        self._mirror("instance_count", value)
        if value < 1:
            raise ValueError(f"instance_count must be at least 1, got {value}")
        if value == self._cluster_count:
            return
        self._cluster_count = int(value)
        self.fire_component_change_event(ChangeType.MASS | ChangeType.TREE)

    cluster_count = instance_count

    @property
    def cluster_radius(self) -> float:
        return self._cluster_radius

    @cluster_radius.setter
    def cluster_radius(self, value: float) -> None:
        self._mirror("cluster_radius", value)
        validate_non_negative(value, "cluster_radius")
        if value == self._cluster_radius:
            return
        self._cluster_radius = float(value)
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def cluster_rotation(self) -> float:
        return self._cluster_rotation

    @cluster_rotation.setter
    def cluster_rotation(self, value: float) -> None:
        self._mirror("cluster_rotation", value)
        if value == self._cluster_rotation:
            return
        self._cluster_rotation = float(value)
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def radial_position(self) -> float:
        """Distance of a single tube's axis from the parent axis [m]."""
        return self._radial_position

    @radial_position.setter
    def radial_position(self, value: float) -> None:
        self._mirror("radial_position", value)
        validate_non_negative(value, "radial_position")
        if value == self._radial_position:
            return
        self._radial_position = float(value)
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def radial_direction(self) -> float:
        """Roll angle of a single off-axis tube [rad]."""
        return self._radial_direction

    @radial_direction.setter
    def radial_direction(self, value: float) -> None:
        self._mirror("radial_direction", value)
        if value == self._radial_direction:
            return
        self._radial_direction = float(value)
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def _axis_offset(self) -> float:
        return self._cluster_radius if self._clustered else self._radial_position

    def _isolate_instance(self, index: int) -> None:
        # Runs on a fresh detached copy, before it is attached
        self._radial_position = self._axis_offset
        self._radial_direction = float(self._cluster_angles()[index])
        self._cluster_count = 1

    def _cluster_angles(self) -> NDArray[np.float64]:
        n = self._cluster_count
        if n == 1:
            return np.array([self._radial_direction], dtype=np.float64)
        return self._cluster_rotation + 2 * np.pi * np.arange(n) / n

    @property
    def instance_offsets(self) -> NDArray[np.float64]:
        n = self._cluster_count
        offsets = np.zeros((n, 3), dtype=np.float64)
        angles = self._cluster_angles()
        offsets[:, 1] = self._axis_offset * np.cos(angles)
        offsets[:, 2] = self._axis_offset * np.sin(angles)
        return offsets

    @property
    def instance_angles(self) -> NDArray[np.float64]:
        return axial_angles_to_vectors(self._cluster_angles())

    # -------------------------------------------------------------------------
    # Motor mount
    # -------------------------------------------------------------------------

    @property
    def motor_mount(self) -> bool:
        return self._motor_mount

    @motor_mount.setter
    def motor_mount(self, value: bool) -> None:
        self._mirror("motor_mount", value)
        if bool(value) == self._motor_mount:
            return
        self._motor_mount = bool(value)
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def motor_overhang(self) -> float:
        return self._motor_overhang

    @motor_overhang.setter
    def motor_overhang(self, value: float) -> None:
        self._mirror("motor_overhang", value)
        if value == self._motor_overhang:
            return
        self._motor_overhang = float(value)
        self.fire_component_change_event(ChangeType.BOTH)

    # -------------------------------------------------------------------------
    # Mass properties
    # -------------------------------------------------------------------------

    @property
    def _clustered(self) -> bool:
        return self._cluster_count > 1

    @property
    def component_mass(self) -> float:
        single = ring_mass(self._outer_radius, self.inner_radius, self.length,
                           self._material.density)
        return single * self._cluster_count

    @property
    def component_cg(self) -> Coordinate:
        return Coordinate(self.length / 2, 0.0, 0.0, self.component_mass)

    @property
    def longitudinal_unit_inertia(self) -> float:
        inertia = ring_longitudinal_unit_inertia(self._outer_radius, self.inner_radius, self.length)
        inertia += self._axis_offset ** 2 / 2
        return inertia

    @property
    def rotational_unit_inertia(self) -> float:
        inertia = ring_rotational_unit_inertia(self._outer_radius, self.inner_radius)
        inertia += self._axis_offset ** 2
        return inertia

    @property
    def component_bounds(self) -> list[Coordinate]:
        bounds: list[Coordinate] = []
        reach = self._outer_radius + self._axis_offset
        add_bounding_box(bounds, 0.0, self.length, reach)
        return bounds

    # -------------------------------------------------------------------------
    # Presets
    # -------------------------------------------------------------------------

    def _load_from_preset(self, preset) -> None:
        from .preset import PresetKey

        if preset.has(PresetKey.OUTER_DIAMETER):
            self.outer_radius = preset[PresetKey.OUTER_DIAMETER] / 2
        if preset.has(PresetKey.INNER_DIAMETER):
            self.thickness = self._outer_radius - preset[PresetKey.INNER_DIAMETER] / 2
        if preset.has(PresetKey.LENGTH):
            self.length = preset[PresetKey.LENGTH]
        if preset.has(PresetKey.MATERIAL):
            self.material = preset[PresetKey.MATERIAL]
        super()._load_from_preset(preset)

    # -------------------------------------------------------------------------
    # Debug
    # -------------------------------------------------------------------------

    def _debug_tree_rows(self, prefix: str, lines: list[str]) -> None:
        super()._debug_tree_rows(prefix, lines)
        if not self._motor_mount:
            return
        configuration = self._selected_configuration()
        motor = configuration.motor_for(self) if configuration is not None else None
        label = "<no motor>" if motor is None else f"{motor.designation} (L={motor.length:.4f})"
        lines.append(f"{prefix}      [Motor] {label}; overhang={self._motor_overhang:.4f}")


class MassComponent(InternalComponent):
    """
    Lumped mass modelled as a solid cylinder.

    Parameters
    ----------
    mass : float
        Component mass [kg]
    length : float
        Cylinder length [m]
    radius : float
        Cylinder radius [m]
    """

    def __init__(self, mass: float = 0.0, length: float = 0.025, radius: float = 0.0125) -> None:
        super().__init__()
        validate_non_negative(mass, "mass")
        validate_non_negative(length, "length")
        validate_non_negative(radius, "radius")
        self._component_mass = float(mass)
        self._length = float(length)
        self._radius = float(radius)

    @property
    def component_name(self) -> str:
        return "Mass component"

    @property
    def allows_children(self) -> bool:
        return False

    def is_compatible(self, component_type) -> bool:
        return False

    @property
    def component_mass(self) -> float:
        return self._component_mass

    @component_mass.setter
    def component_mass(self, value: float) -> None:
        self._mirror("component_mass", value)
        validate_non_negative(value, "component_mass")
        if value == self._component_mass:
            return
        self._component_mass = float(value)
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def radius(self) -> float:
        return self._radius

    @radius.setter
    def radius(self, value: float) -> None:
        self._mirror("radius", value)
        validate_non_negative(value, "radius")
        if value == self._radius:
            return
        self._radius = float(value)
        self.fire_component_change_event(ChangeType.MASS)

    @property
    def density(self) -> float:
        """Apparent density of the cylinder [kg/m³]."""
        volume = math.pi * self._radius ** 2 * self.length
        return self._component_mass / volume if volume > 0 else 0.0

    @property
    def component_cg(self) -> Coordinate:
        return Coordinate(self.length / 2, 0.0, 0.0, self._component_mass)

    @property
    def longitudinal_unit_inertia(self) -> float:
        return ring_longitudinal_unit_inertia(self._radius, 0.0, self.length)

    @property
    def rotational_unit_inertia(self) -> float:
        return ring_rotational_unit_inertia(self._radius, 0.0)

    @property
    def component_bounds(self) -> list[Coordinate]:
        bounds: list[Coordinate] = []
        add_bounding_box(bounds, 0.0, self.length, self._radius)
        return bounds
