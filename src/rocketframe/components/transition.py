"""
Transitions and nose cones.

A transition joins two body diameters with one of the :class:`Shape`
profiles. It may carry a cylindrical shoulder at either end, optionally
capped, and its mass properties combine up to five coaxial solids:

    fore cap | fore shoulder | profile | aft shoulder | aft cap

A nose cone is a transition whose fore radius is zero.
"""
from __future__ import annotations

import logging
import warnings

from rocketframe.geometry import (
    Coordinate,
    Shape,
    add_bound,
    ring_longitudinal_unit_inertia,
    ring_mass,
    ring_rotational_unit_inertia,
    solve_clip_length,
    transition_radius,
)
from rocketframe.utils.validation import validate_non_negative, validate_shape_parameter

from .body import DEFAULT_RADIUS, DEFAULT_THICKNESS, SymmetricComponent
from .events import ChangeType
from .material import DEFAULT_BULK_MATERIAL, POLYSTYRENE, Material

logger = logging.getLogger(__name__)

# Total masses below this are treated as zero [kg]
EPSILON_MASS = 1e-12


class Transition(SymmetricComponent):
    """
    Shoulder-capable transition between two body radii.

    Parameters
    ----------
    shape : Shape
        Profile family
    length : float
        Length of the profile section, shoulders excluded [m]
    fore_radius, aft_radius : float | None
        End radii [m]; None makes the radius follow the adjacent body
        component
    thickness : float
        Wall thickness [m]
    material : Material
        Bulk material

    Attributes
    ----------
    shape_parameter : float
        Profile parameter, clamped into the shape's range
    clipped : bool
        Whether a clippable profile is cut from a virtually extended curve
        instead of being scaled between the two radii

    Examples
    --------
    >>> boattail = Transition(Shape.CONICAL, length=0.05,
    ...                       fore_radius=0.025, aft_radius=0.02)
    >>> boattail.radius(0.0), boattail.radius(0.05)
    (0.025, 0.02)
    """

    def __init__(self, shape: Shape = Shape.CONICAL, length: float = 0.1,
                 fore_radius: float | None = None, aft_radius: float | None = None,
                 thickness: float = DEFAULT_THICKNESS,
                 material: Material = DEFAULT_BULK_MATERIAL) -> None:
        super().__init__(length, thickness, material)
        self._shape = shape
        self._shape_parameter = shape.default_parameter
        self._clipped = True

        self._fore_radius_automatic = fore_radius is None
        self._fore_radius = DEFAULT_RADIUS if fore_radius is None else float(fore_radius)
        self._aft_radius_automatic = aft_radius is None
        self._aft_radius = DEFAULT_RADIUS if aft_radius is None else float(aft_radius)

        self._fore_shoulder_radius = 0.0
        self._fore_shoulder_thickness = 0.0
        self._fore_shoulder_length = 0.0
        self._fore_shoulder_capped = False
        self._aft_shoulder_radius = 0.0
        self._aft_shoulder_thickness = 0.0
        self._aft_shoulder_length = 0.0
        self._aft_shoulder_capped = False

    @property
    def component_name(self) -> str:
        return "Transition"

    # -------------------------------------------------------------------------
    # Shape
    # -------------------------------------------------------------------------

    @property
    def shape(self) -> Shape:
        return self._shape

    @shape.setter
    def shape(self, value: Shape) -> None:
        self._mirror("shape", value)
        if value is self._shape:
            return
        self._shape = value
        self._clipped = value.clippable
        self._shape_parameter = value.default_parameter
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def shape_parameter(self) -> float:
        return self._shape_parameter

    @shape_parameter.setter
    def shape_parameter(self, value: float) -> None:
        self._mirror("shape_parameter", value)
        value = validate_shape_parameter(value, self._shape.min_parameter,
                                         self._shape.max_parameter, "shape_parameter")
        if value == self._shape_parameter:
            return
        self._shape_parameter = value
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def clipped(self) -> bool:
        """Effective clipping: requested and supported by the shape."""
        return self._clipped and self._shape.clippable

    @clipped.setter
    def clipped(self, value: bool) -> None:
        self._mirror("clipped", value)
        if bool(value) == self._clipped:
            return
        self._clipped = bool(value)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def clip_length(self) -> float:
        """Virtual extension solved for the clipped profile [m]."""
        cached = self._cache.get("clip")
        if cached is None:
            prefs = self.preferences
            cached = solve_clip_length(self._shape, self.fore_radius, self.aft_radius,
                                       self.length, self._shape_parameter,
                                       prefs.clip_precision, prefs.clip_max_doublings)
            self._cache["clip"] = cached
        return cached

    def _radius_function(self):
        shape, param, length = self._shape, self._shape_parameter, self.length
        fore, aft = self.fore_radius, self.aft_radius
        clip = self.clip_length if self.clipped else None
        return lambda x: transition_radius(shape, x, fore, aft, length, param, clip)

    def radius(self, x: float) -> float:
        return self._radius_function()(x)

    # -------------------------------------------------------------------------
    # End radii
    # -------------------------------------------------------------------------

    @property
    def fore_radius(self) -> float:
        if self._fore_radius_automatic:
            return self._auto_radius(prefer_previous=True)
        return self._fore_radius

    @fore_radius.setter
    def fore_radius(self, value: float) -> None:
        self._mirror("fore_radius", value)
        validate_non_negative(value, "fore_radius")
        if value == self._fore_radius and not self._fore_radius_automatic:
            return
        self._fore_radius_automatic = False
        self._fore_radius = float(value)
        if self._thickness > self._fore_radius and self._thickness > self._aft_radius:
            self._thickness = max(self._fore_radius, self._aft_radius)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def fore_radius_automatic(self) -> bool:
        return self._fore_radius_automatic

    @fore_radius_automatic.setter
    def fore_radius_automatic(self, value: bool) -> None:
        self._mirror("fore_radius_automatic", value)
        if bool(value) == self._fore_radius_automatic:
            return
        self._fore_radius_automatic = bool(value)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def aft_radius(self) -> float:
        if self._aft_radius_automatic:
            return self._auto_radius(prefer_previous=False)
        return self._aft_radius

    @aft_radius.setter
    def aft_radius(self, value: float) -> None:
        self._mirror("aft_radius", value)
        validate_non_negative(value, "aft_radius")
        if value == self._aft_radius and not self._aft_radius_automatic:
            return
        self._aft_radius_automatic = False
        self._aft_radius = float(value)
        if self._thickness > self._fore_radius and self._thickness > self._aft_radius:
            self._thickness = max(self._fore_radius, self._aft_radius)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    @property
    def aft_radius_automatic(self) -> bool:
        return self._aft_radius_automatic

    @aft_radius_automatic.setter
    def aft_radius_automatic(self, value: bool) -> None:
        self._mirror("aft_radius_automatic", value)
        if bool(value) == self._aft_radius_automatic:
            return
        self._aft_radius_automatic = bool(value)
        self.clear_preset()
        self.fire_component_change_event(ChangeType.BOTH)

    def _front_auto_radius(self) -> float:
        return -1.0 if self._fore_radius_automatic else self._fore_radius

    def _rear_auto_radius(self) -> float:
        return -1.0 if self._aft_radius_automatic else self._aft_radius

    # -------------------------------------------------------------------------
    # Shoulders
    # -------------------------------------------------------------------------

    def _set_shoulder(self, attr: str, value, change: ChangeType = ChangeType.MASS) -> None:
        self._mirror(attr, value)
        if isinstance(value, bool):
            if value == getattr(self, "_" + attr):
                return
        else:
            validate_non_negative(value, attr)
            value = float(value)
            if value == getattr(self, "_" + attr):
                return
        setattr(self, "_" + attr, value)
        self.clear_preset()
        self.fire_component_change_event(change)

    @property
    def fore_shoulder_radius(self) -> float:
        return self._fore_shoulder_radius

    @fore_shoulder_radius.setter
    def fore_shoulder_radius(self, value: float) -> None:
        self._set_shoulder("fore_shoulder_radius", value)

    @property
    def fore_shoulder_thickness(self) -> float:
        return self._fore_shoulder_thickness

    @fore_shoulder_thickness.setter
    def fore_shoulder_thickness(self, value: float) -> None:
        self._set_shoulder("fore_shoulder_thickness", value)

    @property
    def fore_shoulder_length(self) -> float:
        return self._fore_shoulder_length

    @fore_shoulder_length.setter
    def fore_shoulder_length(self, value: float) -> None:
        self._set_shoulder("fore_shoulder_length", value)

    @property
    def fore_shoulder_capped(self) -> bool:
        return self._fore_shoulder_capped

    @fore_shoulder_capped.setter
    def fore_shoulder_capped(self, value: bool) -> None:
        self._set_shoulder("fore_shoulder_capped", bool(value))

    @property
    def aft_shoulder_radius(self) -> float:
        return self._aft_shoulder_radius

    @aft_shoulder_radius.setter
    def aft_shoulder_radius(self, value: float) -> None:
        self._set_shoulder("aft_shoulder_radius", value)

    @property
    def aft_shoulder_thickness(self) -> float:
        return self._aft_shoulder_thickness

    @aft_shoulder_thickness.setter
    def aft_shoulder_thickness(self, value: float) -> None:
        self._set_shoulder("aft_shoulder_thickness", value)

    @property
    def aft_shoulder_length(self) -> float:
        return self._aft_shoulder_length

    @aft_shoulder_length.setter
    def aft_shoulder_length(self, value: float) -> None:
        self._set_shoulder("aft_shoulder_length", value)

    @property
    def aft_shoulder_capped(self) -> bool:
        return self._aft_shoulder_capped

    @aft_shoulder_capped.setter
    def aft_shoulder_capped(self, value: bool) -> None:
        self._set_shoulder("aft_shoulder_capped", bool(value))

    # -------------------------------------------------------------------------
    # Mass properties
    # -------------------------------------------------------------------------

    def _solids(self) -> list[tuple[float, float, float, float]]:
        """
        Coaxial solids making up the transition.

        Returns
        -------
        list[tuple]
            (mass [kg], cg_x [m], longitudinal unit inertia [m²],
            rotational unit inertia [m²]) per solid
        """
        density = self._material.density
        min_feature = self.preferences.min_feature
        length = self.length

        volume, cg_x, longitudinal, rotational = self._profile_properties()
        solids = [(volume * density, cg_x, longitudinal, rotational)]

        if self._fore_shoulder_length > min_feature:
            ro = self._fore_shoulder_radius
            ri = max(ro - self._fore_shoulder_thickness, 0.0)
            ls = self._fore_shoulder_length
            solids.append((ring_mass(ro, ri, ls, density), -ls / 2,
                           ring_longitudinal_unit_inertia(ro, ri, ls),
                           ring_rotational_unit_inertia(ro, ri)))
            if self._fore_shoulder_capped:
                tc = self._fore_shoulder_thickness
                solids.append((ring_mass(ri, 0.0, tc, density), -ls + tc / 2,
                               ring_longitudinal_unit_inertia(ri, 0.0, tc),
                               ring_rotational_unit_inertia(ri, 0.0)))

        if self._aft_shoulder_length > min_feature:
            ro = self._aft_shoulder_radius
            ri = max(ro - self._aft_shoulder_thickness, 0.0)
            ls = self._aft_shoulder_length
            solids.append((ring_mass(ro, ri, ls, density), length + ls / 2,
                           ring_longitudinal_unit_inertia(ro, ri, ls),
                           ring_rotational_unit_inertia(ro, ri)))
            if self._aft_shoulder_capped:
                tc = self._aft_shoulder_thickness
                solids.append((ring_mass(ri, 0.0, tc, density), length + ls - tc / 2,
                               ring_longitudinal_unit_inertia(ri, 0.0, tc),
                               ring_rotational_unit_inertia(ri, 0.0)))
        return solids

    def _composite(self) -> tuple[float, float, float, float]:
        """(mass, cg_x, longitudinal, rotational) of all solids combined."""
        cached = self._cache.get("composite")
        if cached is not None:
            return cached

        solids = self._solids()
        mass = sum(s[0] for s in solids)
        if mass < EPSILON_MASS:
            result = (0.0, 0.0, 0.0, 0.0)
        else:
            cg_x = sum(m * x for m, x, _, _ in solids) / mass
            longitudinal = sum(m * (il + (x - cg_x) ** 2) for m, x, il, _ in solids) / mass
            rotational = sum(m * ir for m, _, _, ir in solids) / mass
            result = (mass, cg_x, longitudinal, rotational)
        self._cache["composite"] = result
        return result

    @property
    def component_mass(self) -> float:
        return self._composite()[0]

    @property
    def component_cg(self) -> Coordinate:
        mass, cg_x, _, _ = self._composite()
        return Coordinate(cg_x, 0.0, 0.0, mass)

    @property
    def longitudinal_unit_inertia(self) -> float:
        return self._composite()[2]

    @property
    def rotational_unit_inertia(self) -> float:
        return self._composite()[3]

    @property
    def component_bounds(self) -> list[Coordinate]:
        bounds = super().component_bounds
        if self._fore_shoulder_length > 0:
            add_bound(bounds, -self._fore_shoulder_length, self._fore_shoulder_radius)
        if self._aft_shoulder_length > 0:
            add_bound(bounds, self.length + self._aft_shoulder_length, self._aft_shoulder_radius)
        return bounds

    # -------------------------------------------------------------------------
    # Presets
    # -------------------------------------------------------------------------

    def _load_from_preset(self, preset) -> None:
        from .preset import PresetKey

        if preset.has(PresetKey.SHAPE):
            self.shape = preset[PresetKey.SHAPE]
        if preset.has(PresetKey.LENGTH):
            self.length = preset[PresetKey.LENGTH]
        if preset.has(PresetKey.FORE_OUTER_DIAMETER):
            self.fore_radius = preset[PresetKey.FORE_OUTER_DIAMETER] / 2
        if preset.has(PresetKey.AFT_OUTER_DIAMETER):
            self.aft_radius = preset[PresetKey.AFT_OUTER_DIAMETER] / 2
        if preset.has(PresetKey.FORE_SHOULDER_DIAMETER):
            self.fore_shoulder_radius = preset[PresetKey.FORE_SHOULDER_DIAMETER] / 2
        if preset.has(PresetKey.FORE_SHOULDER_LENGTH):
            self.fore_shoulder_length = preset[PresetKey.FORE_SHOULDER_LENGTH]
        if preset.has(PresetKey.AFT_SHOULDER_DIAMETER):
            self.aft_shoulder_radius = preset[PresetKey.AFT_SHOULDER_DIAMETER] / 2
        if preset.has(PresetKey.AFT_SHOULDER_LENGTH):
            self.aft_shoulder_length = preset[PresetKey.AFT_SHOULDER_LENGTH]
        if preset.has(PresetKey.THICKNESS):
            self.thickness = preset[PresetKey.THICKNESS]
        if preset.has(PresetKey.FILLED):
            self.filled = preset[PresetKey.FILLED]
        if preset.has(PresetKey.MATERIAL):
            self.material = preset[PresetKey.MATERIAL]
        super()._load_from_preset(preset)


class NoseCone(Transition):
    """
    Transition with a pointed fore end.

    The fore radius is always zero and a nose cone has no fore shoulder;
    attempts to set either are ignored with a warning.
    """

    def __init__(self, shape: Shape = Shape.OGIVE, length: float = 6 * DEFAULT_RADIUS,
                 aft_radius: float | None = DEFAULT_RADIUS, thickness: float = DEFAULT_THICKNESS,
                 material: Material = POLYSTYRENE) -> None:
        super().__init__(shape, length, 0.0, aft_radius, thickness, material)

    @property
    def component_name(self) -> str:
        return "Nose cone"

    @property
    def fore_radius(self) -> float:
        return 0.0

    @fore_radius.setter
    def fore_radius(self, value: float) -> None:
        _ignored("fore_radius", value)

    @property
    def fore_radius_automatic(self) -> bool:
        return False

    @fore_radius_automatic.setter
    def fore_radius_automatic(self, value: bool) -> None:
        _ignored("fore_radius_automatic", value)

    @property
    def fore_shoulder_length(self) -> float:
        return 0.0

    @fore_shoulder_length.setter
    def fore_shoulder_length(self, value: float) -> None:
        _ignored("fore_shoulder_length", value)

    def _front_auto_radius(self) -> float:
        return -1.0

    def _load_from_preset(self, preset) -> None:
        from .preset import PresetKey

        if preset.has(PresetKey.OUTER_DIAMETER):
            self.aft_radius = preset[PresetKey.OUTER_DIAMETER] / 2
        super()._load_from_preset(preset)


def _ignored(attr: str, value) -> None:
    warnings.warn(f"Nose cones do not support {attr}; ignoring {value!r}",
                  RuntimeWarning, stacklevel=3)
