"""
Catalog presets.

A ``ComponentPreset`` is a read-only bag of catalog values for one component
category. Components apply the keys they understand in ``_load_from_preset``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PresetKey(Enum):
    MANUFACTURER = "manufacturer"
    PART_NO = "part_no"
    DESCRIPTION = "description"
    LENGTH = "length"
    OUTER_DIAMETER = "outer_diameter"
    INNER_DIAMETER = "inner_diameter"
    FORE_OUTER_DIAMETER = "fore_outer_diameter"
    AFT_OUTER_DIAMETER = "aft_outer_diameter"
    FORE_SHOULDER_DIAMETER = "fore_shoulder_diameter"
    FORE_SHOULDER_LENGTH = "fore_shoulder_length"
    AFT_SHOULDER_DIAMETER = "aft_shoulder_diameter"
    AFT_SHOULDER_LENGTH = "aft_shoulder_length"
    THICKNESS = "thickness"
    FILLED = "filled"
    SHAPE = "shape"
    MATERIAL = "material"
    MASS = "mass"


@dataclass(frozen=True)
class ComponentPreset:
    """
    Catalog entry for one component.

    Parameters
    ----------
    component_type : type
        Component class the preset applies to
    manufacturer : str
        Manufacturer name
    part_no : str
        Manufacturer part number
    values : dict[PresetKey, Any]
        Catalog values in SI units

    Examples
    --------
    >>> preset = ComponentPreset(BodyTube, "Estes", "BT-50", {
    ...     PresetKey.LENGTH: 0.457,
    ...     PresetKey.OUTER_DIAMETER: 0.0248,
    ...     PresetKey.INNER_DIAMETER: 0.0241,
    ... })
    >>> preset.get(PresetKey.LENGTH)
    0.457
    """

    component_type: type
    manufacturer: str
    part_no: str
    values: dict[PresetKey, Any] = field(default_factory=dict)

    def has(self, key: PresetKey) -> bool:
        return key in self.values

    def get(self, key: PresetKey, default: Any = None) -> Any:
        return self.values.get(key, default)

    def __getitem__(self, key: PresetKey) -> Any:
        return self.values[key]

    def __hash__(self) -> int:
        return hash((self.component_type.__name__, self.manufacturer, self.part_no))

    def __str__(self) -> str:
        return f"{self.manufacturer} {self.part_no}"
