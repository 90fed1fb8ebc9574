"""Construction materials."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MaterialType(Enum):
    BULK = "bulk"          # kg/m³
    SURFACE = "surface"    # kg/m²
    LINE = "line"          # kg/m


@dataclass(frozen=True)
class Material:
    """
    Named material with a density.

    Parameters
    ----------
    name : str
        Display name
    density : float
        Density in the unit implied by ``type``
    type : MaterialType
        Bulk, surface or line density
    """

    name: str
    density: float
    type: MaterialType = MaterialType.BULK

    def __post_init__(self):
        if self.density < 0:
            raise ValueError(f"Material density must be non-negative, got {self.density}")

    def __str__(self) -> str:
        return f"{self.name} ({self.density:g})"


CARDBOARD = Material("Cardboard", 680.0)
POLYSTYRENE = Material("Polystyrene PS", 1050.0)
DEFAULT_BULK_MATERIAL = CARDBOARD
