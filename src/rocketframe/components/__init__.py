"""Component tree: node base class, categories, overrides and change events."""

from .axial import AxialMethod
from .base import RocketComponent, attach, detach, move
from .body import DEFAULT_RADIUS, DEFAULT_THICKNESS, BodyComponent, BodyTube, SymmetricComponent
from .events import ChangeBus, ChangeType, ComponentChangeEvent
from .internal import InnerTube, InternalComponent, MassComponent
from .material import DEFAULT_BULK_MATERIAL, Material, MaterialType
from .mutex import SafetyMutex
from .overrides import (
    OverrideQuantity,
    cascade_override_owners,
    is_overridden_by_ancestor,
    resolve_override_owner,
)
from .preset import ComponentPreset, PresetKey
from .rocket import AxialStage, ComponentAssembly, Rocket
from .transition import NoseCone, Transition

__all__ = [
    "RocketComponent",
    "attach",
    "detach",
    "move",
    "AxialMethod",
    "ChangeBus",
    "ChangeType",
    "ComponentChangeEvent",
    "SafetyMutex",
    "OverrideQuantity",
    "resolve_override_owner",
    "is_overridden_by_ancestor",
    "cascade_override_owners",
    "ComponentAssembly",
    "Rocket",
    "AxialStage",
    "BodyComponent",
    "SymmetricComponent",
    "BodyTube",
    "Transition",
    "NoseCone",
    "InternalComponent",
    "InnerTube",
    "MassComponent",
    "Material",
    "MaterialType",
    "DEFAULT_BULK_MATERIAL",
    "DEFAULT_RADIUS",
    "DEFAULT_THICKNESS",
    "ComponentPreset",
    "PresetKey",
]
