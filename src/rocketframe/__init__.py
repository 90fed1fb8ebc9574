"""
rocketframe - In-memory structural model of multi-stage rockets.

Core Components
---------------
Rocket : Tree root owning the change bus, preferences and configuration
AxialStage : Stage assembly
BodyTube, Transition, NoseCone : Body components
InnerTube, MassComponent : Internal components
Shape : Body-of-revolution profile families

Overrides and Events
--------------------
OverrideQuantity : Mass, CG and CD overrides with subtree ownership
ChangeBus : Listener registry with freeze/thaw batching
ChangeEventLogger : CSV recording of change events

Examples
--------
>>> from rocketframe import Rocket, AxialStage, NoseCone, BodyTube
>>> rocket = Rocket()
>>> stage = AxialStage()
>>> rocket.add_child(stage)
>>> stage.add_child(NoseCone(length=0.15, aft_radius=0.025))
>>> stage.add_child(BodyTube(length=0.4, outer_radius=0.025))
>>> round(stage.length, 3)
0.55
"""

__version__ = "0.1.0"

from rocketframe.components import (
    AxialMethod,
    AxialStage,
    BodyTube,
    ChangeBus,
    ChangeType,
    ComponentChangeEvent,
    ComponentPreset,
    InnerTube,
    MassComponent,
    Material,
    NoseCone,
    OverrideQuantity,
    PresetKey,
    Rocket,
    RocketComponent,
    SafetyMutex,
    Transition,
)
from rocketframe.config import DEFAULT_PREFERENCES, ModelPreferences
from rocketframe.errors import (
    BugError,
    ComponentTreeError,
    ConcurrencyError,
    ConcurrentModificationError,
    InvalidatedComponentError,
)
from rocketframe.geometry import Coordinate, Shape, solve_clip_length
from rocketframe.logger import ChangeEventLogger
from rocketframe.models import (
    AerodynamicCalculator,
    AerodynamicForces,
    FlightConditions,
    FlightConfiguration,
    Motor,
)

__all__ = [
    # Version
    "__version__",
    # Components
    "RocketComponent",
    "Rocket",
    "AxialStage",
    "BodyTube",
    "Transition",
    "NoseCone",
    "InnerTube",
    "MassComponent",
    "Material",
    "ComponentPreset",
    "PresetKey",
    # Placement and overrides
    "AxialMethod",
    "OverrideQuantity",
    # Events
    "ChangeBus",
    "ChangeType",
    "ComponentChangeEvent",
    "SafetyMutex",
    "ChangeEventLogger",
    # Geometry
    "Coordinate",
    "Shape",
    "solve_clip_length",
    # Configuration
    "ModelPreferences",
    "DEFAULT_PREFERENCES",
    # Collaborators
    "AerodynamicCalculator",
    "AerodynamicForces",
    "FlightConditions",
    "FlightConfiguration",
    "Motor",
    # Errors
    "BugError",
    "ConcurrencyError",
    "InvalidatedComponentError",
    "ComponentTreeError",
    "ConcurrentModificationError",
]
