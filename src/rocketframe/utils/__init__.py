"""Utility functions: parameter validation and tabular snapshots."""

from .io import component_table, save_component_table
from .validation import (
    validate_finite,
    validate_non_negative,
    validate_shape_parameter,
)

__all__ = [
    "component_table",
    "save_component_table",
    "validate_non_negative",
    "validate_finite",
    "validate_shape_parameter",
]
