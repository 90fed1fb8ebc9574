"""
Tabular snapshots of a component tree.

A snapshot is an immutable read of every node, suitable for long-running
consumers that must not iterate the live tree.
"""
from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)

TABLE_COLUMNS = [
    "name", "type", "id", "depth", "length", "axial_method", "axial_offset",
    "x", "instance_count", "mass", "section_mass", "cg_x",
    "mass_overridden_by", "cg_overridden_by", "cd_overridden_by",
]


def _owner_name(owner) -> str | None:
    return None if owner is None else owner.name


def component_table(component) -> pd.DataFrame:
    """
    One row per node of the subtree, in depth-first order.

    Parameters
    ----------
    component : RocketComponent
        Root of the subtree to snapshot

    Returns
    -------
    pd.DataFrame
        Columns as in ``TABLE_COLUMNS``; ``x`` is the absolute position of
        the first instance

    Raises
    ------
    ConcurrentModificationError
        If the tree changes while the snapshot is taken.
    """
    base_depth = len(component.parents)
    rows = []
    for node in component.iterator(return_self=True):
        rows.append({
            "name": node.name,
            "type": type(node).__name__,
            "id": node.id,
            "depth": len(node.parents) - base_depth,
            "length": node.length,
            "axial_method": node.axial_method.name,
            "axial_offset": node.axial_offset,
            "x": float(node.component_locations[0][0]),
            "instance_count": node.instance_count,
            "mass": node.mass,
            "section_mass": node.section_mass,
            "cg_x": node.cg.x,
            "mass_overridden_by": _owner_name(node.mass_overridden_by),
            "cg_overridden_by": _owner_name(node.cg_overridden_by),
            "cd_overridden_by": _owner_name(node.cd_overridden_by),
        })
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)


def save_component_table(component, filepath: str | Path) -> Path:
    """
    Write :func:`component_table` to CSV, creating parent directories.

    Returns
    -------
    Path
        Path written
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = component_table(component)
    df.to_csv(path, index=False)
    logger.info("Component table with %d rows saved to %s", len(df), path.absolute())
    return path
