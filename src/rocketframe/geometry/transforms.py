"""
Rotation helpers for instance placement.

Component angles are stored as (n, 3) arrays of rotation angles about the
x, y and z axes [rad]. Axial (roll) angles of clustered components map to the
x column only.
"""
from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.transform import Rotation as R


def axial_angles_to_vectors(angles) -> NDArray[np.float64]:
    """
    Convert a sequence of roll angles into (n, 3) angle vectors.

    >>> axial_angles_to_vectors([0.0, np.pi])
    array([[0.        , 0.        , 0.        ],
           [3.14159265, 0.        , 0.        ]])
    """
    angles = np.asarray(angles, dtype=np.float64).reshape(-1)
    vectors = np.zeros((angles.size, 3), dtype=np.float64)
    vectors[:, 0] = angles
    return vectors


def rotation_from_angles(angles) -> R:
    """Rotation applying x, then y, then z rotations (extrinsic)."""
    return R.from_euler("xyz", np.asarray(angles, dtype=np.float64))


def rotate_points(angles, points) -> NDArray[np.float64]:
    """
    Rotate points by the given angle vector.

    Parameters
    ----------
    angles : array-like
        Angles about x, y, z [rad] (3,)
    points : array-like
        Points to rotate (3,) or (n, 3)

    Returns
    -------
    NDArray[np.float64]
        Rotated points with the same shape as ``points``
    """
    pts = np.asarray(points, dtype=np.float64)
    angles = np.asarray(angles, dtype=np.float64)
    if not np.any(angles):
        return pts.copy()
    return rotation_from_angles(angles).apply(pts)
