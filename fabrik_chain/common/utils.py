"""Utility functions for 3D points, distances and homogeneous poses."""

from typing import Iterable, Optional

import numpy as np
from scipy.spatial.transform import Rotation as R

from .errors import ChainConfigurationError


# Below this distance two points are treated as coincident.
EPS = 1e-12


def as_vec3(v: Iterable[float], name: str = "vector") -> np.ndarray:
    """
    Convert an arbitrary 3-element sequence to a float NumPy vector.

    Args:
        v: Sequence of three coordinates (list, tuple, array, ...).
        name: Name used in the error message.

    Returns:
        (3,) float array. Always a copy, never a view into `v`.

    Raises:
        ChainConfigurationError: If `v` is not three finite numbers.
    """
    try:
        arr = np.array(v, dtype=float).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise ChainConfigurationError(f"{name} must be a 3D vector: {exc}") from exc

    if arr.size != 3:
        raise ChainConfigurationError(
            f"{name} must have 3 coordinates, got {arr.size}."
        )
    if not np.all(np.isfinite(arr)):
        raise ChainConfigurationError(f"{name} must be finite, got {arr}.")
    return arr


def distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(a, dtype=float) - np.asarray(b, dtype=float)))


def safe_normalize(v: np.ndarray, fallback: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Normalize a vector, falling back to another direction if it is ~zero.

    Args:
        v: Vector to normalize.
        fallback: Direction used when `v` is degenerate (default +x). It is
            normalized too; a degenerate fallback also yields +x.

    Returns:
        Unit vector of the same dimension as `v`.
    """
    vv = np.asarray(v, dtype=float).reshape(-1)
    n = np.linalg.norm(vv)
    if n < EPS:
        if fallback is None:
            fallback = np.array([1.0, 0.0, 0.0], dtype=float)
        ff = np.asarray(fallback, dtype=float).reshape(-1)
        fn = np.linalg.norm(ff)
        if fn < EPS:
            return np.array([1.0, 0.0, 0.0], dtype=float)
        return ff / fn
    return vv / n


def pose_matrix(
    translation: Iterable[float],
    quat: Optional[Iterable[float]] = None,
) -> np.ndarray:
    """
    Build a 4x4 homogeneous transform from a position and a quaternion.

    Args:
        translation: 3D translation.
        quat: Optional rotation as quaternion [x, y, z, w] (scipy order).
            Identity orientation if omitted.

    Returns:
        T: 4x4 homogeneous transform.
    """
    T = np.eye(4)
    T[:3, 3] = as_vec3(translation, "translation")
    if quat is not None:
        T[:3, :3] = R.from_quat(np.asarray(quat, dtype=float)).as_matrix()
    return T
