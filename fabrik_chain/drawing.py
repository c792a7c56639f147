"""Drawing helpers for solved joint chains.

The solver does not depend on anything here. These functions turn a chain
into line-segment vertices for a renderer, or plot it with matplotlib.
"""

from typing import Iterable, List, NamedTuple, Optional

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d import Axes3D  # noqa: F401

from .common.utils import as_vec3


class LineVertex(NamedTuple):
    """One vertex of a line segment."""

    position: np.ndarray
    color: int
    normal: np.ndarray


def segment_vertices(
    positions: Iterable,
    color: int,
    transform: Optional[np.ndarray] = None,
    origin: Optional[Iterable[float]] = None,
) -> List[LineVertex]:
    """
    Build line vertices connecting consecutive joints.

    Each pair (p_i, p_{i+1}) gives two vertices that share the normal
    p_{i+1} - p_i (not normalized, as line renderers expect).

    Args:
        positions: Joint chain, root first.
        color: Packed ARGB color applied to every vertex.
        transform: Optional 4x4 homogeneous transform applied to the
            vertex positions. Normals are rotated by its 3x3 block.
        origin: Optional point subtracted from every position first, e.g.
            the camera position for camera-relative rendering.

    Returns:
        List of 2 * (n - 1) vertices.
    """
    pts = np.array([as_vec3(p, "position") for p in positions], dtype=float).reshape(-1, 3)
    if origin is not None:
        pts = pts - as_vec3(origin, "origin")

    T = np.eye(4) if transform is None else np.asarray(transform, dtype=float)
    if T.shape != (4, 4):
        raise ValueError(f"transform must be 4x4, got {T.shape}.")
    Rm, t = T[:3, :3], T[:3, 3]

    vertices: List[LineVertex] = []
    for start, end in zip(pts[:-1], pts[1:]):
        normal = Rm @ (end - start)
        vertices.append(LineVertex(Rm @ start + t, color, normal))
        vertices.append(LineVertex(Rm @ end + t, color, normal.copy()))
    return vertices


def argb_to_rgba(color: int) -> tuple:
    """Convert a packed 0xAARRGGBB integer to a matplotlib RGBA tuple."""
    a = (color >> 24) & 0xFF
    r = (color >> 16) & 0xFF
    g = (color >> 8) & 0xFF
    b = color & 0xFF
    return (r / 255.0, g / 255.0, b / 255.0, a / 255.0)


def plot_chain(
    positions: Iterable,
    ax=None,
    target: Optional[Iterable[float]] = None,
    color: int = 0xFF1F77B4,
    label: Optional[str] = None,
):
    """
    Plot a joint chain on a 3D matplotlib axis.

    Args:
        positions: Joint chain, root first.
        ax: Existing 3D axis. A new figure is created if omitted.
        target: Optional target drawn as a red cross.
        color: Packed ARGB color for links and joints.
        label: Legend label for the chain.

    Returns:
        The axis the chain was drawn on.
    """
    pts = np.array([as_vec3(p, "position") for p in positions], dtype=float).reshape(-1, 3)

    if ax is None:
        fig = plt.figure(figsize=(7, 7))
        ax = fig.add_subplot(111, projection="3d")

    rgba = argb_to_rgba(color)
    ax.plot(pts[:, 0], pts[:, 1], pts[:, 2], "-o", color=rgba, lw=2, ms=5, label=label)
    # Root marker
    ax.scatter(pts[0, 0], pts[0, 1], pts[0, 2], s=60, c="k", marker="s")

    if target is not None:
        tgt = as_vec3(target, "target")
        ax.scatter(tgt[0], tgt[1], tgt[2], s=80, c="r", marker="x", label="target")

    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_zlabel("Z")
    return ax
