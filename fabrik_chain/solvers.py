"""FABRIK solver for unconstrained positional joint chains.

Contains:
    - derive_lengths: rest length of every segment of a pose.
    - SolveConfig: tolerance, iteration cap and optional explicit lengths.
    - solve: Forward And Backward Reaching IK, writing into the caller's chain.
    - FABRIKChainSolver: the same routine, also reporting convergence.

The chain is both input and output: `solve` takes exclusive write access to
the sequence for the duration of the call and returns nothing. A float NumPy
array of shape (n, 3) is updated row by row; a list has its elements
replaced by (3,) arrays.
"""

import logging
from collections.abc import MutableSequence
from dataclasses import dataclass
from numbers import Integral, Real
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from .common.base import ChainSolverBase
from .common.errors import (
    ChainConfigurationError,
    EmptyInputError,
    LengthMismatchError,
)
from .common.utils import EPS, as_vec3, distance, safe_normalize

logger = logging.getLogger(__name__)

ChainLike = Union[np.ndarray, MutableSequence]

DEFAULT_TOLERANCE = 0.1


@dataclass
class SolveConfig:
    """
    Parameters for a single FABRIK solve.

    Attributes:
        tolerance: Convergence radius around the target.
        max_iterations: Cap on forward+backward passes. None means unbounded.
        lengths: Canonical segment lengths. When None they are derived from
            the chain passed to `solve`.
        stall_threshold: Optional early exit. When set, iteration also stops
            once a pass improves the end-effector error by less than this.
    """

    tolerance: float = DEFAULT_TOLERANCE
    max_iterations: Optional[int] = None
    lengths: Optional[Sequence[float]] = None
    stall_threshold: Optional[float] = None

    def validate(self) -> None:
        """Raise ChainConfigurationError if any scalar field is out of range."""
        if (
            isinstance(self.tolerance, bool)
            or not isinstance(self.tolerance, Real)
            or not np.isfinite(self.tolerance)
            or self.tolerance < 0
        ):
            raise ChainConfigurationError(
                f"tolerance must be a finite number >= 0, got {self.tolerance!r}."
            )

        if self.max_iterations is not None and (
            isinstance(self.max_iterations, bool)
            or not isinstance(self.max_iterations, Integral)
            or self.max_iterations < 0
        ):
            raise ChainConfigurationError(
                f"max_iterations must be an integer >= 0 or None, "
                f"got {self.max_iterations!r}."
            )

        if self.stall_threshold is not None and (
            isinstance(self.stall_threshold, bool)
            or not isinstance(self.stall_threshold, Real)
            or self.stall_threshold < 0
        ):
            raise ChainConfigurationError(
                f"stall_threshold must be a number >= 0 or None, "
                f"got {self.stall_threshold!r}."
            )


# -----------------------------------------------------------------------------
# Input handling
# -----------------------------------------------------------------------------


def _chain_points(positions: Iterable) -> np.ndarray:
    """Read a chain into a new (n, 3) float array, validating each joint."""
    if positions is None:
        raise EmptyInputError("positions cannot be empty.")

    points = [as_vec3(p, f"positions[{i}]") for i, p in enumerate(positions)]
    if not points:
        raise EmptyInputError("positions cannot be empty.")
    return np.stack(points, axis=0)


def _check_writable(positions: ChainLike) -> None:
    """Make sure the solution can be written back into `positions`."""
    if isinstance(positions, np.ndarray):
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise ChainConfigurationError(
                f"positions array must have shape (n, 3), got {positions.shape}."
            )
        if not np.issubdtype(positions.dtype, np.floating):
            raise ChainConfigurationError(
                f"positions array must have a float dtype, got {positions.dtype}."
            )
        if not positions.flags.writeable:
            raise ChainConfigurationError("positions array is read-only.")
    elif not isinstance(positions, MutableSequence):
        raise ChainConfigurationError(
            f"positions must be a mutable sequence or a float array, "
            f"got {type(positions).__name__}."
        )


def _resolve_lengths(
    points: np.ndarray,
    lengths: Optional[Sequence[float]],
) -> np.ndarray:
    """Return the segment length table, derived or validated."""
    num_joints = len(points)

    if lengths is None:
        return np.linalg.norm(points[1:] - points[:-1], axis=1)

    try:
        table = np.array(lengths, dtype=float).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise ChainConfigurationError(f"lengths must be numeric: {exc}") from exc

    if table.size == 0 and num_joints > 1:
        raise EmptyInputError(
            f"lengths cannot be empty for a chain of {num_joints} joints."
        )
    if table.size != num_joints - 1:
        raise LengthMismatchError(table.size, num_joints)
    if not np.all(np.isfinite(table)) or np.any(table < 0.0):
        raise ChainConfigurationError(
            f"lengths must be finite and non-negative, got {table}."
        )
    return table


# -----------------------------------------------------------------------------
# Distance table
# -----------------------------------------------------------------------------


def derive_lengths(positions: Iterable) -> np.ndarray:
    """
    Compute the rest length of every segment of a pose.

    Args:
        positions: Sequence of n >= 1 joint positions.

    Returns:
        (n-1,) array where entry i is |positions[i+1] - positions[i]|.
        A single joint gives an empty array.

    Raises:
        EmptyInputError: If `positions` is None or empty.
    """
    points = _chain_points(positions)
    return _resolve_lengths(points, None)


# -----------------------------------------------------------------------------
# FABRIK
# -----------------------------------------------------------------------------


def _place(
    anchor: np.ndarray,
    current: np.ndarray,
    length: float,
    fallback: np.ndarray,
) -> np.ndarray:
    """
    Put a joint at `length` from `anchor`, on the line towards `current`.

    If the two points coincide the line is undefined; the joint is pushed
    out along `fallback` instead so the segment length still holds.
    """
    r = np.linalg.norm(current - anchor)
    if r < EPS:
        return anchor + safe_normalize(fallback) * length

    lam = length / r
    return (1.0 - lam) * anchor + lam * current


def _stretch_towards(points: np.ndarray, lengths: np.ndarray, target: np.ndarray) -> None:
    """Lay the chain out straight from the root towards an unreachable target."""
    for i in range(len(points) - 1):
        r = np.linalg.norm(target - points[i])
        if r < EPS:
            # Target sits on this joint: the rest of the chain collapses onto it.
            points[i + 1:] = points[i]
            return

        lam = lengths[i] / r
        points[i + 1] = (1.0 - lam) * points[i] + lam * target


def _reach(
    points: np.ndarray,
    lengths: np.ndarray,
    target: np.ndarray,
    config: SolveConfig,
) -> Tuple[int, float]:
    """
    Iterate forward and backward reaching passes on `points` in place.

    Returns:
        iterations: Number of passes run.
        pos_err: Final distance from the end effector to the target.
    """
    base = points[0].copy()
    n = len(points)

    pos_err = float(np.linalg.norm(points[-1] - target))
    iterations = 0

    while pos_err > config.tolerance and (
        config.max_iterations is None or iterations < config.max_iterations
    ):
        # Forward reaching: pin the end effector, walk back to the root.
        points[-1] = target
        for i in range(n - 2, -1, -1):
            points[i] = _place(points[i + 1], points[i], lengths[i], base - points[i + 1])

        # Backward reaching: restore the root, walk out to the end effector.
        points[0] = base
        for i in range(1, n):
            points[i] = _place(points[i - 1], points[i], lengths[i - 1], target - points[i - 1])

        previous_err = pos_err
        pos_err = distance(points[-1], target)
        iterations += 1

        if (
            config.stall_threshold is not None
            and previous_err - pos_err < config.stall_threshold
        ):
            logger.debug(
                "Stalled after %d iterations (improvement %.3e).",
                iterations,
                previous_err - pos_err,
            )
            break

    return iterations, pos_err


def _run(positions: ChainLike, target: Iterable[float], config: SolveConfig) -> Dict[str, Any]:
    """Validate everything, solve, write back. Shared by both public entries."""
    config.validate()
    points = _chain_points(positions)
    _check_writable(positions)
    lengths = _resolve_lengths(points, config.lengths)
    target = as_vec3(target, "target")

    if np.any(lengths < EPS):
        logger.warning(
            "Chain has zero-length segments at %s.",
            np.flatnonzero(lengths < EPS).tolist(),
        )

    # Arrays are solved in place; other sequences get the result copied back.
    in_place = isinstance(positions, np.ndarray)
    if in_place:
        points = positions

    total_length = float(np.sum(lengths))
    root_to_target = distance(points[0], target)
    reachable = not total_length < root_to_target

    logger.debug(
        "Solving %d-joint chain: chain length %.6f, root-to-target %.6f (%s).",
        len(points),
        total_length,
        root_to_target,
        "reachable" if reachable else "unreachable",
    )

    if reachable:
        iterations, pos_err = _reach(points, lengths, target, config)
        if pos_err > config.tolerance:
            logger.debug(
                "Stopped after %d iterations with error %.6f (cap %s).",
                iterations,
                pos_err,
                config.max_iterations,
            )
        else:
            logger.debug("Converged in %d iterations (error %.6f).", iterations, pos_err)
    else:
        _stretch_towards(points, lengths, target)
        iterations = 0
        pos_err = distance(points[-1], target)

    if not in_place:
        for i, p in enumerate(points):
            positions[i] = p.copy()

    return {
        "reachable": reachable,
        "iters_total": iterations,
        "pos_err": pos_err,
    }


def solve(
    positions: ChainLike,
    target: Iterable[float],
    config: Optional[SolveConfig] = None,
) -> None:
    """
    Move a joint chain so that its last joint reaches (or points at) a target.

    The root (positions[0]) never moves. If the chain is too short to reach
    the target it is stretched straight towards it, otherwise forward and
    backward reaching passes run until the end effector is within
    `config.tolerance` or `config.max_iterations` passes have run. Nothing
    is returned; re-check the effector distance to tell the two apart.

    Args:
        positions: Mutable chain of n >= 1 joint positions, root first.
            Overwritten with the solution.
        target: Desired end-effector position [x, y, z].
        config: Solve parameters. Defaults to tolerance 0.1, no iteration
            cap and lengths derived from `positions`.

    Raises:
        EmptyInputError: If the chain, or a required length table, is empty.
        LengthMismatchError: If `config.lengths` has the wrong size.
        ChainConfigurationError: For any other invalid input. The chain is
            left untouched.
    """
    _run(positions, target, config if config is not None else SolveConfig())


class FABRIKChainSolver(ChainSolverBase):
    """FABRIK solver object that also reports whether the solve converged."""

    def __init__(self, config: Optional[SolveConfig] = None) -> None:
        """
        Initialize the solver.

        Args:
            config: Parameters used for every call to `solve`.
        """
        self.config = config if config is not None else SolveConfig()
        self.config.validate()

    def solve(
        self,
        positions: ChainLike,
        target: Iterable[float],
    ) -> Tuple[ChainLike, bool, Dict[str, Any]]:
        """
        Run FABRIK on `positions` in place.

        Args:
            positions: Mutable chain of joint positions, root first.
            target: Desired end-effector position [x, y, z].

        Returns:
            positions: The chain that was passed in.
            ok: True if the end effector ended within tolerance.
            info: Dict with keys:
                - 'reachable': whether the chain is long enough.
                - 'iters_total': number of forward+backward passes.
                - 'pos_err': final end-effector distance to the target.
        """
        info = _run(positions, target, self.config)
        ok = info["pos_err"] <= self.config.tolerance
        return positions, bool(ok), info
