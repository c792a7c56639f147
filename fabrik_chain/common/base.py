"""Base classes for positional chain solvers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, MutableSequence, Tuple


class ChainSolverBase(ABC):
    """
    Abstract base class for solvers working directly on joint positions.

    Unlike joint-space IK solvers there is no kinematic model: the chain is
    an ordered sequence of 3D points and the solver moves those points.
    Concrete solvers should inherit from this class and implement `solve`.
    """

    @abstractmethod
    def solve(
        self,
        positions: MutableSequence,
        target: Iterable[float],
    ) -> Tuple[MutableSequence, bool, Dict[str, Any]]:
        """
        Move the chain so its last joint approaches `target`.

        Args:
            positions: Mutable sequence of joint positions, root first.
                Updated in place.
            target: Desired end-effector position [x, y, z].

        Returns:
            positions: The same object that was passed in, now holding
                the solution.
            ok: True if the end effector is within tolerance of the target.
            info: Extra diagnostic information such as iteration count,
                final position error, etc.
        """
        raise NotImplementedError
