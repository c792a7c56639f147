"""FABRIK inverse kinematics for unconstrained 3D joint chains.

Modules:
    - solvers: distance table, FABRIK solve routine and reporting solver
    - config: YAML loading of solver parameters
    - drawing: line-vertex generation and matplotlib plotting of chains
    - diagnose: random-target benchmark CLI
"""

from .common.errors import ChainConfigurationError, EmptyInputError, LengthMismatchError
from .solvers import FABRIKChainSolver, SolveConfig, derive_lengths, solve

__all__ = [
    "ChainConfigurationError",
    "EmptyInputError",
    "LengthMismatchError",
    "FABRIKChainSolver",
    "SolveConfig",
    "derive_lengths",
    "solve",
]
