"""Shared helpers for the FABRIK chain solver."""

from .errors import ChainConfigurationError, EmptyInputError, LengthMismatchError

__all__ = [
    "ChainConfigurationError",
    "EmptyInputError",
    "LengthMismatchError",
]
