"""Exceptions raised when a chain or its solve parameters are malformed."""


class ChainConfigurationError(ValueError):
    """Invalid solver input, detected before any joint is moved."""


class EmptyInputError(ChainConfigurationError):
    """The joint chain (or a required length table) is empty."""


class LengthMismatchError(ChainConfigurationError):
    """The segment length table does not match the chain topology."""

    def __init__(self, num_lengths: int, num_joints: int) -> None:
        super().__init__(
            f"Expected {num_joints - 1} segment lengths for {num_joints} "
            f"joints, got {num_lengths}."
        )
        self.num_lengths = num_lengths
        self.num_joints = num_joints
