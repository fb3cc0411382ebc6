"""
ilqgmpc Exception Classes
=========================

Custom exceptions for iLQG and MPC error handling.

Numerical trouble inside a solve (domain violations, ill-conditioned
curvature) is caught by the solver and reported as a failed solve. Only
structural misuse propagates to the caller.
"""

from typing import Optional


class IlqgMpcError(Exception):
    """Base exception for all ilqgmpc errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotConfiguredError(IlqgMpcError):
    """
    Raised when a solver or controller is used before it is set up.

    Examples: solve() without an initial guess, get_solution() before any
    successful solve.
    """

    def __init__(self, message: str = "Solver is not configured") -> None:
        super().__init__(message)


class DomainError(IlqgMpcError):
    """
    Raised when dynamics or cost are evaluated outside their valid domain.

    The solver treats this as a divergence of the current iteration.
    """

    def __init__(
        self,
        message: str = "Evaluation outside the model domain",
        step: Optional[int] = None,
    ) -> None:
        self.step = step
        super().__init__(message)


class IllConditionedError(IlqgMpcError):
    """
    Raised when the backward-pass curvature cannot be regularized.

    The control Hessian stayed indefinite although the regularization
    reached its upper bound.
    """

    def __init__(
        self,
        message: str = "Backward pass is ill-conditioned",
        regularization: Optional[float] = None,
    ) -> None:
        self.regularization = regularization
        super().__init__(message)


class DimensionError(IlqgMpcError):
    """
    Raised when vector/matrix/trajectory dimensions are incompatible.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Dimension mismatch: {message}")


class InvalidInputError(IlqgMpcError, ValueError):
    """
    Raised when input data is invalid.

    Examples: NaN values, non-positive horizon or time step.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Invalid input: {message}")


class ConfigurationError(IlqgMpcError):
    """
    Raised when a configuration file or section cannot be used.

    Examples: missing section, unknown keys, unknown term type.
    """

    def __init__(self, message: str) -> None:
        super().__init__(f"Configuration error: {message}")
