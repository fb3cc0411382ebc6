"""
ilqgmpc Result Classes
======================

Data classes for solver status and results.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Status(Enum):
    """
    Solver status codes.

    Attributes:
        CONVERGED: Relative cost improvement fell below tolerance, or no
            line-search step improved the cost
        MAX_ITERATIONS: Iteration limit reached, best policy kept
        DIVERGED: Rollout left the model domain or the backward pass could
            not be regularized
        UNSOLVED: Problem not yet solved
    """
    CONVERGED = "converged"
    MAX_ITERATIONS = "max_iterations"
    DIVERGED = "diverged"
    UNSOLVED = "unsolved"

    def __str__(self) -> str:
        return self.value

    @property
    def is_successful(self) -> bool:
        """True if solve() reports success for this status."""
        return self in (Status.CONVERGED, Status.MAX_ITERATIONS)

    @property
    def has_solution(self) -> bool:
        """True if a policy was accepted."""
        return self.is_successful


@dataclass
class SolveResult:
    """
    Result of one iLQG solve call.

    Attributes:
        status: Terminal state of the iteration loop
        cost: Cost of the accepted trajectory
        iterations: Number of iterations performed
        solve_time: Wall clock time in seconds
        cost_history: Accepted cost after the initial rollout and each
            accepted iteration (non-increasing with an active line search)
        regularization: Regularization value at termination
        message: Human readable reason for termination

    Example:
        >>> solver.solve()
        >>> result = solver.result
        >>> if result.status == Status.CONVERGED:
        ...     print(f"Cost: {result.cost}")
    """

    status: Status
    cost: float
    iterations: int
    solve_time: float

    cost_history: List[float] = field(default_factory=list)
    regularization: float = 0.0
    line_search_alpha: Optional[float] = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status.is_successful

    def __repr__(self) -> str:
        return (
            f"SolveResult(status={self.status}, "
            f"cost={self.cost:.6g}, "
            f"iterations={self.iterations}, "
            f"time={self.solve_time:.4f}s)"
        )

    def summary(self) -> str:
        """Return a formatted summary of the solve result."""
        lines = [
            "=" * 50,
            "iLQG Solve Summary",
            "=" * 50,
            f"Status:           {self.status}",
            f"Cost:             {self.cost:.10g}",
            f"Iterations:       {self.iterations}",
            f"Solve time:       {self.solve_time:.4f} s",
            "-" * 50,
            f"Regularization:   {self.regularization:.3e}",
            f"Last step size:   {self.line_search_alpha}",
            f"Message:          {self.message}",
            "=" * 50,
        ]
        return "\n".join(lines)

    @classmethod
    def unsolved(cls) -> "SolveResult":
        """Placeholder result before the first solve."""
        return cls(
            status=Status.UNSOLVED,
            cost=float("nan"),
            iterations=0,
            solve_time=0.0,
            message="not solved",
        )
