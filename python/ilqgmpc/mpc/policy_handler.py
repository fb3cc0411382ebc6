"""
Policy Handling
===============

Initial guesses for successive MPC solves and truncation of returned
policies.

Policies are indexed by grid steps relative to the MPC start time. A
policy solved for a cycle starting at step s covers steps s..s+K-1.
"""

from typing import Callable, Optional, Tuple

import numpy as np

from ..core.controller import StateFeedbackController


class PolicyHandler:
    """
    Produces the initial guess of each MPC solve.

    Warm start shifts the previous solution onto the new start step and
    resizes it to the new horizon. Cold start shifts the user initial guess
    instead, so every solve begins from the same seed.

    Args:
        initial_guess: User supplied policy for the first cycle (starts at step 0)
        cold_start: Seed every solve from the initial guess
    """

    def __init__(self, initial_guess: StateFeedbackController, cold_start: bool = False) -> None:
        self._initial_guess = initial_guess.copy()
        self.cold_start = cold_start
        self._solution: Optional[StateFeedbackController] = None
        self._solution_step = 0

    @property
    def initial_guess(self) -> StateFeedbackController:
        return self._initial_guess.copy()

    @property
    def has_solution(self) -> bool:
        return self._solution is not None

    @property
    def solution_step(self) -> int:
        """Start step of the stored solution."""
        return self._solution_step

    def store_solution(self, policy: StateFeedbackController, start_step: int) -> None:
        """Keep the latest solution for the next warm start."""
        self._solution = policy.copy()
        self._solution_step = int(start_step)

    def reset(self) -> None:
        self._solution = None
        self._solution_step = 0

    def design_initial_guess(self, start_step: int, length: int) -> StateFeedbackController:
        """
        Initial guess for a solve starting at start_step with 'length' steps.

        Example:
            >>> handler.store_solution(policy, start_step=0)
            >>> guess = handler.design_initial_guess(start_step=5, length=len(policy) - 5)
        """
        if self.cold_start or self._solution is None:
            return self._initial_guess.shifted(start_step, length)
        return self._solution.shifted(start_step - self._solution_step, length)


def truncate_policy(
    policy: StateFeedbackController, n_steps: int
) -> Tuple[StateFeedbackController, int]:
    """
    Drop up to n_steps leading steps of a policy.

    The count is clipped to [0, len(policy)], so the result may be empty.

    Returns:
        Tuple (truncated policy, number of steps actually dropped)
    """
    n = int(np.clip(n_steps, 0, len(policy)))
    return policy.truncate_front(n), n


def forward_integrate_state(
    step_fn: Callable[[np.ndarray, np.ndarray, int], np.ndarray],
    policy: StateFeedbackController,
    x: np.ndarray,
    offset: int,
    n_steps: int,
) -> np.ndarray:
    """
    Propagate a state n_steps grid steps under the policy being executed.

    Args:
        step_fn: Callable (x, u, i) -> x_next advancing one grid step, where i
            counts steps from the measurement time
        policy: Policy the plant currently executes
        x: Measured state
        offset: Policy index matching the measurement step (clamped)
        n_steps: Number of steps to propagate

    Returns:
        Predicted state after n_steps
    """
    x = np.array(x, dtype=np.float64)
    for i in range(n_steps):
        u = policy.control_at(offset + i, x)
        x = step_fn(x, u, i)
    return x
