"""
Model Predictive Control Wrapper
================================

Receding-horizon controller re-solving an optimal control problem with
iLQG every cycle.

One run() cycle:
1. Quantize the measurement time onto the solver grid
2. Estimate the delay until the new policy reaches the plant
3. Optionally propagate the measured state over that delay with the
   policy currently executed
4. Pick the horizon length from the horizon strategy
5. Build the initial guess (warm or cold start) and solve
6. Optionally drop the policy steps that elapsed during the solve; a solve
   that outlasts its whole horizon fails the cycle

The problem is solved at start_time + s * dt for grid step s, so
time-varying dynamics and costs see the time of the cycle.

Example:
    >>> mpc = MPC(problem, ILQGSettings(dt=0.01, max_iterations=5), MpcSettings())
    >>> mpc.set_initial_guess(solver.get_solution())
    >>> success, policy, timestamp = mpc.run(x, t)
"""

from __future__ import annotations

import functools
import logging
import threading
from typing import Callable, NamedTuple, Optional

import numpy as np

from ..core.controller import StateFeedbackController
from ..core.trajectory import StateTrajectory
from ..exceptions import DimensionError, DomainError, NotConfiguredError
from ..problem import OptConProblem
from ..result import SolveResult
from ..solver.ilqg import ILQG
from ..solver.settings import ILQGSettings
from ..utils.validation import as_vector
from .horizon import make_horizon_strategy
from .policy_handler import PolicyHandler, forward_integrate_state, truncate_policy
from .settings import MpcSettings
from .timekeeper import CycleTiming, MpcStatistics, MpcTimeKeeper

logger = logging.getLogger(__name__)


class MpcCycle(NamedTuple):
    """
    Outcome of one MPC cycle.

    Attributes:
        success: True if a new policy was computed
        policy: New policy (None on failure)
        timestamp: Time at which the first policy step applies
    """
    success: bool
    policy: Optional[StateFeedbackController]
    timestamp: float


class MPC:
    """
    Receding-horizon iLQG controller.

    Args:
        problem: Optimal control problem; its time horizon defines the
            initial horizon. The controller works on a private copy.
        solver_settings: iLQG settings (dt is the MPC grid step)
        mpc_settings: MPC settings
        solver: Pre-built ILQG to use instead of constructing one
        clock: Monotonic clock in seconds used to measure solve latency
            (default: time.perf_counter)
    """

    def __init__(
        self,
        problem: OptConProblem,
        solver_settings: Optional[ILQGSettings] = None,
        mpc_settings: Optional[MpcSettings] = None,
        solver: Optional[ILQG] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._settings = mpc_settings if mpc_settings is not None else MpcSettings()

        if solver is None:
            self._problem = problem.copy()
            self._solver = ILQG(self._problem, solver_settings)
        else:
            self._solver = solver
            self._problem = solver.problem
            if solver_settings is not None:
                solver.configure(solver_settings)

        self._initial_steps = self._solver.num_steps()
        self._initial_state = self._problem.initial_state
        self._time_origin = self._problem.start_time
        dt = self._solver.settings.dt
        self._horizon = make_horizon_strategy(
            self._settings.mpc_mode,
            self._initial_steps,
            int(round(self._settings.min_time_horizon / dt)),
        )
        self._timekeeper = MpcTimeKeeper(dt, clock)
        self._lock = threading.Lock()

        self._policy_handler: Optional[PolicyHandler] = None
        self._reset_state()

    def _reset_state(self) -> None:
        self._executed_policy: Optional[StateFeedbackController] = None
        self._executed_step = 0
        self._state_trajectory: Optional[StateTrajectory] = None
        self._time_horizon_reached = False
        self._last_result = SolveResult.unsolved()

    # Configuration

    @property
    def dt(self) -> float:
        return self._timekeeper.dt

    @property
    def settings(self) -> MpcSettings:
        return self._settings

    @property
    def solver(self) -> ILQG:
        return self._solver

    @property
    def initial_steps(self) -> int:
        """Horizon length of the original problem in steps."""
        return self._initial_steps

    @property
    def last_solve_result(self) -> SolveResult:
        return self._last_result

    @property
    def statistics(self) -> MpcStatistics:
        return self._timekeeper.compute_statistics()

    def set_initial_guess(self, policy: StateFeedbackController) -> None:
        """
        Seed the first cycle (and every cycle when cold starting).

        The policy starts at the MPC start time and is shifted and resized
        to each cycle's horizon.
        """
        if (policy.state_dim, policy.control_dim) != (
            self._problem.state_dim,
            self._problem.control_dim,
        ):
            raise DimensionError(
                f"initial guess has dimensions ({policy.state_dim}, {policy.control_dim}), "
                f"expected ({self._problem.state_dim}, {self._problem.control_dim})"
            )
        with self._lock:
            self._policy_handler = PolicyHandler(policy, cold_start=self._settings.cold_start)
            self._reset_state()

    def reset(self) -> None:
        """Forget the start time, stored solutions and statistics."""
        with self._lock:
            self._timekeeper.reset()
            if self._policy_handler is not None:
                self._policy_handler.reset()
            self._reset_state()
            self._problem.set_initial_state(self._initial_state)
            self._problem.set_time_horizon(self._initial_steps * self.dt)
            self._problem.set_start_time(self._time_origin)

    # Cycle

    def _grid_time(self, step: int) -> float:
        """Problem time of grid step 'step' counted from the MPC start."""
        return self._time_origin + step * self.dt

    def run(self, x: np.ndarray, t: float) -> MpcCycle:
        """
        Compute a new policy for the state x measured at time t.

        Args:
            x: Measured state (n_x,)
            t: Measurement timestamp in seconds; the first call defines the
                MPC start time

        Returns:
            MpcCycle(success, policy, timestamp). On failure the policy is
            None and the stored solution and problem are unchanged.

        Raises:
            NotConfiguredError: If no initial guess was set
        """
        with self._lock:
            if self._policy_handler is None:
                raise NotConfiguredError("MPC has no initial guess, call set_initial_guess()")
            x = as_vector(x, self._problem.state_dim, "x")

            tk = self._timekeeper
            tk.start_cycle()
            tk.start(t)
            settings = self._settings

            measured_step = tk.step_index(t)
            delay = tk.delay_estimate(settings)

            forward_steps = 0
            x_start = x
            if settings.state_forward_integration:
                forward_steps = tk.steps(delay)
                executed = self._executed_policy
                if executed is None:
                    executed = self._policy_handler.initial_guess
                step_fn = functools.partial(
                    self._solver.step, start_time=self._grid_time(measured_step)
                )
                try:
                    x_start = forward_integrate_state(
                        step_fn,
                        executed,
                        x,
                        measured_step - self._executed_step,
                        forward_steps,
                    )
                except DomainError as exc:
                    logger.warning("MPC forward integration failed: %s", exc.message)
                    return MpcCycle(False, None, tk.timestamp(measured_step))

            start_step = measured_step + forward_steps
            horizon_steps = self._horizon.horizon_steps(start_step)
            if horizon_steps is None:
                if not self._time_horizon_reached:
                    logger.info("MPC time horizon reached at step %d", start_step)
                self._time_horizon_reached = True
                return MpcCycle(False, None, tk.timestamp(start_step))

            guess = self._policy_handler.design_initial_guess(start_step, horizon_steps)
            previous = (
                self._problem.initial_state,
                self._problem.time_horizon,
                self._problem.start_time,
            )
            accepted = False
            try:
                self._problem.set_initial_state(x_start)
                self._problem.set_time_horizon(horizon_steps * self.dt)
                self._problem.set_start_time(self._grid_time(start_step))
                self._solver.set_initial_guess(guess)

                success = self._solver.solve()
                latency = tk.elapsed()
                self._last_result = self._solver.result

                timing = CycleTiming(
                    latency_s=latency,
                    delay_estimate_s=delay,
                    forward_steps=forward_steps,
                    horizon_steps=horizon_steps,
                    iterations=self._last_result.iterations,
                    success=success,
                )

                if not success:
                    tk.record(timing)
                    logger.warning(
                        "MPC solve failed at step %d: %s", start_step, self._last_result.message
                    )
                    return MpcCycle(False, None, tk.timestamp(start_step))

                solution = self._solver.get_solution()
                policy = solution
                truncated = 0
                if settings.post_truncation:
                    elapsed_steps = tk.steps(tk.actual_delay(latency, settings))
                    policy, truncated = truncate_policy(solution, elapsed_steps - forward_steps)
                timing.truncated_steps = truncated

                if len(policy) == 0:
                    timing.success = False
                    tk.record(timing)
                    logger.warning(
                        "MPC solve at step %d outlasted its %d step horizon",
                        start_step, horizon_steps,
                    )
                    return MpcCycle(False, None, tk.timestamp(start_step + truncated))

                tk.record(timing)
                accepted = True
            finally:
                if not accepted:
                    x0, horizon, start_time = previous
                    self._problem.set_initial_state(x0)
                    if horizon is not None:
                        self._problem.set_time_horizon(horizon)
                    self._problem.set_start_time(start_time)

            self._policy_handler.store_solution(solution, start_step)
            self._executed_policy = policy
            self._executed_step = start_step + truncated
            self._state_trajectory = StateTrajectory(
                self._solver.get_state_trajectory().values,
                self.dt,
                start_time=tk.timestamp(start_step),
            )

            logger.debug(
                "MPC cycle: step %d, forward %d, horizon %d, truncated %d, "
                "latency %.3f ms, iterations %d",
                start_step, forward_steps, horizon_steps, truncated,
                latency * 1e3, self._last_result.iterations,
            )
            return MpcCycle(True, policy.copy(), tk.timestamp(start_step + truncated))

    # Queries

    def time_horizon_reached(self) -> bool:
        """True once a fixed-final-time horizon has been exhausted."""
        return self._time_horizon_reached

    def get_state_trajectory(self) -> StateTrajectory:
        """Predicted states of the latest successful cycle (absolute times)."""
        if self._state_trajectory is None:
            raise NotConfiguredError("no successful MPC cycle yet")
        return self._state_trajectory.copy()

    def print_mpc_summary(self) -> MpcStatistics:
        """Print and return the accumulated statistics."""
        stats = self.statistics
        print(stats.summary())
        return stats

    def __repr__(self) -> str:
        return (
            f"MPC(mode={self._settings.mpc_mode}, dt={self.dt}, "
            f"initial_steps={self._initial_steps})"
        )
