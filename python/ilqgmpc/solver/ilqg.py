"""
iLQG Trajectory Optimizer
=========================

Iterative Linear-Quadratic-Gaussian solver for finite-horizon optimal
control problems.

Each iteration:
1. Linearizes the dynamics along the nominal trajectory
2. Runs a backward Riccati recursion on a local quadratic model of the
   cost, yielding feedforward increments and feedback gains
3. Runs a forward line search rolling out the updated policy on the
   nonlinear model

    u_k = u_bar_k + alpha * k_ff_k + K_k (x_k - x_bar_k)

The accepted policy is returned as a StateFeedbackController whose
reference is the nominal state trajectory.
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Tuple

import numpy as np
from scipy.linalg import cho_factor, cho_solve

from ..core.controller import StateFeedbackController
from ..core.integration import discretize, integrate
from ..core.trajectory import ControlTrajectory, StateTrajectory
from ..exceptions import (
    DimensionError,
    DomainError,
    IllConditionedError,
    InvalidInputError,
    NotConfiguredError,
)
from ..problem import OptConProblem
from ..result import SolveResult, Status
from .settings import ILQGSettings

logger = logging.getLogger(__name__)


class ILQG:
    """
    iLQG solver.

    Args:
        problem: Optimal control problem (read at every solve)
        settings: Solver settings (default: ILQGSettings())

    Example:
        >>> solver = ILQG(problem, ILQGSettings(dt=0.001, max_iterations=50))
        >>> solver.set_initial_guess(StateFeedbackController.from_horizon(3.0, 2, 1, 0.001))
        >>> if solver.solve():
        ...     policy = solver.get_solution()
    """

    def __init__(
        self,
        problem: OptConProblem,
        settings: Optional[ILQGSettings] = None,
    ) -> None:
        self._problem = problem
        self._settings = settings if settings is not None else ILQGSettings()
        self._check_settings(self._settings)

        self._initial_guess: Optional[StateFeedbackController] = None
        self._solution: Optional[StateFeedbackController] = None
        self._states: Optional[np.ndarray] = None
        self._controls: Optional[np.ndarray] = None
        self._solution_start_time = 0.0
        self._result = SolveResult.unsolved()

        self._mu = self._settings.regularization_init
        self._delta = self._settings.regularization_factor

    # Configuration

    @property
    def problem(self) -> OptConProblem:
        return self._problem

    @property
    def settings(self) -> ILQGSettings:
        return self._settings

    @property
    def result(self) -> SolveResult:
        """Result of the most recent solve."""
        return self._result

    @staticmethod
    def _check_settings(settings) -> None:
        if not isinstance(settings, ILQGSettings):
            raise InvalidInputError(
                f"settings must be ILQGSettings, got {type(settings).__name__}"
            )

    def configure(self, settings: ILQGSettings) -> None:
        """Replace the settings; takes effect at the next solve."""
        self._check_settings(settings)
        self._settings = settings

    def change_initial_state(self, x0: np.ndarray) -> None:
        self._problem.set_initial_state(x0)

    def change_time_horizon(self, horizon: float) -> None:
        self._problem.set_time_horizon(horizon)

    def num_steps(self) -> int:
        """Number of control steps K = round(horizon / dt)."""
        horizon = self._problem.time_horizon
        if horizon is None:
            raise NotConfiguredError("time horizon is not set")
        K = self._settings.horizon_steps(horizon)
        if K < 1:
            raise InvalidInputError(
                f"time horizon {horizon} is shorter than one step of dt={self._settings.dt}"
            )
        return K

    def set_initial_guess(self, policy: StateFeedbackController) -> None:
        """
        Set the policy rolled out to build the first nominal trajectory.

        Raises:
            DimensionError: If the policy dimensions do not match the problem
        """
        if (policy.state_dim, policy.control_dim) != (
            self._problem.state_dim,
            self._problem.control_dim,
        ):
            raise DimensionError(
                f"initial guess has dimensions ({policy.state_dim}, {policy.control_dim}), "
                f"expected ({self._problem.state_dim}, {self._problem.control_dim})"
            )
        self._initial_guess = policy.copy()

    def _checked_initial_guess(self, K: int) -> StateFeedbackController:
        if self._initial_guess is None:
            raise NotConfiguredError("no initial guess set")
        if len(self._initial_guess) != K:
            raise DimensionError(
                f"initial guess has {len(self._initial_guess)} steps, expected {K}"
            )
        if not np.isclose(self._initial_guess.dt, self._settings.dt):
            raise InvalidInputError(
                f"initial guess dt={self._initial_guess.dt} differs from solver dt={self._settings.dt}"
            )
        return self._initial_guess

    # Solution access

    def get_solution(self) -> StateFeedbackController:
        """Copy of the latest accepted policy."""
        if self._solution is None:
            raise NotConfiguredError("no solution available, call solve() first")
        return self._solution.copy()

    def get_state_trajectory(self) -> StateTrajectory:
        """Nominal states x_0..x_K of the latest accepted solution."""
        if self._states is None:
            raise NotConfiguredError("no solution available, call solve() first")
        return StateTrajectory(self._states.copy(), self._settings.dt, self._solution_start_time)

    def get_control_trajectory(self) -> ControlTrajectory:
        """Nominal controls u_0..u_{K-1} of the latest accepted solution."""
        if self._controls is None:
            raise NotConfiguredError("no solution available, call solve() first")
        return ControlTrajectory(self._controls.copy(), self._settings.dt, self._solution_start_time)

    def get_cost(self) -> float:
        """Cost of the latest accepted solution."""
        if self._solution is None:
            raise NotConfiguredError("no solution available, call solve() first")
        return self._result.cost

    # Model evaluation

    def _time(self, k: int, start_time: Optional[float] = None) -> float:
        """Time of step k, start_time + k * dt (default: the problem's start time)."""
        if start_time is None:
            start_time = self._problem.start_time
        return start_time + k * self._settings.dt

    def _grid_index(self, t: float) -> int:
        return int(round(t / self._settings.dt))

    def step(
        self,
        x: np.ndarray,
        u: np.ndarray,
        k: int,
        start_time: Optional[float] = None,
    ) -> np.ndarray:
        """
        Advance one grid step from step k with constant control u.

        Args:
            x: State at step k
            u: Control held over the step
            k: Step counted from start_time
            start_time: Time of step 0 (default: the problem's start time)

        Discrete systems receive the absolute grid index round(t / dt).
        """
        dt = self._settings.dt
        t = self._time(k, start_time)
        dynamics = self._problem.dynamics
        if self._problem.is_discrete:
            index = self._grid_index(t)
            x_next = np.asarray(dynamics.propagate(x, u, index), dtype=np.float64)
            if not np.all(np.isfinite(x_next)):
                raise DomainError(f"propagation produced non-finite state at step {k}", step=k)
            return x_next
        return integrate(
            dynamics, x, u, t, dt,
            n_steps=self._settings.substeps,
            method=self._settings.integrator,
        )

    def _linearize(self, x: np.ndarray, u: np.ndarray, k: int) -> Tuple[np.ndarray, np.ndarray]:
        linearizer = self._problem.linearizer
        t = self._time(k)
        if self._problem.is_discrete:
            return linearizer.linearize(x, u, self._grid_index(t))
        Ac, Bc = linearizer.linearize(x, u, t)
        return discretize(Ac, Bc, self._settings.dt, self._settings.discretization)

    def _rollout(
        self,
        feedforward: np.ndarray,
        feedback: np.ndarray,
        reference: np.ndarray,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Closed-loop rollout of u_k = u_ff[k] + K[k] (x_k - x_ref[k]) from x_0."""
        K = feedforward.shape[0]
        xs = np.empty((K + 1, self._problem.state_dim))
        us = np.empty((K, self._problem.control_dim))
        xs[0] = self._problem.initial_state

        for k in range(K):
            us[k] = feedforward[k] + feedback[k] @ (xs[k] - reference[k])
            if not np.all(np.isfinite(us[k])):
                raise DomainError(f"non-finite control at step {k}", step=k)
            try:
                xs[k + 1] = self.step(xs[k], us[k], k)
            except DomainError as exc:
                if exc.step is None:
                    exc.step = k
                raise
        return xs, us

    def _trajectory_cost(self, xs: np.ndarray, us: np.ndarray) -> float:
        cost = self._problem.cost_function
        dt = self._settings.dt
        K = us.shape[0]
        J = sum(cost.intermediate_cost(xs[k], us[k], self._time(k)) for k in range(K)) * dt
        J += cost.final_cost(xs[K], self._time(K))
        if not np.isfinite(J):
            raise DomainError("cost evaluated to a non-finite value")
        return float(J)

    # Backward pass

    def _backward_pass(
        self,
        xs: np.ndarray,
        us: np.ndarray,
        A: np.ndarray,
        B: np.ndarray,
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Riccati recursion for the current regularization.

        Returns:
            Tuple (k_ff, K_fb) with shapes (K, n_u) and (K, n_u, n_x)

        Raises:
            numpy.linalg.LinAlgError: If the regularized Q_uu is not positive definite
        """
        cost = self._problem.cost_function
        dt = self._settings.dt
        K = us.shape[0]
        n_u = us.shape[1]

        k_ff = np.empty_like(us)
        K_fb = np.empty((K, n_u, xs.shape[1]))

        t_final = self._time(K)
        V_x = cost.state_derivative_terminal(xs[K], t_final)
        V_xx = cost.state_second_derivative_terminal(xs[K], t_final)
        reg = self._mu * np.eye(n_u)

        for k in range(K - 1, -1, -1):
            x, u, t = xs[k], us[k], self._time(k)
            l_x = cost.state_derivative_intermediate(x, u, t) * dt
            l_u = cost.control_derivative_intermediate(x, u, t) * dt
            l_xx = cost.state_second_derivative_intermediate(x, u, t) * dt
            l_ux = cost.state_control_derivative_intermediate(x, u, t) * dt
            l_uu = cost.control_second_derivative_intermediate(x, u, t) * dt

            Q_x = l_x + A[k].T @ V_x
            Q_u = l_u + B[k].T @ V_x
            Q_xx = l_xx + A[k].T @ V_xx @ A[k]
            Q_ux = l_ux + B[k].T @ V_xx @ A[k]
            Q_uu = l_uu + B[k].T @ V_xx @ B[k]
            Q_uu = 0.5 * (Q_uu + Q_uu.T)

            Q_uu_reg = Q_uu + reg
            if not np.all(np.isfinite(Q_uu_reg)):
                raise DomainError(f"non-finite curvature at step {k}", step=k)
            factor = cho_factor(Q_uu_reg)

            k_ff[k] = -cho_solve(factor, Q_u)
            K_fb[k] = -cho_solve(factor, Q_ux)

            V_x = Q_x + K_fb[k].T @ Q_uu @ k_ff[k] + K_fb[k].T @ Q_u + Q_ux.T @ k_ff[k]
            V_xx = Q_xx + K_fb[k].T @ Q_uu @ K_fb[k] + K_fb[k].T @ Q_ux + Q_ux.T @ K_fb[k]
            V_xx = 0.5 * (V_xx + V_xx.T)

        return k_ff, K_fb

    def _increase_regularization(self) -> None:
        s = self._settings
        self._delta = max(1.0, self._delta) * s.regularization_factor
        self._mu = max(s.regularization_min, self._mu * self._delta)
        if self._mu > s.regularization_max:
            raise IllConditionedError(
                f"regularization exceeded {s.regularization_max:.3e}",
                regularization=self._mu,
            )

    def _decrease_regularization(self) -> None:
        s = self._settings
        self._delta = min(1.0, self._delta) / s.regularization_factor
        self._mu *= self._delta
        if self._mu < s.regularization_min:
            self._mu = 0.0

    def _regularized_backward_pass(self, xs, us, A, B):
        while True:
            try:
                return self._backward_pass(xs, us, A, B)
            except np.linalg.LinAlgError:
                self._increase_regularization()
                logger.warning(
                    "Q_uu not positive definite, regularization raised to %.3e", self._mu
                )

    # Main loop

    def solve(self) -> bool:
        """
        Optimize starting from the initial guess (or the previous solution).

        Returns:
            True if the solve converged or hit max_iterations; False if it
            diverged. On failure the previous solution is kept.

        Raises:
            NotConfiguredError: No initial guess or time horizon
            DimensionError: Initial guess length differs from round(horizon/dt)
            InvalidInputError: Horizon shorter than one step
        """
        K = self.num_steps()
        guess = self._checked_initial_guess(K)
        settings = self._settings
        log_level = logging.INFO if settings.verbose else logging.DEBUG

        start_time = time.perf_counter()
        self._mu = settings.regularization_init
        self._delta = settings.regularization_factor

        cost_history = []
        alpha = None
        iteration = 0

        try:
            xs, us = self._rollout(guess.feedforward, guess.feedback, guess.reference)
            J = self._trajectory_cost(xs, us)
        except DomainError as exc:
            return self._finish(
                Status.DIVERGED, np.nan, 0, start_time, cost_history, None,
                f"initial rollout failed: {exc.message}",
            )
        cost_history.append(J)
        logger.log(log_level, "iLQG start: K=%d, initial cost %.6g", K, J)

        K_fb = guess.feedback
        status = Status.MAX_ITERATIONS
        message = f"reached max_iterations={settings.max_iterations}"

        try:
            while iteration < settings.max_iterations:
                iteration += 1

                A = np.empty((K, xs.shape[1], xs.shape[1]))
                B = np.empty((K, xs.shape[1], us.shape[1]))
                for k in range(K):
                    A[k], B[k] = self._linearize(xs[k], us[k], k)

                k_ff, K_fb = self._regularized_backward_pass(xs, us, A, B)

                accepted = False
                for alpha in settings.line_search.alphas():
                    xs_new, us_new = self._rollout(us + alpha * k_ff, K_fb, xs[:K])
                    J_new = self._trajectory_cost(xs_new, us_new)
                    if J_new < J or not settings.line_search.active:
                        accepted = True
                        break

                if not accepted:
                    if settings.line_search_failure_is_convergence:
                        status = Status.CONVERGED
                        message = "line search found no cost decrease"
                    else:
                        status = Status.DIVERGED
                        message = "line search failed"
                    break

                improvement = abs(J - J_new) / max(abs(J), np.finfo(float).eps)
                xs, us, J = xs_new, us_new, J_new
                cost_history.append(J)
                self._decrease_regularization()

                logger.log(
                    log_level,
                    "iLQG iter %d: cost %.6g, alpha %.3g, rel. improvement %.3e, mu %.3e",
                    iteration, J, alpha, improvement, self._mu,
                )

                if improvement < settings.min_cost_improvement:
                    status = Status.CONVERGED
                    message = "relative cost improvement below tolerance"
                    break

        except DomainError as exc:
            status = Status.DIVERGED
            message = f"rollout left the model domain: {exc.message}"
        except IllConditionedError as exc:
            status = Status.DIVERGED
            message = exc.message

        if status.is_successful:
            self._solution = StateFeedbackController(us, K_fb, settings.dt, reference=xs[:K])
            self._states = xs
            self._controls = us
            self._solution_start_time = self._problem.start_time

        return self._finish(status, J, iteration, start_time, cost_history, alpha, message)

    def _finish(self, status, cost, iterations, start_time, cost_history, alpha, message) -> bool:
        self._result = SolveResult(
            status=status,
            cost=float(cost),
            iterations=iterations,
            solve_time=time.perf_counter() - start_time,
            cost_history=cost_history,
            regularization=self._mu,
            line_search_alpha=alpha,
            message=message,
        )
        if status.is_successful:
            logger.log(
                logging.INFO if self._settings.verbose else logging.DEBUG,
                "iLQG %s after %d iterations, cost %.6g", status, iterations, cost,
            )
        else:
            logger.warning("iLQG solve failed (%s): %s", status, message)
        return status.is_successful

    def __repr__(self) -> str:
        return f"ILQG(problem={self._problem!r}, status={self._result.status})"
