"""
Optimal Control Problem
=======================

Container bundling dynamics, cost, linearizer, initial state and time
horizon for the iLQG solver.

    minimize    sum_k l(x_k, u_k, t_k) dt + l_f(x_K)
    subject to  x_{k+1} = step(x_k, u_k, t_k)
                x_0 = initial_state

with t_k = start_time + k * dt.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from .costfunction.cost_function import CostFunction
from .core.linearization import LinearizerBase, default_linearizer
from .exceptions import DimensionError, InvalidInputError
from .utils.validation import as_vector, validate_positive


class OptConProblem:
    """
    Optimal control problem definition.

    Args:
        dynamics: ControlledSystem or DiscreteControlledSystem
        cost_function: CostFunction with intermediate and final terms
        linearizer: Jacobian provider (default: analytic if the system
            implements linearize(), numerical otherwise)
        initial_state: Initial state x_0 (default: origin)
        time_horizon: Horizon length in seconds
        start_time: Time of x_0 in seconds (default 0)

    Example:
        >>> problem = OptConProblem(
        ...     SecondOrderSystem(w_n=0.1, zeta=5.0),
        ...     cost,
        ...     initial_state=np.array([1.0, 0.0]),
        ...     time_horizon=3.0,
        ... )
    """

    def __init__(
        self,
        dynamics,
        cost_function: CostFunction,
        linearizer: Optional[LinearizerBase] = None,
        initial_state: Optional[np.ndarray] = None,
        time_horizon: Optional[float] = None,
        start_time: float = 0.0,
    ) -> None:
        self._dynamics = None
        self._cost_function = None
        self._linearizer = None
        self.set_dynamics(dynamics, linearizer)
        self.set_cost_function(cost_function)

        if initial_state is None:
            self._initial_state = np.zeros(self.state_dim)
        else:
            self.set_initial_state(initial_state)

        self._time_horizon: Optional[float] = None
        if time_horizon is not None:
            self.set_time_horizon(time_horizon)

        self._start_time = 0.0
        self.set_start_time(start_time)

    @property
    def state_dim(self) -> int:
        return self._dynamics.state_dim

    @property
    def control_dim(self) -> int:
        return self._dynamics.control_dim

    @property
    def dynamics(self):
        return self._dynamics

    @property
    def cost_function(self) -> CostFunction:
        return self._cost_function

    @property
    def linearizer(self) -> LinearizerBase:
        return self._linearizer

    @property
    def initial_state(self) -> np.ndarray:
        return self._initial_state.copy()

    @property
    def time_horizon(self) -> Optional[float]:
        return self._time_horizon

    @property
    def start_time(self) -> float:
        """Time of the initial state; step k of a solve lies at start_time + k * dt."""
        return self._start_time

    @property
    def is_discrete(self) -> bool:
        return bool(getattr(self._dynamics, "is_discrete", False))

    def set_dynamics(self, dynamics, linearizer: Optional[LinearizerBase] = None) -> None:
        """Replace the dynamics (and linearizer) keeping dimensions consistent."""
        if self._dynamics is not None and (
            dynamics.state_dim != self.state_dim or dynamics.control_dim != self.control_dim
        ):
            raise DimensionError(
                f"new dynamics has dimensions ({dynamics.state_dim}, {dynamics.control_dim}), "
                f"expected ({self.state_dim}, {self.control_dim})"
            )
        self._dynamics = dynamics
        self._linearizer = linearizer if linearizer is not None else default_linearizer(dynamics)

    def set_cost_function(self, cost_function: CostFunction) -> None:
        """Replace the cost function; dimensions must match the dynamics."""
        if cost_function.state_dim is None:
            cost_function.state_dim = self.state_dim
        if cost_function.control_dim is None:
            cost_function.control_dim = self.control_dim
        if (cost_function.state_dim, cost_function.control_dim) != (
            self.state_dim,
            self.control_dim,
        ):
            raise DimensionError(
                f"cost function has dimensions ({cost_function.state_dim}, "
                f"{cost_function.control_dim}), expected ({self.state_dim}, {self.control_dim})"
            )
        self._cost_function = cost_function

    def set_initial_state(self, x0: np.ndarray) -> None:
        self._initial_state = as_vector(x0, self.state_dim, "initial_state")

    def set_time_horizon(self, horizon: float) -> None:
        validate_positive(horizon, "time_horizon")
        self._time_horizon = float(horizon)

    def set_start_time(self, start_time: float) -> None:
        start_time = float(start_time)
        if not np.isfinite(start_time):
            raise InvalidInputError(f"start_time must be finite, got {start_time}")
        self._start_time = start_time

    def copy(self) -> "OptConProblem":
        """
        Independent copy of the mutable problem data.

        Dynamics, cost function and linearizer are shared: the solver only
        reads from them.
        """
        return OptConProblem(
            self._dynamics,
            self._cost_function,
            self._linearizer,
            self._initial_state.copy(),
            self._time_horizon,
            self._start_time,
        )

    def __repr__(self) -> str:
        return (
            f"OptConProblem(n_x={self.state_dim}, n_u={self.control_dim}, "
            f"horizon={self._time_horizon}, dynamics={self._dynamics!r})"
        )
