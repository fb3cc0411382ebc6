"""
System Dynamics Models
======================

Abstract interfaces for the plant models consumed by the optimizer, plus
reference implementations.

Supported models:
- Continuous-time controlled systems: dx/dt = f(x, u, t)
- Discrete-time controlled systems: x_{k+1} = f(x_k, u_k, k)
- Linear Time-Invariant (LTI): dx/dt = A x + B u
- Damped second-order oscillator
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import Tuple

import numpy as np


class ControlledSystem(abc.ABC):
    """
    Continuous-time controlled system dx/dt = f(x, u, t).

    Subclasses implement compute_dynamics(). Systems with closed-form
    Jacobians may also implement linearize(); otherwise the numerical
    SystemLinearizer is used.
    """

    is_discrete = False

    @property
    @abc.abstractmethod
    def state_dim(self) -> int:
        """Number of states."""

    @property
    @abc.abstractmethod
    def control_dim(self) -> int:
        """Number of controls."""

    @abc.abstractmethod
    def compute_dynamics(self, x: np.ndarray, u: np.ndarray, t: float) -> np.ndarray:
        """
        Evaluate the state derivative.

        Args:
            x: State (n_x,)
            u: Control (n_u,)
            t: Time in seconds

        Returns:
            State derivative (n_x,)

        Raises:
            DomainError: If (x, u) lies outside the model's valid domain
        """

    def evaluate(self, x: np.ndarray, u: np.ndarray, t: float) -> np.ndarray:
        """Alias for compute_dynamics()."""
        return self.compute_dynamics(x, u, t)

    @property
    def has_analytic_jacobians(self) -> bool:
        return callable(getattr(self, "linearize", None))


class DiscreteControlledSystem(abc.ABC):
    """Discrete-time controlled system x_{k+1} = f(x_k, u_k, k)."""

    is_discrete = True

    @property
    @abc.abstractmethod
    def state_dim(self) -> int:
        """Number of states."""

    @property
    @abc.abstractmethod
    def control_dim(self) -> int:
        """Number of controls."""

    @abc.abstractmethod
    def propagate(self, x: np.ndarray, u: np.ndarray, k: int) -> np.ndarray:
        """Return the successor state x_{k+1}."""

    def evaluate(self, x: np.ndarray, u: np.ndarray, k: int) -> np.ndarray:
        """Alias for propagate()."""
        return self.propagate(x, u, k)

    @property
    def has_analytic_jacobians(self) -> bool:
        return callable(getattr(self, "linearize", None))


@dataclass(eq=False)
class LinearSystem(ControlledSystem):
    """
    Linear Time-Invariant (LTI) continuous-time system.

    Dynamics: dx/dt = A @ x + B @ u

    Args:
        A: State matrix (n_x, n_x)
        B: Input matrix (n_x, n_u)

    Example:
        >>> # Double integrator (position, velocity)
        >>> A = np.array([[0, 1], [0, 0]])
        >>> B = np.array([[0], [1]])
        >>> system = LinearSystem(A, B)
        >>> system.compute_dynamics(np.array([0, 1]), np.array([0.5]), 0.0)
        array([1. , 0.5])
    """
    A: np.ndarray
    B: np.ndarray

    def __post_init__(self):
        """Validate dimensions."""
        self.A = np.asarray(self.A, dtype=np.float64)
        self.B = np.asarray(self.B, dtype=np.float64)

        if self.A.ndim != 2:
            raise ValueError(f"A must be 2D, got shape {self.A.shape}")
        if self.B.ndim != 2:
            raise ValueError(f"B must be 2D, got shape {self.B.shape}")

        n_x = self.A.shape[0]
        if self.A.shape != (n_x, n_x):
            raise ValueError(f"A must be square, got shape {self.A.shape}")
        if self.B.shape[0] != n_x:
            raise ValueError(
                f"B rows ({self.B.shape[0]}) must match A ({n_x})"
            )

    @property
    def state_dim(self) -> int:
        return self.A.shape[0]

    @property
    def control_dim(self) -> int:
        return self.B.shape[1]

    def compute_dynamics(self, x: np.ndarray, u: np.ndarray, t: float = 0.0) -> np.ndarray:
        return self.A @ x + self.B @ u

    def linearize(
        self, x: np.ndarray, u: np.ndarray, t: float = 0.0
    ) -> Tuple[np.ndarray, np.ndarray]:
        """Exact Jacobians (A, B), independent of the operating point."""
        return self.A.copy(), self.B.copy()

    def is_stable(self) -> bool:
        """Check if system is stable (all eigenvalues in the open left half plane)."""
        eigenvalues = np.linalg.eigvals(self.A)
        return bool(np.all(eigenvalues.real < 0.0))

    def is_controllable(self) -> bool:
        """Check if system is controllable."""
        n = self.state_dim
        controllability = self.B

        for i in range(1, n):
            controllability = np.hstack([
                controllability,
                np.linalg.matrix_power(self.A, i) @ self.B
            ])

        return np.linalg.matrix_rank(controllability) == n


class SecondOrderSystem(ControlledSystem):
    """
    Damped second-order oscillator.

    States: [position, velocity]
    Input: force (scaled by g_dc)

        dx0/dt = x1
        dx1/dt = g_dc * u - 2 * zeta * w_n * x1 - w_n^2 * x0

    Args:
        w_n: Natural frequency (rad/s)
        zeta: Damping ratio
        g_dc: Input gain

    Example:
        >>> oscillator = SecondOrderSystem(w_n=0.1, zeta=5.0)
    """

    def __init__(self, w_n: float, zeta: float = 1.0, g_dc: float = 1.0) -> None:
        if w_n <= 0:
            raise ValueError(f"w_n must be positive, got {w_n}")
        self.w_n = float(w_n)
        self.zeta = float(zeta)
        self.g_dc = float(g_dc)

    @property
    def state_dim(self) -> int:
        return 2

    @property
    def control_dim(self) -> int:
        return 1

    def compute_dynamics(self, x: np.ndarray, u: np.ndarray, t: float = 0.0) -> np.ndarray:
        return np.array([
            x[1],
            self.g_dc * u[0] - 2.0 * self.zeta * self.w_n * x[1] - self.w_n ** 2 * x[0],
        ])

    def linearize(
        self, x: np.ndarray, u: np.ndarray, t: float = 0.0
    ) -> Tuple[np.ndarray, np.ndarray]:
        A = np.array([
            [0.0, 1.0],
            [-self.w_n ** 2, -2.0 * self.zeta * self.w_n],
        ])
        B = np.array([[0.0], [self.g_dc]])
        return A, B

    def as_linear_system(self) -> LinearSystem:
        """Equivalent LinearSystem."""
        A, B = self.linearize(np.zeros(2), np.zeros(1))
        return LinearSystem(A, B)

    def __repr__(self) -> str:
        return f"SecondOrderSystem(w_n={self.w_n}, zeta={self.zeta}, g_dc={self.g_dc})"
