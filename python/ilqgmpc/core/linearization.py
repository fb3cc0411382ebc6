"""
System Linearization
====================

Jacobians A = df/dx and B = df/du of a controlled system at a trajectory
point, either from the system's closed-form linearize() or by finite
differences.
"""

from __future__ import annotations

import abc
from typing import Optional, Tuple

import numpy as np


class LinearizerBase(abc.ABC):
    """Produces (A, B) at a given (x, u, t)."""

    def __init__(self, system) -> None:
        self.system = system

    @abc.abstractmethod
    def linearize(
        self, x: np.ndarray, u: np.ndarray, t: float
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Compute Jacobians at one point.

        Args:
            x: State (n_x,)
            u: Control (n_u,)
            t: Time (continuous systems) or step index (discrete systems)

        Returns:
            Tuple (A, B) with shapes (n_x, n_x) and (n_x, n_u)
        """


class AnalyticLinearizer(LinearizerBase):
    """Delegates to the system's own linearize() method."""

    def __init__(self, system) -> None:
        if not callable(getattr(system, "linearize", None)):
            raise TypeError(
                f"{type(system).__name__} does not provide linearize()"
            )
        super().__init__(system)

    def linearize(self, x, u, t):
        A, B = self.system.linearize(x, u, t)
        return np.asarray(A, dtype=np.float64), np.asarray(B, dtype=np.float64)


class SystemLinearizer(LinearizerBase):
    """
    Numerical-differentiation linearizer.

    Each state and control component is perturbed by a fixed step and the
    output difference is scaled. Works for continuous systems (differencing
    compute_dynamics) and discrete systems (differencing propagate).
    The queried point is copied, never modified in place.

    Args:
        system: ControlledSystem or DiscreteControlledSystem
        step: Perturbation size (default: cube root of machine eps for
            central differences, square root for forward differences)
        method: 'central' or 'forward'

    Example:
        >>> linearizer = SystemLinearizer(SecondOrderSystem(0.1, 5.0))
        >>> A, B = linearizer.linearize(np.zeros(2), np.zeros(1), 0.0)
    """

    def __init__(
        self,
        system,
        step: Optional[float] = None,
        method: str = "central",
    ) -> None:
        super().__init__(system)
        if method not in ("central", "forward"):
            raise ValueError(f"Unknown method '{method}'")
        if step is None:
            eps = np.finfo(np.float64).eps
            step = eps ** (1.0 / 3.0) if method == "central" else np.sqrt(eps)
        if step <= 0:
            raise ValueError(f"step must be positive, got {step}")
        self.step = float(step)
        self.method = method

    def _f(self, x: np.ndarray, u: np.ndarray, t) -> np.ndarray:
        if getattr(self.system, "is_discrete", False):
            return np.asarray(self.system.propagate(x, u, t), dtype=np.float64)
        return np.asarray(self.system.compute_dynamics(x, u, t), dtype=np.float64)

    def linearize(self, x, u, t):
        x = np.array(x, dtype=np.float64)
        u = np.array(u, dtype=np.float64)
        n_x, n_u = x.shape[0], u.shape[0]

        A = np.empty((n_x, n_x))
        B = np.empty((n_x, n_u))
        h = self.step

        f0 = self._f(x, u, t) if self.method == "forward" else None

        for i in range(n_x):
            dx = np.zeros(n_x)
            dx[i] = h
            if self.method == "central":
                A[:, i] = (self._f(x + dx, u, t) - self._f(x - dx, u, t)) / (2.0 * h)
            else:
                A[:, i] = (self._f(x + dx, u, t) - f0) / h

        for j in range(n_u):
            du = np.zeros(n_u)
            du[j] = h
            if self.method == "central":
                B[:, j] = (self._f(x, u + du, t) - self._f(x, u - du, t)) / (2.0 * h)
            else:
                B[:, j] = (self._f(x, u + du, t) - f0) / h

        return A, B


def default_linearizer(system) -> LinearizerBase:
    """Analytic linearizer when available, numerical otherwise."""
    if callable(getattr(system, "linearize", None)):
        return AnalyticLinearizer(system)
    return SystemLinearizer(system)


class DiscreteSystemLinearizer(SystemLinearizer):
    """
    Finite-difference linearizer for discrete systems.

    Returns the discrete Jacobians of propagate(x, u, k) directly.
    """

    def __init__(self, system, step: Optional[float] = None, method: str = "central") -> None:
        if not getattr(system, "is_discrete", False):
            raise TypeError(f"{type(system).__name__} is not a discrete system")
        super().__init__(system, step, method)
