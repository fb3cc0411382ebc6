"""
Cost Terms
==========

Additive contributions to the intermediate cost l(x, u, t) or the terminal
cost l_f(x). Every term exposes its value and the first and second
derivatives the backward pass needs.

Available terms:
- TermQuadratic: 0.5 (x - x_ref)' Q (x - x_ref) + 0.5 (u - u_ref)' R (u - u_ref)
- TermLinear: a' x + b' u
- TermMixed: u' P x
"""

from __future__ import annotations

import abc
from typing import Optional

import numpy as np

from ..utils.validation import as_vector, as_weight_matrix, as_matrix


class Term(abc.ABC):
    """
    Base class for cost terms.

    Args:
        state_dim: Number of states
        control_dim: Number of controls
        weight: Scalar multiplier applied to value and derivatives
        name: Label used in summaries and configuration files
    """

    def __init__(
        self,
        state_dim: int,
        control_dim: int,
        weight: float = 1.0,
        name: str = "",
    ) -> None:
        self.state_dim = int(state_dim)
        self.control_dim = int(control_dim)
        self.weight = float(weight)
        self.name = name or type(self).__name__

    @abc.abstractmethod
    def _value(self, x: np.ndarray, u: np.ndarray, t: float) -> float:
        """Unweighted term value."""

    def evaluate(self, x: np.ndarray, u: np.ndarray, t: float = 0.0) -> float:
        """Weighted term value."""
        return self.weight * self._value(x, u, t)

    def state_derivative(self, x, u, t=0.0) -> np.ndarray:
        """dl/dx (n_x,)"""
        return np.zeros(self.state_dim)

    def control_derivative(self, x, u, t=0.0) -> np.ndarray:
        """dl/du (n_u,)"""
        return np.zeros(self.control_dim)

    def state_second_derivative(self, x, u, t=0.0) -> np.ndarray:
        """d2l/dx2 (n_x, n_x)"""
        return np.zeros((self.state_dim, self.state_dim))

    def control_second_derivative(self, x, u, t=0.0) -> np.ndarray:
        """d2l/du2 (n_u, n_u)"""
        return np.zeros((self.control_dim, self.control_dim))

    def state_control_derivative(self, x, u, t=0.0) -> np.ndarray:
        """d2l/(du dx) (n_u, n_x)"""
        return np.zeros((self.control_dim, self.state_dim))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, weight={self.weight})"


class TermQuadratic(Term):
    """
    Quadratic tracking term.

        l = 0.5 (x - x_ref)' Q (x - x_ref) + 0.5 (u - u_ref)' R (u - u_ref)

    Args:
        Q: State weight (n_x, n_x), diagonal list or scalar
        R: Control weight (n_u, n_u), diagonal list or scalar
        x_ref: Desired state (default: origin)
        u_ref: Desired control (default: zero)
        weight: Scalar multiplier
        name: Label

    Example:
        >>> term = TermQuadratic(Q=np.diag([10.0, 1.0]), R=[[0.1]])
        >>> term.evaluate(np.array([1.0, 0.0]), np.zeros(1))
        5.0
    """

    def __init__(
        self,
        Q,
        R,
        x_ref: Optional[np.ndarray] = None,
        u_ref: Optional[np.ndarray] = None,
        weight: float = 1.0,
        name: str = "",
    ) -> None:
        Q_arr = np.asarray(Q, dtype=np.float64)
        R_arr = np.asarray(R, dtype=np.float64)
        n_x = Q_arr.shape[0] if Q_arr.ndim > 0 else len(np.atleast_1d(x_ref))
        n_u = R_arr.shape[0] if R_arr.ndim > 0 else len(np.atleast_1d(u_ref))
        super().__init__(n_x, n_u, weight, name)

        self.Q = as_weight_matrix(Q_arr, n_x, "Q")
        self.R = as_weight_matrix(R_arr, n_u, "R")
        self.x_ref = np.zeros(n_x) if x_ref is None else as_vector(x_ref, n_x, "x_ref")
        self.u_ref = np.zeros(n_u) if u_ref is None else as_vector(u_ref, n_u, "u_ref")

    def _value(self, x, u, t):
        dx = x - self.x_ref
        value = 0.5 * dx @ self.Q @ dx
        if u is not None:
            du = u - self.u_ref
            value += 0.5 * du @ self.R @ du
        return float(value)

    def state_derivative(self, x, u, t=0.0):
        return self.weight * (self.Q @ (x - self.x_ref))

    def control_derivative(self, x, u, t=0.0):
        return self.weight * (self.R @ (u - self.u_ref))

    def state_second_derivative(self, x, u, t=0.0):
        return self.weight * self.Q

    def control_second_derivative(self, x, u, t=0.0):
        return self.weight * self.R


class TermLinear(Term):
    """
    Linear term l = a' x + b' u.

    Args:
        a: State coefficients (n_x,)
        b: Control coefficients (n_u,)
    """

    def __init__(self, a, b, weight: float = 1.0, name: str = "") -> None:
        a = np.atleast_1d(np.asarray(a, dtype=np.float64))
        b = np.atleast_1d(np.asarray(b, dtype=np.float64))
        super().__init__(a.shape[0], b.shape[0], weight, name)
        self.a = as_vector(a, self.state_dim, "a")
        self.b = as_vector(b, self.control_dim, "b")

    def _value(self, x, u, t):
        value = self.a @ x
        if u is not None:
            value += self.b @ u
        return float(value)

    def state_derivative(self, x, u, t=0.0):
        return self.weight * self.a

    def control_derivative(self, x, u, t=0.0):
        return self.weight * self.b


class TermMixed(Term):
    """
    Bilinear state-control term l = u' P x.

    Args:
        P: Coupling matrix (n_u, n_x)
    """

    def __init__(self, P, weight: float = 1.0, name: str = "") -> None:
        P = np.atleast_2d(np.asarray(P, dtype=np.float64))
        super().__init__(P.shape[1], P.shape[0], weight, name)
        self.P = as_matrix(P, (self.control_dim, self.state_dim), "P")

    def _value(self, x, u, t):
        if u is None:
            return 0.0
        return float(u @ self.P @ x)

    def state_derivative(self, x, u, t=0.0):
        if u is None:
            return np.zeros(self.state_dim)
        return self.weight * (self.P.T @ u)

    def control_derivative(self, x, u, t=0.0):
        return self.weight * (self.P @ x)

    def state_control_derivative(self, x, u, t=0.0):
        return self.weight * self.P
