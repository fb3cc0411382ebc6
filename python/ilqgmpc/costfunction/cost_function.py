"""
Cost Function
=============

Additive composition of intermediate and terminal cost terms.

    J = sum_k l(x_k, u_k, t_k) * dt + l_f(x_K)

The solver only reads from a cost function; terms must not change while a
solve is running.
"""

from __future__ import annotations

from typing import List, Optional

import numpy as np

from ..exceptions import DimensionError
from .terms import Term


class CostFunction:
    """
    Sum of intermediate and terminal terms.

    Args:
        state_dim: Number of states (inferred from the first term if omitted)
        control_dim: Number of controls (inferred from the first term if omitted)

    Example:
        >>> cost = CostFunction()
        >>> cost.add_intermediate_term(TermQuadratic(Q=[1.0, 1.0], R=[0.1]))
        >>> cost.add_final_term(TermQuadratic(Q=[100.0, 100.0], R=[0.0]))
        >>> cost.intermediate_cost(np.ones(2), np.zeros(1), 0.0)
        1.0
    """

    def __init__(
        self,
        state_dim: Optional[int] = None,
        control_dim: Optional[int] = None,
    ) -> None:
        self.state_dim = state_dim
        self.control_dim = control_dim
        self.intermediate_terms: List[Term] = []
        self.final_terms: List[Term] = []

    def _check_term(self, term: Term) -> None:
        if self.state_dim is None:
            self.state_dim = term.state_dim
        if self.control_dim is None:
            self.control_dim = term.control_dim
        if term.state_dim != self.state_dim:
            raise DimensionError(
                f"term '{term.name}' has state_dim {term.state_dim}, expected {self.state_dim}"
            )
        if term.control_dim != self.control_dim:
            raise DimensionError(
                f"term '{term.name}' has control_dim {term.control_dim}, "
                f"expected {self.control_dim}"
            )

    def add_intermediate_term(self, term: Term) -> int:
        """Append an intermediate term; returns its index."""
        self._check_term(term)
        self.intermediate_terms.append(term)
        return len(self.intermediate_terms) - 1

    def add_final_term(self, term: Term) -> int:
        """Append a terminal term; returns its index."""
        self._check_term(term)
        self.final_terms.append(term)
        return len(self.final_terms) - 1

    # Intermediate cost

    def intermediate_cost(self, x: np.ndarray, u: np.ndarray, t: float = 0.0) -> float:
        return float(sum(term.evaluate(x, u, t) for term in self.intermediate_terms))

    def state_derivative_intermediate(self, x, u, t=0.0) -> np.ndarray:
        grad = np.zeros(self.state_dim)
        for term in self.intermediate_terms:
            grad += term.state_derivative(x, u, t)
        return grad

    def control_derivative_intermediate(self, x, u, t=0.0) -> np.ndarray:
        grad = np.zeros(self.control_dim)
        for term in self.intermediate_terms:
            grad += term.control_derivative(x, u, t)
        return grad

    def state_second_derivative_intermediate(self, x, u, t=0.0) -> np.ndarray:
        hess = np.zeros((self.state_dim, self.state_dim))
        for term in self.intermediate_terms:
            hess += term.state_second_derivative(x, u, t)
        return hess

    def control_second_derivative_intermediate(self, x, u, t=0.0) -> np.ndarray:
        hess = np.zeros((self.control_dim, self.control_dim))
        for term in self.intermediate_terms:
            hess += term.control_second_derivative(x, u, t)
        return hess

    def state_control_derivative_intermediate(self, x, u, t=0.0) -> np.ndarray:
        hess = np.zeros((self.control_dim, self.state_dim))
        for term in self.intermediate_terms:
            hess += term.state_control_derivative(x, u, t)
        return hess

    # Terminal cost

    def final_cost(self, x: np.ndarray, t: float = 0.0) -> float:
        return float(sum(term.evaluate(x, None, t) for term in self.final_terms))

    def state_derivative_terminal(self, x, t=0.0) -> np.ndarray:
        grad = np.zeros(self.state_dim)
        for term in self.final_terms:
            grad += term.state_derivative(x, None, t)
        return grad

    def state_second_derivative_terminal(self, x, t=0.0) -> np.ndarray:
        hess = np.zeros((self.state_dim, self.state_dim))
        for term in self.final_terms:
            hess += term.state_second_derivative(x, None, t)
        return hess

    def __repr__(self) -> str:
        return (
            f"CostFunction(intermediate={self.intermediate_terms}, "
            f"final={self.final_terms})"
        )
