"""
ilqgmpc cost functions
======================

Intermediate and terminal cost terms, their additive composition, and YAML
loading.

Quick Start
-----------
>>> from ilqgmpc.costfunction import CostFunction, TermQuadratic
>>> cost = CostFunction()
>>> cost.add_intermediate_term(TermQuadratic(Q=[10.0, 10.0], R=[0.1]))
>>> cost.add_final_term(TermQuadratic(Q=[1000.0, 1000.0], R=[0.0]))
"""

from .terms import Term, TermQuadratic, TermLinear, TermMixed
from .cost_function import CostFunction
from .loader import load_term, load_terms, load_cost_function, term_from_config

__all__ = [
    "Term",
    "TermQuadratic",
    "TermLinear",
    "TermMixed",
    "CostFunction",
    "load_term",
    "load_terms",
    "load_cost_function",
    "term_from_config",
]
