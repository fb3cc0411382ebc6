"""
ilqgmpc solver
==============

iLQG trajectory optimizer and its settings.

Quick Start
-----------
>>> from ilqgmpc.solver import ILQG, ILQGSettings
>>> solver = ILQG(problem, ILQGSettings(dt=0.01, max_iterations=20))
>>> solver.set_initial_guess(guess)
>>> solver.solve()
True
"""

from .settings import ILQGSettings, LineSearchSettings
from .ilqg import ILQG

__all__ = [
    "ILQG",
    "ILQGSettings",
    "LineSearchSettings",
]
