"""
ilqgmpc: iLQG Trajectory Optimization and Nonlinear MPC
=======================================================

ilqgmpc solves finite-horizon nonlinear optimal control problems with the
iterative Linear-Quadratic-Gaussian (iLQG) method and wraps the solver in
a receding-horizon Model Predictive Controller.

Quick Start
-----------
>>> import numpy as np
>>> import ilqgmpc
>>>
>>> system = ilqgmpc.SecondOrderSystem(w_n=0.1, zeta=5.0)
>>> cost = ilqgmpc.CostFunction()
>>> cost.add_intermediate_term(ilqgmpc.TermQuadratic(Q=[10.0, 10.0], R=[0.1]))
>>> cost.add_final_term(ilqgmpc.TermQuadratic(Q=[1000.0, 1000.0], R=[0.0]))
>>>
>>> problem = ilqgmpc.OptConProblem(
...     system, cost, initial_state=np.array([1.0, 0.0]), time_horizon=3.0
... )
>>> settings = ilqgmpc.ILQGSettings(dt=0.001, dt_sim=0.001)
>>> solver = ilqgmpc.ILQG(problem, settings)
>>> solver.set_initial_guess(
...     ilqgmpc.StateFeedbackController.from_horizon(3.0, 2, 1, settings.dt)
... )
>>> solver.solve()
True
>>> policy = solver.get_solution()

Receding horizon control:

>>> mpc = ilqgmpc.MPC(problem, settings, ilqgmpc.MpcSettings())
>>> mpc.set_initial_guess(policy)
>>> success, policy, timestamp = mpc.run(x, t)
"""

import logging

__version__ = "0.1.0"
__author__ = "ilqgmpc Contributors"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Import public API
from .core import (
    ControlledSystem,
    DiscreteControlledSystem,
    LinearSystem,
    SecondOrderSystem,
    LinearizerBase,
    AnalyticLinearizer,
    SystemLinearizer,
    DiscreteSystemLinearizer,
    StateTrajectory,
    ControlTrajectory,
    Trajectory,
    StateFeedbackController,
)
from .costfunction import (
    CostFunction,
    Term,
    TermQuadratic,
    TermLinear,
    TermMixed,
    load_cost_function,
    load_term,
)
from .problem import OptConProblem
from .solver import ILQG, ILQGSettings, LineSearchSettings
from .mpc import MPC, MpcCycle, MpcMode, MpcSettings, MpcStatistics
from .result import SolveResult, Status
from .exceptions import (
    IlqgMpcError,
    NotConfiguredError,
    DomainError,
    IllConditionedError,
    DimensionError,
    InvalidInputError,
    ConfigurationError,
)

__all__ = [
    # Version
    "__version__",

    # Dynamics
    "ControlledSystem",
    "DiscreteControlledSystem",
    "LinearSystem",
    "SecondOrderSystem",
    "LinearizerBase",
    "AnalyticLinearizer",
    "SystemLinearizer",
    "DiscreteSystemLinearizer",

    # Trajectories and policies
    "Trajectory",
    "StateTrajectory",
    "ControlTrajectory",
    "StateFeedbackController",

    # Cost
    "CostFunction",
    "Term",
    "TermQuadratic",
    "TermLinear",
    "TermMixed",
    "load_cost_function",
    "load_term",

    # Solving
    "OptConProblem",
    "ILQG",
    "ILQGSettings",
    "LineSearchSettings",

    # MPC
    "MPC",
    "MpcCycle",
    "MpcMode",
    "MpcSettings",
    "MpcStatistics",

    # Results
    "SolveResult",
    "Status",

    # Exceptions
    "IlqgMpcError",
    "NotConfiguredError",
    "DomainError",
    "IllConditionedError",
    "DimensionError",
    "InvalidInputError",
    "ConfigurationError",
]


def info() -> str:
    """Return information about the ilqgmpc installation."""
    import platform

    import numpy
    import scipy

    lines = [
        f"ilqgmpc version: {__version__}",
        f"Python version: {platform.python_version()}",
        f"Platform: {platform.platform()}",
        f"NumPy version: {numpy.__version__}",
        f"SciPy version: {scipy.__version__}",
    ]
    return "\n".join(lines)
