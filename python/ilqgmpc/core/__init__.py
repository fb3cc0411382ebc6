"""
ilqgmpc core types
==================

Dynamics models, linearizers, integrators, trajectories and feedback
policies shared by the solver and the MPC wrapper.
"""

from .dynamics import (
    ControlledSystem,
    DiscreteControlledSystem,
    LinearSystem,
    SecondOrderSystem,
)
from .linearization import (
    LinearizerBase,
    AnalyticLinearizer,
    SystemLinearizer,
    DiscreteSystemLinearizer,
    default_linearizer,
)
from .integration import integrate, discretize, substeps
from .trajectory import (
    Trajectory,
    StateTrajectory,
    ControlTrajectory,
    constant_trajectory,
)
from .controller import StateFeedbackController

__all__ = [
    # Dynamics
    "ControlledSystem",
    "DiscreteControlledSystem",
    "LinearSystem",
    "SecondOrderSystem",
    # Linearization
    "LinearizerBase",
    "AnalyticLinearizer",
    "SystemLinearizer",
    "DiscreteSystemLinearizer",
    "default_linearizer",
    # Integration
    "integrate",
    "discretize",
    "substeps",
    # Trajectories
    "Trajectory",
    "StateTrajectory",
    "ControlTrajectory",
    "constant_trajectory",
    # Policies
    "StateFeedbackController",
]
