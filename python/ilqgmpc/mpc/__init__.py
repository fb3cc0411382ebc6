"""
ilqgmpc Model Predictive Control (MPC)
======================================

Receding-horizon wrapper around the iLQG solver with warm starting,
delay compensation and horizon management.

Quick Start
-----------
>>> from ilqgmpc.mpc import MPC, MpcSettings, MpcMode
>>>
>>> mpc = MPC(
...     problem,
...     ILQGSettings(dt=0.01, max_iterations=5),
...     MpcSettings(mpc_mode=MpcMode.FIXED_FINAL_TIME),
... )
>>> mpc.set_initial_guess(solver.get_solution())
>>>
>>> while not mpc.time_horizon_reached():
...     success, policy, timestamp = mpc.run(x, t)
...     if not success:
...         break

Classes
-------
MPC
    Receding-horizon controller
MpcSettings
    Delay compensation, warm start and horizon options
MpcMode
    Time-horizon strategy
MpcCycle
    (success, policy, timestamp) returned by MPC.run
MpcStatistics
    Cycle count, failures, latency and truncation totals

Timing
------
Every cycle is placed on the solver grid dt relative to the first run()
timestamp t0:

    s_meas  = round((t - t0) / dt)
    s_start = s_meas + round(delay / dt)           (forward integration)
    t_out   = t0 + (s_start + n_truncated) * dt    (post truncation)
"""

from .settings import MpcMode, MpcSettings
from .timekeeper import CycleTiming, MpcStatistics, MpcTimeKeeper
from .horizon import (
    HorizonStrategy,
    FixedFinalTime,
    FixedFinalTimeWithMinHorizon,
    RecedingHorizon,
    make_horizon_strategy,
)
from .policy_handler import PolicyHandler, truncate_policy, forward_integrate_state
from .controller import MPC, MpcCycle

__all__ = [
    # Controller
    "MPC",
    "MpcCycle",
    # Settings
    "MpcMode",
    "MpcSettings",
    # Timing
    "CycleTiming",
    "MpcStatistics",
    "MpcTimeKeeper",
    # Horizon
    "HorizonStrategy",
    "FixedFinalTime",
    "FixedFinalTimeWithMinHorizon",
    "RecedingHorizon",
    "make_horizon_strategy",
    # Policies
    "PolicyHandler",
    "truncate_policy",
    "forward_integrate_state",
]
