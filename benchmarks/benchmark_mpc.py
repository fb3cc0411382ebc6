#!/usr/bin/env python3
"""
ilqgmpc MPC Benchmark: iLQG-MPC on a damped oscillator

1. Solve the full 3 s problem on a 1 ms grid from a zero initial guess
2. Seed MPC with that solution
3. Run MPC cycles on wall clock time, feeding back the predicted state
   plus uniform noise, until the horizon is exhausted or a solve fails
"""

import argparse
import logging
import os
import time

import numpy as np

import ilqgmpc
from ilqgmpc import (
    ILQG,
    ILQGSettings,
    MPC,
    MpcMode,
    MpcSettings,
    OptConProblem,
    SecondOrderSystem,
    StateFeedbackController,
    SystemLinearizer,
    load_cost_function,
)

COST_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "mpc_cost.yaml")


def build_problem(x0, time_horizon=3.0):
    """Oscillator problem with a numerical linearizer and the YAML cost."""
    system = SecondOrderSystem(w_n=0.1, zeta=5.0)
    cost = load_cost_function(COST_FILE)
    return OptConProblem(
        system, cost, SystemLinearizer(system), initial_state=x0, time_horizon=time_horizon
    )


def solve_full(problem, dt):
    """Solve the full problem once; its solution seeds MPC."""
    settings = ILQGSettings(dt=dt, dt_sim=dt)
    solver = ILQG(problem, settings)
    solver.set_initial_guess(
        StateFeedbackController.from_horizon(problem.time_horizon, 2, 1, dt)
    )

    start = time.perf_counter()
    solver.solve()
    elapsed = time.perf_counter() - start

    print(solver.result.summary())
    print(f"Full solve wall time: {elapsed * 1e3:.1f} ms")
    print()
    return solver


def run_mpc(problem, initial_policy, dt, max_runs=2000, noise=0.1, seed=0):
    """MPC loop on wall clock time."""
    mpc_settings = MpcSettings(
        state_forward_integration=True,
        post_truncation=True,
        measure_delay=True,
        delay_measurement_multiplier=1.0,
        mpc_mode=MpcMode.FIXED_FINAL_TIME,
        cold_start=False,
        additional_delay_us=0,
    )
    mpc = MPC(problem, ILQGSettings(dt=dt, dt_sim=dt, max_iterations=5), mpc_settings)
    mpc.set_initial_guess(initial_policy)

    rng = np.random.default_rng(seed)
    x = problem.initial_state
    start = time.perf_counter()

    print("Starting to run MPC")
    for i in range(max_runs):
        if i > 0:
            x = predicted.front() + noise * rng.uniform(-1.0, 1.0, size=x.shape)

        t = time.perf_counter() - start
        success, _, _ = mpc.run(x, t)

        if mpc.time_horizon_reached() or not success:
            break
        predicted = mpc.get_state_trajectory()

    return mpc.print_mpc_summary()


def main():
    parser = argparse.ArgumentParser(description="iLQG-MPC oscillator benchmark")
    parser.add_argument("--dt", type=float, default=0.001)
    parser.add_argument("--horizon", type=float, default=3.0)
    parser.add_argument("--max-runs", type=int, default=2000)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    print(f"ilqgmpc version: {ilqgmpc.__version__}")
    print()

    x0 = np.random.default_rng(args.seed).uniform(-1.0, 1.0, size=2)
    problem = build_problem(x0, args.horizon)

    solver = solve_full(problem, args.dt)
    run_mpc(problem, solver.get_solution(), args.dt, max_runs=args.max_runs, seed=args.seed)


if __name__ == "__main__":
    main()
