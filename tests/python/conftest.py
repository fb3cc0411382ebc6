"""
pytest configuration and fixtures for ilqgmpc tests.
"""

import pytest
import numpy as np


# ============================================================================
# Helpers
# ============================================================================

class FakeClock:
    """
    Deterministic clock advancing by a fixed increment on every call.

    The MPC wrapper reads the clock once at run() entry and once after the
    solve, so each cycle measures exactly one increment of latency.
    """

    def __init__(self, increment=0.0, start=100.0):
        self.increment = increment
        self.now = start
        self.calls = 0

    def __call__(self):
        value = self.now
        self.now += self.increment
        self.calls += 1
        return value


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def oscillator():
    """Damped oscillator w_n = 0.1, zeta = 5.0."""
    from ilqgmpc import SecondOrderSystem
    return SecondOrderSystem(w_n=0.1, zeta=5.0)


@pytest.fixture
def quadratic_cost():
    """
    Regulation cost for the oscillator.

    l   = 0.5 x'(10 I)x + 0.5 u'(0.1)u
    l_f = 0.5 x'(1000 I)x
    """
    from ilqgmpc import CostFunction, TermQuadratic

    cost = CostFunction()
    cost.add_intermediate_term(TermQuadratic(Q=[10.0, 10.0], R=[0.1], name="intermediateCost"))
    cost.add_final_term(TermQuadratic(Q=[1000.0, 1000.0], R=[0.0], name="finalCost"))
    return cost


@pytest.fixture
def coarse_settings():
    """Solver settings on a 10 ms grid."""
    from ilqgmpc import ILQGSettings
    return ILQGSettings(dt=0.01, dt_sim=0.01, max_iterations=50)


@pytest.fixture
def oscillator_problem(oscillator, quadratic_cost):
    """One second regulation problem from x0 = [1, 0]."""
    from ilqgmpc import OptConProblem
    return OptConProblem(
        oscillator,
        quadratic_cost,
        initial_state=np.array([1.0, 0.0]),
        time_horizon=1.0,
    )


@pytest.fixture
def zero_guess():
    """Factory for all-zero initial guesses."""
    from ilqgmpc import StateFeedbackController

    def make(horizon, dt, state_dim=2, control_dim=1):
        return StateFeedbackController.from_horizon(horizon, state_dim, control_dim, dt)

    return make


@pytest.fixture
def solved_solver(oscillator_problem, coarse_settings, zero_guess):
    """ILQG that already solved the oscillator problem."""
    from ilqgmpc import ILQG

    solver = ILQG(oscillator_problem, coarse_settings)
    solver.set_initial_guess(zero_guess(1.0, coarse_settings.dt))
    assert solver.solve()
    return solver


@pytest.fixture
def fake_clock():
    """Factory for FakeClock instances."""
    def make(increment=0.0):
        return FakeClock(increment)
    return make


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")
