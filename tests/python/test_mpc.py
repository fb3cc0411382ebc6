"""
Tests for the MPC wrapper.

Tests covering:
1. Horizon strategies and policy handling
2. Time keeping and delay estimation
3. Cycle arithmetic (forward integration, post truncation, timestamps)
4. Warm/cold starting, failures and reset
5. A noisy closed loop on the damped oscillator
"""

import pytest
import numpy as np


def _make_mpc(problem, settings, clock, guess=None, solver=None, **mpc_kwargs):
    from ilqgmpc import MPC, MpcSettings

    mpc = MPC(problem, settings, MpcSettings(**mpc_kwargs), solver=solver, clock=clock)
    if guess is not None:
        mpc.set_initial_guess(guess)
    return mpc


# ============================================================================
# Building blocks
# ============================================================================

class TestHorizonStrategies:

    def test_fixed_final_time(self):
        from ilqgmpc.mpc import FixedFinalTime

        strategy = FixedFinalTime(100)
        assert strategy.horizon_steps(0) == 100
        assert strategy.horizon_steps(99) == 1
        assert strategy.horizon_steps(100) is None
        assert strategy.is_exhausted(120)

    def test_min_horizon(self):
        from ilqgmpc.mpc import FixedFinalTimeWithMinHorizon

        strategy = FixedFinalTimeWithMinHorizon(100, min_steps=30)
        assert strategy.horizon_steps(10) == 90
        assert strategy.horizon_steps(80) == 30
        assert strategy.horizon_steps(99) == 30
        assert strategy.horizon_steps(100) is None

    def test_receding(self):
        from ilqgmpc.mpc import RecedingHorizon

        strategy = RecedingHorizon(100)
        assert strategy.horizon_steps(0) == 100
        assert strategy.horizon_steps(10 ** 6) == 100
        assert not strategy.is_exhausted(10 ** 6)

    @pytest.mark.parametrize("mode, cls_name", [
        ("fixed_final_time", "FixedFinalTime"),
        ("fixed_final_time_with_min_time_horizon", "FixedFinalTimeWithMinHorizon"),
        ("receding_horizon", "RecedingHorizon"),
    ])
    def test_factory(self, mode, cls_name):
        from ilqgmpc.mpc import MpcMode, make_horizon_strategy

        strategy = make_horizon_strategy(MpcMode.parse(mode), 50, 10)
        assert type(strategy).__name__ == cls_name

    def test_invalid_initial_steps(self):
        from ilqgmpc.mpc import FixedFinalTime

        with pytest.raises(ValueError):
            FixedFinalTime(0)


class TestPolicyHandler:

    def _ramp(self, length=10):
        from ilqgmpc import StateFeedbackController

        ff = np.arange(length, dtype=float).reshape(-1, 1)
        return StateFeedbackController(ff, np.zeros((length, 1, 2)), dt=0.01)

    def test_cold_guess_shifts_initial_guess(self):
        from ilqgmpc.mpc import PolicyHandler

        handler = PolicyHandler(self._ramp(), cold_start=True)
        handler.store_solution(self._ramp(), start_step=0)
        guess = handler.design_initial_guess(start_step=3, length=7)

        assert len(guess) == 7
        np.testing.assert_allclose(guess.feedforward[:, 0], np.arange(3, 10))

    def test_warm_guess_shifts_stored_solution(self):
        from ilqgmpc.mpc import PolicyHandler

        handler = PolicyHandler(self._ramp(), cold_start=False)
        solution = self._ramp()
        solution.feedforward += 100.0
        handler.store_solution(solution, start_step=2)

        guess = handler.design_initial_guess(start_step=5, length=4)
        np.testing.assert_allclose(guess.feedforward[:, 0], [103.0, 104.0, 105.0, 106.0])
        assert handler.solution_step == 2

    def test_guess_padded_past_end(self):
        from ilqgmpc.mpc import PolicyHandler

        handler = PolicyHandler(self._ramp(5))
        guess = handler.design_initial_guess(start_step=3, length=4)
        np.testing.assert_allclose(guess.feedforward[:, 0], [3.0, 4.0, 4.0, 4.0])

    def test_reset_falls_back_to_initial_guess(self):
        from ilqgmpc.mpc import PolicyHandler

        handler = PolicyHandler(self._ramp())
        handler.store_solution(self._ramp(3), start_step=1)
        handler.reset()

        assert not handler.has_solution
        np.testing.assert_allclose(handler.design_initial_guess(0, 10).feedforward[:, 0], np.arange(10))

    def test_initial_guess_is_copied(self):
        from ilqgmpc.mpc import PolicyHandler

        guess = self._ramp()
        handler = PolicyHandler(guess)
        guess.feedforward[:] = -1.0
        assert handler.initial_guess.feedforward[0, 0] == 0.0

    @pytest.mark.parametrize("n, expected_len, dropped", [
        (0, 10, 0),
        (4, 6, 4),
        (9, 1, 9),
        (10, 0, 10),
        (25, 0, 10),
        (-3, 10, 0),
    ])
    def test_truncate_policy(self, n, expected_len, dropped):
        from ilqgmpc.mpc import truncate_policy

        policy, n_dropped = truncate_policy(self._ramp(), n)
        assert len(policy) == expected_len
        assert n_dropped == dropped
        if expected_len:
            assert policy.feedforward[0, 0] == float(dropped)

    def test_forward_integrate_state(self):
        from ilqgmpc.mpc import forward_integrate_state

        calls = []

        def step(x, u, k):
            calls.append(k)
            return x + u[0]

        x = forward_integrate_state(step, self._ramp(), np.zeros(2), offset=2, n_steps=3)
        np.testing.assert_allclose(x, [9.0, 9.0])
        assert calls == [0, 1, 2]


class TestTimeKeeper:

    def test_grid(self):
        from ilqgmpc.mpc import MpcTimeKeeper

        tk = MpcTimeKeeper(0.01)
        assert not tk.is_started
        tk.start(2.0)
        tk.start(5.0)

        assert tk.start_time == 2.0
        assert tk.step_index(2.051) == 5
        assert tk.timestamp(7) == pytest.approx(2.07)
        assert tk.steps(0.0349) == 3
        assert tk.steps(-1.0) == 0

    def test_latency_with_fake_clock(self, fake_clock):
        from ilqgmpc.mpc import MpcTimeKeeper

        clock = fake_clock(0.004)
        tk = MpcTimeKeeper(0.001, clock=clock)
        tk.start_cycle()

        assert tk.elapsed() == pytest.approx(0.004)
        assert clock.calls == 2

    def test_delay_estimate(self):
        from ilqgmpc import MpcSettings
        from ilqgmpc.mpc import CycleTiming, MpcTimeKeeper

        tk = MpcTimeKeeper(0.01)
        measured = MpcSettings(delay_measurement_multiplier=2.0, additional_delay_us=1000)
        fixed = MpcSettings(measure_delay=False, fixed_delay_us=20000, additional_delay_us=1000)

        assert tk.delay_estimate(measured) == pytest.approx(0.001)
        assert tk.delay_estimate(fixed) == pytest.approx(0.021)

        tk.record(CycleTiming(latency_s=0.03, success=True))
        assert tk.delay_estimate(measured) == pytest.approx(0.061)
        assert tk.delay_estimate(fixed) == pytest.approx(0.021)
        assert tk.actual_delay(0.03, measured) == pytest.approx(0.061)

    def test_statistics(self):
        from ilqgmpc.mpc import CycleTiming, MpcTimeKeeper

        tk = MpcTimeKeeper(0.01, history_length=2)
        tk.record(CycleTiming(latency_s=0.01, forward_steps=1, truncated_steps=2, success=True))
        tk.record(CycleTiming(latency_s=0.02, forward_steps=5, success=False))
        tk.record(CycleTiming(latency_s=0.04, forward_steps=3, truncated_steps=1, success=True))

        stats = tk.compute_statistics()
        assert stats.cycles == 3
        assert stats.failures == 1
        assert stats.total_forward_steps == 4
        assert stats.total_truncated_steps == 3
        assert len(tk.history) == 2
        assert stats.latency_mean_s == pytest.approx(0.03)
        assert stats.latency_max_s == pytest.approx(0.04)
        assert "Failures" in stats.summary()


# ============================================================================
# MPC cycles
# ============================================================================

class TestMpcSetup:

    def test_run_without_guess(self, oscillator_problem, coarse_settings, fake_clock):
        from ilqgmpc import NotConfiguredError

        mpc = _make_mpc(oscillator_problem, coarse_settings, fake_clock())
        with pytest.raises(NotConfiguredError):
            mpc.run(np.array([1.0, 0.0]), 0.0)

    def test_guess_dimension_mismatch(self, oscillator_problem, coarse_settings, zero_guess):
        from ilqgmpc import DimensionError

        mpc = _make_mpc(oscillator_problem, coarse_settings, None)
        with pytest.raises(DimensionError):
            mpc.set_initial_guess(zero_guess(1.0, 0.01, state_dim=3))

    def test_initial_steps(self, oscillator_problem, coarse_settings):
        mpc = _make_mpc(oscillator_problem, coarse_settings, None)
        assert mpc.initial_steps == 100
        assert mpc.dt == 0.01
        assert not mpc.time_horizon_reached()

    def test_problem_is_copied(self, oscillator_problem, coarse_settings, zero_guess, fake_clock):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            state_forward_integration=False,
        )
        mpc.run(np.array([0.3, 0.1]), 0.0)

        np.testing.assert_allclose(oscillator_problem.initial_state, [1.0, 0.0])
        np.testing.assert_allclose(mpc.solver.problem.initial_state, [0.3, 0.1])

    def test_uses_given_solver(self, solved_solver, fake_clock):
        mpc = _make_mpc(
            solved_solver.problem, None, fake_clock(), solved_solver.get_solution(),
            solver=solved_solver,
        )
        cycle = mpc.run(np.array([1.0, 0.0]), 0.0)

        assert mpc.solver is solved_solver
        assert cycle.success
        assert mpc.last_solve_result.iterations <= 1


class TestMpcCycle:

    def test_post_truncation_arithmetic(
        self, oscillator_problem, coarse_settings, zero_guess, fake_clock
    ):
        """Every cycle takes 50 ms of clock time on a 10 ms grid."""
        clock = fake_clock(0.05)
        mpc = _make_mpc(oscillator_problem, coarse_settings, clock, zero_guess(1.0, 0.01))
        x = np.array([1.0, 0.0])

        first = mpc.run(x, 0.0)
        assert first.success
        assert len(first.policy) == 95
        assert first.timestamp == pytest.approx(0.05)

        second = mpc.run(x, 0.05)
        assert second.success
        assert len(second.policy) == 90
        assert second.timestamp == pytest.approx(0.1)

        assert clock.calls == 4
        history = mpc._timekeeper.history
        assert [c.forward_steps for c in history] == [0, 5]
        assert [c.truncated_steps for c in history] == [5, 0]
        assert [c.horizon_steps for c in history] == [100, 90]

    def test_no_delay_compensation(self, oscillator_problem, coarse_settings, zero_guess, fake_clock):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(0.05), zero_guess(1.0, 0.01),
            state_forward_integration=False, post_truncation=False,
        )
        x = np.array([1.0, 0.0])

        first = mpc.run(x, 0.0)
        second = mpc.run(x, 0.05)

        assert len(first.policy) == 100
        assert first.timestamp == pytest.approx(0.0)
        assert len(second.policy) == 95
        assert second.timestamp == pytest.approx(0.05)

    def test_returned_policy_matches_solution(
        self, oscillator_problem, coarse_settings, zero_guess, fake_clock
    ):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(0.05), zero_guess(1.0, 0.01)
        )
        cycle = mpc.run(np.array([1.0, 0.0]), 0.0)

        solution = mpc.solver.get_solution()
        assert cycle.policy.allclose(solution.truncate_front(5))

    def test_fixed_delay_forward_integration(
        self, oscillator_problem, coarse_settings, zero_guess, fake_clock
    ):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(0.05), zero_guess(1.0, 0.01),
            measure_delay=False, fixed_delay_us=30000, post_truncation=False,
        )
        x = np.array([1.0, 0.5])
        cycle = mpc.run(x, 0.0)

        assert len(cycle.policy) == 97
        assert cycle.timestamp == pytest.approx(0.03)

        expected = x.copy()
        for k in range(3):
            expected = mpc.solver.step(expected, np.zeros(1), k, start_time=0.0)
        predicted = mpc.get_state_trajectory()
        np.testing.assert_allclose(predicted.front(), expected)
        assert predicted.start_time == pytest.approx(0.03)

    def test_additional_delay(self, oscillator_problem, coarse_settings, zero_guess, fake_clock):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(0.05), zero_guess(1.0, 0.01),
            additional_delay_us=10000,
        )
        cycle = mpc.run(np.array([1.0, 0.0]), 0.0)

        # One step forward for the additional delay, five more dropped for the latency.
        assert len(cycle.policy) == 94
        assert cycle.timestamp == pytest.approx(0.06)

    def test_fixed_final_time_exhaustion(
        self, oscillator_problem, coarse_settings, zero_guess, fake_clock
    ):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            state_forward_integration=False, post_truncation=False,
        )
        first = mpc.run(np.array([1.0, 0.0]), 0.0)
        predicted = mpc.get_state_trajectory()

        last = mpc.run(np.array([0.0, 0.0]), 1.0)

        assert first.success
        assert not last.success
        assert last.policy is None
        assert mpc.time_horizon_reached()
        np.testing.assert_allclose(mpc.solver.problem.initial_state, [1.0, 0.0])
        np.testing.assert_allclose(mpc.get_state_trajectory().values, predicted.values)
        assert mpc.statistics.cycles == 1

    def test_min_time_horizon(self, oscillator_problem, coarse_settings, zero_guess, fake_clock):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            mpc_mode="fixed_final_time_with_min_time_horizon",
            min_time_horizon=0.3,
            state_forward_integration=False, post_truncation=False,
        )
        x = np.array([1.0, 0.0])

        assert len(mpc.run(x, 0.0).policy) == 100
        assert len(mpc.run(x, 0.5).policy) == 50
        assert len(mpc.run(x, 0.8).policy) == 30
        assert not mpc.run(x, 1.0).success
        assert mpc.time_horizon_reached()

    def test_receding_horizon(self, oscillator_problem, coarse_settings, zero_guess, fake_clock):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            mpc_mode="receding_horizon",
            state_forward_integration=False, post_truncation=False,
        )
        x = np.array([1.0, 0.0])

        for t in (0.0, 0.5, 2.0):
            cycle = mpc.run(x, t)
            assert cycle.success
            assert len(cycle.policy) == 100
            assert cycle.timestamp == pytest.approx(t)
        assert not mpc.time_horizon_reached()

    def test_start_time_offset(self, oscillator_problem, coarse_settings, zero_guess, fake_clock):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            state_forward_integration=False, post_truncation=False,
        )
        first = mpc.run(np.array([1.0, 0.0]), 42.0)
        second = mpc.run(np.array([1.0, 0.0]), 42.2)

        assert first.timestamp == pytest.approx(42.0)
        assert second.timestamp == pytest.approx(42.2)
        assert len(second.policy) == 80


class TestMpcProblemTime:
    """Time-varying models must see the time of the cycle, not the MPC start."""

    @staticmethod
    def _recording_problem(cost):
        from ilqgmpc import OptConProblem, SecondOrderSystem

        class RecordingOscillator(SecondOrderSystem):
            def __init__(self, *args):
                super().__init__(*args)
                self.times = []

            def compute_dynamics(self, x, u, t=0.0):
                self.times.append(t)
                return super().compute_dynamics(x, u, t)

        system = RecordingOscillator(0.1, 5.0)
        problem = OptConProblem(
            system, cost, initial_state=np.array([1.0, 0.0]), time_horizon=1.0
        )
        return system, problem

    def test_solve_starts_at_cycle_time(
        self, quadratic_cost, coarse_settings, zero_guess, fake_clock
    ):
        system, problem = self._recording_problem(quadratic_cost)
        mpc = _make_mpc(
            problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            mpc_mode="receding_horizon",
            state_forward_integration=False, post_truncation=False,
        )
        x = np.array([1.0, 0.0])

        mpc.run(x, 0.0)
        assert min(system.times) == pytest.approx(0.0)

        system.times.clear()
        cycle = mpc.run(x, 0.5)

        assert cycle.success
        assert min(system.times) >= 0.5 - 1e-9
        assert max(system.times) <= 1.5 + 1e-9
        assert mpc.solver.problem.start_time == pytest.approx(0.5)
        assert mpc.solver.get_state_trajectory().start_time == pytest.approx(0.5)

    def test_forward_integration_starts_at_measurement(
        self, quadratic_cost, coarse_settings, zero_guess, fake_clock
    ):
        system, problem = self._recording_problem(quadratic_cost)
        mpc = _make_mpc(
            problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            mpc_mode="receding_horizon",
            measure_delay=False, fixed_delay_us=30000, post_truncation=False,
        )
        x = np.array([1.0, 0.0])

        mpc.run(x, 0.0)
        system.times.clear()
        cycle = mpc.run(x, 0.5)

        assert cycle.timestamp == pytest.approx(0.53)
        assert system.times[0] == pytest.approx(0.5)
        assert min(system.times) >= 0.5 - 1e-9
        assert mpc.solver.problem.start_time == pytest.approx(0.53)

    def test_problem_start_time_offsets_cycles(
        self, quadratic_cost, coarse_settings, zero_guess, fake_clock
    ):
        system, problem = self._recording_problem(quadratic_cost)
        problem.set_start_time(10.0)
        mpc = _make_mpc(
            problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            mpc_mode="receding_horizon",
            state_forward_integration=False, post_truncation=False,
        )
        x = np.array([1.0, 0.0])

        mpc.run(x, 3.0)
        system.times.clear()
        cycle = mpc.run(x, 3.2)

        # Returned timestamps follow the measurements, the model follows the problem.
        assert cycle.timestamp == pytest.approx(3.2)
        assert min(system.times) >= 10.2 - 1e-9

        mpc.reset()
        assert mpc.solver.problem.start_time == 10.0


class TestMpcStarts:

    def _run_twice(self, problem, settings, guess, clock, cold_start):
        mpc = _make_mpc(
            problem, settings, clock, guess, cold_start=cold_start,
            state_forward_integration=False, post_truncation=False,
        )
        x = np.array([1.0, 0.0])
        mpc.run(x, 0.0)
        first = mpc.last_solve_result.iterations
        mpc.run(x, 0.0)
        return first, mpc.last_solve_result.iterations

    def test_warm_start(self, oscillator_problem, coarse_settings, zero_guess, fake_clock):
        first, second = self._run_twice(
            oscillator_problem, coarse_settings, zero_guess(1.0, 0.01), fake_clock(), False
        )
        assert first >= 2
        assert second <= 1

    def test_cold_start(self, oscillator_problem, coarse_settings, zero_guess, fake_clock):
        first, second = self._run_twice(
            oscillator_problem, coarse_settings, zero_guess(1.0, 0.01), fake_clock(), True
        )
        assert first >= 2
        assert second == first


class TestMpcFailures:

    def test_failed_solve_keeps_state(self, quadratic_cost, coarse_settings, zero_guess, fake_clock):
        from ilqgmpc import DomainError, OptConProblem, SecondOrderSystem

        class FlakyOscillator(SecondOrderSystem):
            fail = False

            def compute_dynamics(self, x, u, t):
                if self.fail:
                    raise DomainError("model unavailable")
                return super().compute_dynamics(x, u, t)

        system = FlakyOscillator(0.1, 5.0)
        problem = OptConProblem(
            system, quadratic_cost, initial_state=np.array([1.0, 0.0]), time_horizon=1.0
        )
        mpc = _make_mpc(
            problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            state_forward_integration=False, post_truncation=False,
        )
        x = np.array([1.0, 0.0])

        assert mpc.run(x, 0.0).success
        predicted = mpc.get_state_trajectory()

        system.fail = True
        failed = mpc.run(np.array([0.5, 0.0]), 0.1)
        assert not failed.success
        assert failed.policy is None
        assert failed.timestamp == pytest.approx(0.1)
        np.testing.assert_allclose(mpc.get_state_trajectory().values, predicted.values)
        assert mpc.statistics.failures == 1
        assert not mpc.time_horizon_reached()

        problem = mpc.solver.problem
        np.testing.assert_allclose(problem.initial_state, [1.0, 0.0])
        assert problem.time_horizon == pytest.approx(1.0)
        assert problem.start_time == 0.0

        system.fail = False
        recovered = mpc.run(x, 0.1)
        assert recovered.success
        assert len(recovered.policy) == 90

    def test_solve_outlasting_horizon_fails(
        self, oscillator_problem, coarse_settings, zero_guess, fake_clock
    ):
        """A 2 s solve on a 1 s horizon leaves nothing to execute."""
        from ilqgmpc import NotConfiguredError

        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(2.0), zero_guess(1.0, 0.01)
        )
        cycle = mpc.run(np.array([0.5, 0.0]), 0.0)

        assert not cycle.success
        assert cycle.policy is None
        assert cycle.timestamp == pytest.approx(1.0)

        stats = mpc.statistics
        assert stats.cycles == 1
        assert stats.failures == 1
        assert stats.total_truncated_steps == 0
        with pytest.raises(NotConfiguredError):
            mpc.get_state_trajectory()
        np.testing.assert_allclose(mpc.solver.problem.initial_state, [1.0, 0.0])
        assert mpc.solver.problem.start_time == 0.0


class TestMpcBookkeeping:

    def test_statistics_and_summary(
        self, oscillator_problem, coarse_settings, zero_guess, fake_clock, capsys
    ):
        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(0.05), zero_guess(1.0, 0.01)
        )
        x = np.array([1.0, 0.0])
        mpc.run(x, 0.0)
        mpc.run(x, 0.05)

        stats = mpc.print_mpc_summary()
        assert stats.cycles == 2
        assert stats.failures == 0
        assert stats.latency_mean_s == pytest.approx(0.05)
        assert stats.total_forward_steps == 5
        assert stats.total_truncated_steps == 5
        assert "MPC Summary" in capsys.readouterr().out

    def test_reset(self, oscillator_problem, coarse_settings, zero_guess, fake_clock):
        from ilqgmpc import NotConfiguredError

        mpc = _make_mpc(
            oscillator_problem, coarse_settings, fake_clock(), zero_guess(1.0, 0.01),
            state_forward_integration=False, post_truncation=False,
        )
        x = np.array([1.0, 0.0])
        mpc.run(x, 0.0)
        mpc.run(np.array([0.5, 0.0]), 1.0)
        assert mpc.time_horizon_reached()

        mpc.reset()
        assert not mpc.time_horizon_reached()
        assert mpc.statistics.cycles == 0
        assert mpc.solver.problem.time_horizon == pytest.approx(1.0)
        assert mpc.solver.problem.start_time == 0.0
        np.testing.assert_allclose(mpc.solver.problem.initial_state, [1.0, 0.0])
        with pytest.raises(NotConfiguredError):
            mpc.get_state_trajectory()

        cycle = mpc.run(x, 5.0)
        assert cycle.success
        assert len(cycle.policy) == 100
        assert cycle.timestamp == pytest.approx(5.0)


@pytest.mark.integration
class TestClosedLoop:
    """Oscillator regulated by MPC with measurement noise, 20 ms cycles."""

    def test_noisy_regulation(self, oscillator, oscillator_problem, zero_guess, fake_clock):
        from ilqgmpc import ILQGSettings

        dt = 0.01
        settings = ILQGSettings(dt=dt, dt_sim=dt, max_iterations=5)
        mpc = _make_mpc(oscillator_problem, settings, fake_clock(0.02), zero_guess(1.0, dt))
        rng = np.random.default_rng(0)

        x = np.array([1.0, 0.0])
        t = 0.0
        cycles = 0
        while True:
            cycle = mpc.run(x, t)
            if mpc.time_horizon_reached():
                break
            assert cycle.success
            cycles += 1

            for _ in range(2):
                u = cycle.policy.compute_control(x, t - cycle.timestamp)
                x = x + dt * oscillator.compute_dynamics(x, u, t)
                t += dt
            x = x + 0.1 * rng.uniform(-1.0, 1.0, size=2)

            assert cycles < 100

        assert cycles == 49
        assert abs(x[0]) < 0.5
        assert mpc.statistics.failures == 0
