"""Time keeping for the MPC wrapper.

Maps measurement timestamps onto the solver grid, measures solve latency
with an injectable clock, estimates the delay of the next cycle and
collects per-cycle statistics.
"""

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from .settings import MpcSettings


@dataclass
class CycleTiming:
    """Record of a single MPC cycle.

    Attributes:
        latency_s: Raw wall clock time from run() entry to solve completion
        delay_estimate_s: Delay assumed when the cycle started
        forward_steps: Steps the measured state was propagated
        truncated_steps: Leading steps dropped from the returned policy
        horizon_steps: Length of the solved problem
        iterations: iLQG iterations performed
        success: Whether the cycle returned a new policy
    """

    latency_s: float = 0.0
    delay_estimate_s: float = 0.0
    forward_steps: int = 0
    truncated_steps: int = 0
    horizon_steps: int = 0
    iterations: int = 0
    success: bool = False


@dataclass
class MpcStatistics:
    """Aggregate MPC statistics.

    Attributes:
        cycles: Number of cycles that reached the solver
        failures: Number of failed solves
        latency_mean_s: Mean solve latency in seconds
        latency_min_s: Minimum solve latency in seconds
        latency_max_s: Maximum solve latency in seconds
        latency_std_s: Standard deviation of the latency in seconds
        total_forward_steps: Sum of forward integration steps
        total_truncated_steps: Sum of post-truncated steps
    """

    cycles: int = 0
    failures: int = 0
    latency_mean_s: float = 0.0
    latency_min_s: float = 0.0
    latency_max_s: float = 0.0
    latency_std_s: float = 0.0
    total_forward_steps: int = 0
    total_truncated_steps: int = 0

    def summary(self) -> str:
        """Return a formatted summary."""
        lines = [
            "=" * 50,
            "MPC Summary",
            "=" * 50,
            f"Cycles:           {self.cycles}",
            f"Failures:         {self.failures}",
            "-" * 50,
            f"Latency mean:     {self.latency_mean_s * 1e3:.3f} ms",
            f"Latency min:      {self.latency_min_s * 1e3:.3f} ms",
            f"Latency max:      {self.latency_max_s * 1e3:.3f} ms",
            f"Latency std:      {self.latency_std_s * 1e3:.3f} ms",
            "-" * 50,
            f"Forward steps:    {self.total_forward_steps}",
            f"Truncated steps:  {self.total_truncated_steps}",
            "=" * 50,
        ]
        return "\n".join(lines)


class MpcTimeKeeper:
    """Grid quantization and latency measurement for the MPC wrapper.

    The first call to start() fixes the MPC start time t0. All later
    timestamps are expressed as whole steps of dt relative to t0.

    Attributes:
        dt: Solver grid step in seconds
    """

    def __init__(
        self,
        dt: float,
        clock: Optional[Callable[[], float]] = None,
        history_length: int = 10000,
    ) -> None:
        """Initialize the time keeper.

        Args:
            dt: Solver grid step in seconds
            clock: Monotonic clock in seconds (default: time.perf_counter)
            history_length: Number of cycles kept for latency statistics
        """
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        if history_length <= 0:
            raise ValueError(f"history_length must be positive, got {history_length}")

        self.dt = float(dt)
        self._clock = clock if clock is not None else time.perf_counter
        self._history_length = history_length
        self.reset()

    def reset(self) -> None:
        """Forget the start time, the last latency and all statistics."""
        self._t0: Optional[float] = None
        self._cycle_start: Optional[float] = None
        self._last_latency_s: Optional[float] = None
        self._history: List[CycleTiming] = []
        self._cycles = 0
        self._failures = 0
        self._forward_steps = 0
        self._truncated_steps = 0

    # Grid

    @property
    def is_started(self) -> bool:
        return self._t0 is not None

    @property
    def start_time(self) -> Optional[float]:
        return self._t0

    def start(self, t: float) -> None:
        """Set t0 on the first call; later calls are ignored."""
        if self._t0 is None:
            self._t0 = float(t)

    def step_index(self, t: float) -> int:
        """Grid step of timestamp t, round((t - t0) / dt)."""
        if self._t0 is None:
            raise RuntimeError("start() was not called")
        return int(round((t - self._t0) / self.dt))

    def timestamp(self, step: int) -> float:
        """Timestamp of grid step 'step', t0 + step * dt."""
        if self._t0 is None:
            raise RuntimeError("start() was not called")
        return self._t0 + step * self.dt

    def steps(self, duration_s: float) -> int:
        """Whole grid steps covering a duration (rounded, never negative)."""
        return max(0, int(round(duration_s / self.dt)))

    # Latency

    def start_cycle(self) -> None:
        """Mark run() entry."""
        self._cycle_start = self._clock()

    def elapsed(self) -> float:
        """Raw clock time since start_cycle()."""
        if self._cycle_start is None:
            raise RuntimeError("start_cycle() was not called")
        return self._clock() - self._cycle_start

    def delay_estimate(self, settings: MpcSettings) -> float:
        """Expected delay of the coming cycle in seconds."""
        if settings.measure_delay:
            measured = self._last_latency_s if self._last_latency_s is not None else 0.0
            delay = measured * settings.delay_measurement_multiplier
        else:
            delay = settings.fixed_delay_s
        return delay + settings.additional_delay_s

    def actual_delay(self, latency_s: float, settings: MpcSettings) -> float:
        """Scaled latency plus the additional delay."""
        return latency_s * settings.delay_measurement_multiplier + settings.additional_delay_s

    @property
    def last_latency_s(self) -> Optional[float]:
        return self._last_latency_s

    # Statistics

    def record(self, timing: CycleTiming) -> None:
        """Store one cycle that reached the solver."""
        self._last_latency_s = timing.latency_s
        self._cycles += 1
        if timing.success:
            self._forward_steps += timing.forward_steps
            self._truncated_steps += timing.truncated_steps
        else:
            self._failures += 1

        self._history.append(timing)
        if len(self._history) > self._history_length:
            self._history.pop(0)

    @property
    def history(self) -> List[CycleTiming]:
        return list(self._history)

    def compute_statistics(self) -> MpcStatistics:
        """Aggregate statistics over the recorded cycles."""
        stats = MpcStatistics(
            cycles=self._cycles,
            failures=self._failures,
            total_forward_steps=self._forward_steps,
            total_truncated_steps=self._truncated_steps,
        )
        if self._history:
            latencies = np.array([c.latency_s for c in self._history])
            stats.latency_mean_s = float(np.mean(latencies))
            stats.latency_min_s = float(np.min(latencies))
            stats.latency_max_s = float(np.max(latencies))
            stats.latency_std_s = float(np.std(latencies))
        return stats
