"""
Time-Horizon Strategies
=======================

Length of the problem solved in an MPC cycle that starts s_start steps
after the MPC start time. K0 is the number of steps of the original
problem.

- FixedFinalTime: K = K0 - s_start, exhausted once K < 1
- FixedFinalTimeWithMinHorizon: K = max(K0 - s_start, K_min), exhausted
  once s_start >= K0
- RecedingHorizon: K = K0, never exhausted
"""

import abc
from typing import Optional

from .settings import MpcMode


class HorizonStrategy(abc.ABC):
    """Maps the cycle start step to a horizon length in steps."""

    def __init__(self, initial_steps: int) -> None:
        if initial_steps < 1:
            raise ValueError(f"initial_steps must be at least 1, got {initial_steps}")
        self.initial_steps = int(initial_steps)

    @abc.abstractmethod
    def horizon_steps(self, start_step: int) -> Optional[int]:
        """Horizon length for a cycle starting at start_step, None if exhausted."""

    def is_exhausted(self, start_step: int) -> bool:
        return self.horizon_steps(start_step) is None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(initial_steps={self.initial_steps})"


class FixedFinalTime(HorizonStrategy):
    def horizon_steps(self, start_step: int) -> Optional[int]:
        remaining = self.initial_steps - start_step
        return remaining if remaining >= 1 else None


class FixedFinalTimeWithMinHorizon(HorizonStrategy):
    """Shrinking horizon floored at min_steps."""

    def __init__(self, initial_steps: int, min_steps: int) -> None:
        super().__init__(initial_steps)
        self.min_steps = max(1, int(min_steps))

    def horizon_steps(self, start_step: int) -> Optional[int]:
        if start_step >= self.initial_steps:
            return None
        return max(self.initial_steps - start_step, self.min_steps)


class RecedingHorizon(HorizonStrategy):
    def horizon_steps(self, start_step: int) -> Optional[int]:
        return self.initial_steps


def make_horizon_strategy(mode: MpcMode, initial_steps: int, min_steps: int = 1) -> HorizonStrategy:
    """Build the strategy for an MpcMode."""
    if mode is MpcMode.FIXED_FINAL_TIME:
        return FixedFinalTime(initial_steps)
    if mode is MpcMode.FIXED_FINAL_TIME_WITH_MIN_TIME_HORIZON:
        return FixedFinalTimeWithMinHorizon(initial_steps, min_steps)
    if mode is MpcMode.RECEDING_HORIZON:
        return RecedingHorizon(initial_steps)
    raise ValueError(f"Unknown mpc mode '{mode}'")
