"""
Trajectories
============

Time-indexed sequences of state or control vectors on a uniform grid.
"""

from __future__ import annotations

import numpy as np


def nearest_index(t: float, dt: float, length: int) -> int:
    """Nearest grid index to time t, clamped to [0, length - 1]."""
    k = int(round(t / dt))
    return min(max(k, 0), length - 1)


class Trajectory:
    """
    Uniformly sampled trajectory.

    Args:
        values: Samples (N, dim); a 1D array is treated as (N, 1)
        dt: Sample spacing in seconds
        start_time: Time of the first sample

    Example:
        >>> traj = Trajectory(np.zeros((301, 2)), dt=0.01)
        >>> traj.front()
        array([0., 0.])
        >>> traj.duration
        3.0
    """

    def __init__(
        self,
        values: np.ndarray,
        dt: float,
        start_time: float = 0.0,
    ) -> None:
        values = np.array(values, dtype=np.float64)
        if values.ndim == 1:
            values = values.reshape(-1, 1)
        if values.ndim != 2:
            raise ValueError(f"values must be 2D, got shape {values.shape}")
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")
        self.values = values
        self.dt = float(dt)
        self.start_time = float(start_time)

    def __len__(self) -> int:
        return self.values.shape[0]

    def __getitem__(self, k):
        return self.values[k]

    def __iter__(self):
        return iter(self.values)

    @property
    def dim(self) -> int:
        return self.values.shape[1]

    @property
    def time(self) -> np.ndarray:
        """Sample times (N,)."""
        return self.start_time + self.dt * np.arange(len(self))

    @property
    def duration(self) -> float:
        """Time between first and last sample."""
        return max(len(self) - 1, 0) * self.dt

    def front(self) -> np.ndarray:
        """First sample."""
        if len(self) == 0:
            raise IndexError("trajectory is empty")
        return self.values[0].copy()

    def back(self) -> np.ndarray:
        """Last sample."""
        if len(self) == 0:
            raise IndexError("trajectory is empty")
        return self.values[-1].copy()

    def get(self, k: int) -> np.ndarray:
        """Sample at index k (clamped to bounds)."""
        k = min(max(k, 0), len(self) - 1)
        return self.values[k].copy()

    def evaluate(self, t: float) -> np.ndarray:
        """Sample nearest to absolute time t."""
        if len(self) == 0:
            raise IndexError("trajectory is empty")
        return self.values[nearest_index(t - self.start_time, self.dt, len(self))].copy()

    def get_window(self, start: int, length: int) -> "Trajectory":
        """
        Window starting at index 'start' with given length.

        If the window extends beyond the trajectory, the last value is repeated.
        """
        end = start + length

        if end > len(self):
            values = np.zeros((length, self.dim))
            available = max(min(len(self) - start, length), 0)
            values[:available] = self.values[start:start + available]
            if len(self) > 0:
                values[available:] = self.values[-1]
        else:
            values = self.values[start:end]

        return type(self)(values, self.dt, self.start_time + start * self.dt)

    def copy(self) -> "Trajectory":
        return type(self)(self.values.copy(), self.dt, self.start_time)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(length={len(self)}, dim={self.dim}, "
            f"dt={self.dt}, start_time={self.start_time:.6g})"
        )


class StateTrajectory(Trajectory):
    """State samples x_0..x_K (K + 1 entries for a K-step solve)."""


class ControlTrajectory(Trajectory):
    """Control samples u_0..u_{K-1}."""


def constant_trajectory(
    value: np.ndarray,
    length: int,
    dt: float,
    start_time: float = 0.0,
) -> Trajectory:
    """
    Trajectory repeating one value.

    Example:
        >>> traj = constant_trajectory(np.array([1.0, 0.0]), length=50, dt=0.1)
    """
    value = np.asarray(value, dtype=np.float64)
    return Trajectory(np.tile(value, (length, 1)), dt, start_time)
