"""
Feedback Policies
=================

Time-varying feedforward/feedback control laws produced by the iLQG solver
and executed by the plant.

    u = u_ff[k] + K_fb[k] @ (x - x_ref[k])

where k is the grid step nearest to the query time.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from ..exceptions import DimensionError
from .trajectory import ControlTrajectory, nearest_index


class StateFeedbackController:
    """
    Time-varying affine state feedback policy.

    Args:
        feedforward: Feedforward controls (K, n_u)
        feedback: Feedback gains (K, n_u, n_x)
        dt: Step size in seconds
        reference: Reference states (K, n_x), default zeros

    Example:
        >>> K = 3000
        >>> policy = StateFeedbackController(
        ...     np.zeros((K, 1)), np.zeros((K, 1, 2)), dt=0.001
        ... )
        >>> policy.compute_control(np.array([1.0, 0.0]), t=0.5)
        array([0.])
    """

    def __init__(
        self,
        feedforward: np.ndarray,
        feedback: np.ndarray,
        dt: float,
        reference: Optional[np.ndarray] = None,
    ) -> None:
        feedforward = np.array(feedforward, dtype=np.float64)
        feedback = np.array(feedback, dtype=np.float64)

        if feedforward.ndim != 2:
            raise DimensionError(f"feedforward must be (K, n_u), got {feedforward.shape}")
        if feedback.ndim != 3:
            raise DimensionError(f"feedback must be (K, n_u, n_x), got {feedback.shape}")
        if feedback.shape[:2] != feedforward.shape:
            raise DimensionError(
                f"feedback {feedback.shape} inconsistent with feedforward {feedforward.shape}"
            )
        if dt <= 0:
            raise ValueError(f"dt must be positive, got {dt}")

        K, _, n_x = feedback.shape
        if reference is None:
            reference = np.zeros((K, n_x))
        else:
            reference = np.array(reference, dtype=np.float64)
            if reference.shape != (K, n_x):
                raise DimensionError(
                    f"reference must be ({K}, {n_x}), got {reference.shape}"
                )

        self.feedforward = feedforward
        self.feedback = feedback
        self.reference = reference
        self.dt = float(dt)

    @classmethod
    def zeros(
        cls, length: int, state_dim: int, control_dim: int, dt: float
    ) -> "StateFeedbackController":
        """All-zero policy of the given length."""
        return cls(
            np.zeros((length, control_dim)),
            np.zeros((length, control_dim, state_dim)),
            dt,
        )

    @classmethod
    def from_horizon(
        cls, horizon: float, state_dim: int, control_dim: int, dt: float
    ) -> "StateFeedbackController":
        """All-zero policy covering horizon seconds (round(horizon/dt) steps)."""
        return cls.zeros(int(round(horizon / dt)), state_dim, control_dim, dt)

    def __len__(self) -> int:
        return self.feedforward.shape[0]

    @property
    def state_dim(self) -> int:
        return self.feedback.shape[2]

    @property
    def control_dim(self) -> int:
        return self.feedforward.shape[1]

    @property
    def horizon(self) -> float:
        """Time covered by the policy (K * dt)."""
        return len(self) * self.dt

    def step_index(self, t: float) -> int:
        """Nearest step to time t (relative to the policy start), clamped."""
        if len(self) == 0:
            raise IndexError("policy is empty")
        return nearest_index(t, self.dt, len(self))

    def control_at(self, k: int, x: np.ndarray) -> np.ndarray:
        """Control for state x at step k (clamped to bounds)."""
        if len(self) == 0:
            raise IndexError("policy is empty")
        k = min(max(k, 0), len(self) - 1)
        return self.feedforward[k] + self.feedback[k] @ (x - self.reference[k])

    def compute_control(self, x: np.ndarray, t: float) -> np.ndarray:
        """
        Evaluate the policy.

        Args:
            x: Current state (n_x,)
            t: Time since the policy start in seconds

        Returns:
            Control (n_u,)
        """
        return self.control_at(self.step_index(t), np.asarray(x, dtype=np.float64))

    def truncate_front(self, n_steps: int) -> "StateFeedbackController":
        """Policy without its first n_steps entries (may become empty)."""
        n = min(max(int(n_steps), 0), len(self))
        return StateFeedbackController(
            self.feedforward[n:], self.feedback[n:], self.dt, self.reference[n:]
        )

    def resized(self, length: int) -> "StateFeedbackController":
        """
        Policy with exactly 'length' steps.

        Longer policies are truncated at the end; shorter ones are padded by
        repeating the last step (zeros if the policy is empty).
        """
        length = max(int(length), 0)
        K = len(self)
        if length <= K:
            return StateFeedbackController(
                self.feedforward[:length],
                self.feedback[:length],
                self.dt,
                self.reference[:length],
            )
        if K == 0:
            return StateFeedbackController.zeros(
                length, self.state_dim, self.control_dim, self.dt
            )

        pad = length - K
        return StateFeedbackController(
            np.concatenate([self.feedforward, np.repeat(self.feedforward[-1:], pad, axis=0)]),
            np.concatenate([self.feedback, np.repeat(self.feedback[-1:], pad, axis=0)]),
            self.dt,
            np.concatenate([self.reference, np.repeat(self.reference[-1:], pad, axis=0)]),
        )

    def shifted(self, n_steps: int, length: Optional[int] = None) -> "StateFeedbackController":
        """Drop n_steps leading steps, then resize to length (default: unchanged)."""
        target = len(self) if length is None else length
        return self.truncate_front(n_steps).resized(target)

    def feedforward_trajectory(self, start_time: float = 0.0) -> ControlTrajectory:
        """Feedforward controls as a ControlTrajectory."""
        return ControlTrajectory(self.feedforward.copy(), self.dt, start_time)

    def copy(self) -> "StateFeedbackController":
        return StateFeedbackController(
            self.feedforward.copy(), self.feedback.copy(), self.dt, self.reference.copy()
        )

    def allclose(self, other: "StateFeedbackController", rtol=1e-9, atol=1e-12) -> bool:
        """Element-wise comparison with another policy."""
        return (
            len(self) == len(other)
            and self.dt == other.dt
            and np.allclose(self.feedforward, other.feedforward, rtol=rtol, atol=atol)
            and np.allclose(self.feedback, other.feedback, rtol=rtol, atol=atol)
            and np.allclose(self.reference, other.reference, rtol=rtol, atol=atol)
        )

    def __repr__(self) -> str:
        return (
            f"StateFeedbackController(length={len(self)}, n_x={self.state_dim}, "
            f"n_u={self.control_dim}, dt={self.dt})"
        )
