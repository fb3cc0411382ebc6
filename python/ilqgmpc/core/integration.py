"""
Integration and Discretization
==============================

Fixed-step numerical integration of continuous-time systems and conversion
of continuous Jacobians into their discrete-time counterparts.

Integrators:
- euler: forward Euler
- rk4: classic fourth-order Runge-Kutta

Discretization methods for (A_c, B_c):
- euler: A = I + A_c*dt, B = B_c*dt
- zoh: zero-order hold, exact for LTI systems
- tustin: bilinear transform
"""

from __future__ import annotations

from typing import Callable, Tuple

import numpy as np
from scipy.linalg import expm

from ..exceptions import DomainError

INTEGRATORS = ("euler", "rk4")
DISCRETIZATIONS = ("euler", "zoh", "tustin")


def _euler_step(f: Callable, x: np.ndarray, u: np.ndarray, t: float, h: float) -> np.ndarray:
    return x + h * f(x, u, t)


def _rk4_step(f: Callable, x: np.ndarray, u: np.ndarray, t: float, h: float) -> np.ndarray:
    k1 = f(x, u, t)
    k2 = f(x + 0.5 * h * k1, u, t + 0.5 * h)
    k3 = f(x + 0.5 * h * k2, u, t + 0.5 * h)
    k4 = f(x + h * k3, u, t + h)
    return x + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


_STEPPERS = {
    "euler": _euler_step,
    "rk4": _rk4_step,
}


def substeps(dt: float, dt_sim: float) -> int:
    """Number of integration sub-steps used to cover dt with step dt_sim."""
    return max(1, int(round(dt / dt_sim)))


def integrate(
    system,
    x: np.ndarray,
    u: np.ndarray,
    t: float,
    duration: float,
    n_steps: int = 1,
    method: str = "euler",
) -> np.ndarray:
    """
    Integrate a continuous system over a time interval with constant control.

    Args:
        system: ControlledSystem providing compute_dynamics(x, u, t)
        x: Initial state (n_x,)
        u: Control held constant over the interval (n_u,)
        t: Start time
        duration: Interval length
        n_steps: Number of fixed integration steps
        method: 'euler' or 'rk4'

    Returns:
        State at t + duration

    Raises:
        DomainError: If the integrated state becomes non-finite
    """
    try:
        stepper = _STEPPERS[method]
    except KeyError:
        raise ValueError(f"Unknown integrator '{method}'") from None

    h = duration / n_steps
    x_next = np.asarray(x, dtype=np.float64)
    for i in range(n_steps):
        x_next = stepper(system.compute_dynamics, x_next, u, t + i * h, h)

    if not np.all(np.isfinite(x_next)):
        raise DomainError(f"Integration produced non-finite state at t={t:.6g}")
    return x_next


def discretize(
    Ac: np.ndarray,
    Bc: np.ndarray,
    dt: float,
    method: str = "euler",
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Discretize continuous-time Jacobians.

    Continuous: dx/dt = Ac @ x + Bc @ u
    Discrete:   x_{k+1} = A @ x_k + B @ u_k

    Args:
        Ac: Continuous state matrix
        Bc: Continuous input matrix
        dt: Sampling time
        method: Discretization method ('euler', 'zoh', 'tustin')

    Returns:
        Tuple (A, B) of discrete matrices
    """
    Ac = np.asarray(Ac, dtype=np.float64)
    Bc = np.asarray(Bc, dtype=np.float64)
    n = Ac.shape[0]

    if method == "euler":
        A = np.eye(n) + Ac * dt
        B = Bc * dt

    elif method == "zoh":
        m = Bc.shape[1]

        # Build augmented matrix [Ac, Bc; 0, 0]
        M = np.zeros((n + m, n + m))
        M[:n, :n] = Ac * dt
        M[:n, n:] = Bc * dt

        eM = expm(M)
        A = eM[:n, :n]
        B = eM[:n, n:]

    elif method == "tustin":
        I = np.eye(n)

        inv_term = np.linalg.inv(I - (dt / 2) * Ac)
        A = inv_term @ (I + (dt / 2) * Ac)
        B = inv_term @ Bc * dt

    else:
        raise ValueError(f"Unknown method '{method}'")

    return A, B
