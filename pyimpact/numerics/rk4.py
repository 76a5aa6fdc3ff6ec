"""
Fixed-step classical Runge-Kutta (RK4) integration for small ODE systems.

Goals:
- Pure step function: y_{n+1} = rk4_step(f, t_n, y_n, h); y_n is never mutated.
- Explicit fixed step, no adaptive control; callers pick h.
- Works on flat numpy vectors, e.g. orbital [x, y, z, vx, vy, vz].

Tests to cover (see tests/test_rk4.py):
- exact for polynomials up to degree 4 in t (y' = p(t))
- 4th-order convergence on y' = -y
- input array untouched after a step
- integrate() returns n_steps + 1 samples including the initial state
"""

from __future__ import annotations

from typing import Callable

import numpy as _np

Derivative = Callable[[float, _np.ndarray], _np.ndarray]


def rk4_step(f: Derivative, t: float, y: _np.ndarray, h: float) -> _np.ndarray:
    """Advance ``y`` by one step of size ``h``; returns a new array."""
    y = _np.asarray(y, dtype=_np.float64)
    k1 = f(t, y)
    k2 = f(t + 0.5 * h, y + 0.5 * h * k1)
    k3 = f(t + 0.5 * h, y + 0.5 * h * k2)
    k4 = f(t + h, y + h * k3)
    return y + (h / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)


def integrate(
    f: Derivative,
    y0: _np.ndarray,
    h: float,
    n_steps: int,
    t0: float = 0.0,
    *,
    stop_on_nonfinite: bool = True,
) -> _np.ndarray:
    """
    Integrate ``n_steps`` fixed steps from ``(t0, y0)``.

    Returns an array of shape [k, len(y0)], k <= n_steps + 1. When
    ``stop_on_nonfinite`` is set, integration stops before the first
    non-finite state and the trajectory computed so far is returned.
    """
    y = _np.asarray(y0, dtype=_np.float64).copy()
    out = [y]
    t = t0
    for _ in range(int(n_steps)):
        with _np.errstate(over="ignore", invalid="ignore", divide="ignore"):
            y_next = rk4_step(f, t, y, h)
        if stop_on_nonfinite and not _np.all(_np.isfinite(y_next)):
            break
        out.append(y_next)
        y = y_next
        t += h
    return _np.vstack(out)
