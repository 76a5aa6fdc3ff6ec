from __future__ import annotations

# Re-export public API for pyimpact.numerics

from .rk4 import integrate, rk4_step

__all__ = [
    "integrate",
    "rk4_step",
]
