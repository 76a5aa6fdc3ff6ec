"""
diagnostics.py

Env-gated diagnostic printing shared by the calculation modules.

Environment:
    PI_DIAG=1         master switch (0 silences every tag)
    PI_ORBIT_DIAG=0   propagation summaries from pyimpact.orbital
    PI_SEISMIC_DIAG=1 validity-range warnings from pyimpact.seismic
"""

from __future__ import annotations

import os


def env_flag(name: str, default: str = "1") -> bool:
    try:
        return int(os.getenv(name, default)) == 1
    except Exception:
        return default == "1"


def env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return default


def diag_enabled(flag: str | None = None, default: str = "1") -> bool:
    """True when PI_DIAG is on and, if given, the module flag is on too."""
    if not env_flag("PI_DIAG", "1"):
        return False
    if flag is None:
        return True
    return env_flag(flag, default)


def diag(tag: str, msg: str, flag: str | None = None, default: str = "1") -> None:
    if diag_enabled(flag, default):
        print(f"[{tag}] {msg}")
