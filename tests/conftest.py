"""
pytest configuration

Goals:
- keep tests fast and deterministic
- keep diagnostic prints quiet unless a test turns them on
- pin tunable env parameters to their defaults
"""

import os
import sys

import pytest

# Ensure project root on sys.path for 'pyimpact' and 'scripts' imports
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)


@pytest.fixture(autouse=True)
def _pi_env(monkeypatch):
    # Diagnostics on (prints are cheap); orbit summaries off
    monkeypatch.setenv("PI_DIAG", "1")
    monkeypatch.delenv("PI_SEISMIC_DIAG", raising=False)
    monkeypatch.setenv("PI_ORBIT_DIAG", "0")
    # Seismic tuning back to defaults
    monkeypatch.delenv("PI_SEISMIC_EFFICIENCY", raising=False)
    monkeypatch.delenv("PI_SEISMIC_EFFICIENCY_SIGMA", raising=False)
    # Force non-interactive backend for matplotlib (avoid display requirements)
    monkeypatch.setenv("MPLBACKEND", os.getenv("MPLBACKEND", "Agg"))
    yield
