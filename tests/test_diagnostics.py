"""
Env-gated diagnostic printing.
"""


def test_master_switch_silences_every_tag(monkeypatch, capsys):
    from pyimpact.diagnostics import diag

    diag("Seismic", "visible")
    monkeypatch.setenv("PI_DIAG", "0")
    diag("Seismic", "hidden")
    out = capsys.readouterr().out
    assert "[Seismic] visible" in out
    assert "hidden" not in out


def test_module_flag_and_default(monkeypatch, capsys):
    from pyimpact.diagnostics import diag

    diag("Orbit", "off by default", flag="PI_UNSET_FLAG", default="0")
    monkeypatch.setenv("PI_UNSET_FLAG", "1")
    diag("Orbit", "now on", flag="PI_UNSET_FLAG", default="0")
    out = capsys.readouterr().out
    assert "off by default" not in out
    assert "[Orbit] now on" in out


def test_bad_values_fall_back_to_defaults(monkeypatch):
    from pyimpact.diagnostics import env_flag, env_float

    monkeypatch.setenv("PI_SOME_FLAG", "yes")
    monkeypatch.setenv("PI_SOME_FLOAT", "abc")
    assert env_flag("PI_SOME_FLAG", "1") is True
    assert env_flag("PI_SOME_FLAG", "0") is False
    assert env_float("PI_SOME_FLOAT", 2.5) == 2.5


def test_orbit_summary_is_opt_in(monkeypatch, capsys):
    from pyimpact.orbital import OrbitalStateVector, PerturbationCalculator

    state = OrbitalStateVector([7000.0, 0.0, 0.0], [0.0, 7.546, 0.0], 2451545.0)
    calc = PerturbationCalculator()
    calc.propagate_state(state, 10.0, 30.0)
    assert "[Orbit]" not in capsys.readouterr().out

    monkeypatch.setenv("PI_ORBIT_DIAG", "1")
    calc.propagate_state(state, 10.0, 30.0)
    assert "[Orbit] 3 steps" in capsys.readouterr().out
