"""
Uncertainty propagation: linear, finite-difference and Monte Carlo paths.
"""

import math

import numpy as np
import pytest


def _vars():
    from pyimpact.quantity import Quantity
    from pyimpact.uncertainty import UncertaintyVariable

    return [
        UncertaintyVariable("a", Quantity(10.0, 0.3, "m")),
        UncertaintyVariable("b", Quantity(4.0, 0.4, "m")),
    ]


def test_linear_propagation_independent():
    from pyimpact.uncertainty import propagate_linear

    res = propagate_linear(_vars(), {"a": 2.0, "b": -1.0})
    assert np.isclose(res.value, 16.0)
    assert np.isclose(res.uncertainty, math.hypot(0.6, 0.4))
    assert res.method == "linear"
    pct = sum(c.relative_contribution for c in res.contributions)
    assert pct > 0


def test_linear_propagation_with_correlation():
    from pyimpact.uncertainty import Correlation, propagate_linear

    res = propagate_linear(_vars(), {"a": 1.0, "b": 1.0}, [Correlation("a", "b", 1.0)])
    # fully correlated sum: sigmas add linearly
    assert np.isclose(res.uncertainty, 0.7)


def test_linear_propagation_rejects_inconsistent_correlations():
    from pyimpact.errors import CalculationError, CalculationException
    from pyimpact.quantity import Quantity
    from pyimpact.uncertainty import Correlation, UncertaintyVariable, monte_carlo, propagate_linear

    variables = [UncertaintyVariable(n, Quantity(1.0, 0.1, "m")) for n in ("a", "b", "c")]
    corr = [Correlation("a", "b", -0.9), Correlation("a", "c", -0.9), Correlation("b", "c", -0.9)]
    with pytest.raises(CalculationException) as exc:
        propagate_linear(variables, {"a": 1.0, "b": 1.0, "c": 1.0}, corr)
    assert exc.value.kind is CalculationError.NUMERICAL_INSTABILITY
    # same verdict as the sampling path
    with pytest.raises(CalculationException) as exc:
        monte_carlo(variables, lambda x: x["a"] + x["b"] + x["c"], samples=1000, correlations=corr, seed=1)
    assert exc.value.kind is CalculationError.NUMERICAL_INSTABILITY


def test_linear_propagation_handles_huge_terms():
    from pyimpact.quantity import Quantity
    from pyimpact.uncertainty import UncertaintyVariable, propagate_linear

    variables = [
        UncertaintyVariable("a", Quantity(1e300, 3e299, "J")),
        UncertaintyVariable("b", Quantity(1e300, 4e299, "J")),
    ]
    res = propagate_linear(variables, {"a": 10.0, "b": 10.0})
    assert np.isclose(res.uncertainty, 5e300)
    assert np.isclose(res.contributions[0].contribution, 3e300)
    assert np.isclose(res.contributions[1].relative_contribution, 80.0)


def test_linear_propagation_missing_partial():
    from pyimpact.errors import CalculationError, CalculationException
    from pyimpact.uncertainty import propagate_linear

    with pytest.raises(CalculationException) as exc:
        propagate_linear(_vars(), {"a": 1.0})
    assert exc.value.kind is CalculationError.MISSING_DATA


def test_nonlinear_matches_analytic_product():
    from pyimpact.uncertainty import propagate_nonlinear

    res = propagate_nonlinear(_vars(), lambda x: x["a"] * x["b"])
    assert np.isclose(res.value, 40.0)
    expected = 40.0 * math.hypot(0.03, 0.1)
    assert np.isclose(res.uncertainty, expected, rtol=1e-5)


def test_monte_carlo_agrees_with_linear_for_linear_function():
    from pyimpact.uncertainty import monte_carlo, propagate_linear

    lin = propagate_linear(_vars(), {"a": 1.0, "b": 1.0})
    mc = monte_carlo(_vars(), lambda x: x["a"] + x["b"], samples=20000, seed=1234)
    assert mc.method == "monte_carlo" and mc.samples == 20000
    assert np.isclose(mc.value, lin.value, rtol=2e-3)
    assert np.isclose(mc.uncertainty, lin.uncertainty, rtol=0.05)


def test_monte_carlo_is_deterministic_when_seeded():
    from pyimpact.uncertainty import monte_carlo

    f = lambda x: x["a"] ** 2 / x["b"]  # noqa: E731
    r1 = monte_carlo(_vars(), f, samples=500, seed=7)
    r2 = monte_carlo(_vars(), f, samples=500, seed=7)
    assert r1.value == r2.value and r1.uncertainty == r2.uncertainty


def test_monte_carlo_non_normal_distributions():
    from pyimpact.quantity import Quantity
    from pyimpact.uncertainty import Distribution, UncertaintyVariable, monte_carlo

    variables = [
        UncertaintyVariable("u", Quantity(5.0, 1.0, "1"), Distribution.UNIFORM),
        UncertaintyVariable("t", Quantity(2.0, 0.5, "1"), Distribution.TRIANGULAR),
    ]
    res = monte_carlo(variables, lambda x: x["u"] + x["t"], samples=20000, seed=3)
    assert np.isclose(res.value, 7.0, rtol=0.01)
    assert np.isclose(res.uncertainty, math.hypot(1.0, 0.5), rtol=0.05)


def test_monte_carlo_requires_enough_samples():
    from pyimpact.errors import CalculationException
    from pyimpact.uncertainty import monte_carlo

    with pytest.raises(CalculationException):
        monte_carlo(_vars(), lambda x: x["a"], samples=50)


def test_propagate_function_returns_quantity():
    from pyimpact.quantity import Quantity
    from pyimpact.uncertainty import propagate_function

    q = propagate_function(
        [Quantity(100.0, 10.0, "J")], lambda e: math.log10(e), "1", "log scaling", "log energy"
    )
    assert np.isclose(q.value, 2.0)
    assert np.isclose(q.uncertainty, 10.0 / (100.0 * math.log(10.0)), rtol=1e-5)
    assert q.source == "log scaling" and q.description == "log energy"
