"""
uncertainty.py

Uncertainty propagation for functions of several independent (or optionally
correlated) Quantities.

Methods:
    - linear:      sigma_f^2 = sum (df/dx_i)^2 sigma_i^2 + 2 sum_ij (df/dx_i)(df/dx_j) rho_ij sigma_i sigma_j
    - nonlinear:   same formula with forward-difference partial derivatives
    - monte_carlo: sample every input from its distribution and take the
                   sample mean / standard deviation of the outputs

The Monte Carlo path draws from scipy.stats frozen distributions with a
numpy Generator, so a fixed seed gives identical results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Sequence

import numpy as np
from scipy import stats

from .errors import CalculationError, CalculationException
from .quantity import Quantity

MIN_MONTE_CARLO_SAMPLES = 100


class Distribution(str, Enum):
    NORMAL = "normal"
    UNIFORM = "uniform"
    TRIANGULAR = "triangular"


@dataclass(frozen=True)
class UncertaintyVariable:
    name: str
    value: Quantity
    distribution: Distribution = Distribution.NORMAL


@dataclass(frozen=True)
class Correlation:
    variable1: str
    variable2: str
    coefficient: float  # -1..1


@dataclass(frozen=True)
class Contribution:
    variable: str
    contribution: float  # absolute, same units as the result
    relative_contribution: float  # percent of total


@dataclass(frozen=True)
class UncertaintyAnalysis:
    value: float
    uncertainty: float
    relative_uncertainty: float
    contributions: tuple[Contribution, ...] = field(default_factory=tuple)
    method: str = "linear"
    samples: int | None = None

    def to_quantity(self, unit: str, source: str, description: str | None = None) -> Quantity:
        return Quantity(self.value, self.uncertainty, unit, source, description)


def _require_variables(variables: Sequence[UncertaintyVariable]) -> None:
    if not variables:
        raise CalculationException(
            CalculationError.MISSING_DATA,
            "at least one variable is required for uncertainty propagation",
        )


def _relative(value: float, sigma: float) -> float:
    return abs(sigma / value) if value != 0 else 0.0


def propagate_linear(
    variables: Sequence[UncertaintyVariable],
    partials: Mapping[str, float],
    correlations: Sequence[Correlation] = (),
) -> UncertaintyAnalysis:
    """
    Linear propagation with known partial derivatives.

    The returned value is the linear combination sum(partial_i * x_i).
    """
    _require_variables(variables)
    for var in variables:
        if var.name not in partials:
            raise CalculationException(
                CalculationError.MISSING_DATA,
                f"missing partial derivative for variable: {var.name}",
            )

    by_name = {v.name: v for v in variables}
    # work in units of the largest term so squares stay representable
    terms = np.array([partials[v.name] * v.value.uncertainty for v in variables], dtype=np.float64)
    scale = float(np.max(np.abs(terms)))
    if not np.isfinite(scale):
        raise CalculationException(
            CalculationError.CALCULATION_OVERFLOW,
            "uncertainty term is not finite",
            {v.name: float(t) for v, t in zip(variables, terms)},
        )
    unit = scale if scale > 0 else 1.0
    diag_var = float(np.sum((terms / unit) ** 2))
    total_var = diag_var

    for corr in correlations:
        v1 = by_name.get(corr.variable1)
        v2 = by_name.get(corr.variable2)
        if v1 is None or v2 is None:
            raise CalculationException(
                CalculationError.INVALID_INPUT,
                f"unknown variable in correlation: {corr.variable1} or {corr.variable2}",
            )
        t1 = partials[v1.name] * v1.value.uncertainty / unit
        t2 = partials[v2.name] * v2.value.uncertainty / unit
        total_var += 2.0 * corr.coefficient * t1 * t2

    if total_var < -1e-12 * diag_var:
        raise CalculationException(
            CalculationError.NUMERICAL_INSTABILITY,
            "correlations give a negative variance",
            {"variance": total_var * unit * unit, "correlations": list(correlations)},
        )
    sigma = unit * float(np.sqrt(max(total_var, 0.0)))
    contributions = tuple(
        Contribution(
            v.name,
            float(abs(t)),
            (float(abs(t)) / sigma * 100.0) if sigma > 0 else 0.0,
        )
        for v, t in zip(variables, terms)
    )
    value = float(sum(partials[v.name] * v.value.value for v in variables))
    return UncertaintyAnalysis(value, sigma, _relative(value, sigma), contributions, "linear")


def propagate_nonlinear(
    variables: Sequence[UncertaintyVariable],
    func: Callable[[Mapping[str, float]], float],
    correlations: Sequence[Correlation] = (),
    step_size: float = 1e-8,
) -> UncertaintyAnalysis:
    """Linear propagation around ``func(nominal)`` with forward-difference partials."""
    _require_variables(variables)
    nominal = {v.name: v.value.value for v in variables}
    f0 = float(func(nominal))

    partials: dict[str, float] = {}
    for var in variables:
        h = max(step_size, abs(var.value.value) * step_size)
        bumped = dict(nominal)
        bumped[var.name] += h
        partials[var.name] = (float(func(bumped)) - f0) / h

    lin = propagate_linear(variables, partials, correlations)
    return UncertaintyAnalysis(
        f0,
        lin.uncertainty,
        _relative(f0, lin.uncertainty),
        lin.contributions,
        "nonlinear",
    )


def _frozen_distribution(mean: float, sigma: float, dist: Distribution):
    if dist is Distribution.NORMAL:
        return stats.norm(loc=mean, scale=sigma)
    if dist is Distribution.UNIFORM:
        # sigma = width / (2 sqrt 3)
        half = sigma * np.sqrt(3.0)
        return stats.uniform(loc=mean - half, scale=2.0 * half)
    if dist is Distribution.TRIANGULAR:
        # symmetric triangle, sigma = half_width / sqrt(6)
        half = sigma * np.sqrt(6.0)
        return stats.triang(c=0.5, loc=mean - half, scale=2.0 * half)
    raise CalculationException(CalculationError.INVALID_INPUT, f"unsupported distribution: {dist}")


def monte_carlo(
    variables: Sequence[UncertaintyVariable],
    func: Callable[[Mapping[str, float]], float],
    samples: int = 10000,
    correlations: Sequence[Correlation] = (),
    seed: int | None = None,
) -> UncertaintyAnalysis:
    """
    Monte Carlo propagation.

    Correlations are imposed with a Cholesky factor on standard-normal draws
    (NORMAL variables only; other distributions are sampled independently).
    """
    _require_variables(variables)
    if samples < MIN_MONTE_CARLO_SAMPLES:
        raise CalculationException(
            CalculationError.INVALID_INPUT,
            f"Monte Carlo analysis requires at least {MIN_MONTE_CARLO_SAMPLES} samples",
        )

    rng = np.random.default_rng(seed)
    names = [v.name for v in variables]
    draws: dict[str, np.ndarray] = {}

    normal_idx = [i for i, v in enumerate(variables) if v.distribution is Distribution.NORMAL]
    if normal_idx:
        k = len(normal_idx)
        corr = np.eye(k)
        pos = {names[i]: j for j, i in enumerate(normal_idx)}
        for c in correlations:
            if c.variable1 not in names or c.variable2 not in names:
                raise CalculationException(
                    CalculationError.INVALID_INPUT,
                    f"unknown variable in correlation: {c.variable1} or {c.variable2}",
                )
            if c.variable1 in pos and c.variable2 in pos:
                a, b = pos[c.variable1], pos[c.variable2]
                corr[a, b] = corr[b, a] = c.coefficient
        try:
            chol = np.linalg.cholesky(corr)
        except np.linalg.LinAlgError as exc:
            raise CalculationException(
                CalculationError.NUMERICAL_INSTABILITY,
                "correlation matrix is not positive definite",
                {"correlations": list(correlations)},
            ) from exc
        z = stats.norm.rvs(size=(samples, k), random_state=rng) @ chol.T
        for j, i in enumerate(normal_idx):
            q = variables[i].value
            draws[names[i]] = q.value + q.uncertainty * z[:, j]

    for v in variables:
        if v.distribution is Distribution.NORMAL:
            continue
        q = v.value
        if q.uncertainty == 0:
            draws[v.name] = np.full(samples, q.value)
        else:
            draws[v.name] = _frozen_distribution(q.value, q.uncertainty, v.distribution).rvs(
                size=samples, random_state=rng
            )

    outputs = np.array(
        [float(func({n: float(draws[n][s]) for n in names})) for s in range(samples)]
    )
    mean = float(np.mean(outputs))
    std = float(np.std(outputs, ddof=1))

    raw = []
    for n in names:
        x = draws[n]
        if np.std(x) > 0 and std > 0:
            r = float(np.corrcoef(x, outputs)[0, 1])
        else:
            r = 0.0
        raw.append((n, abs(r) * std))
    total = sum(c for _, c in raw)
    contributions = tuple(
        Contribution(n, c, (c / total * 100.0) if total > 0 else 0.0) for n, c in raw
    )
    return UncertaintyAnalysis(mean, std, _relative(mean, std), contributions, "monte_carlo", samples)


def propagate_function(
    inputs: Sequence[Quantity],
    func: Callable[..., float],
    unit: str,
    source: str,
    description: str | None = None,
) -> Quantity:
    """
    Evaluate ``func(*values)`` and propagate the input uncertainties numerically.

    Convenience wrapper used by the domain models for closed-form empirical
    relations (log scalings, GMPEs) where writing partials by hand is noisy.
    """
    variables = [UncertaintyVariable(f"x{i}", q) for i, q in enumerate(inputs)]
    n = len(variables)

    def _wrapped(values: Mapping[str, float]) -> float:
        return func(*(values[f"x{i}"] for i in range(n)))

    res = propagate_nonlinear(variables, _wrapped)
    return res.to_quantity(unit, source, description)
