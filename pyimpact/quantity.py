"""
quantity.py

Numeric values carried together with a 1-sigma uncertainty, a unit symbol and
a provenance tag.

Propagation rules (independent inputs, first order):
    add / subtract:    sigma = sqrt(sum sigma_i^2)
    multiply / divide: sigma / |f| = sqrt(sum (sigma_i / x_i)^2)
    power(x, n):       sigma = |n * x^(n-1)| * sigma_x
    sqrt(x):           sigma = sigma_x / (2 sqrt(x))

Every derived Quantity in pyimpact goes through these helpers (or the
numerical propagation in pyimpact.uncertainty), so round-trip and
consistency checks hold across modules.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from .errors import CalculationError, CalculationException, InvalidUncertaintyError

DIMENSIONLESS_UNITS = ("", "1", "dimensionless")


@dataclass(frozen=True)
class Quantity:
    """A value with non-negative uncertainty, unit and source."""

    value: float
    uncertainty: float
    unit: str
    source: str = ""
    description: str | None = None

    def __post_init__(self) -> None:
        if math.isnan(self.uncertainty) or self.uncertainty < 0:
            raise InvalidUncertaintyError(
                f"invalid uncertainty {self.uncertainty!r} for {self.unit!r}: must be non-negative"
            )
        object.__setattr__(self, "value", float(self.value))
        object.__setattr__(self, "uncertainty", float(self.uncertainty))

    @classmethod
    def exact(cls, value: float, unit: str, source: str = "", description: str | None = None) -> Quantity:
        return cls(value, 0.0, unit, source, description)

    @property
    def relative_uncertainty(self) -> float:
        if self.value == 0:
            return 0.0
        return abs(self.uncertainty / self.value)

    @property
    def relative_uncertainty_percent(self) -> float:
        return self.relative_uncertainty * 100.0

    @property
    def is_exact(self) -> bool:
        return self.uncertainty == 0

    def to_display_string(self, precision: int | None = None) -> str:
        def _fmt(x: float) -> str:
            return f"{x}" if precision is None else f"{x:.{precision}g}"

        if self.uncertainty == 0:
            return f"{_fmt(self.value)} {self.unit} (exact)"
        return f"{_fmt(self.value)} ± {_fmt(self.uncertainty)} {self.unit}"

    def __str__(self) -> str:
        return self.to_display_string()

    def converted_to(self, new_unit: str, factor: float) -> Quantity:
        """Scale value and uncertainty by ``factor``; relative uncertainty is unchanged."""
        return Quantity(
            self.value * factor,
            self.uncertainty * abs(factor),
            new_unit,
            self.source,
            self.description,
        )

    def relabel(self, **changes) -> Quantity:
        """Copy with a new unit/source/description (value and uncertainty untouched)."""
        return replace(self, **changes)

    # ---- operators (delegate to the propagation helpers) ----

    def __add__(self, other: Quantity | float) -> Quantity:
        return add(self, _as_quantity(other, self.unit))

    def __radd__(self, other: float) -> Quantity:
        return add(_as_quantity(other, self.unit), self)

    def __sub__(self, other: Quantity | float) -> Quantity:
        return subtract(self, _as_quantity(other, self.unit))

    def __rsub__(self, other: float) -> Quantity:
        return subtract(_as_quantity(other, self.unit), self)

    def __mul__(self, other: Quantity | float) -> Quantity:
        if isinstance(other, Quantity):
            return multiply(self, other)
        return scale(self, other)

    def __rmul__(self, other: float) -> Quantity:
        return scale(self, other)

    def __truediv__(self, other: Quantity | float) -> Quantity:
        if isinstance(other, Quantity):
            return divide(self, other)
        if other == 0:
            raise CalculationException(CalculationError.INVALID_INPUT, "division by zero")
        return scale(self, 1.0 / other)

    def __rtruediv__(self, other: float) -> Quantity:
        return divide(_as_quantity(other, "1"), self)

    def __pow__(self, exponent: float) -> Quantity:
        return power(self, exponent)

    def __neg__(self) -> Quantity:
        return scale(self, -1.0)


def _as_quantity(x: Quantity | float, unit: str) -> Quantity:
    if isinstance(x, Quantity):
        return x
    return Quantity(float(x), 0.0, unit, "exact number")


def _is_dimensionless(unit: str) -> bool:
    return unit in DIMENSIONLESS_UNITS


def _compose(a: str, b: str, op: str) -> str:
    if _is_dimensionless(b):
        return a
    if _is_dimensionless(a):
        return b if op == "*" else f"1/{b}"
    return f"{a}{op}{b}"


def _aligned(a: Quantity, b: Quantity) -> Quantity:
    """Express ``b`` in ``a``'s unit for summation."""
    if a.unit == b.unit or _is_dimensionless(b.unit) and _is_dimensionless(a.unit):
        return b
    # units imports this module; resolve lazily
    from .units import convert_quantity

    return convert_quantity(b, a.unit)


def _source(values: Sequence[Quantity], op: str) -> str:
    if len(values) == 1:
        return values[0].source
    return f"Combined from {len(values)} values ({op})"


def add(a: Quantity, b: Quantity) -> Quantity:
    b = _aligned(a, b)
    return Quantity(
        a.value + b.value,
        math.hypot(a.uncertainty, b.uncertainty),
        a.unit,
        _source((a, b), "add"),
    )


def subtract(a: Quantity, b: Quantity) -> Quantity:
    b = _aligned(a, b)
    return Quantity(
        a.value - b.value,
        math.hypot(a.uncertainty, b.uncertainty),
        a.unit,
        _source((a, b), "subtract"),
    )


def multiply(a: Quantity, b: Quantity) -> Quantity:
    # sigma_f^2 = (b sigma_a)^2 + (a sigma_b)^2 == |ab|^2 (r_a^2 + r_b^2), finite at zero
    return Quantity(
        a.value * b.value,
        math.hypot(b.value * a.uncertainty, a.value * b.uncertainty),
        _compose(a.unit, b.unit, "*"),
        _source((a, b), "multiply"),
    )


def divide(a: Quantity, b: Quantity) -> Quantity:
    if b.value == 0:
        raise CalculationException(
            CalculationError.INVALID_INPUT,
            "division by a zero-valued quantity",
            {"numerator": a, "denominator": b},
        )
    q = a.value / b.value
    sigma = math.hypot(a.uncertainty / b.value, a.value * b.uncertainty / b.value**2)
    return Quantity(q, abs(sigma), _compose(a.unit, b.unit, "/"), _source((a, b), "divide"))


def scale(a: Quantity, factor: float) -> Quantity:
    return Quantity(a.value * factor, a.uncertainty * abs(factor), a.unit, a.source, a.description)


def power(a: Quantity, exponent: float) -> Quantity:
    try:
        result = a.value**exponent
    except ZeroDivisionError as exc:
        raise CalculationException(
            CalculationError.INVALID_INPUT, f"cannot raise zero to power {exponent}"
        ) from exc
    if isinstance(result, complex):
        raise CalculationException(
            CalculationError.INVALID_INPUT,
            f"negative base {a.value} with non-integer exponent {exponent}",
        )
    sigma = abs(result * exponent * a.relative_uncertainty)
    unit = a.unit if _is_dimensionless(a.unit) or exponent == 1 else f"{a.unit}^{exponent:g}"
    desc = f"{a.description} raised to power {exponent:g}" if a.description else None
    return Quantity(result, sigma, unit, a.source, desc)


def sqrt(a: Quantity) -> Quantity:
    if a.value < 0:
        raise CalculationException(
            CalculationError.INVALID_INPUT, "cannot take square root of negative value", {"value": a.value}
        )
    root = math.sqrt(a.value)
    sigma = a.uncertainty / (2.0 * root) if root > 0 else 0.0
    unit = a.unit if _is_dimensionless(a.unit) else f"sqrt({a.unit})"
    desc = f"Square root of {a.description}" if a.description else None
    return Quantity(root, sigma, unit, a.source, desc)


_OPERATIONS = {
    "add": add,
    "subtract": subtract,
    "multiply": multiply,
    "divide": divide,
}


def combine_independent(values: Iterable[Quantity], operation: str) -> Quantity:
    """Fold ``values`` left to right with one of add/subtract/multiply/divide."""
    values = list(values)
    if not values:
        raise CalculationException(CalculationError.MISSING_DATA, "at least one value is required")
    try:
        op = _OPERATIONS[operation]
    except KeyError:
        raise CalculationException(
            CalculationError.INVALID_INPUT, f"unsupported operation: {operation}"
        ) from None
    if len(values) == 1:
        return values[0]
    result = values[0]
    for v in values[1:]:
        result = op(result, v)
    return replace(
        result,
        source=f"Combined from {len(values)} values",
        description=f"Result of {operation} operation",
    )
