"""
errors.py

Exception taxonomy for the pyimpact calculation core.

Hard failures (bad units, negative uncertainties, non-positive distances)
raise one of these immediately. Soft issues are reported as disclaimers by
pyimpact.validation instead.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class UnitConversionError(ValueError):
    """Unknown unit symbol."""


class DimensionalAnalysisError(ValueError):
    """Conversion requested between units of different dimension families."""


class InvalidUncertaintyError(ValueError):
    """Quantity constructed with a negative or NaN uncertainty."""


class UnknownConstantError(KeyError):
    """Lookup of a constant name that is not in the registry."""

    def __str__(self) -> str:
        # KeyError repr-quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else "unknown constant"


class CalculationError(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    MISSING_DATA = "MISSING_DATA"
    NUMERICAL_INSTABILITY = "NUMERICAL_INSTABILITY"
    UNSUPPORTED_COMPOSITION = "UNSUPPORTED_COMPOSITION"
    CALCULATION_OVERFLOW = "CALCULATION_OVERFLOW"
    CALCULATION_UNDERFLOW = "CALCULATION_UNDERFLOW"


class CalculationException(Exception):
    """
    Typed failure of a domain calculation.

    Attributes:
        kind (CalculationError): Failure category.
        details (dict): Offending inputs or nested errors, for callers that log them.
        fallback_used (bool): True when the failure happened on the fallback retry.
    """

    def __init__(
        self,
        kind: CalculationError,
        message: str,
        details: dict[str, Any] | None = None,
        fallback_used: bool = False,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = dict(details or {})
        self.fallback_used = fallback_used

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


__all__ = [
    "UnitConversionError",
    "DimensionalAnalysisError",
    "InvalidUncertaintyError",
    "UnknownConstantError",
    "CalculationError",
    "CalculationException",
]
