"""
units.py

Unit registry with dimensional-analysis checks.

Every unit is a pure multiplicative factor relative to the SI base unit of
its dimension family:

    convert(x, a, b) = x * to_base(a) / to_base(b)

Affine units (degC, degF) are not representable and are not registered.

The registry is built once at import time and exposed read-only through
types.MappingProxyType.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType

from .errors import DimensionalAnalysisError, UnitConversionError
from .quantity import Quantity


class Dimension(str, Enum):
    LENGTH = "LENGTH"
    TIME = "TIME"
    MASS = "MASS"
    ENERGY = "ENERGY"
    VELOCITY = "VELOCITY"
    ACCELERATION = "ACCELERATION"
    FORCE = "FORCE"
    PRESSURE = "PRESSURE"
    TEMPERATURE = "TEMPERATURE"
    ANGLE = "ANGLE"
    DIMENSIONLESS = "DIMENSIONLESS"


BASE_UNITS = {
    Dimension.LENGTH: "m",
    Dimension.TIME: "s",
    Dimension.MASS: "kg",
    Dimension.ENERGY: "J",
    Dimension.VELOCITY: "m/s",
    Dimension.ACCELERATION: "m/s²",
    Dimension.FORCE: "N",
    Dimension.PRESSURE: "Pa",
    Dimension.TEMPERATURE: "K",
    Dimension.ANGLE: "rad",
    Dimension.DIMENSIONLESS: "1",
}


@dataclass(frozen=True)
class UnitDefinition:
    symbol: str
    name: str
    dimension: Dimension
    to_base: float
    description: str = ""

    @property
    def base_unit(self) -> str:
        return BASE_UNITS[self.dimension]


# Exact-by-definition factors
AU_M = 149_597_870_700.0  # IAU 2012 Resolution B2
JULIAN_YEAR_S = 365.25 * 86400.0
LIGHT_YEAR_M = 299_792_458.0 * JULIAN_YEAR_S  # IAU light-year
KT_TNT_J = 4.184e12
MT_TNT_J = 4.184e15
ELECTRON_VOLT_J = 1.602176634e-19
STANDARD_ATMOSPHERE_PA = 101_325.0

_D = Dimension
_UNIT_TABLE = (
    # length (base m)
    ("m", "meter", _D.LENGTH, 1.0, "SI base unit of length"),
    ("km", "kilometer", _D.LENGTH, 1e3, "Kilometer (1000 meters)"),
    ("cm", "centimeter", _D.LENGTH, 1e-2, "Centimeter (0.01 meters)"),
    ("mm", "millimeter", _D.LENGTH, 1e-3, "Millimeter (0.001 meters)"),
    ("AU", "astronomical unit", _D.LENGTH, AU_M, "Astronomical unit (exact, IAU 2012)"),
    ("ly", "light year", _D.LENGTH, LIGHT_YEAR_M, "Distance light travels in one Julian year"),
    # time (base s)
    ("s", "second", _D.TIME, 1.0, "SI base unit of time"),
    ("min", "minute", _D.TIME, 60.0, "Minute (60 seconds)"),
    ("h", "hour", _D.TIME, 3600.0, "Hour (3600 seconds)"),
    ("day", "day", _D.TIME, 86400.0, "Day (86400 seconds)"),
    ("year", "Julian year", _D.TIME, JULIAN_YEAR_S, "Julian year (365.25 days)"),
    # mass (base kg)
    ("kg", "kilogram", _D.MASS, 1.0, "SI base unit of mass"),
    ("g", "gram", _D.MASS, 1e-3, "Gram (0.001 kg)"),
    ("t", "metric ton", _D.MASS, 1e3, "Metric ton (1000 kg)"),
    # energy (base J)
    ("J", "joule", _D.ENERGY, 1.0, "SI unit of energy"),
    ("kJ", "kilojoule", _D.ENERGY, 1e3, "Kilojoule (1000 J)"),
    ("MJ", "megajoule", _D.ENERGY, 1e6, "Megajoule (10^6 J)"),
    ("GJ", "gigajoule", _D.ENERGY, 1e9, "Gigajoule (10^9 J)"),
    ("TJ", "terajoule", _D.ENERGY, 1e12, "Terajoule (10^12 J)"),
    ("kt TNT", "kiloton TNT", _D.ENERGY, KT_TNT_J, "Kiloton TNT equivalent (4.184e12 J)"),
    ("Mt TNT", "megaton TNT", _D.ENERGY, MT_TNT_J, "Megaton TNT equivalent (4.184e15 J)"),
    ("eV", "electron volt", _D.ENERGY, ELECTRON_VOLT_J, "Electron volt"),
    # velocity (base m/s)
    ("m/s", "meter per second", _D.VELOCITY, 1.0, "SI unit of velocity"),
    ("km/s", "kilometer per second", _D.VELOCITY, 1e3, "Kilometer per second"),
    ("km/h", "kilometer per hour", _D.VELOCITY, 1e3 / 3600.0, "Kilometer per hour"),
    # acceleration (base m/s²)
    ("m/s²", "meter per second squared", _D.ACCELERATION, 1.0, "SI unit of acceleration"),
    ("km/s²", "kilometer per second squared", _D.ACCELERATION, 1e3, "Kilometer per second squared"),
    # force (base N)
    ("N", "newton", _D.FORCE, 1.0, "SI unit of force"),
    ("kN", "kilonewton", _D.FORCE, 1e3, "Kilonewton (1000 N)"),
    # pressure (base Pa)
    ("Pa", "pascal", _D.PRESSURE, 1.0, "SI unit of pressure"),
    ("kPa", "kilopascal", _D.PRESSURE, 1e3, "Kilopascal (1000 Pa)"),
    ("MPa", "megapascal", _D.PRESSURE, 1e6, "Megapascal (10^6 Pa)"),
    ("GPa", "gigapascal", _D.PRESSURE, 1e9, "Gigapascal (10^9 Pa)"),
    ("atm", "standard atmosphere", _D.PRESSURE, STANDARD_ATMOSPHERE_PA, "Standard atmosphere (101325 Pa)"),
    # temperature (base K, multiplicative only)
    ("K", "kelvin", _D.TEMPERATURE, 1.0, "SI base unit of temperature"),
    # angle (base rad)
    ("rad", "radian", _D.ANGLE, 1.0, "SI unit of angle"),
    ("deg", "degree", _D.ANGLE, math.pi / 180.0, "Degree (pi/180 radians)"),
    ("arcmin", "arcminute", _D.ANGLE, math.pi / (180.0 * 60.0), "Arcminute (1/60 degree)"),
    ("arcsec", "arcsecond", _D.ANGLE, math.pi / (180.0 * 3600.0), "Arcsecond (1/3600 degree)"),
    # dimensionless
    ("1", "dimensionless", _D.DIMENSIONLESS, 1.0, "Dimensionless quantity"),
)

UNIT_DEFINITIONS: MappingProxyType[str, UnitDefinition] = MappingProxyType(
    {row[0]: UnitDefinition(*row) for row in _UNIT_TABLE}
)

del _D, _UNIT_TABLE


def validate_unit(symbol: str) -> UnitDefinition:
    try:
        return UNIT_DEFINITIONS[symbol]
    except KeyError:
        raise UnitConversionError(f"Unknown unit: {symbol}") from None


def convert(value: float, from_unit: str, to_unit: str) -> float:
    """Convert ``value`` from ``from_unit`` to ``to_unit``."""
    src = validate_unit(from_unit)
    dst = validate_unit(to_unit)
    if src.dimension is not dst.dimension:
        raise DimensionalAnalysisError(
            f"Cannot convert {src.dimension.value} to {dst.dimension.value}: incompatible dimensions"
        )
    if from_unit == to_unit:
        return value
    return value * src.to_base / dst.to_base


def conversion_factor(from_unit: str, to_unit: str) -> float:
    return convert(1.0, from_unit, to_unit)


def convert_quantity(q: Quantity, to_unit: str) -> Quantity:
    """Convert a Quantity; value and uncertainty share one factor."""
    return q.converted_to(to_unit, conversion_factor(q.unit, to_unit))


def are_compatible(unit1: str, unit2: str) -> bool:
    a = UNIT_DEFINITIONS.get(unit1)
    b = UNIT_DEFINITIONS.get(unit2)
    return a is not None and b is not None and a.dimension is b.dimension


def units_of_type(dimension: Dimension) -> list[UnitDefinition]:
    return [d for d in UNIT_DEFINITIONS.values() if d.dimension is dimension]


def supported_units() -> list[str]:
    return list(UNIT_DEFINITIONS)


def unit_info(symbol: str) -> UnitDefinition | None:
    return UNIT_DEFINITIONS.get(symbol)


def format_value(value: float, unit: str, precision: int = 3) -> str:
    definition = validate_unit(unit)
    return f"{value:.{precision}g} {definition.symbol}"


def format_quantity(q: Quantity, precision: int = 3) -> str:
    definition = validate_unit(q.unit)
    if q.uncertainty == 0:
        return f"{q.value:.{precision}g} {definition.symbol} (exact)"
    return f"{q.value:.{precision}g} ± {q.uncertainty:.{precision}g} {definition.symbol}"
