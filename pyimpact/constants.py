# pyimpact/constants.py

"""
Central repository for the physical and astronomical constants used by the
impact, seismic and orbital models.

Two views of the same data:
    - plain floats (G, C_KM_S, AU_KM, ...) for hot numeric paths
    - Quantity entries with uncertainty and provenance, reachable through
      get_constant(name) / list_constants()

CODATA values come from scipy.constants (value and standard uncertainty).
Derived constants are composed from the primitives with the propagation
helpers in pyimpact.quantity, so their uncertainties follow from G and the
body masses.
"""

from __future__ import annotations

from types import MappingProxyType

from scipy import constants as _codata

from .errors import UnknownConstantError
from .quantity import Quantity, divide, multiply, scale, sqrt
from .units import AU_M, MT_TNT_J


def _codata_entry(key: str, unit: str, description: str) -> Quantity:
    value, _unit, sigma = _codata.physical_constants[key]
    return Quantity(value, sigma, unit, "CODATA (scipy.constants)", description)


# --- Fundamental Constants (CODATA) ---
SPEED_OF_LIGHT = _codata_entry("speed of light in vacuum", "m/s", "Speed of light in vacuum (exact by definition)")
GRAVITATIONAL_CONSTANT = _codata_entry(
    "Newtonian constant of gravitation", "m³ kg⁻¹ s⁻²", "Newtonian constant of gravitation"
)
PLANCK_CONSTANT = _codata_entry("Planck constant", "J⋅s", "Planck constant (exact by definition)")
BOLTZMANN_CONSTANT = _codata_entry("Boltzmann constant", "J/K", "Boltzmann constant (exact by definition)")
STEFAN_BOLTZMANN_CONSTANT = _codata_entry(
    "Stefan-Boltzmann constant", "W m⁻² K⁻⁴", "Stefan-Boltzmann constant (exact by definition)"
)
ELECTRON_VOLT = _codata_entry("electron volt", "J", "Electron volt (exact by definition)")
ATOMIC_MASS_UNIT = _codata_entry("atomic mass constant", "kg", "Atomic mass unit")

# --- Conventional Standards ---
STANDARD_GRAVITY = Quantity.exact(
    _codata.g, "m/s²", "CGPM 1901", "Standard acceleration due to gravity (exact by definition)"
)
STANDARD_ATMOSPHERE = Quantity.exact(
    _codata.atm, "Pa", "ISO 2533", "Standard atmospheric pressure (exact by definition)"
)

# --- Astronomical Constants (IAU) ---
ASTRONOMICAL_UNIT = Quantity.exact(
    AU_M / 1000.0, "km", "IAU 2012 Resolution B2", "Astronomical unit (exact by definition)"
)
SOLAR_MASS = Quantity(1.9884e30, 2e26, "kg", "IAU 2015 Resolution B3", "Mass of the Sun")
SOLAR_RADIUS = Quantity.exact(695_700.0, "km", "IAU 2015 Resolution B3", "Nominal solar radius")

# --- Earth Properties (IERS/IAU/WGS84) ---
EARTH_MASS = Quantity(5.9722e24, 6e20, "kg", "IAU 2015 Resolution B3", "Mass of Earth")
EARTH_EQUATORIAL_RADIUS = Quantity.exact(
    6_378_137.0, "m", "WGS84/GRS80", "Earth equatorial radius (WGS84 reference ellipsoid)"
)
EARTH_POLAR_RADIUS = Quantity.exact(
    6_356_752.314245, "m", "WGS84/GRS80", "Earth polar radius (WGS84 reference ellipsoid)"
)
EARTH_MEAN_RADIUS = Quantity.exact(6_371_008.8, "m", "IUGG", "Earth mean radius (volumetric)")

# --- Perturbation-model parameters ---
EARTH_J2 = Quantity(1.0826267e-3, 1e-9, "1", "IERS Conventions 2010", "Earth's second zonal harmonic coefficient")
EARTH_MU_KM = Quantity(398_600.4418, 8e-4, "km³/s²", "IERS Conventions 2010", "Earth's gravitational parameter")
SUN_MU_KM = Quantity(1.32712442018e11, 8e1, "km³/s²", "IAU 2015", "Solar gravitational parameter")
MOON_MU_KM = Quantity(4902.7779, 1e-4, "km³/s²", "DE430", "Lunar gravitational parameter")
SOLAR_RADIATION_PRESSURE = Quantity(
    4.56e-6, 0.01e-6, "N/m²", "Solar constant / c", "Solar radiation pressure at 1 AU"
)


# --- Derived Constants ---
def _derive_escape_velocity(mass: Quantity, distance_m: Quantity, source: str, description: str) -> Quantity:
    # v = sqrt(2 G M / r), returned in km/s
    gm = multiply(GRAVITATIONAL_CONSTANT, mass)
    v_ms = sqrt(divide(scale(gm, 2.0), distance_m))
    return scale(v_ms, 1e-3).relabel(unit="km/s", source=source, description=description)


_AU_IN_M = Quantity.exact(AU_M, "m")

EARTH_ORBITAL_VELOCITY = scale(
    sqrt(divide(multiply(GRAVITATIONAL_CONSTANT, SOLAR_MASS), _AU_IN_M)), 1e-3
).relabel(
    unit="km/s",
    source="Calculated from G, solar mass and AU",
    description="Earth mean (circular) orbital velocity",
)
EARTH_ESCAPE_VELOCITY = _derive_escape_velocity(
    EARTH_MASS,
    EARTH_EQUATORIAL_RADIUS,
    "Calculated from G, Earth mass and radius",
    "Earth escape velocity at surface",
)
SOLAR_ESCAPE_VELOCITY_AT_EARTH = _derive_escape_velocity(
    SOLAR_MASS,
    _AU_IN_M,
    "Calculated from G, solar mass and AU",
    "Solar escape velocity at Earth orbital distance",
)
MEGATON_TNT_TO_JOULE = Quantity.exact(
    MT_TNT_J, "J/(Mt TNT)", "TNT equivalence convention", "Conversion factor from megatons TNT to joules"
)
JOULE_TO_MEGATON_TNT = Quantity.exact(
    1.0 / MT_TNT_J, "Mt TNT/J", "TNT equivalence convention", "Conversion factor from joules to megatons TNT"
)

# --- Plain floats for numeric kernels ---
G = GRAVITATIONAL_CONSTANT.value  # m^3 kg^-1 s^-2
C_M_S = SPEED_OF_LIGHT.value  # m/s
C_KM_S = C_M_S / 1000.0  # km/s
AU_KM = ASTRONOMICAL_UNIT.value  # km
MU_EARTH = EARTH_MU_KM.value  # km^3/s^2
MU_SUN = SUN_MU_KM.value  # km^3/s^2
MU_MOON = MOON_MU_KM.value  # km^3/s^2
R_EARTH_EQ_KM = EARTH_EQUATORIAL_RADIUS.value / 1000.0  # km
J2_EARTH = EARTH_J2.value
P_SRP_1AU = SOLAR_RADIATION_PRESSURE.value  # N/m^2
SECONDS_PER_DAY = 86400.0
MOON_DISTANCE_KM = 384_400.0  # mean Earth-Moon distance


PHYSICAL_CONSTANTS: MappingProxyType[str, Quantity] = MappingProxyType(
    {
        "SPEED_OF_LIGHT": SPEED_OF_LIGHT,
        "GRAVITATIONAL_CONSTANT": GRAVITATIONAL_CONSTANT,
        "PLANCK_CONSTANT": PLANCK_CONSTANT,
        "BOLTZMANN_CONSTANT": BOLTZMANN_CONSTANT,
        "STEFAN_BOLTZMANN_CONSTANT": STEFAN_BOLTZMANN_CONSTANT,
        "ELECTRON_VOLT": ELECTRON_VOLT,
        "ATOMIC_MASS_UNIT": ATOMIC_MASS_UNIT,
        "STANDARD_GRAVITY": STANDARD_GRAVITY,
        "STANDARD_ATMOSPHERE": STANDARD_ATMOSPHERE,
        "ASTRONOMICAL_UNIT": ASTRONOMICAL_UNIT,
        "SOLAR_MASS": SOLAR_MASS,
        "SOLAR_RADIUS": SOLAR_RADIUS,
        "EARTH_MASS": EARTH_MASS,
        "EARTH_EQUATORIAL_RADIUS": EARTH_EQUATORIAL_RADIUS,
        "EARTH_POLAR_RADIUS": EARTH_POLAR_RADIUS,
        "EARTH_MEAN_RADIUS": EARTH_MEAN_RADIUS,
        "EARTH_J2": EARTH_J2,
        "EARTH_MU": EARTH_MU_KM,
        "SUN_MU": SUN_MU_KM,
        "MOON_MU": MOON_MU_KM,
        "SOLAR_RADIATION_PRESSURE": SOLAR_RADIATION_PRESSURE,
    }
)

DERIVED_CONSTANTS: MappingProxyType[str, Quantity] = MappingProxyType(
    {
        "EARTH_ORBITAL_VELOCITY": EARTH_ORBITAL_VELOCITY,
        "EARTH_ESCAPE_VELOCITY": EARTH_ESCAPE_VELOCITY,
        "SOLAR_ESCAPE_VELOCITY_AT_EARTH": SOLAR_ESCAPE_VELOCITY_AT_EARTH,
        "JOULE_TO_MEGATON_TNT": JOULE_TO_MEGATON_TNT,
        "MEGATON_TNT_TO_JOULE": MEGATON_TNT_TO_JOULE,
    }
)

ALL_CONSTANTS: MappingProxyType[str, Quantity] = MappingProxyType(
    {**PHYSICAL_CONSTANTS, **DERIVED_CONSTANTS}
)


def get_constant(name: str) -> Quantity:
    try:
        return ALL_CONSTANTS[name]
    except KeyError:
        raise UnknownConstantError(f"Unknown constant: {name}") from None


def list_constants() -> list[tuple[str, Quantity]]:
    return list(ALL_CONSTANTS.items())
