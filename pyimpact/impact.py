# pyimpact/impact.py

"""
Impact energetics: impactor properties -> kinetic energy, TNT equivalent and
seismic response, with validator disclaimers attached.

    m   = rho * pi d^3 / 6          (when no mass is given)
    E   = 1/2 m v^2
    E_e = eta(composition, v) * E   effective (coupled) energy

safe_calculate_impact() wraps the whole chain: a hard failure on the
caller's inputs triggers one retry with conservative fallback inputs, and
the result is flagged as fallback-derived.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Optional, Union

from .diagnostics import diag
from .errors import CalculationError, CalculationException
from .quantity import Quantity, multiply, power, scale
from .seismic import GeologicalProperties, SeismicResult, calculate_seismic_magnitude, geological_preset
from .units import convert_quantity
from .validation import Disclaimer, scientific_validator, validate_impact_parameters


@dataclass(frozen=True)
class MaterialProperties:
    density_min: float  # kg/m^3
    density_typical: float
    density_max: float
    impact_efficiency: float


# Britt & Consolmagno (2003); Carry (2012)
MATERIAL_PROPERTIES: MappingProxyType[str, MaterialProperties] = MappingProxyType(
    {
        "stony": MaterialProperties(2000, 2700, 3500, 0.85),
        "metallic": MaterialProperties(7000, 7800, 8000, 0.95),
        "carbonaceous": MaterialProperties(1200, 1400, 2200, 0.70),
        "stony-iron": MaterialProperties(4500, 5300, 6000, 0.90),
        "basaltic": MaterialProperties(2800, 2900, 3200, 0.88),
        "unknown": MaterialProperties(2000, 2500, 3000, 0.80),
    }
)

# conservative stand-ins used by create_fallback_parameters()
FALLBACK_DIAMETER_M = 150.0
FALLBACK_DENSITY = 2500.0
FALLBACK_COMPOSITION = "stony"
FALLBACK_VELOCITY_KM_S = 15.5


def material_properties(composition: str, strict: bool = False) -> MaterialProperties:
    """
    Table entry for ``composition`` (case-insensitive).

    Unrecognised compositions map to the "unknown" entry, or raise
    UNSUPPORTED_COMPOSITION when ``strict`` is set.
    """
    key = (composition or "unknown").strip().lower()
    props = MATERIAL_PROPERTIES.get(key)
    if props is None:
        if strict:
            raise CalculationException(
                CalculationError.UNSUPPORTED_COMPOSITION,
                f"unsupported composition {composition!r}",
                {"supported": sorted(MATERIAL_PROPERTIES)},
            )
        props = MATERIAL_PROPERTIES["unknown"]
    return props


def composition_density(composition: str, uncertainty_factor: float = 0.15) -> Quantity:
    props = material_properties(composition)
    rho = props.density_typical
    return Quantity(
        rho,
        rho * uncertainty_factor,
        "kg/m³",
        "Britt & Consolmagno (2003); Carry (2012)",
        f"Typical bulk density of {composition or 'unknown'} asteroids",
    )


def impact_efficiency(composition: str, velocity_km_s: float) -> float:
    """Material efficiency times a velocity factor capped at 1.1 (not clipped to 1)."""
    base = material_properties(composition).impact_efficiency
    velocity_factor = min(1.1, 0.9 + velocity_km_s * 1000.0 / 100_000.0)
    return base * velocity_factor


@dataclass(frozen=True)
class ImpactorParameters:
    diameter_m: float
    velocity_km_s: float
    composition: str = "unknown"
    density_kg_m3: Optional[float] = None
    mass_kg: Optional[float] = None
    velocity_uncertainty_km_s: float = 0.0
    uncertainty_factor: float = 0.15  # relative 1-sigma on density and given mass


@dataclass(frozen=True)
class ImpactEnergyResult:
    mass: Quantity  # kg
    density: Quantity  # kg/m^3
    kinetic_energy: Quantity  # J
    effective_energy: Quantity  # J
    tnt_equivalent: Quantity  # Mt TNT
    efficiency: float
    seismic: SeismicResult
    disclaimer: Disclaimer


@dataclass(frozen=True)
class SafeImpactResult:
    result: Optional[ImpactEnergyResult]
    errors: tuple[CalculationException, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)
    fallback_used: bool = False


def _positive(x: Optional[float]) -> bool:
    return x is not None and math.isfinite(x) and x > 0


def calculate_kinetic_energy(mass: Quantity, velocity: Quantity) -> Quantity:
    """1/2 m v^2 in joules; velocity may be in any VELOCITY unit."""
    v = velocity if velocity.unit == "m/s" else convert_quantity(velocity, "m/s")
    m = mass if mass.unit == "kg" else convert_quantity(mass, "kg")
    try:
        energy = scale(multiply(m, power(v, 2)), 0.5)
    except OverflowError:
        energy = None
    if energy is None or not math.isfinite(energy.value):
        raise CalculationException(
            CalculationError.CALCULATION_OVERFLOW,
            "kinetic energy overflowed",
            {"mass": m.value, "velocity": v.value},
        )
    return energy.relabel(unit="J", source="E = 1/2 m v^2", description="Impact kinetic energy")


def energy_to_tnt(energy: Quantity) -> Quantity:
    return convert_quantity(energy, "Mt TNT").relabel(description="TNT equivalent")


def _check_inputs(params: ImpactorParameters) -> None:
    bad = {}
    if not _positive(params.diameter_m):
        bad["diameter_m"] = params.diameter_m
    if not _positive(params.velocity_km_s):
        bad["velocity_km_s"] = params.velocity_km_s
    if params.density_kg_m3 is not None and not _positive(params.density_kg_m3):
        bad["density_kg_m3"] = params.density_kg_m3
    if params.mass_kg is not None and not _positive(params.mass_kg):
        bad["mass_kg"] = params.mass_kg
    if bad:
        raise CalculationException(
            CalculationError.INVALID_INPUT,
            "invalid impactor parameters: " + ", ".join(sorted(bad)),
            bad,
        )


def calculate_impact_energy(
    params: ImpactorParameters,
    geological_properties: Optional[Union[GeologicalProperties, str]] = None,
) -> ImpactEnergyResult:
    """
    Kinetic, effective and TNT-equivalent energy of an impactor, plus the
    seismic response of the target.

    ``geological_properties`` may be a preset name such as "sedimentary".

    Raises:
        CalculationException: INVALID_INPUT for non-positive or non-finite
            inputs or an unknown preset name, CALCULATION_OVERFLOW when the
            energy is not finite.
    """
    _check_inputs(params)
    if isinstance(geological_properties, str):
        geological_properties = geological_preset(geological_properties)

    if params.density_kg_m3 is not None:
        rho = params.density_kg_m3
        density = Quantity(rho, rho * params.uncertainty_factor, "kg/m³", "input")
    else:
        density = composition_density(params.composition, params.uncertainty_factor)

    if params.mass_kg is not None:
        mass = Quantity(params.mass_kg, params.mass_kg * params.uncertainty_factor, "kg", "input")
    else:
        volume = math.pi / 6.0 * params.diameter_m**3
        mass = scale(density, volume).relabel(unit="kg", source="sphere volume x density")

    velocity = Quantity(params.velocity_km_s, params.velocity_uncertainty_km_s, "km/s", "input")
    energy = calculate_kinetic_energy(mass, velocity)
    eta = impact_efficiency(params.composition, params.velocity_km_s)
    effective = scale(energy, eta).relabel(unit="J", description="Effective coupled energy")

    disclaimers = validate_impact_parameters(
        energy=energy.value,
        velocity=params.velocity_km_s * 1000.0,
        diameter=params.diameter_m,
    )
    return ImpactEnergyResult(
        mass=mass,
        density=density,
        kinetic_energy=energy,
        effective_energy=effective,
        tnt_equivalent=energy_to_tnt(energy),
        efficiency=eta,
        seismic=calculate_seismic_magnitude(energy, geological_properties),
        disclaimer=scientific_validator.combine_disclaimers(disclaimers),
    )


def input_warnings(params: ImpactorParameters) -> list[str]:
    warnings = []
    if not params.composition or params.composition.strip().lower() == "unknown":
        warnings.append("Unknown composition - using default properties")
    elif params.composition.strip().lower() not in MATERIAL_PROPERTIES:
        warnings.append(f"Unrecognised composition {params.composition!r} - using default properties")
    if params.density_kg_m3 is None:
        warnings.append("No density given - using composition default")
    if _positive(params.mass_kg) and params.mass_kg > 1e18:
        warnings.append("Extremely large mass - results may be unrealistic")
    if _positive(params.velocity_km_s) and params.velocity_km_s > 100:
        warnings.append("Extremely high velocity - results may be unrealistic")
    if _positive(params.diameter_m) and params.diameter_m > 100_000:
        warnings.append("Extremely large diameter - results may be unrealistic")
    return warnings


def create_fallback_parameters(params: ImpactorParameters) -> ImpactorParameters:
    """
    Replace missing or invalid inputs with conservative defaults; valid
    inputs are kept. A missing mass is recomputed from the fallback sphere.
    """
    diameter = params.diameter_m if _positive(params.diameter_m) else FALLBACK_DIAMETER_M
    density = params.density_kg_m3 if _positive(params.density_kg_m3) else FALLBACK_DENSITY
    comp = (params.composition or "").strip().lower()
    composition = comp if comp in MATERIAL_PROPERTIES and comp != "unknown" else FALLBACK_COMPOSITION
    velocity = params.velocity_km_s if _positive(params.velocity_km_s) else FALLBACK_VELOCITY_KM_S
    if _positive(params.mass_kg):
        mass = params.mass_kg
    else:
        mass = math.pi / 6.0 * diameter**3 * density
    return replace(
        params,
        diameter_m=diameter,
        velocity_km_s=velocity,
        composition=composition,
        density_kg_m3=density,
        mass_kg=mass,
    )


def safe_calculate_impact(
    params: ImpactorParameters,
    geological_properties: Optional[Union[GeologicalProperties, str]] = None,
) -> SafeImpactResult:
    """
    calculate_impact_energy() with one fallback retry.

    Returns:
        SafeImpactResult: ``result`` is None only when the fallback attempt
        fails too; every CalculationException raised is kept in ``errors``.
    """
    warnings = input_warnings(params)
    errors: list[CalculationException] = []
    try:
        result = calculate_impact_energy(params, geological_properties)
        return SafeImpactResult(result, (), tuple(warnings), False)
    except CalculationException as exc:
        errors.append(exc)
        diag("Impact", f"primary calculation failed: {exc}; retrying with fallback inputs")

    fallback = create_fallback_parameters(params)
    warnings.append("Fallback data used due to missing or invalid asteroid properties")
    try:
        result = calculate_impact_energy(fallback, geological_properties)
    except CalculationException as exc:
        errors.append(
            CalculationException(exc.kind, exc.message, exc.details, fallback_used=True)
        )
        diag("Impact", f"fallback calculation failed: {exc}")
        return SafeImpactResult(None, tuple(errors), tuple(warnings), True)
    return SafeImpactResult(result, tuple(errors), tuple(warnings), True)
