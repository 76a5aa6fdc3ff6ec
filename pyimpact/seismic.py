# pyimpact/seismic.py

"""
Seismic scaling model: impact kinetic energy -> earthquake-equivalent metrics.

Chain of empirical relations:
    Es  = eta * E                              seismic efficiency (Ben-Menahem 1975)
    Mw0 = 0.67 log10(Es) - 4.8                 energy-magnitude fit
    M0  = 10^(1.5 Mw0 + 9.1) * rho Vs^2 / mu_ref   rigidity of the target rock
    Mw  = 2/3 (log10 M0 - 9.1)                 Hanks & Kanamori (1979)
    PGA, PGV                                   Boore-Atkinson (2008), Campbell-Bozorgnia (2008)
    MMI, felt/damage radii                     Bakun & Wentworth (1997)

Uncertainty on the input energy, the efficiency and the rock properties is
propagated numerically through every step (pyimpact.uncertainty).

Environment:
    PI_SEISMIC_EFFICIENCY        seismic efficiency eta (default 1e-2)
    PI_SEISMIC_EFFICIENCY_SIGMA  1-sigma uncertainty on eta (default 5e-3)
    PI_SEISMIC_DIAG              print validity-range warnings (default 1)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Optional, Union

from .diagnostics import diag, env_float
from .errors import CalculationError, CalculationException
from .quantity import Quantity
from .uncertainty import propagate_function
from .units import convert_quantity

MIN_VALID_ENERGY_J = 1e12  # small meteorite
MAX_VALID_ENERGY_J = 1e24  # Chicxulub scale
REFERENCE_RIGIDITY = 3e10  # Pa, crustal shear modulus behind the Mw0 fit
SCALING_LAW = "Ben-Menahem (1975) with modern GMPE"


@dataclass(frozen=True)
class GeologicalProperties:
    density: Quantity  # kg/m^3
    p_wave_velocity: Quantity  # m/s
    s_wave_velocity: Quantity  # m/s
    quality_factor: Quantity  # dimensionless
    formation: str

    @property
    def shear_modulus(self) -> float:
        return self.density.value * self.s_wave_velocity.value**2


def _geo(rho, vp, vs, q, formation, source) -> GeologicalProperties:
    return GeologicalProperties(
        density=Quantity(rho[0], rho[1], "kg/m³", source),
        p_wave_velocity=Quantity(vp[0], vp[1], "m/s", source),
        s_wave_velocity=Quantity(vs[0], vs[1], "m/s", source),
        quality_factor=Quantity(q[0], q[1], "1", source),
        formation=formation,
    )


GEOLOGICAL_PRESETS: MappingProxyType[str, GeologicalProperties] = MappingProxyType(
    {
        "continental_crust": _geo(
            (2700, 200), (6200, 300), (3600, 200), (600, 200), "igneous", "Christensen & Mooney (1995)"
        ),
        "oceanic_crust": _geo((2900, 150), (6800, 400), (3900, 250), (400, 150), "oceanic", "IASP91 model"),
        "sedimentary": _geo(
            (2400, 300), (4500, 500), (2600, 400), (200, 100), "sedimentary", "Aki & Richards (2002)"
        ),
    }
)

CONTINENTAL_CRUST = GEOLOGICAL_PRESETS["continental_crust"]


def geological_preset(name: str) -> GeologicalProperties:
    try:
        return GEOLOGICAL_PRESETS[name]
    except KeyError:
        raise CalculationException(
            CalculationError.INVALID_INPUT,
            f"unknown geological preset {name!r}",
            {"available": sorted(GEOLOGICAL_PRESETS)},
        ) from None


@dataclass(frozen=True)
class SeismicParams:
    efficiency: float = 1e-2
    efficiency_sigma: float = 5e-3

    def efficiency_quantity(self) -> Quantity:
        return Quantity(
            self.efficiency,
            self.efficiency_sigma,
            "1",
            "Impact scaling (Ben-Menahem, 1975; Springer & Kinnaman, 1971)",
        )


def get_seismic_params_from_env() -> SeismicParams:
    """
    Build SeismicParams from environment variables, falling back to defaults
    on missing or unparsable values.
    """
    eff = env_float("PI_SEISMIC_EFFICIENCY", 1e-2)
    sigma = env_float("PI_SEISMIC_EFFICIENCY_SIGMA", 5e-3)
    if not (0.0 < eff <= 1.0):
        eff = 1e-2
    if not (sigma >= 0.0):
        sigma = 5e-3
    return SeismicParams(efficiency=eff, efficiency_sigma=sigma)


@dataclass(frozen=True)
class SeismicResult:
    moment_magnitude: Quantity
    local_magnitude: Quantity
    seismic_moment: Quantity  # N*m
    peak_ground_acceleration: Quantity  # m/s^2 at 1 km
    felt_radius: Quantity  # km
    damage_radius: Quantity  # km
    validity_range: tuple[float, float]  # J
    scaling_law: str
    warnings: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class GroundMotionResult:
    peak_ground_acceleration: Quantity  # m/s^2
    peak_ground_velocity: Quantity  # m/s
    mercalli_intensity: Quantity  # MMI
    distance_km: float


@dataclass(frozen=True)
class KnownImpactValidation:
    is_valid: bool
    expected_range: tuple[float, float]
    calculated_value: float
    deviation: float
    confidence: str  # HIGH | MEDIUM | LOW


# energy (J), magnitude range
KNOWN_IMPACT_EVENTS = MappingProxyType(
    {
        "Tunguska_1908": (1.2e16, (4.5, 5.2)),  # ~12 Mt, estimated from seismic records
        "Chelyabinsk_2013": (2.1e15, (3.8, 4.2)),  # ~500 kt, recorded by seismic networks
        "Barringer_Crater": (1.5e16, (4.8, 5.5)),  # ~15 Mt, estimated from crater size
    }
)


def _moment(energy: float, eta: float, rho: float, vs: float) -> float:
    mw0 = 0.67 * math.log10(energy * eta) - 4.8
    return 10.0 ** (1.5 * mw0 + 9.1) * (rho * vs * vs / REFERENCE_RIGIDITY)


def _moment_magnitude(m0: float) -> float:
    return (2.0 / 3.0) * (math.log10(m0) - 9.1)


def _local_magnitude(mw: float) -> float:
    return mw + 0.1 * math.sin(mw - 5.0)


def _epicentral_pga(mw: float) -> float:
    # Boore-Atkinson at 1 km, g -> m/s^2
    return 10.0 ** (-3.512 + 0.904 * mw - 1.328 * math.log10(1.0)) * 9.81


def _felt_radius(mw: float) -> float:
    # MMI >= III
    return max(1.0, 10.0 ** (-1.72 + 1.4 * mw - 3.0))


def _damage_radius(mw: float) -> float:
    # MMI >= VI
    return max(0.1, 10.0 ** (-1.72 + 1.4 * mw - 6.0))


def calculate_seismic_magnitude(
    kinetic_energy: Quantity,
    geological_properties: Optional[GeologicalProperties] = None,
    params: Optional[SeismicParams] = None,
) -> SeismicResult:
    """
    Seismic magnitude and shaking footprint of an impact.

    Args:
        kinetic_energy (Quantity): Impact energy in any ENERGY unit.
        geological_properties (GeologicalProperties, optional): Target rock;
            continental crust when omitted.
        params (SeismicParams, optional): Efficiency settings; read from the
            environment when omitted.

    Returns:
        SeismicResult
    """
    energy = kinetic_energy if kinetic_energy.unit == "J" else convert_quantity(kinetic_energy, "J")
    if not energy.value > 0:
        raise CalculationException(
            CalculationError.INVALID_INPUT,
            f"kinetic energy must be positive, got {energy.value} J",
        )
    geo = geological_properties or CONTINENTAL_CRUST
    p = params or get_seismic_params_from_env()

    warnings = []
    if energy.value < MIN_VALID_ENERGY_J or energy.value > MAX_VALID_ENERGY_J:
        msg = (
            f"Energy {energy.value:.3e} J outside validated range "
            f"[{MIN_VALID_ENERGY_J:.0e}, {MAX_VALID_ENERGY_J:.0e}] J"
        )
        warnings.append(msg)
        diag("Seismic", msg, flag="PI_SEISMIC_DIAG")

    m0 = propagate_function(
        [energy, p.efficiency_quantity(), geo.density, geo.s_wave_velocity],
        _moment,
        "N⋅m",
        "Ben-Menahem (1975) with rigidity scaling",
        "Seismic moment",
    )
    mw = propagate_function([m0], _moment_magnitude, "1", "Hanks & Kanamori (1979)", "Moment magnitude")
    ml = propagate_function([mw], _local_magnitude, "1", "Empirical Mw-ML relation", "Local magnitude")
    pga = propagate_function(
        [mw], _epicentral_pga, "m/s²", "Boore-Atkinson (2008) GMPE", "Peak ground acceleration at 1 km"
    )
    felt = propagate_function([mw], _felt_radius, "km", "Bakun & Wentworth (1997)", "Felt radius (MMI >= III)")
    damage = propagate_function(
        [mw], _damage_radius, "km", "Bakun & Wentworth (1997)", "Damage radius (MMI >= VI)"
    )

    return SeismicResult(
        moment_magnitude=mw,
        local_magnitude=ml,
        seismic_moment=m0,
        peak_ground_acceleration=pga,
        felt_radius=felt,
        damage_radius=damage,
        validity_range=(MIN_VALID_ENERGY_J, MAX_VALID_ENERGY_J),
        scaling_law=SCALING_LAW,
        warnings=tuple(warnings),
    )


def _site_amplification(geo: GeologicalProperties) -> float:
    # impedance contrast against the continental reference rock
    ref = CONTINENTAL_CRUST
    ref_impedance = ref.density.value * ref.s_wave_velocity.value
    return math.sqrt(ref_impedance / (geo.density.value * geo.s_wave_velocity.value))


def calculate_ground_motion_at_distance(
    magnitude: Union[Quantity, float],
    distance_km: float,
    geological_properties: Optional[GeologicalProperties] = None,
) -> GroundMotionResult:
    """
    PGA, PGV and Modified Mercalli Intensity at ``distance_km`` from the impact.

    All three are non-increasing with distance; MMI is clamped to [1, 12].
    Softer target rock amplifies PGA and PGV by its impedance contrast.
    """
    if not distance_km > 0:
        raise CalculationException(
            CalculationError.INVALID_INPUT,
            f"distance must be positive, got {distance_km} km",
            {"distance_km": distance_km},
        )
    mw = magnitude if isinstance(magnitude, Quantity) else Quantity.exact(float(magnitude), "1")
    amp = _site_amplification(geological_properties or CONTINENTAL_CRUST)
    log_d5 = math.log10(distance_km + 5.0)
    log_d = math.log10(distance_km)

    pga = propagate_function(
        [mw],
        lambda m: amp * 10.0 ** (-3.512 + 0.904 * m - 1.328 * log_d5) * 9.81,
        "m/s²",
        "Boore-Atkinson (2008) GMPE",
    )
    pgv = propagate_function(
        [mw],
        lambda m: amp * 10.0 ** (-5.261 + 1.1 * m - 1.5 * log_d5),
        "m/s",
        "Campbell & Bozorgnia (2008)",
    )
    mmi = propagate_function(
        [mw],
        lambda m: max(1.0, min(12.0, 1.72 + 1.4 * m - 3.0 * log_d)),
        "MMI",
        "Bakun & Wentworth (1997)",
    )
    return GroundMotionResult(pga, pgv, mmi, float(distance_km))


def validate_against_known_impacts(
    kinetic_energy: Quantity,
    calculated_magnitude: Union[Quantity, float],
    event_name: str,
) -> KnownImpactValidation:
    """
    Compare a computed magnitude with a historical impact's estimated range.

    Tolerance is half the range width: HIGH within tolerance, MEDIUM within
    1.5x, LOW beyond. Unknown events are LOW with infinite deviation.
    """
    value = calculated_magnitude.value if isinstance(calculated_magnitude, Quantity) else float(calculated_magnitude)
    event = KNOWN_IMPACT_EVENTS.get(event_name)
    if event is None:
        return KnownImpactValidation(False, (0.0, 0.0), value, math.inf, "LOW")

    _energy, (lo, hi) = event
    deviation = abs(value - 0.5 * (lo + hi))
    tolerance = 0.5 * (hi - lo)
    if deviation <= tolerance:
        confidence = "HIGH"
    elif deviation <= 1.5 * tolerance:
        confidence = "MEDIUM"
    else:
        confidence = "LOW"
    return KnownImpactValidation(deviation <= 1.5 * tolerance, (lo, hi), value, deviation, confidence)
