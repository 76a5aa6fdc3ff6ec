# pyimpact/orbital.py

"""
Orbital perturbation engine.

Computes the secondary accelerations acting on a body orbiting the Earth
beyond two-body gravity and integrates their combined effect:

    a_total = -mu r / |r|^3 + sum_k a_k(r, v, t)

Perturbation terms (km/s^2, geocentric inertial frame):
    J2_OBLATENESS       Vallado, zonal harmonic J2
    SOLAR_GRAVITY       third body, direct minus indirect term
    LUNAR_GRAVITY       third body, direct minus indirect term
    RELATIVISTIC        Schwarzschild post-Newtonian correction
    RADIATION_PRESSURE  cannonball model, P0 (AU/d)^2 A (1 + rho) / m
    ATMOSPHERIC_DRAG    only when the config carries an atmosphere model

Each type maps to one pure function in _MODELS; the calculator walks that
table, so every term can be exercised in isolation.

Environment:
    PI_ORBIT_DIAG=1   print an energy-drift summary after propagate_state()
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

import numpy as np

from . import constants as const
from .diagnostics import diag
from .errors import CalculationError, CalculationException
from .numerics import integrate

PositionFunc = Callable[[float], np.ndarray]  # Julian date -> position (km)

EARTH_ROTATION_RATE = 7.292115e-5  # rad/s, IERS


class PerturbationType(str, Enum):
    J2_OBLATENESS = "j2_oblateness"
    SOLAR_GRAVITY = "solar_gravity"
    LUNAR_GRAVITY = "lunar_gravity"
    RELATIVISTIC = "relativistic"
    RADIATION_PRESSURE = "radiation_pressure"
    ATMOSPHERIC_DRAG = "atmospheric_drag"


def _vec3(v, name: str) -> np.ndarray:
    arr = np.array(v, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise CalculationException(
            CalculationError.INVALID_INPUT, f"{name} must have 3 components, got shape {arr.shape}"
        )
    if not np.all(np.isfinite(arr)):
        raise CalculationException(CalculationError.INVALID_INPUT, f"{name} has non-finite components", {name: arr})
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class OrbitalStateVector:
    """Geocentric state: position (km), velocity (km/s), epoch (Julian date)."""

    position: np.ndarray
    velocity: np.ndarray
    epoch: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", _vec3(self.position, "position"))
        object.__setattr__(self, "velocity", _vec3(self.velocity, "velocity"))
        object.__setattr__(self, "epoch", float(self.epoch))

    @classmethod
    def from_array(cls, y: np.ndarray, epoch: float) -> OrbitalStateVector:
        return cls(y[:3], y[3:6], epoch)

    def as_array(self) -> np.ndarray:
        return np.concatenate([self.position, self.velocity])

    @property
    def radius(self) -> float:
        return float(np.linalg.norm(self.position))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))


@dataclass(frozen=True, eq=False)
class PerturbationResult:
    type: PerturbationType
    acceleration: np.ndarray  # km/s^2
    magnitude: float  # km/s^2
    description: str


@dataclass(frozen=True)
class ExponentialAtmosphere:
    """
    Exponential density profile anchored at a reference altitude.

        rho(h) = rho_ref * exp(-(h - h_ref) / H),   0 above max_altitude_km
    """

    reference_altitude_km: float
    reference_density: float  # kg/m^3
    scale_height_km: float
    max_altitude_km: float = 1000.0

    def density(self, altitude_km: float) -> float:
        if altitude_km > self.max_altitude_km:
            return 0.0
        h = max(altitude_km, 0.0)
        return self.reference_density * math.exp(-(h - self.reference_altitude_km) / self.scale_height_km)


# Vallado table 8-4 band anchored at 400 km
EARTH_THERMOSPHERE_400KM = ExponentialAtmosphere(400.0, 3.725e-12, 58.515)


@dataclass(frozen=True)
class ObjectProperties:
    mass: float  # kg
    area: float  # m^2
    reflectivity: float = 1.0  # 0 absorbing .. 1 perfect reflector
    drag_coefficient: float = 2.2


@dataclass(frozen=True)
class PerturbationConfig:
    include_j2: bool = True
    include_lunar: bool = True
    include_solar: bool = True
    include_relativistic: bool = False
    include_radiation_pressure: bool = False
    include_atmospheric_drag: bool = False

    # Object properties for radiation pressure and drag
    mass: Optional[float] = None  # kg
    cross_sectional_area: Optional[float] = None  # m^2
    reflectivity_coefficient: float = 1.0
    drag_coefficient: float = 2.2
    atmosphere: Optional[ExponentialAtmosphere] = None

    @property
    def area_to_mass(self) -> Optional[float]:
        if not self.mass or not self.cross_sectional_area:
            return None
        return self.cross_sectional_area / self.mass


DEFAULT_PERTURBATION_CONFIG = PerturbationConfig()


# ---------------------------
# Individual acceleration terms
# ---------------------------


def j2_acceleration(
    position: np.ndarray,
    mu: float = const.MU_EARTH,
    j2: float = const.J2_EARTH,
    r_eq: float = const.R_EARTH_EQ_KM,
) -> np.ndarray:
    x, y, z = position
    r2 = np.dot(position, position)
    r = np.sqrt(r2)
    factor = -1.5 * j2 * mu * r_eq * r_eq / r**5
    z2_r2 = z * z / r2
    return np.array(
        [
            factor * x * (1.0 - 5.0 * z2_r2),
            factor * y * (1.0 - 5.0 * z2_r2),
            factor * z * (3.0 - 5.0 * z2_r2),
        ]
    )


def third_body_acceleration(position: np.ndarray, body_position: np.ndarray, body_mu: float) -> np.ndarray:
    """Direct attraction toward the body minus the primary's acceleration toward it."""
    d = body_position - position
    d_norm = np.linalg.norm(d)
    s_norm = np.linalg.norm(body_position)
    return body_mu * (d / d_norm**3 - body_position / s_norm**3)


def relativistic_acceleration(
    position: np.ndarray,
    velocity: np.ndarray,
    mu: float = const.MU_EARTH,
    c: float = const.C_KM_S,
) -> np.ndarray:
    r = np.linalg.norm(position)
    v2 = np.dot(velocity, velocity)
    rv = np.dot(position, velocity)
    factor = mu / (c * c * r**3)
    return factor * ((4.0 * mu / r - v2) * position + 4.0 * rv * velocity)


def radiation_pressure_acceleration(
    position: np.ndarray,
    sun_position: np.ndarray,
    area_to_mass: float,
    reflectivity: float,
    p0: float = const.P_SRP_1AU,
    au_km: float = const.AU_KM,
) -> np.ndarray:
    d = position - sun_position  # Sun -> object
    d_norm = np.linalg.norm(d)
    pressure = p0 * (au_km / d_norm) ** 2  # N/m^2
    accel_ms2 = pressure * area_to_mass * (1.0 + reflectivity)
    return accel_ms2 * 1e-3 * d / d_norm


def drag_acceleration(
    position: np.ndarray,
    velocity: np.ndarray,
    atmosphere: ExponentialAtmosphere,
    area_to_mass: float,
    drag_coefficient: float,
    r_eq: float = const.R_EARTH_EQ_KM,
    omega: float = EARTH_ROTATION_RATE,
) -> np.ndarray:
    altitude = float(np.linalg.norm(position)) - r_eq
    rho = atmosphere.density(altitude)
    if rho == 0.0:
        return np.zeros(3)
    v_rel = velocity - np.cross([0.0, 0.0, omega], position)  # km/s, co-rotating air
    v_rel_norm = float(np.linalg.norm(v_rel))
    # -1/2 Cd (A/m) rho |v| v with v in m/s, result back in km/s^2
    return -0.5 * drag_coefficient * area_to_mass * rho * v_rel_norm * v_rel * 1e3


# ---------------------------
# Type -> model table
# ---------------------------


def _j2_term(state, cfg, sun, moon):
    return j2_acceleration(state.position)


def _solar_term(state, cfg, sun, moon):
    if sun is None:
        return None
    return third_body_acceleration(state.position, sun, const.MU_SUN)


def _lunar_term(state, cfg, sun, moon):
    if moon is None:
        return None
    return third_body_acceleration(state.position, moon, const.MU_MOON)


def _relativistic_term(state, cfg, sun, moon):
    return relativistic_acceleration(state.position, state.velocity)


def _radiation_term(state, cfg, sun, moon):
    ratio = cfg.area_to_mass
    if sun is None or ratio is None:
        return None
    return radiation_pressure_acceleration(state.position, sun, ratio, cfg.reflectivity_coefficient)


def _drag_term(state, cfg, sun, moon):
    ratio = cfg.area_to_mass
    if cfg.atmosphere is None or ratio is None:
        return None
    return drag_acceleration(state.position, state.velocity, cfg.atmosphere, ratio, cfg.drag_coefficient)


# order matters: results are reported (and summed) in this order
_MODELS = (
    (PerturbationType.J2_OBLATENESS, "include_j2", _j2_term, "Earth oblateness (J2) perturbation"),
    (PerturbationType.SOLAR_GRAVITY, "include_solar", _solar_term, "Solar gravitational perturbation"),
    (PerturbationType.LUNAR_GRAVITY, "include_lunar", _lunar_term, "Lunar gravitational perturbation"),
    (PerturbationType.RELATIVISTIC, "include_relativistic", _relativistic_term, "General relativistic correction"),
    (PerturbationType.RADIATION_PRESSURE, "include_radiation_pressure", _radiation_term, "Solar radiation pressure"),
    (PerturbationType.ATMOSPHERIC_DRAG, "include_atmospheric_drag", _drag_term, "Atmospheric drag"),
)


def _optional_vec(v, name: str) -> Optional[np.ndarray]:
    return None if v is None else _vec3(v, name)


def specific_orbital_energy(state: OrbitalStateVector, mu: float = const.MU_EARTH) -> float:
    """v^2/2 - mu/r in km^2/s^2."""
    return 0.5 * state.speed**2 - mu / state.radius


class PerturbationCalculator:
    """
    Evaluates and integrates perturbing accelerations for one configuration.

    The calculator holds only its immutable config; every call builds fresh
    results, so one instance can serve many independent scenarios.
    """

    def __init__(self, config: Optional[PerturbationConfig] = None, **overrides):
        """
        Args:
            config (PerturbationConfig): Base configuration (defaults if None).
            **overrides: Field overrides applied on top of ``config``.
        """
        base = config or DEFAULT_PERTURBATION_CONFIG
        self.config = replace(base, **overrides) if overrides else base

    def calculate_perturbations(self, state: OrbitalStateVector, sun_position=None, moon_position=None):
        """
        Evaluates every enabled perturbation whose auxiliary inputs are available.

        Args:
            state (OrbitalStateVector): Geocentric state of the object.
            sun_position (array-like, optional): Geocentric Sun position (km).
            moon_position (array-like, optional): Geocentric Moon position (km).

        Returns:
            list[PerturbationResult]: One entry per contributing term.
        """
        sun = _optional_vec(sun_position, "sun_position")
        moon = _optional_vec(moon_position, "moon_position")
        return self._evaluate(state, sun, moon)

    def _evaluate(self, state, sun, moon) -> list[PerturbationResult]:
        results = []
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            for ptype, flag, model, description in _MODELS:
                if not getattr(self.config, flag):
                    continue
                accel = model(state, self.config, sun, moon)
                if accel is None:
                    continue
                accel = np.asarray(accel, dtype=np.float64)
                accel.flags.writeable = False
                results.append(PerturbationResult(ptype, accel, float(np.linalg.norm(accel)), description))
        return results

    def calculate_total_perturbation(self, state: OrbitalStateVector, sun_position=None, moon_position=None) -> np.ndarray:
        """Component-wise sum of calculate_perturbations() (zeros if none apply)."""
        total = np.zeros(3)
        for p in self.calculate_perturbations(state, sun_position, moon_position):
            total = total + p.acceleration
        return total

    def _derivative(self, epoch0: float, sun_func, moon_func):
        mu = const.MU_EARTH

        def f(t: float, y: np.ndarray) -> np.ndarray:
            r_vec = y[:3]
            v_vec = y[3:6]
            r = np.linalg.norm(r_vec)
            jd = epoch0 + t / const.SECONDS_PER_DAY
            sun = None if sun_func is None else np.asarray(sun_func(jd), dtype=np.float64)
            moon = None if moon_func is None else np.asarray(moon_func(jd), dtype=np.float64)
            # bypass validation: intermediate RK stages may be non-finite
            state = _unchecked_state(r_vec, v_vec, jd)
            accel = -mu * r_vec / r**3
            for p in self._evaluate(state, sun, moon):
                accel = accel + p.acceleration
            return np.concatenate([v_vec, accel])

        return f

    def propagate_state(
        self,
        initial_state: OrbitalStateVector,
        time_step: float,
        duration: float,
        sun_position_func: Optional[PositionFunc] = None,
        moon_position_func: Optional[PositionFunc] = None,
    ) -> list[OrbitalStateVector]:
        """
        Integrates two-body gravity plus enabled perturbations with fixed-step RK4.

        Args:
            initial_state (OrbitalStateVector): Starting state; returned as element 0.
            time_step (float): Step size in seconds (> 0).
            duration (float): Total span in seconds (>= 0).
            sun_position_func (callable, optional): Julian date -> Sun position (km).
            moon_position_func (callable, optional): Julian date -> Moon position (km).

        Returns:
            list[OrbitalStateVector]: floor(duration / time_step) + 1 states, fewer
            only if the integration hit a non-finite state and stopped early.
        """
        if not time_step > 0:
            raise CalculationException(
                CalculationError.INVALID_INPUT, f"time step must be positive, got {time_step}"
            )
        if not duration >= 0:
            raise CalculationException(
                CalculationError.INVALID_INPUT, f"duration must be non-negative, got {duration}"
            )
        n_steps = int(math.floor(duration / time_step))
        f = self._derivative(initial_state.epoch, sun_position_func, moon_position_func)
        traj = integrate(f, initial_state.as_array(), time_step, n_steps)

        states = [initial_state]
        for i in range(1, traj.shape[0]):
            epoch = initial_state.epoch + i * time_step / const.SECONDS_PER_DAY
            states.append(OrbitalStateVector.from_array(traj[i], epoch))

        if len(states) < n_steps + 1:
            diag(
                "Orbit",
                f"propagation stopped at step {len(states) - 1}/{n_steps}: non-finite state",
            )
        else:
            e0 = specific_orbital_energy(initial_state)
            e1 = specific_orbital_energy(states[-1])
            drift = abs((e1 - e0) / e0) if e0 != 0 else 0.0
            diag(
                "Orbit",
                f"{n_steps} steps of {time_step:g} s | E0={e0:+.6e} km^2/s^2 | rel. drift={drift:.2e}",
                flag="PI_ORBIT_DIAG",
                default="0",
            )
        return states


def _unchecked_state(r_vec: np.ndarray, v_vec: np.ndarray, epoch: float) -> OrbitalStateVector:
    state = object.__new__(OrbitalStateVector)
    object.__setattr__(state, "position", r_vec)
    object.__setattr__(state, "velocity", v_vec)
    object.__setattr__(state, "epoch", epoch)
    return state


# ---------------------------
# Order-of-magnitude estimates
# ---------------------------


def estimate_perturbation_magnitudes(
    semi_major_axis: float, eccentricity: float, inclination: float
) -> dict[PerturbationType, float]:
    """
    Rough acceleration scale (km/s^2) of each perturbation at r ~ a.

    Third-body terms use the tidal estimate 2 mu_3 r / d^3. Radiation
    pressure and drag depend on object properties and are reported as 0.
    """
    r = semi_major_axis
    mu = const.MU_EARTH
    re = const.R_EARTH_EQ_KM
    return {
        PerturbationType.J2_OBLATENESS: 1.5 * const.J2_EARTH * mu * re * re / r**4,
        PerturbationType.LUNAR_GRAVITY: 2.0 * const.MU_MOON * r / const.MOON_DISTANCE_KM**3,
        PerturbationType.SOLAR_GRAVITY: 2.0 * const.MU_SUN * r / const.AU_KM**3,
        PerturbationType.RELATIVISTIC: 4.0 * mu * mu / (const.C_KM_S**2 * r**3),
        PerturbationType.RADIATION_PRESSURE: 0.0,
        PerturbationType.ATMOSPHERIC_DRAG: 0.0,
    }


def get_significant_perturbations(
    semi_major_axis: float,
    eccentricity: float,
    inclination: float,
    threshold: float = 1e-9,
) -> list[PerturbationType]:
    """Types whose estimated magnitude exceeds ``threshold``, largest first."""
    mags = estimate_perturbation_magnitudes(semi_major_axis, eccentricity, inclination)
    significant = [t for t, m in mags.items() if m > threshold]
    return sorted(significant, key=lambda t: mags[t], reverse=True)


# ---------------------------
# Regime presets
# ---------------------------

_REGIME_FLAGS = {
    "LEO": dict(
        include_j2=True,
        include_lunar=False,
        include_solar=False,
        include_relativistic=False,
        include_radiation_pressure=False,
        include_atmospheric_drag=True,
    ),
    "MEO": dict(include_j2=True, include_lunar=True, include_solar=True, include_atmospheric_drag=False),
    "GEO": dict(include_j2=True, include_lunar=True, include_solar=True, include_atmospheric_drag=False),
    "HEO": dict(include_j2=True, include_lunar=True, include_solar=True, include_atmospheric_drag=False),
    "INTERPLANETARY": dict(
        include_j2=False,
        include_lunar=False,
        include_solar=True,
        include_relativistic=True,
        include_atmospheric_drag=False,
    ),
}


def create_perturbation_calculator(
    orbit_type: str,
    object_properties: Optional[ObjectProperties] = None,
    atmosphere: Optional[ExponentialAtmosphere] = None,
) -> PerturbationCalculator:
    """
    Calculator preset for an orbital regime.

    Args:
        orbit_type (str): LEO, MEO, GEO, HEO or interplanetary (case-insensitive).
        object_properties (ObjectProperties, optional): Enables radiation
            pressure outside LEO and feeds the drag term.
        atmosphere (ExponentialAtmosphere, optional): Density model for drag.
    """
    key = orbit_type.strip().upper()
    try:
        flags = dict(_REGIME_FLAGS[key])
    except KeyError:
        raise CalculationException(
            CalculationError.INVALID_INPUT,
            f"unknown orbit type {orbit_type!r}; expected one of LEO, MEO, GEO, HEO, interplanetary",
        ) from None

    if key != "LEO":
        flags["include_radiation_pressure"] = object_properties is not None
    if object_properties is not None:
        flags.update(
            mass=object_properties.mass,
            cross_sectional_area=object_properties.area,
            reflectivity_coefficient=object_properties.reflectivity,
            drag_coefficient=object_properties.drag_coefficient,
        )
    if atmosphere is not None:
        flags["atmosphere"] = atmosphere
    return PerturbationCalculator(PerturbationConfig(**flags))
