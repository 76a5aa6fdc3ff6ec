"""
Orbital perturbation engine.

Covers invariants and basic properties:
- total perturbation equals the component-wise sum of the individual terms
- J2 falls off with radius and depends on latitude
- third-body effects grow relative to two-body gravity with distance
- radiation pressure follows inverse-square and scales with area/mass
- RK4 propagation length, epochs and energy conservation
- regime presets and magnitude ranking
"""

import math

import numpy as np
import pytest

MU = 398_600.4418
R_E = 6378.137
AU = 149_597_870.7


def _circular(r_km, inclined=False, epoch=2451545.0):
    from pyimpact.orbital import OrbitalStateVector

    v = math.sqrt(MU / r_km)
    vel = [0.0, v * math.cos(0.9), v * math.sin(0.9)] if inclined else [0.0, v, 0.0]
    return OrbitalStateVector([r_km, 0.0, 0.0], vel, epoch)


def _calc(**flags):
    from pyimpact.orbital import PerturbationCalculator, PerturbationConfig

    base = dict(
        include_j2=False,
        include_lunar=False,
        include_solar=False,
        include_relativistic=False,
        include_radiation_pressure=False,
        include_atmospheric_drag=False,
    )
    base.update(flags)
    return PerturbationCalculator(PerturbationConfig(**base))


def test_total_equals_sum_of_components():
    from pyimpact.orbital import PerturbationCalculator, PerturbationConfig

    calc = PerturbationCalculator(
        PerturbationConfig(
            include_relativistic=True,
            include_radiation_pressure=True,
            mass=500.0,
            cross_sectional_area=4.0,
        )
    )
    state = _circular(R_E + 700.0, inclined=True)
    sun = [AU * 0.6, -AU * 0.8, 1000.0]
    moon = [-300_000.0, 200_000.0, 30_000.0]

    parts = calc.calculate_perturbations(state, sun, moon)
    total = calc.calculate_total_perturbation(state, sun, moon)
    assert len(parts) == 5
    np.testing.assert_allclose(total, np.sum([p.acceleration for p in parts], axis=0), rtol=1e-12, atol=1e-20)
    for p in parts:
        assert np.isclose(p.magnitude, np.linalg.norm(p.acceleration))
        assert p.description


def test_terms_need_auxiliary_positions():
    from pyimpact.orbital import PerturbationCalculator, PerturbationType

    calc = PerturbationCalculator()  # J2 + lunar + solar
    state = _circular(R_E + 600.0)

    only_j2 = calc.calculate_perturbations(state)
    assert [p.type for p in only_j2] == [PerturbationType.J2_OBLATENESS]

    with_moon = calc.calculate_perturbations(state, moon_position=[384_400.0, 0.0, 0.0])
    assert {p.type for p in with_moon} == {PerturbationType.J2_OBLATENESS, PerturbationType.LUNAR_GRAVITY}

    np.testing.assert_array_equal(_calc().calculate_total_perturbation(state), np.zeros(3))


def test_j2_decreases_with_altitude():
    calc = _calc(include_j2=True)
    low = calc.calculate_perturbations(_circular(R_E + 600.0))[0]
    high = calc.calculate_perturbations(_circular(R_E + 1600.0))[0]
    assert low.magnitude > high.magnitude
    assert "J2" in low.description


def test_j2_depends_on_latitude():
    from pyimpact.orbital import OrbitalStateVector

    calc = _calc(include_j2=True)
    r = R_E + 600.0
    v = math.sqrt(MU / r)
    equatorial = OrbitalStateVector([r, 0.0, 0.0], [0.0, v, 0.0], 2451545.0)
    polar = OrbitalStateVector([0.0, 0.0, r], [v, 0.0, 0.0], 2451545.0)
    m_eq = calc.calculate_perturbations(equatorial)[0].magnitude
    m_pol = calc.calculate_perturbations(polar)[0].magnitude
    # 1.5 J2 mu Re^2 / r^4 at the equator, twice that over the pole
    assert np.isclose(m_pol / m_eq, 2.0, rtol=1e-12)
    assert np.isclose(m_eq, 1.5 * 1.0826267e-3 * MU * R_E**2 / r**4, rtol=1e-9)


def test_third_body_relative_effect_grows_with_distance():
    calc = _calc(include_solar=True, include_lunar=True)
    sun = [AU, 0.0, 0.0]
    moon = [0.0, 384_400.0, 0.0]

    def relative(r_km):
        state = _circular(r_km)
        parts = calc.calculate_perturbations(state, sun, moon)
        assert len(parts) == 2
        return [p.magnitude / (MU / r_km**2) for p in parts]

    leo = relative(R_E + 500.0)
    geo = relative(42_164.0)
    for a, b in zip(leo, geo):
        assert b > a


def test_relativistic_is_tiny_and_larger_for_faster_orbits():
    calc = _calc(include_relativistic=True)
    leo = calc.calculate_perturbations(_circular(R_E + 400.0))[0]
    geo = calc.calculate_perturbations(_circular(42_164.0))[0]
    assert 0.0 < leo.magnitude < 1e-10
    assert geo.magnitude < leo.magnitude
    assert "relativistic" in leo.description


def test_radiation_pressure_inverse_square_and_area_to_mass():
    state = _circular(7000.0)
    sun_1au = [7000.0 - AU, 0.0, 0.0]
    sun_2au = [7000.0 - 2.0 * AU, 0.0, 0.0]

    calc = _calc(include_radiation_pressure=True, mass=1000.0, cross_sectional_area=10.0)
    calc2 = _calc(include_radiation_pressure=True, mass=1000.0, cross_sectional_area=20.0)

    near = calc.calculate_perturbations(state, sun_1au)[0]
    far = calc.calculate_perturbations(state, sun_2au)[0]
    doubled = calc2.calculate_perturbations(state, sun_1au)[0]

    assert np.isclose(near.magnitude / far.magnitude, 4.0, rtol=1e-9)
    assert np.isclose(doubled.magnitude / near.magnitude, 2.0, rtol=1e-12)
    # pushes away from the Sun (+x here)
    assert near.acceleration[0] > 0


def test_radiation_pressure_needs_object_properties():
    calc = _calc(include_radiation_pressure=True)
    assert calc.calculate_perturbations(_circular(7000.0), [AU, 0.0, 0.0]) == []


def test_drag_is_an_opt_in_model():
    from pyimpact.orbital import EARTH_THERMOSPHERE_400KM, PerturbationType

    state = _circular(R_E + 400.0)
    no_model = _calc(include_atmospheric_drag=True, mass=100.0, cross_sectional_area=1.0)
    assert no_model.calculate_perturbations(state) == []

    calc = _calc(
        include_atmospheric_drag=True,
        mass=100.0,
        cross_sectional_area=1.0,
        atmosphere=EARTH_THERMOSPHERE_400KM,
    )
    (drag,) = calc.calculate_perturbations(state)
    assert drag.type is PerturbationType.ATMOSPHERIC_DRAG
    # opposes the (co-rotation corrected) velocity
    assert float(np.dot(drag.acceleration, state.velocity)) < 0
    assert 1e-10 < drag.magnitude < 1e-6


def test_exponential_atmosphere_profile():
    from pyimpact.orbital import ExponentialAtmosphere

    atm = ExponentialAtmosphere(0.0, 1.225, 8.5, max_altitude_km=100.0)
    assert atm.density(0.0) == 1.225
    assert np.isclose(atm.density(8.5), 1.225 / math.e)
    assert atm.density(150.0) == 0.0


def test_propagation_length_epochs_and_energy():
    from pyimpact.orbital import specific_orbital_energy

    calc = _calc(include_j2=True)
    initial = _circular(R_E + 600.0, inclined=True)
    states = calc.propagate_state(initial, 10.0, 600.0)

    assert len(states) == 61
    assert states[0] is initial
    assert np.isclose(states[-1].epoch - initial.epoch, 600.0 / 86400.0, rtol=0.0, atol=1e-8)
    assert np.isclose(states[1].epoch - states[0].epoch, 10.0 / 86400.0, rtol=0.0, atol=1e-8)

    e0 = specific_orbital_energy(initial)
    e1 = specific_orbital_energy(states[-1])
    assert abs((e1 - e0) / e0) < 0.01
    # moved but stayed on (roughly) the same shell
    assert not np.allclose(states[-1].position, initial.position)
    assert np.isclose(states[-1].radius, initial.radius, rtol=1e-2)


def test_propagation_floor_of_steps():
    calc = _calc()
    states = calc.propagate_state(_circular(8000.0), 7.0, 50.0)
    assert len(states) == 8
    assert len(calc.propagate_state(_circular(8000.0), 60.0, 0.0)) == 1


def test_propagation_uses_body_position_functions():
    calc = _calc(include_solar=True)
    calls = []

    def sun(jd):
        calls.append(jd)
        return np.array([AU, 0.0, 0.0])

    states = calc.propagate_state(_circular(42_164.0), 60.0, 600.0, sun_position_func=sun)
    assert len(states) == 11
    assert calls and min(calls) >= states[0].epoch and max(calls) <= states[-1].epoch + 1e-6


def test_propagation_rejects_bad_step():
    from pyimpact.errors import CalculationError, CalculationException

    calc = _calc()
    with pytest.raises(CalculationException) as exc:
        calc.propagate_state(_circular(8000.0), 0.0, 100.0)
    assert exc.value.kind is CalculationError.INVALID_INPUT
    with pytest.raises(CalculationException):
        calc.propagate_state(_circular(8000.0), 10.0, -1.0)


def test_extreme_inputs_degrade_gracefully():
    from pyimpact.orbital import OrbitalStateVector, PerturbationCalculator, PerturbationConfig

    calc = PerturbationCalculator(PerturbationConfig(include_relativistic=True))
    far = OrbitalStateVector([1.2e6, -3.0e5, 8.0e5], [0.1, 0.4, -0.2], 2460000.5)
    eccentric = OrbitalStateVector([6600.0, 1500.0, -2500.0], [-2.0, 9.8, 3.1], 2460000.5)
    sun = [AU, 0.0, 0.0]
    moon = [384_400.0, 0.0, 0.0]
    for state in (far, eccentric):
        parts = calc.calculate_perturbations(state, sun, moon)
        assert all(np.all(np.isfinite(p.acceleration)) for p in parts)
        states = calc.propagate_state(state, 30.0, 900.0)
        assert len(states) == 31
        assert all(np.all(np.isfinite(s.position)) for s in states)


def test_degenerate_radius_gives_non_finite_terms_not_errors():
    from pyimpact.orbital import OrbitalStateVector, PerturbationType

    calc = _calc(
        include_j2=True,
        include_solar=True,
        include_lunar=True,
        include_relativistic=True,
        include_radiation_pressure=True,
        mass=500.0,
        cross_sectional_area=4.0,
    )
    sun = [AU, 0.0, 0.0]
    moon = [384_400.0, 0.0, 0.0]

    at_center = OrbitalStateVector([0.0, 0.0, 0.0], [0.0, 7.5, 0.0], 2451545.0)
    parts = {p.type: p for p in calc.calculate_perturbations(at_center, sun, moon)}
    assert len(parts) == 5
    assert not np.all(np.isfinite(parts[PerturbationType.J2_OBLATENESS].acceleration))
    assert not np.all(np.isfinite(parts[PerturbationType.RELATIVISTIC].acceleration))

    huge = OrbitalStateVector([1e80, 0.0, 0.0], [0.0, 1.0, 0.0], 2451545.0)
    parts = calc.calculate_perturbations(huge, sun, moon)
    assert len(parts) == 5
    for p in parts:
        assert np.all(np.isfinite(p.acceleration))

    states = calc.propagate_state(huge, 60.0, 600.0)
    assert len(states) == 11

    states = calc.propagate_state(at_center, 60.0, 600.0)
    assert 1 <= len(states) <= 11
    assert states[0] is at_center


def test_state_vector_validation_and_immutability():
    from pyimpact.errors import CalculationException
    from pyimpact.orbital import OrbitalStateVector

    s = OrbitalStateVector([7000.0, 0.0, 0.0], [0.0, 7.5, 0.0], 2451545.0)
    with pytest.raises(ValueError):
        s.position[0] = 1.0
    with pytest.raises(CalculationException):
        OrbitalStateVector([7000.0, 0.0], [0.0, 7.5, 0.0], 2451545.0)
    with pytest.raises(CalculationException):
        OrbitalStateVector([np.nan, 0.0, 0.0], [0.0, 7.5, 0.0], 2451545.0)


def test_regime_presets():
    from pyimpact.errors import CalculationException
    from pyimpact.orbital import ObjectProperties, create_perturbation_calculator

    leo = create_perturbation_calculator("LEO").config
    assert leo.include_j2 and leo.include_atmospheric_drag
    assert not (leo.include_lunar or leo.include_solar or leo.include_relativistic)

    geo = create_perturbation_calculator("GEO").config
    assert geo.include_j2 and geo.include_lunar and geo.include_solar
    assert not geo.include_atmospheric_drag and not geo.include_radiation_pressure

    props = ObjectProperties(mass=2000.0, area=20.0)
    geo_rp = create_perturbation_calculator("geo", props).config
    assert geo_rp.include_radiation_pressure
    assert geo_rp.mass == 2000.0 and geo_rp.drag_coefficient == 2.2 and geo_rp.reflectivity_coefficient == 1.0

    ip = create_perturbation_calculator("interplanetary").config
    assert not ip.include_j2 and ip.include_solar and ip.include_relativistic

    with pytest.raises(CalculationException):
        create_perturbation_calculator("lunar-transfer")


def test_magnitude_estimates_and_ranking():
    from pyimpact.orbital import (
        PerturbationType,
        estimate_perturbation_magnitudes,
        get_significant_perturbations,
    )

    leo = get_significant_perturbations(R_E + 500.0, 0.001, 0.9, threshold=1e-12)
    assert leo[0] is PerturbationType.J2_OBLATENESS

    mags = estimate_perturbation_magnitudes(42_164.0, 0.0, 0.0)
    assert mags[PerturbationType.RADIATION_PRESSURE] == 0.0
    assert mags[PerturbationType.ATMOSPHERIC_DRAG] == 0.0
    assert mags[PerturbationType.LUNAR_GRAVITY] > mags[PerturbationType.RELATIVISTIC]

    strict = get_significant_perturbations(42_164.0, 0.0, 0.0, threshold=1e-6)
    loose = get_significant_perturbations(42_164.0, 0.0, 0.0, threshold=1e-15)
    assert len(strict) < 4
    assert set(loose) >= {
        PerturbationType.J2_OBLATENESS,
        PerturbationType.LUNAR_GRAVITY,
        PerturbationType.SOLAR_GRAVITY,
        PerturbationType.RELATIVISTIC,
    }
    ranked = [mags[t] for t in loose]
    assert ranked == sorted(ranked, reverse=True)
