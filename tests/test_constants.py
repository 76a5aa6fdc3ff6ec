"""
Constants registry: provenance, exact constants, derived-value consistency.
"""

import math

import numpy as np
import pytest


def test_exact_constants_have_zero_uncertainty():
    from pyimpact.constants import get_constant

    for name in ("SPEED_OF_LIGHT", "ASTRONOMICAL_UNIT", "STANDARD_GRAVITY"):
        q = get_constant(name)
        assert q.uncertainty == 0.0, name
        assert q.source


def test_astronomical_unit_and_speed_of_light_values():
    from pyimpact import constants as const

    assert const.ASTRONOMICAL_UNIT.value == 149_597_870.7
    assert const.ASTRONOMICAL_UNIT.unit == "km"
    assert const.SPEED_OF_LIGHT.value == 299_792_458.0
    assert const.C_KM_S == 299_792.458


def test_gravitational_constant_carries_codata_uncertainty():
    from pyimpact.constants import GRAVITATIONAL_CONSTANT

    assert np.isclose(GRAVITATIONAL_CONSTANT.value, 6.674e-11, rtol=1e-3)
    assert GRAVITATIONAL_CONSTANT.uncertainty > 0
    assert "CODATA" in GRAVITATIONAL_CONSTANT.source


def test_escape_velocity_matches_formula_and_propagated_uncertainty():
    from pyimpact import constants as const

    G = const.GRAVITATIONAL_CONSTANT
    M = const.EARTH_MASS
    R = const.EARTH_EQUATORIAL_RADIUS.value
    v = const.EARTH_ESCAPE_VELOCITY

    expected = math.sqrt(2.0 * G.value * M.value / R) / 1000.0
    assert v.unit == "km/s"
    assert np.isclose(v.value, expected, rtol=1e-12)
    assert np.isclose(v.value, 11.18, rtol=1e-3)

    # sqrt halves the relative uncertainty of G*M (radius exact)
    rel_gm = math.hypot(G.relative_uncertainty, M.relative_uncertainty)
    assert np.isclose(v.relative_uncertainty, 0.5 * rel_gm, rtol=1e-9)


def test_earth_orbital_velocity():
    from pyimpact.constants import EARTH_ORBITAL_VELOCITY, SOLAR_ESCAPE_VELOCITY_AT_EARTH

    assert np.isclose(EARTH_ORBITAL_VELOCITY.value, 29.78, rtol=2e-3)
    assert EARTH_ORBITAL_VELOCITY.uncertainty > 0
    assert np.isclose(SOLAR_ESCAPE_VELOCITY_AT_EARTH.value / EARTH_ORBITAL_VELOCITY.value, math.sqrt(2.0))


def test_tnt_factors_are_reciprocal_and_exact():
    from pyimpact.constants import JOULE_TO_MEGATON_TNT, MEGATON_TNT_TO_JOULE

    assert MEGATON_TNT_TO_JOULE.value == 4.184e15
    assert MEGATON_TNT_TO_JOULE.is_exact and JOULE_TO_MEGATON_TNT.is_exact
    assert np.isclose(MEGATON_TNT_TO_JOULE.value * JOULE_TO_MEGATON_TNT.value, 1.0, rtol=1e-15)


def test_unknown_constant():
    from pyimpact.constants import get_constant
    from pyimpact.errors import UnknownConstantError

    with pytest.raises(UnknownConstantError, match="Unknown constant"):
        get_constant("HUBBLE_CONSTANT")
    with pytest.raises(KeyError):
        get_constant("")


def test_list_constants_covers_registry():
    from pyimpact.constants import ALL_CONSTANTS, list_constants
    from pyimpact.quantity import Quantity

    entries = list_constants()
    names = [n for n, _ in entries]
    assert len(names) == len(ALL_CONSTANTS)
    assert {"EARTH_MU", "SUN_MU", "EARTH_ESCAPE_VELOCITY", "JOULE_TO_MEGATON_TNT"} <= set(names)
    assert all(isinstance(q, Quantity) and q.uncertainty >= 0 for _, q in entries)


def test_plain_floats_agree_with_quantities():
    from pyimpact import constants as const

    assert const.MU_EARTH == const.get_constant("EARTH_MU").value
    assert const.AU_KM == const.get_constant("ASTRONOMICAL_UNIT").value
    assert np.isclose(const.R_EARTH_EQ_KM, 6378.137)
