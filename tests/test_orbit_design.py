import math

import pytest

from contactsim.engine.orbit_design import (
    beacon_elements,
    raan_from_local_solar_time,
    sun_synchronous_inclination,
)
from contactsim.errors import ConfigurationError
from contactsim.models.params import BeaconConfig
from contactsim.physics.body import CentralBody


@pytest.mark.parametrize("altitude", [300.0, 600.0, 800.0, 1500.0])
def test_sun_synchronous_inclination_is_retrograde(altitude):
    inc = math.degrees(sun_synchronous_inclination(altitude))
    assert 90.0 <= inc < 180.0


def test_sun_synchronous_inclination_at_600_km():
    assert math.degrees(sun_synchronous_inclination(600.0)) == pytest.approx(97.8, abs=0.3)


def test_sun_synchronous_unreachable_altitude():
    with pytest.raises(ConfigurationError) as exc:
        sun_synchronous_inclination(10000.0)
    assert exc.value.field == "altitude_km"


def test_sun_synchronous_needs_oblate_body():
    sphere = CentralBody(name="Sphere", radius_km=6371.0, mu_km3_s2=398600.4418)
    with pytest.raises(ConfigurationError):
        sun_synchronous_inclination(600.0, body=sphere)


def test_raan_from_local_solar_time():
    assert raan_from_local_solar_time(6.0) == pytest.approx(math.pi / 2)
    assert raan_from_local_solar_time(0.0) == 0.0


def test_sun_synchronous_mode_defaults_to_ten_o_clock_node():
    el = beacon_elements(BeaconConfig(mode="sun-synchronous", altitude_km=600.0))
    assert math.degrees(el.raan_rad) == pytest.approx(150.0)
    assert el.inclination_rad == pytest.approx(sun_synchronous_inclination(600.0))


def test_sun_synchronous_ignores_supplied_inclination():
    el = beacon_elements(BeaconConfig(mode="sun-synchronous", altitude_km=600.0, inclination_deg=45.0))
    assert math.degrees(el.inclination_rad) > 90.0


def test_non_polar_accepts_range_bounds():
    for inc in (30.0, 45.0, 98.0):
        el = beacon_elements(BeaconConfig(mode="non-polar", altitude_km=600.0, inclination_deg=inc))
        assert math.degrees(el.inclination_rad) == pytest.approx(inc)
        assert el.raan_rad == 0.0


@pytest.mark.parametrize("inc", [20.0, 99.0, 120.0])
def test_non_polar_rejects_out_of_range(inc):
    with pytest.raises(ConfigurationError) as exc:
        beacon_elements(BeaconConfig(mode="non-polar", altitude_km=600.0, inclination_deg=inc))
    assert exc.value.field == "inclination_deg"
    assert "between 30° and 98°" in str(exc.value)


def test_custom_mode_raan():
    plain = beacon_elements(BeaconConfig(mode="custom", altitude_km=700.0, inclination_deg=120.0))
    assert plain.raan_rad == 0.0
    with_lst = beacon_elements(
        BeaconConfig(mode="custom", altitude_km=700.0, inclination_deg=120.0, local_solar_time_hours=2.0)
    )
    assert math.degrees(with_lst.raan_rad) == pytest.approx(30.0)


def test_custom_mode_rejects_inclination_above_180():
    with pytest.raises(ConfigurationError):
        beacon_elements(BeaconConfig(mode="custom", altitude_km=700.0, inclination_deg=181.0))


@pytest.mark.parametrize(
    "config, field",
    [
        (BeaconConfig(mode="polar"), "mode"),
        (BeaconConfig(altitude_km=0.0), "altitude_km"),
        (BeaconConfig(local_solar_time_hours=24.0), "local_solar_time_hours"),
    ],
)
def test_invalid_beacon_config(config, field):
    with pytest.raises(ConfigurationError) as exc:
        beacon_elements(config)
    assert exc.value.field == field


def test_phase_override():
    el = beacon_elements(BeaconConfig(), phase_rad=1.25)
    assert el.phase_offset_rad == 1.25
