import math

import numpy as np
import pytest

from contactsim.engine.constellation import (
    ConstellationLayout,
    primary_index,
    resolve_members,
    single_member,
    walker_members,
)
from contactsim.errors import ConfigurationError
from contactsim.models.elements import OrbitalElements, RemoteSatellite
from contactsim.models.params import RemoteConfig


@pytest.fixture
def iridium_members():
    return walker_members(66, 781.0, 86.4, name_prefix="IRIDIUM")


def test_slot_positions():
    layout = ConstellationLayout.iridium()
    assert layout.slot(0) == (0.0, 0.0)
    raan, phase = layout.slot(12)
    assert math.degrees(raan) == pytest.approx(31.6)
    assert math.degrees(phase) == pytest.approx(360.0 / 11)


def test_assign_iridium_layout(iridium_members):
    elements = ConstellationLayout.iridium().assign(iridium_members)
    assert len(elements) == 66
    assert math.degrees(elements[11].raan_rad) == pytest.approx(31.6)
    assert math.degrees(elements[65].raan_rad) == pytest.approx(5 * 31.6)
    assert math.degrees(elements[65].phase_offset_rad) == pytest.approx(10 * 360.0 / 11)
    assert all(el.altitude_km == 781.0 for el in elements)


def test_explicit_orbit_overrides_slot():
    member = RemoteSatellite(7, 781.0, math.radians(86.4), raan_rad=1.0, phase_rad=2.0)
    (el,) = ConstellationLayout().assign([member])
    assert el.raan_rad == 1.0
    assert el.phase_offset_rad == 2.0


def test_raan_is_wrapped():
    member = RemoteSatellite(7, 781.0, 1.0, raan_rad=3 * math.pi)
    (el,) = ConstellationLayout().assign([member])
    assert el.raan_rad == pytest.approx(math.pi)


def test_expected_size_mismatch(iridium_members):
    with pytest.raises(ConfigurationError) as exc:
        ConstellationLayout.iridium().assign(iridium_members[:60])
    assert "66" in str(exc.value)


def test_empty_members_rejected():
    with pytest.raises(ConfigurationError):
        ConstellationLayout().assign([])


def test_duplicate_ids_rejected():
    members = walker_members(3, 781.0, 86.4)
    members.append(members[0])
    with pytest.raises(ConfigurationError):
        ConstellationLayout().assign(members)


def test_invalid_member_names_the_member():
    members = [RemoteSatellite(42, -5.0, 1.0)]
    with pytest.raises(ConfigurationError) as exc:
        ConstellationLayout().assign(members)
    assert exc.value.field == "members[42].altitude_km"


def test_seeded_jitter_is_reproducible(iridium_members):
    layout = ConstellationLayout.iridium(raan_jitter_rad=0.01, phase_jitter_rad=0.02)
    first = layout.assign(iridium_members, rng=np.random.default_rng(7))
    second = layout.assign(iridium_members, rng=np.random.default_rng(7))
    plain = layout.assign(iridium_members)
    assert first == second
    assert first != plain


def test_jitter_without_rng_is_ignored(iridium_members):
    jittery = ConstellationLayout.iridium(raan_jitter_rad=0.5)
    assert jittery.assign(iridium_members) == ConstellationLayout.iridium().assign(iridium_members)


def test_single_member_sits_on_opposite_node():
    beacon = OrbitalElements.from_degrees(600.0, 97.5, 150.0)
    member = single_member(RemoteConfig(satellite_id=5), beacon)
    assert member.satellite_id == 5
    assert math.degrees(member.raan_rad) == pytest.approx(330.0)
    assert member.phase_rad == pytest.approx(math.pi / 2)


def test_single_member_rejects_bad_inclination():
    beacon = OrbitalElements.from_degrees(600.0, 97.5)
    with pytest.raises(ConfigurationError):
        single_member(RemoteConfig(inclination_deg=200.0), beacon)


def test_resolve_members(iridium_members):
    beacon = OrbitalElements.from_degrees(600.0, 97.5)
    assert resolve_members(RemoteConfig(show_all=True, members=iridium_members), beacon) == iridium_members
    # show_all without members and a plain config both fall back to one satellite
    assert len(resolve_members(RemoteConfig(show_all=True), beacon)) == 1
    assert len(resolve_members(RemoteConfig(members=iridium_members), beacon)) == 1


def test_primary_index(iridium_members):
    assert primary_index(iridium_members, 12) == 11
    assert primary_index(iridium_members, 999) == 0
