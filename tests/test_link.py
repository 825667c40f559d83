import math

import numpy as np
import pytest

from contactsim.models.elements import OrbitalElements, TerminalState
from contactsim.physics.body import EARTH
from contactsim.physics.geometry import is_occluded, segment_min_distance, subpoint
from contactsim.physics.link import LinkTester, is_linked
from contactsim.physics.propagator import CircularOrbitPropagator
from contactsim.physics.vectors import safe_unit

R = EARTH.radius_km
BEACON_POS = np.array([R + 600.0, 0.0, 0.0])
BEACON_VEL = np.array([0.0, 7.5, 0.0])


def beacon(pos=BEACON_POS, vel=BEACON_VEL):
    return TerminalState(pos, vel)


def remote(pos):
    return TerminalState(pos, [0.0, 0.0, 1.0], hint_kind=TerminalState.PLANE_NORMAL)


# --- geometry ---------------------------------------------------------------

def test_segment_distance_perpendicular_foot():
    assert segment_min_distance([7000.0, -1000.0, 0.0], [7000.0, 1000.0, 0.0]) == pytest.approx(7000.0)


def test_segment_distance_clamps_to_endpoint():
    assert segment_min_distance([7000.0, 0.0, 0.0], [8000.0, 0.0, 0.0]) == pytest.approx(7000.0)


def test_segment_distance_coincident_points():
    assert segment_min_distance([0.0, 7000.0, 0.0], [0.0, 7000.0, 0.0]) == pytest.approx(7000.0)


def test_occlusion_through_centre():
    assert is_occluded([R + 600.0, 0.0, 0.0], [-(R + 780.0), 0.0, 0.0], R)
    assert not is_occluded([R + 600.0, 0.0, 0.0], [R + 600.0, 500.0, 0.0], R)


def test_segment_distance_vectorised():
    r1 = np.array([[7000.0, -1000.0, 0.0], [7000.0, 0.0, 0.0]])
    r2 = np.array([[7000.0, 1000.0, 0.0], [-7000.0, 0.0, 0.0]])
    assert segment_min_distance(r1, r2) == pytest.approx([7000.0, 0.0])


def test_subpoint():
    assert subpoint([0.0, 0.0, 7000.0])["latitude"] == pytest.approx(90.0)
    sp = subpoint([0.0, 7000.0, 0.0])
    assert sp["latitude"] == pytest.approx(0.0)
    assert sp["longitude"] == pytest.approx(90.0)


def test_safe_unit_flags_zero_and_nan():
    unit, ok = safe_unit(np.array([[3.0, 4.0, 0.0], [0.0, 0.0, 0.0], [np.nan, 1.0, 0.0]]))
    assert ok.tolist() == [True, False, False]
    assert unit[0] == pytest.approx([0.6, 0.8, 0.0])
    assert np.all(np.isfinite(unit))


# --- link test --------------------------------------------------------------

def test_antipodal_pair_never_linked_even_with_open_cones():
    far = remote([-(R + 780.0), 0.0, 0.0])
    assert not is_linked(beacon(), far, math.pi, math.pi)


def test_forward_cone_link():
    # remote nadir sees the beacon about 66.7 deg off boresight
    target = remote([R + 600.0, 3000.0, 0.0])
    assert is_linked(beacon(), target, math.radians(10), math.radians(70))
    assert not is_linked(beacon(), target, math.radians(10), math.radians(60))


def test_backward_cone_link():
    behind = remote([R + 600.0, -3000.0, 0.0])
    assert is_linked(beacon(), behind, math.radians(10), math.radians(70))


def test_zero_beacon_half_angle_needs_exact_alignment():
    off_axis = remote([R + 650.0, 3000.0, 0.0])
    assert is_linked(beacon(), off_axis, math.radians(10), math.radians(70))
    assert not is_linked(beacon(), off_axis, 0.0, math.radians(70))


def test_zero_remote_half_angle_blocks_link():
    target = remote([R + 600.0, 3000.0, 0.0])
    assert not is_linked(beacon(), target, math.radians(60), 0.0)


def test_sideways_target_outside_beacon_cones():
    # straight "up" from the beacon: perpendicular to the velocity
    above = remote([R + 1600.0, 0.0, 0.0])
    assert not is_linked(beacon(), above, math.radians(60), math.pi)


def test_plane_normal_hint_matches_velocity_hint():
    target = remote([R + 600.0, 3000.0, 0.0])
    by_normal = TerminalState(BEACON_POS, [0.0, 0.0, 1.0], hint_kind=TerminalState.PLANE_NORMAL)
    fwd, ok = LinkTester.beacon_forward(by_normal)
    assert ok
    assert fwd == pytest.approx([0.0, 1.0, 0.0])
    assert is_linked(by_normal, target, math.radians(10), math.radians(70))


@pytest.mark.parametrize(
    "b",
    [
        TerminalState(BEACON_POS, [0.0, 0.0, 0.0]),
        TerminalState(BEACON_POS, [1.0, 0.0, 0.0], hint_kind=TerminalState.PLANE_NORMAL),
        TerminalState([np.nan, 0.0, 0.0], BEACON_VEL),
    ],
    ids=["zero-velocity", "normal-along-radius", "nan-position"],
)
def test_degenerate_beacon_is_not_linked(b):
    target = remote([R + 600.0, 3000.0, 0.0])
    tester = LinkTester(math.pi, math.pi)
    linked, degenerate = tester.evaluate(b, target)
    assert not linked


@pytest.mark.parametrize(
    "hint",
    [[0.0, 0.0, 0.0], [np.nan, 0.0, 0.0]],
    ids=["zero-normal", "nan-normal"],
)
def test_degenerate_remote_normal_is_not_linked(hint):
    # same geometry as test_forward_cone_link, which links with a valid normal
    target = TerminalState([R + 600.0, 3000.0, 0.0], hint, hint_kind=TerminalState.PLANE_NORMAL)
    tester = LinkTester(math.radians(10), math.radians(70))
    linked, degenerate = tester.evaluate(beacon(), target)
    assert degenerate
    assert not linked
    assert not is_linked(beacon(), target, math.radians(10), math.radians(70))


def test_coincident_terminals_are_degenerate():
    tester = LinkTester.from_degrees(60, 31)
    linked, degenerate = tester.evaluate(beacon(), remote(BEACON_POS))
    assert degenerate
    assert not linked


def test_terminal_below_surface_not_linked():
    buried = remote([R - 10.0, 100.0, 0.0])
    assert not is_linked(beacon(), buried, math.pi, math.pi)


def test_mask_matches_single_instant_checks():
    b = CircularOrbitPropagator(OrbitalElements.from_degrees(600.0, 97.5))
    r = CircularOrbitPropagator(OrbitalElements.from_degrees(781.0, 86.4, 180.0, 90.0))
    t = np.arange(0.0, 12000.0, 60.0)
    tester = LinkTester.from_degrees(60, 31)
    mask = tester.mask(b.state(t), r.state(t, TerminalState.PLANE_NORMAL))
    assert mask.shape == t.shape
    for k in range(0, len(t), 17):
        single = tester.check(b.state(t[k]), r.state(t[k], TerminalState.PLANE_NORMAL))
        assert single == bool(mask[k])


def test_half_angle_out_of_range():
    with pytest.raises(ValueError):
        LinkTester(math.radians(200), 0.5)
