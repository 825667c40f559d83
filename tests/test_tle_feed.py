import json
import math

import pytest
import requests

from contactsim.data import tle_feed
from contactsim.data.tle_feed import (
    fetch_group_text,
    load_constellation,
    parse_tle_text,
    remote_from_tle,
    remotes_from_text,
)

ISS_L1 = "1 25544U 98067A   19343.69339541  .00001764  00000-0  38792-4 0  9991"
ISS_L2 = "2 25544  51.6439 211.2001 0007417  17.6667  85.6398 15.50103472202482"
TLE_TEXT = f"ISS (ZARYA)\n{ISS_L1}\n{ISS_L2}\n"


class FakeResponse:
    def __init__(self, text, status_code=200, content_type="text/plain"):
        self.text = text
        self.status_code = status_code
        self.headers = {"Content-Type": content_type}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    def __init__(self, *responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = 0

    def get(self, url, params=None, timeout=None):
        self.calls += 1
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(tle_feed.time, "sleep", lambda s: None)


def test_parse_named_and_unnamed_pairs():
    text = f"{TLE_TEXT}\n{ISS_L1}\n{ISS_L2}\n"
    tles = parse_tle_text(text)
    assert [t[0] for t in tles] == ["ISS (ZARYA)", "NORAD-25544"]
    assert tles[0][1] == ISS_L1


def test_parse_ignores_noise():
    assert parse_tle_text("") == []
    assert parse_tle_text("hello\nworld") == []


def test_remote_from_tle():
    sat = remote_from_tle("ISS (ZARYA)", ISS_L1, ISS_L2)
    assert sat.satellite_id == 25544
    assert sat.name == "ISS (ZARYA)"
    assert 400.0 < sat.altitude_km < 450.0
    assert sat.inclination_rad == pytest.approx(math.radians(51.6439))
    assert sat.raan_rad == pytest.approx(math.radians(211.2001))
    assert 0.0 <= sat.phase_rad < 2 * math.pi


def test_iridium_name_sets_id():
    sat = remote_from_tle("IRIDIUM 106", ISS_L1, ISS_L2)
    assert sat.satellite_id == 106
    assert sat.label == "IRIDIUM 106"


def test_duplicates_are_skipped():
    members = remotes_from_text(TLE_TEXT + TLE_TEXT)
    assert len(members) == 1


def test_fetch_returns_text():
    session = FakeSession(FakeResponse(TLE_TEXT))
    assert fetch_group_text(session=session) == TLE_TEXT
    assert "User-Agent" in session.headers


def test_fetch_retries_then_succeeds():
    session = FakeSession(requests.ConnectionError("down"), FakeResponse(TLE_TEXT))
    assert fetch_group_text(session=session, retries=3) == TLE_TEXT
    assert session.calls == 2


def test_fetch_rejects_html():
    session = FakeSession(FakeResponse("<html><body>oops</body></html>", content_type="text/html"))
    with pytest.raises(RuntimeError):
        fetch_group_text(session=session, retries=2)
    assert session.calls == 2


def test_fetch_404_is_not_retried():
    session = FakeSession(FakeResponse("", status_code=404))
    with pytest.raises(RuntimeError, match="404"):
        fetch_group_text(session=session, retries=3)
    assert session.calls == 1


def test_load_constellation_fetches_and_caches(tmp_path):
    cache = tmp_path / "tle_cache.json"
    members, source = load_constellation(session=FakeSession(FakeResponse(TLE_TEXT)), cache_file=cache)
    assert source == "celestrak"
    assert [m.satellite_id for m in members] == [25544]
    assert "iridium-next" in json.loads(cache.read_text())

    offline = FakeSession(requests.ConnectionError("offline"))
    members, source = load_constellation(session=offline, cache_file=cache)
    assert source == "cache"
    assert offline.calls == 0


def test_load_constellation_falls_back(tmp_path):
    session = FakeSession(requests.ConnectionError("offline"))
    members, source = load_constellation(session=session, cache_file=tmp_path / "c.json")
    assert source == "fallback"
    assert len(members) == 66
    assert members[0].name == "IRIDIUM 1"
    assert all(m.raan_rad is None for m in members)
    assert not (tmp_path / "c.json").exists()


def test_corrupt_cache_is_ignored(tmp_path):
    cache = tmp_path / "tle_cache.json"
    cache.write_text("{not json")
    members, source = load_constellation(session=FakeSession(FakeResponse(TLE_TEXT)), cache_file=cache)
    assert source == "celestrak"
