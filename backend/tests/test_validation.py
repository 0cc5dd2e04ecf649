import math

from kisan_saathi.core.models import LocationRecord
from kisan_saathi.tools.validation import (
    is_blocked_city,
    is_stale,
    rejection_reason,
    valid_coordinates,
)


def _record(**kw):
    base = dict(city="Lucknow", state="Uttar Pradesh", lat=26.85, lon=80.95,
                accuracy=80, source="ip_lookup", timestamp=0)
    base.update(kw)
    return LocationRecord(**base)


def test_valid_coordinates():
    assert valid_coordinates(25.3, 82.9)
    assert not valid_coordinates(0, 0)
    assert not valid_coordinates(91, 10)
    assert not valid_coordinates(10, -181)
    assert not valid_coordinates(math.nan, 10)
    assert not valid_coordinates(math.inf, 10)
    assert not valid_coordinates(None, 10)
    assert not valid_coordinates(True, 10)


def test_blocked_city_is_case_insensitive():
    blocked = ("Delhi", "New Delhi")
    assert is_blocked_city("delhi", blocked)
    assert is_blocked_city(" NEW DELHI ", blocked)
    assert not is_blocked_city("Delhi Cantonment", blocked)


def test_rejection_reasons():
    assert rejection_reason(_record()) is None
    assert "city" in rejection_reason(_record(city=" "))
    assert "city" in rejection_reason(_record(state=""))
    assert "coordinates" in rejection_reason(_record(lat=0, lon=0))
    assert "blocked" in rejection_reason(_record(city="Delhi"), ("Delhi",))
    # block list only applies when given
    assert rejection_reason(_record(city="Delhi")) is None


def test_is_stale():
    week = 7 * 24 * 3600
    now = 1_000_000_000_000
    assert not is_stale(now - week * 1000, week, now)
    assert is_stale(now - week * 1000 - 1, week, now)
