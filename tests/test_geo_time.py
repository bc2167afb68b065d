from datetime import datetime, timedelta, timezone

import pytest

from parkwatch.core import geo
from parkwatch.core.geo import Coordinate, haversine_m
from parkwatch.core.time import (
    day_window,
    format_api_timestamp,
    parse_api_timestamp,
    parse_utc_timestamp,
    week_window,
)


def test_haversine_known_distance():
    dresden = Coordinate(lat=51.0504, lon=13.7373)
    leipzig = Coordinate(lat=51.3397, lon=12.3731)
    assert haversine_m(dresden, leipzig) == pytest.approx(100_000, rel=0.02)


def test_haversine_is_symmetric_and_zero_on_identity():
    a = Coordinate(lat=48.0, lon=11.0)
    b = Coordinate(lat=47.5, lon=8.5)
    assert haversine_m(a, a) == 0
    assert haversine_m(a, b) == pytest.approx(haversine_m(b, a))


def test_wire_timestamp_round_trip_is_verbatim():
    dt = datetime(2024, 1, 1, 7, 5, 9)
    assert format_api_timestamp(dt) == "2024-01-01T07:05:09"
    assert parse_api_timestamp("2024-01-01T07:05:09") == dt


def test_format_keeps_wall_clock_of_aware_datetimes():
    dt = datetime(2024, 1, 1, 7, 0, tzinfo=timezone(timedelta(hours=1)))
    assert format_api_timestamp(dt) == "2024-01-01T07:00:00"


def test_parse_utc_timestamp_variants():
    assert parse_utc_timestamp("2024-01-01T12:00:00") == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
    assert parse_utc_timestamp("2024-01-01T12:00:00Z") == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)
    assert parse_utc_timestamp("2024-01-01T13:00:00+01:00") == datetime(2024, 1, 1, 12, tzinfo=timezone.utc)


def test_day_and_week_windows():
    assert day_window(datetime(2024, 2, 29, 23, 59, 59)) == (
        datetime(2024, 2, 29),
        datetime(2024, 3, 1),
    )
    assert week_window(datetime(2024, 1, 1)) == (datetime(2024, 1, 1), datetime(2024, 1, 8))


def test_geo_module_is_documented():
    assert geo.__doc__ and "Geospatial helpers" in geo.__doc__
