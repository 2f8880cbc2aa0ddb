from datetime import datetime, timezone

import pytest

from weatherapp.services.normalize import (
    normalize_current,
    normalize_sample,
    round_half_away,
    wind_speed_unit,
)

from payloads import current_payload, forecast_item


@pytest.mark.parametrize("value,expected", [
    (2.5, 3),
    (-2.5, -3),
    (2.49, 2),
    (-0.4, 0),
    (24.0, 24),
])
def test_round_half_away_from_zero(value, expected):
    assert round_half_away(value) == expected


def test_wind_speed_unit():
    assert wind_speed_unit("metric") == "m/s"
    assert wind_speed_unit("imperial") == "mph"


def test_normalize_current_maps_fields():
    out = normalize_current(current_payload(temp=-3.5, feels_like=-7.5), "imperial")

    assert out.location == "Pune, IN"
    assert out.coordinates.lat == 18.52
    assert out.temperature == -4
    assert out.feels_like == -8
    assert out.description == "clear sky"
    assert out.icon == "01d"
    assert out.humidity == 40
    assert out.pressure == 1012
    assert out.wind_speed == 3.6
    assert out.wind_direction == 270
    assert out.wind_speed_unit == "mph"
    assert out.visibility_km == 10.0
    assert out.cloudiness == 0
    assert out.sunrise == datetime.fromtimestamp(1792285200, tz=timezone.utc)
    assert out.sunset.tzinfo is not None
    assert out.timezone == 19800


def test_normalize_current_without_visibility():
    data = current_payload()
    del data["visibility"]

    assert normalize_current(data, "metric").visibility_km is None


def test_normalize_sample():
    s = normalize_sample(forecast_item("2026-10-19 12:00:00", 21.5, pop=0.07, dt=1792411200))

    assert s.local_time == datetime(2026, 10, 19, 12, 0)
    assert s.timestamp == 1792411200
    assert s.temperature == 22
    assert s.precipitation_probability == pytest.approx(7)
    assert s.description == "few clouds"
    assert s.wind_direction == 90


def test_precipitation_probability_is_not_rounded():
    s = normalize_sample(forecast_item("2026-10-19 12:00:00", 20, pop=0.125))

    assert s.precipitation_probability == pytest.approx(12.5)
