"""
Tests for the day-bucketing of 3-hourly forecast samples.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from weatherapp.services.aggregator import day_key, group_forecast_by_day
from weatherapp.services.normalize import normalize_sample

from payloads import forecast_item, three_hourly


def _samples(items):
    return [normalize_sample(i) for i in items]


class TestGroupForecastByDay:

    def test_noon_sample_preferred_otherwise_first_of_day(self):
        """Day 1 has a 12:00 reading; day 2 has nothing between 11 and 13."""
        day1 = three_hourly("2026-10-19", [18, 17, 19, 23, 27, 26, 22, 20], description="day one")
        day1[4]["weather"][0]["description"] = "noon reading"

        day2_hours = [0, 2, 4, 6, 8, 10, 14, 16]
        day2 = [
            forecast_item(f"2026-10-20 {h:02d}:00:00", 15 + i, description=f"h{h}")
            for i, h in enumerate(day2_hours)
        ]

        days = group_forecast_by_day(_samples(day1 + day2))

        assert len(days) == 2
        assert days[0].local_time.hour == 12
        assert days[0].description == "noon reading"
        assert days[1].local_time == datetime(2026, 10, 20, 0, 0)
        assert days[1].description == "h0"

    def test_min_max_cover_every_sample_of_the_day(self):
        items = three_hourly("2026-10-19", [18, 17, 19, 23, 27, 31, 22, 12])

        [day] = group_forecast_by_day(_samples(items))

        assert day.min_temp == 12
        assert day.max_temp == 31
        assert day.temperature == 27  # the 12:00 sample
        assert day.day_key == "2026-10-19"

    def test_representative_within_range(self):
        items = []
        for d, base in zip(range(19, 24), [10, 14, -3, 0, 22]):
            items += three_hourly(f"2026-10-{d}", [base + (i * 7) % 9 for i in range(8)])

        for day in group_forecast_by_day(_samples(items)):
            assert day.min_temp <= day.temperature <= day.max_temp

    def test_single_sample_day(self):
        [day] = group_forecast_by_day(_samples([forecast_item("2026-10-19 21:00:00", 14.6)]))

        assert day.min_temp == day.max_temp == 15
        assert day.local_time.hour == 21

    def test_empty_input(self):
        assert group_forecast_by_day([]) == []

    def test_truncates_to_five_days(self):
        items = []
        for d in range(19, 25):
            items += three_hourly(f"2026-10-{d}", [20] * 8)

        days = group_forecast_by_day(_samples(items))

        assert len(days) == 5
        assert [d.day_key for d in days] == [f"2026-10-{d}" for d in range(19, 24)]

    def test_fewer_days_not_padded(self):
        items = three_hourly("2026-10-19", [20] * 8) + three_hourly("2026-10-20", [21] * 8)

        assert len(group_forecast_by_day(_samples(items))) == 2

    def test_groups_keep_first_seen_order(self):
        items = [
            forecast_item("2026-10-21 09:00:00", 20),
            forecast_item("2026-10-19 09:00:00", 10),
            forecast_item("2026-10-21 12:00:00", 25),
        ]

        days = group_forecast_by_day(_samples(items))

        assert [d.day_key for d in days] == ["2026-10-21", "2026-10-19"]
        assert days[0].temperature == 25
        assert (days[0].min_temp, days[0].max_temp) == (20, 25)

    def test_first_noon_sample_wins(self):
        items = [
            forecast_item("2026-10-19 11:00:00", 20, description="eleven"),
            forecast_item("2026-10-19 13:00:00", 22, description="thirteen"),
        ]

        [day] = group_forecast_by_day(_samples(items))

        assert day.description == "eleven"

    def test_daily_forecast_is_frozen(self):
        [day] = group_forecast_by_day(_samples([forecast_item("2026-10-19 12:00:00", 20)]))

        with pytest.raises(ValidationError):
            day.min_temp = -50


def test_day_key_uses_provider_wall_clock():
    sample = normalize_sample(forecast_item("2026-10-19 23:00:00", 20))
    assert day_key(sample) == "2026-10-19"
