"""Unit tests for daily / morning-evening pattern recognition."""

from datetime import datetime, timedelta

import pytest

from auracast.ensemble.patterns import daily_pattern, seasonal_pattern, recognize_patterns
from auracast.errors import InvalidInput


def hourly_readings(value_for_hour, days=2):
    start = datetime(2026, 3, 2)
    return [
        {"timestamp": start + timedelta(days=d, hours=h), "aqi": value_for_hour(h)}
        for d in range(days) for h in range(24)
    ]


@pytest.fixture
def rush_hour():
    return hourly_readings(lambda h: 150.0 if 7 <= h <= 9 else 50.0)


@pytest.fixture
def flat():
    return hourly_readings(lambda h: 60.0)


class TestDailyPattern:
    def test_peak_and_low(self, rush_hour):
        p = daily_pattern(rush_hour)
        assert p.data["peak_hour"] == 7
        assert p.data["low_hour"] == 0
        assert len(p.data["hourly_averages"]) == 24
        assert p.description == "Peak pollution at 7:00, lowest at 0:00"

    def test_missing_hours_average_zero(self):
        readings = [{"timestamp": datetime(2026, 3, 2, 12), "aqi": 80.0}]
        p = daily_pattern(readings)
        assert p.data["hourly_averages"][12] == 80.0
        assert p.data["hourly_averages"][0] == 0.0

    def test_empty(self):
        assert daily_pattern([]) is None


class TestSeasonalPattern:
    def test_morning_evening_gap(self, rush_hour):
        p = seasonal_pattern(rush_hour)
        assert p is not None
        assert p.data["morning_avg"] == pytest.approx((3 * 150 + 4 * 50) / 7)
        assert p.data["evening_avg"] == pytest.approx(50.0)

    def test_no_gap(self, flat):
        assert seasonal_pattern(flat) is None


class TestRecognizePatterns:
    def test_all(self, rush_hour):
        types = [p.type for p in recognize_patterns(rush_hour)]
        assert types == ["daily", "seasonal"]

    def test_filter(self, rush_hour):
        types = [p.type for p in recognize_patterns(rush_hour, "seasonal")]
        assert types == ["seasonal"]

    def test_unknown_type(self, flat):
        with pytest.raises(InvalidInput):
            recognize_patterns(flat, "weekly")

    def test_missing_columns(self):
        with pytest.raises(InvalidInput):
            recognize_patterns([{"when": datetime(2026, 1, 1), "aqi": 1.0}])
