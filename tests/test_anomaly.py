"""Unit tests for z-score anomaly detection."""

import pytest

from auracast.ensemble.anomaly import detect_anomalies, anomaly_confidence, summarize_anomalies
from auracast.ensemble.types import Severity
from auracast.errors import InsufficientData, InvalidInput


@pytest.fixture
def alternating():
    """100 points alternating 9/11: mean 10, std 1."""
    return [9.0, 11.0] * 50


class TestDetectAnomalies:
    def test_constant_series_has_no_anomalies(self):
        for sensitivity in (0.0, 0.5, 1.0):
            flags = detect_anomalies([42.0] * 24, sensitivity)
            assert len(flags) == 24
            assert not any(f.is_anomaly for f in flags)
            assert all(f.z_score == 0 and f.severity is Severity.LOW for f in flags)

    def test_short_series_raises(self):
        with pytest.raises(InsufficientData) as exc:
            detect_anomalies([1.0] * 23)
        assert exc.value.required == 24
        assert exc.value.available == 23

    def test_min_points_configurable(self):
        flags = detect_anomalies([1.0] * 12, min_points=10)
        assert len(flags) == 12

    def test_invalid_sensitivity(self):
        with pytest.raises(InvalidInput):
            detect_anomalies([1.0] * 30, sensitivity=1.5)

    def test_single_spike_is_high(self):
        series = [10.0] * 23 + [100.0]
        flags = detect_anomalies(series, sensitivity=0.8)
        assert flags[-1].is_anomaly
        assert flags[-1].severity is Severity.HIGH
        assert not any(f.is_anomaly for f in flags[:-1])

    def test_far_outlier_is_high(self):
        # z is bounded by sqrt(n - 1), so a long series is needed for z > 10
        flags = detect_anomalies([9.0, 11.0] * 500 + [30.0], sensitivity=0.8)
        spike = flags[-1]
        assert spike.z_score > 10
        assert spike.severity is Severity.HIGH

    def test_moderate_outlier_is_medium(self, alternating):
        flags = detect_anomalies(alternating + [13.5], sensitivity=0.8)
        assert flags[-1].is_anomaly
        assert flags[-1].severity is Severity.MEDIUM

    def test_sensitivity_lowers_threshold(self, alternating):
        series = alternating + [13.0]  # z ~ 2.86
        assert not detect_anomalies(series, sensitivity=0.0)[-1].is_anomaly
        assert detect_anomalies(series, sensitivity=0.8)[-1].is_anomaly

    def test_indices_follow_series(self, alternating):
        flags = detect_anomalies(alternating)
        assert [f.index for f in flags] == list(range(len(alternating)))


class TestAnomalyConfidence:
    def test_confidence(self):
        flags = detect_anomalies([10.0] * 23 + [100.0])
        assert anomaly_confidence(flags) == pytest.approx(1 / 24 + 0.5)

    def test_confidence_capped(self):
        flags = detect_anomalies([10.0] * 23 + [100.0])
        assert anomaly_confidence(flags) <= 0.95

    def test_summary_only_keeps_anomalies(self):
        summary = summarize_anomalies([10.0] * 23 + [100.0])
        assert summary["total_anomalies"] == 1
        assert summary["anomalies"][0].index == 23
