"""Unit tests for forecast drift monitoring."""

import asyncio

import numpy as np
import pytest

from auracast.errors import InsufficientData
from auracast.monitoring.drift import prediction_drift, forecast_drift
from auracast.sync.store import InMemoryStore, StoreOperation


def stored(rows):
    """InMemoryStore holding (zone_id, timestamp, predicted_aqi) forecasts."""
    store = InMemoryStore()

    async def fill():
        for zone_id, ts, aqi in rows:
            await store.mutate(StoreOperation.STORE_PREDICTION,
                               {"zone_id": zone_id, "hour_offset": 1,
                                "predicted_aqi": aqi, "timestamp": ts})
    asyncio.run(fill())
    return store


class TestPredictionDrift:
    def test_same_distribution(self):
        rng = np.random.default_rng(1)
        ref = rng.normal(80, 10, 500)
        result = prediction_drift(ref, ref.copy())
        assert result["drift_detected"] is False

    def test_shifted_distribution(self):
        rng = np.random.default_rng(1)
        result = prediction_drift(rng.normal(80, 10, 500), rng.normal(120, 10, 500))
        assert result["drift_detected"] is True
        assert result["current_mean"] > result["reference_mean"]


class TestForecastDrift:
    def test_splits_on_issue_time(self):
        rng = np.random.default_rng(3)
        rows = [("z1", t, v) for t, v in enumerate(rng.normal(60, 5, 50))]
        rows += [("z1", 100 + t, v) for t, v in enumerate(rng.normal(140, 5, 50))]
        result = asyncio.run(forecast_drift(stored(rows), "z1", split_at=100))
        assert result["drift_detected"] is True
        assert result["reference_count"] == 50
        assert result["current_count"] == 50
        assert result["current_mean"] > result["reference_mean"]

    def test_stable_zone(self):
        values = [60.0 + i % 7 for i in range(40)]
        rows = [("z1", t, v) for t, v in enumerate(values)]
        result = asyncio.run(forecast_drift(stored(rows), "z1", split_at=20))
        assert result["drift_detected"] is False

    def test_ignores_other_zones(self):
        rows = [("z1", 0, 50.0), ("z1", 1, 51.0), ("z2", 200, 300.0)]
        with pytest.raises(InsufficientData):
            asyncio.run(forecast_drift(stored(rows), "z1", split_at=100))

    def test_empty_store(self):
        with pytest.raises(InsufficientData) as exc:
            asyncio.run(forecast_drift(InMemoryStore(), "z1", split_at=100))
        assert exc.value.available == 0
