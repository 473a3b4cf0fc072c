#!/usr/bin/env python
"""Run an hourly ensemble forecast for a sample zone and scan its history for anomalies."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

import numpy as np

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from auracast.config import DEFAULT_HORIZON_HOURS, DEFAULT_SENSITIVITY
from auracast.ensemble.anomaly import summarize_anomalies
from auracast.ensemble.types import PredictionInput, Pollutants, WeatherConditions
from auracast.errors import InsufficientData
from auracast.models.orchestrator import PredictionOrchestrator
from auracast.models.stubs import default_models, MovingAverageModel
from auracast.sync.store import InMemoryStore, StoreOperation


def parse_args():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--zone", default="downtown")
    parser.add_argument("--aqi", type=float, default=85.0)
    parser.add_argument("--horizon", type=int, default=DEFAULT_HORIZON_HOURS)
    parser.add_argument("--sensitivity", type=float, default=DEFAULT_SENSITIVITY)
    return parser.parse_args()


async def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    args = parse_args()

    rng = np.random.default_rng(7)
    hours = np.arange(48)
    history = args.aqi + 15 * np.sin(hours / 24 * 2 * np.pi) + rng.normal(0, 5, size=48)

    reading = PredictionInput.at(
        datetime.now(),
        current_aqi=args.aqi,
        pollutants=Pollutants(pm25=35.0, pm10=50.0, no2=20.0, so2=5.0, o3=40.0, co=0.8),
        weather=WeatherConditions(temperature=28.0, humidity=60.0, wind_speed=3.5, wind_direction=180.0),
        historical=tuple(float(v) for v in history),
    )

    store = InMemoryStore()
    orchestrator = PredictionOrchestrator([*default_models(), MovingAverageModel(window=3)], store)
    results = await orchestrator.forecast(reading, args.horizon, zone_id=args.zone)

    print(f"\nForecast for {args.zone} (current AQI {args.aqi:.0f})")
    print("=" * 60)
    for r in results:
        print(f"+{r.hour_offset:>2}h  AQI {r.predicted:6.1f}  "
              f"[{r.lower:6.1f}, {r.upper:6.1f}]  conf {r.confidence:.2f}")
    print("=" * 60)

    stored = await store.query(StoreOperation.GET_FORECAST, {"zone_id": args.zone})
    print(f"Persisted {len(stored)} forecast rows")

    try:
        summary = summarize_anomalies(history.tolist(), args.sensitivity)
    except InsufficientData as e:
        print(f"Skipping anomaly scan: {e}")
        return
    print(f"Anomalies in history: {summary['total_anomalies']} "
          f"(confidence {summary['confidence']:.2f})")


if __name__ == "__main__":
    asyncio.run(main())
