"""Daily and morning/evening pattern recognition over timestamped AQI readings."""

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from auracast.config import (
    MORNING_HOURS, EVENING_HOURS, SEASONAL_DIFF_THRESHOLD,
    DAILY_PATTERN_CONFIDENCE, SEASONAL_PATTERN_CONFIDENCE,
)
from auracast.errors import InvalidInput

logger = logging.getLogger(__name__)

PATTERN_TYPES = ("all", "daily", "seasonal")


@dataclass
class Pattern:
    type: str
    description: str
    confidence: float
    data: dict = field(default_factory=dict)


def _to_frame(readings) -> pd.DataFrame:
    """Normalise readings to a DataFrame with ``timestamp`` and ``aqi`` columns."""
    df = pd.DataFrame(readings)
    if df.empty:
        return pd.DataFrame(columns=["timestamp", "aqi", "hour"])
    missing = {"timestamp", "aqi"} - set(df.columns)
    if missing:
        raise InvalidInput(f"Readings are missing columns: {sorted(missing)}")
    df = df[["timestamp", "aqi"]].copy()
    df["timestamp"] = pd.to_datetime(df["timestamp"])
    df["hour"] = df["timestamp"].dt.hour
    return df


def _window_mean(df: pd.DataFrame, hours: tuple[int, int]) -> float:
    lo, hi = hours
    window = df[(df["hour"] >= lo) & (df["hour"] <= hi)]["aqi"]
    return float(window.mean()) if len(window) else 0.0


def daily_pattern(readings) -> Pattern | None:
    """Hourly averages with the peak and the lowest hour.

    Hours without readings average to 0, so they count as the low hour.
    """
    df = _to_frame(readings)
    if df.empty:
        return None

    hourly = (
        df.groupby("hour")["aqi"].mean()
        .reindex(range(24), fill_value=0.0)
    )
    averages = hourly.to_numpy(dtype=float)
    peak_hour = int(np.argmax(averages))
    low_hour = int(np.argmin(averages))

    return Pattern(
        type="daily",
        description=f"Peak pollution at {peak_hour}:00, lowest at {low_hour}:00",
        confidence=DAILY_PATTERN_CONFIDENCE,
        data={"hourly_averages": averages.tolist(),
              "peak_hour": peak_hour, "low_hour": low_hour},
    )


def seasonal_pattern(readings) -> Pattern | None:
    """Report a morning/evening gap larger than SEASONAL_DIFF_THRESHOLD."""
    df = _to_frame(readings)
    if df.empty:
        return None

    morning = _window_mean(df, MORNING_HOURS)
    evening = _window_mean(df, EVENING_HOURS)
    if abs(morning - evening) <= SEASONAL_DIFF_THRESHOLD:
        return None

    return Pattern(
        type="seasonal",
        description=(f"Significant difference between morning ({round(morning)}) "
                     f"and evening ({round(evening)}) AQI"),
        confidence=SEASONAL_PATTERN_CONFIDENCE,
        data={"morning_avg": morning, "evening_avg": evening},
    )


def recognize_patterns(readings, pattern_type: str = "all") -> list[Pattern]:
    if pattern_type not in PATTERN_TYPES:
        raise InvalidInput(f"Unknown pattern type {pattern_type!r}; expected one of {PATTERN_TYPES}")

    patterns = []
    if pattern_type in ("all", "daily"):
        p = daily_pattern(readings)
        if p is not None:
            patterns.append(p)
    if pattern_type in ("all", "seasonal"):
        p = seasonal_pattern(readings)
        if p is not None:
            patterns.append(p)

    logger.info("Pattern recognition (%s): %d patterns", pattern_type, len(patterns))
    return patterns
