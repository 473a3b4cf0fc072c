"""z-score anomaly flagging over a historical AQI series."""

import logging
from collections.abc import Sequence

import numpy as np

from auracast.config import (
    MIN_ANOMALY_POINTS, ANOMALY_BASE_THRESHOLD, HIGH_SEVERITY_Z,
    DEFAULT_SENSITIVITY, ANOMALY_CONFIDENCE_BASE, CONFIDENCE_CEILING,
)
from auracast.ensemble.types import AnomalyFlag, Severity
from auracast.errors import InvalidInput, InsufficientData

logger = logging.getLogger(__name__)


def detect_anomalies(series: Sequence[float],
                     sensitivity: float = DEFAULT_SENSITIVITY,
                     min_points: int = MIN_ANOMALY_POINTS) -> list[AnomalyFlag]:
    """Flag every point of ``series`` by its distance from the series mean.

    A point is anomalous when ``z > 3 - sensitivity``; severity is high
    above z = 4. Mean and std are the population statistics of the whole
    series. A constant series (std == 0) has no anomalies: every point gets
    z = 0 and severity low.

    Parameters
    ----------
    series : ordered past values, oldest first.
    sensitivity : in [0, 1]; higher values lower the threshold.
    min_points : shortest series accepted, 24 by default.
    """
    if not 0.0 <= sensitivity <= 1.0:
        raise InvalidInput(f"sensitivity must be in [0, 1], got {sensitivity}")
    if len(series) < min_points:
        raise InsufficientData(required=min_points, available=len(series))

    values = np.asarray(series, dtype=float)
    mean = values.mean()
    std = values.std()
    threshold = ANOMALY_BASE_THRESHOLD - sensitivity

    if std == 0:
        z_scores = np.zeros_like(values)
    else:
        z_scores = np.abs(values - mean) / std

    flags = []
    for i, (value, z) in enumerate(zip(values, z_scores)):
        is_anomaly = bool(z > threshold)
        if not is_anomaly:
            severity = Severity.LOW
        elif z > HIGH_SEVERITY_Z:
            severity = Severity.HIGH
        else:
            severity = Severity.MEDIUM
        flags.append(AnomalyFlag(index=i, value=float(value), z_score=float(z),
                                 is_anomaly=is_anomaly, severity=severity))

    n_anomalies = sum(f.is_anomaly for f in flags)
    if n_anomalies:
        logger.info("Anomaly scan: %d / %d points flagged (threshold z > %.2f)",
                    n_anomalies, len(flags), threshold)
    return flags


def anomaly_confidence(flags: Sequence[AnomalyFlag]) -> float:
    if not flags:
        return ANOMALY_CONFIDENCE_BASE
    ratio = sum(f.is_anomaly for f in flags) / len(flags)
    return min(CONFIDENCE_CEILING, ratio + ANOMALY_CONFIDENCE_BASE)


def summarize_anomalies(series: Sequence[float],
                        sensitivity: float = DEFAULT_SENSITIVITY,
                        min_points: int = MIN_ANOMALY_POINTS) -> dict:
    """Run detection and keep only the anomalous points."""
    flags = detect_anomalies(series, sensitivity, min_points)
    anomalies = [f for f in flags if f.is_anomaly]
    return {
        "anomalies": anomalies,
        "total_anomalies": len(anomalies),
        "confidence": anomaly_confidence(flags),
        "sensitivity": sensitivity,
    }
