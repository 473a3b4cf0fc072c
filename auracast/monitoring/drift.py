"""Forecast distribution drift over stored prediction results."""

import logging

import numpy as np
from scipy import stats

from auracast.errors import InsufficientData
from auracast.sync.store import RemoteStore, StoreOperation

logger = logging.getLogger(__name__)


def prediction_drift(reference_preds: np.ndarray,
                     current_preds: np.ndarray,
                     threshold: float = 0.05) -> dict:
    """Detect drift in forecast distribution using a two-sample KS test.

    Parameters
    ----------
    reference_preds : forecasts from a trusted period.
    current_preds : recent forecasts.
    threshold : p-value below which drift is reported.

    Returns
    -------
    Dict with statistic, p_value, and drift_detected flag.
    """
    ks_stat, p_value = stats.ks_2samp(reference_preds, current_preds)
    drift_detected = bool(p_value < threshold)

    result = {
        "ks_statistic": float(ks_stat),
        "p_value": float(p_value),
        "drift_detected": drift_detected,
        "reference_mean": float(np.mean(reference_preds)),
        "current_mean": float(np.mean(current_preds)),
        "reference_count": int(len(reference_preds)),
        "current_count": int(len(current_preds)),
    }

    if drift_detected:
        logger.warning("FORECAST DRIFT DETECTED: KS=%.4f, p=%.6f", ks_stat, p_value)
    else:
        logger.info("No forecast drift: KS=%.4f, p=%.6f", ks_stat, p_value)

    return result


async def forecast_drift(store: RemoteStore,
                         zone_id: str,
                         split_at: float,
                         threshold: float = 0.05) -> dict:
    """Compare a zone's stored forecasts issued before ``split_at`` with those issued since.

    Raises InsufficientData when either window holds no forecasts.
    """
    rows = await store.query(StoreOperation.GET_FORECAST, {"zone_id": zone_id})
    reference = np.array([r["predicted_aqi"] for r in rows if r.get("timestamp", 0) < split_at], dtype=float)
    current = np.array([r["predicted_aqi"] for r in rows if r.get("timestamp", 0) >= split_at], dtype=float)

    if len(reference) == 0 or len(current) == 0:
        logger.warning("Zone %s lacks forecasts on one side of %s", zone_id, split_at)
        raise InsufficientData(required=1, available=min(len(reference), len(current)))

    logger.info("Drift check for %s: %d reference vs %d current forecasts",
                zone_id, len(reference), len(current))
    return prediction_drift(reference, current, threshold)
