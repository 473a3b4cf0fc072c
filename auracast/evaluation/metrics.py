"""Forecast accuracy metrics, overall and per zone or per model."""

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd

from auracast.ensemble.types import EnsembleResult

logger = logging.getLogger(__name__)


def rmse(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    return float(np.sqrt(np.mean((y_true - y_pred) ** 2)))


def mae(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    return float(np.mean(np.abs(y_true - y_pred)))


def bias(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Mean signed error (positive = forecasting dirtier air than observed)."""
    return float(np.mean(y_pred - y_true))


def interval_coverage(y_true: np.ndarray, lower: np.ndarray, upper: np.ndarray) -> float:
    """Fraction of observations that fall inside their forecast interval."""
    inside = (y_true >= lower) & (y_true <= upper)
    return float(np.mean(inside))


def evaluate(y_true: np.ndarray, y_pred: np.ndarray) -> dict:
    return {
        "rmse": rmse(y_true, y_pred),
        "mae": mae(y_true, y_pred),
        "bias": bias(y_true, y_pred),
    }


def forecast_frame(results: Sequence[EnsembleResult], zone_id: str | None = None) -> pd.DataFrame:
    """Flatten ensemble results to one row per (hour, model), plus the ensemble row."""
    rows = []
    for r in results:
        base = {"zone_id": zone_id, "hour_offset": r.hour_offset}
        rows.append({**base, "model": "ensemble", "predicted": r.predicted,
                     "lower": r.lower, "upper": r.upper})
        for m in r.members:
            rows.append({**base, "model": m.model, "predicted": m.prediction,
                         "lower": np.nan, "upper": np.nan})
    return pd.DataFrame(rows)


def evaluate_forecasts(results: Sequence[EnsembleResult], actuals: Sequence[float]) -> dict:
    """Score ensemble forecasts against observed AQI, hour by hour."""
    if len(results) != len(actuals):
        raise ValueError(f"{len(results)} forecasts but {len(actuals)} observations")
    y_true = np.asarray(actuals, dtype=float)
    y_pred = np.array([r.predicted for r in results])
    metrics = evaluate(y_true, y_pred)
    metrics["coverage"] = interval_coverage(
        y_true,
        np.array([r.lower for r in results]),
        np.array([r.upper for r in results]),
    )
    return metrics


def evaluate_by_segment(df: pd.DataFrame,
                        y_true_col: str,
                        y_pred_col: str,
                        segment_col: str) -> pd.DataFrame:
    """Compute metrics per segment (e.g. per zone, per model).

    Parameters
    ----------
    df : DataFrame containing predictions and actuals.
    y_true_col : column name for observed AQI.
    y_pred_col : column name for predictions.
    segment_col : column to segment by.

    Returns
    -------
    DataFrame with one row per segment, worst RMSE first.
    """
    rows = []
    for seg, group in df.groupby(segment_col):
        m = evaluate(group[y_true_col].to_numpy(dtype=float),
                     group[y_pred_col].to_numpy(dtype=float))
        m[segment_col] = seg
        m["n"] = len(group)
        rows.append(m)

    result = pd.DataFrame(rows)
    cols = [segment_col, "n"] + [c for c in result.columns if c not in [segment_col, "n"]]
    result = result[cols].sort_values("rmse", ascending=False).reset_index(drop=True)
    logger.info("Segment evaluation on '%s': %d segments", segment_col, len(result))
    return result
