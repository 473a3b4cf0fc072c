"""Uncertainty-weighted ensemble of per-model AQI predictions."""

import logging
from collections.abc import Sequence

import numpy as np

from auracast.config import (
    UNCERTAINTY_WEIGHT_SCALE, CONFIDENCE_SCALE, CONFIDENCE_FLOOR,
    CONFIDENCE_CEILING, Z_SCORE_95, AQI_FLOOR,
)
from auracast.ensemble.types import ModelPrediction, EnsembleResult
from auracast.errors import InvalidInput

logger = logging.getLogger(__name__)


def _raw_weights(predictions: Sequence[ModelPrediction]) -> np.ndarray:
    uncertainties = np.array([p.uncertainty for p in predictions], dtype=float)
    return 1.0 / (1.0 + uncertainties / UNCERTAINTY_WEIGHT_SCALE)


def model_weights(predictions: Sequence[ModelPrediction]) -> dict[str, float]:
    """Normalised weight each model receives in the ensemble."""
    if not predictions:
        return {}
    w = _raw_weights(predictions)
    w = w / w.sum()
    return {p.model: float(wi) for p, wi in zip(predictions, w)}


def combine(predictions: Sequence[ModelPrediction],
            floor: float | None = AQI_FLOOR) -> EnsembleResult:
    """Combine model predictions into one estimate with an uncertainty band.

    Parameters
    ----------
    predictions : non-empty sequence of ModelPrediction.
    floor : domain minimum for the interval's lower bound (None disables it).

    Returns
    -------
    EnsembleResult with weighted mean, population RMS deviation as
    uncertainty, an agreement-based confidence and a 95% interval.
    """
    if not predictions:
        raise InvalidInput("Cannot combine an empty list of predictions")

    values = np.array([p.prediction for p in predictions], dtype=float)
    weights = _raw_weights(predictions)
    if np.ptp(values) == 0:
        mean = float(values[0])
    else:
        mean = float(np.sum(values * weights) / np.sum(weights))

    deviations = np.abs(values - mean)
    uncertainty = float(np.sqrt(np.mean(deviations ** 2)))
    max_deviation = float(deviations.max())

    agreement = max(0.0, 1.0 - max_deviation / CONFIDENCE_SCALE)
    confidence = agreement * (1.0 - uncertainty / CONFIDENCE_SCALE)
    confidence = float(np.clip(confidence, CONFIDENCE_FLOOR, CONFIDENCE_CEILING))

    margin = Z_SCORE_95 * uncertainty
    lower = mean - margin
    if floor is not None:
        # Never lift the bound above the estimate itself
        lower = max(lower, min(floor, mean))
    upper = mean + margin

    logger.debug("Ensemble of %d models: mean=%.2f u=%.2f conf=%.3f",
                 len(predictions), mean, uncertainty, confidence)
    return EnsembleResult(
        predicted=mean,
        confidence=confidence,
        uncertainty=uncertainty,
        confidence_interval=(lower, upper),
        members=tuple(predictions),
    )
