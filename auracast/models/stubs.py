"""Pluggable per-model predictors consumed by the orchestrator.

Anything with a ``name`` and a ``predict(PredictionInput) -> ModelPrediction``
method can be registered; a real inference backend slots in the same way.
"""

import logging
import math
from typing import Protocol, runtime_checkable

import numpy as np

from auracast.config import (
    MODEL_NAMES, SIMULATED_MODEL_PARAMS, DIURNAL_AMPLITUDE,
    REFERENCE_TEMPERATURE, TEMPERATURE_COEF, FALLBACK_UNCERTAINTY,
)
from auracast.ensemble.types import PredictionInput, ModelPrediction

logger = logging.getLogger(__name__)


@runtime_checkable
class ModelStub(Protocol):
    name: str

    def predict(self, input: PredictionInput) -> ModelPrediction:
        ...


class SimulatedModel:
    """Deterministic stand-in for a neural forecaster.

    The point estimate follows a diurnal cycle plus a temperature effect
    around the current reading. Uncertainty comes from ``n_samples``
    noisy draws (Monte Carlo style), seeded by the model seed and the
    input, so the same input always yields the same prediction.
    """

    def __init__(self, name: str, noise_scale: float = 10.0, seed: int = 0,
                 n_samples: int = 10):
        self.name = name
        self.noise_scale = noise_scale
        self.seed = seed
        self.n_samples = n_samples

    def _rng(self, input: PredictionInput) -> np.random.Generator:
        key = [self.seed, input.time_of_day, input.day_of_week,
               int(round(input.current_aqi * 100))]
        return np.random.default_rng(key)

    def predict(self, input: PredictionInput) -> ModelPrediction:
        rng = self._rng(input)
        diurnal = math.sin(input.time_of_day / 24 * 2 * math.pi) * DIURNAL_AMPLITUDE
        weather = (input.weather.temperature - REFERENCE_TEMPERATURE) * TEMPERATURE_COEF
        base = input.current_aqi + diurnal + weather

        samples = base + rng.normal(0.0, self.noise_scale, size=self.n_samples)
        samples = np.clip(samples, 0, None)

        return ModelPrediction(
            model=self.name,
            prediction=float(samples.mean()),
            confidence=float(0.8 + rng.random() * 0.15),
            uncertainty=float(samples.std()),
        )


class PersistenceModel:
    """Tomorrow looks like now: predicts the latest observed value."""

    def __init__(self, name: str = "persistence"):
        self.name = name

    def predict(self, input: PredictionInput) -> ModelPrediction:
        history = input.historical or ()
        if len(history) >= 2:
            uncertainty = float(np.std(history[-24:]))
        else:
            uncertainty = FALLBACK_UNCERTAINTY
        return ModelPrediction(model=self.name, prediction=input.current_aqi,
                               confidence=0.6, uncertainty=uncertainty)


class MovingAverageModel:
    """Mean of the last ``window`` historical values.

    Falls back to the current reading when there is no history.
    """

    def __init__(self, window: int = 3, name: str | None = None):
        self.window = window
        self.name = name or f"ma{window}"

    def predict(self, input: PredictionInput) -> ModelPrediction:
        history = input.historical or ()
        if history:
            pred = float(np.mean(history[-self.window:]))
        else:
            pred = input.current_aqi
        return ModelPrediction(
            model=self.name,
            prediction=pred,
            confidence=0.6,
            uncertainty=abs(pred - input.current_aqi) * 0.2,
        )


def default_models() -> list[ModelStub]:
    """The three simulated forecasters the dashboard ships with."""
    return [SimulatedModel(name, **SIMULATED_MODEL_PARAMS[name]) for name in MODEL_NAMES]
