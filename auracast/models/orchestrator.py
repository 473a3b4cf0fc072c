"""Fan out to model stubs per forecast hour, combine, and persist."""

import asyncio
import logging
import math
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from auracast.config import (
    FALLBACK_CONFIDENCE, FALLBACK_UNCERTAINTY, ZONE_BATCH_SIZE,
)
from auracast.ensemble.combiner import combine
from auracast.ensemble.types import PredictionInput, ModelPrediction, EnsembleResult
from auracast.errors import InvalidInput
from auracast.models.stubs import ModelStub
from auracast.sync.store import RemoteStore, StoreOperation

logger = logging.getLogger(__name__)


@dataclass
class ZoneForecast:
    zone_id: str
    success: bool
    results: list[EnsembleResult] = field(default_factory=list)
    error: str | None = None


class PredictionOrchestrator:
    """Owns a set of model stubs and the store forecasts are written to."""

    def __init__(self, models: Sequence[ModelStub], store: RemoteStore | None = None):
        if not models:
            raise InvalidInput("At least one model stub is required")
        self.models = list(models)
        self.store = store

    def model_status(self) -> dict[str, bool]:
        return {m.name: True for m in self.models}

    def _predict_all(self, input: PredictionInput) -> list[ModelPrediction]:
        predictions = []
        for model in self.models:
            try:
                p = model.predict(input)
                if not isinstance(p, ModelPrediction):
                    raise TypeError(f"expected ModelPrediction, got {type(p).__name__}")
                if not (math.isfinite(p.prediction) and math.isfinite(p.uncertainty)):
                    raise ValueError(f"non-finite output {p.prediction}±{p.uncertainty}")
                predictions.append(p)
            except Exception as e:
                logger.warning("Prediction failed for %s, using current AQI: %s", model.name, e)
                predictions.append(ModelPrediction(
                    model=model.name,
                    prediction=input.current_aqi,
                    confidence=FALLBACK_CONFIDENCE,
                    uncertainty=FALLBACK_UNCERTAINTY,
                ))
        return predictions

    async def _persist(self, zone_id: str, result: EnsembleResult, issued_at: float) -> None:
        if self.store is None:
            return
        args = {
            "zone_id": zone_id,
            "hour_offset": result.hour_offset,
            "predicted_aqi": result.predicted,
            "confidence": result.confidence,
            "uncertainty": result.uncertainty,
            "confidence_interval": list(result.confidence_interval),
            "model_predictions": result.model_predictions(),
            "timestamp": issued_at,
        }
        try:
            await self.store.mutate(StoreOperation.STORE_PREDICTION, args)
        except Exception as e:
            logger.warning("Failed to persist forecast for %s (+%dh): %s",
                           zone_id, result.hour_offset, e)

    async def forecast(self,
                       input: PredictionInput,
                       horizon_hours: int,
                       zone_id: str = "default") -> list[EnsembleResult]:
        """Hourly ensemble forecasts for offsets 1..horizon_hours.

        Model failures fall back to the current reading; persistence
        failures are logged and the computed results are still returned.
        """
        if horizon_hours < 1:
            raise InvalidInput(f"horizon_hours must be >= 1, got {horizon_hours}")

        issued_at = time.time()
        results = []
        for offset in range(1, horizon_hours + 1):
            shifted = input.shifted(offset)
            ensemble = combine(self._predict_all(shifted))
            results.append(ensemble.model_copy(update={"hour_offset": offset}))

        for result in results:
            await self._persist(zone_id, result, issued_at)

        logger.info("Forecast for %s: %d hours, mean AQI %.1f", zone_id, len(results),
                    sum(r.predicted for r in results) / len(results))
        return results

    async def forecast_zones(self,
                             inputs: Mapping[str, PredictionInput],
                             horizon_hours: int,
                             batch_size: int = ZONE_BATCH_SIZE) -> list[ZoneForecast]:
        """Forecast many zones, ``batch_size`` at a time; one zone failing does not stop the rest."""
        zone_ids = list(inputs)
        outcomes = []

        async def run(zone_id: str) -> ZoneForecast:
            try:
                results = await self.forecast(inputs[zone_id], horizon_hours, zone_id=zone_id)
                return ZoneForecast(zone_id=zone_id, success=True, results=results)
            except Exception as e:
                logger.error("Forecast failed for zone %s: %s", zone_id, e)
                return ZoneForecast(zone_id=zone_id, success=False, error=str(e))

        for i in range(0, len(zone_ids), batch_size):
            batch = zone_ids[i:i + batch_size]
            outcomes.extend(await asyncio.gather(*(run(z) for z in batch)))

        n_ok = sum(o.success for o in outcomes)
        logger.info("Batch forecast: %d / %d zones succeeded", n_ok, len(outcomes))
        return outcomes
