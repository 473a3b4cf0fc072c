import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from auracast.ensemble.anomaly import summarize_anomalies
from auracast.ensemble.combiner import combine
from auracast.ensemble.types import EnsembleResult
from auracast.errors import InvalidInput, InsufficientData
from auracast.models.orchestrator import PredictionOrchestrator
from auracast.models.stubs import default_models
from auracast.monitoring.drift import forecast_drift
from auracast.serving.schemas import (
    ForecastRequest, ForecastResponse, HourlyForecast,
    EnsembleRequest, EnsembleResponse,
    AnomalyRequest, AnomalyResponse, AnomalyPoint,
    DriftResponse, HealthResponse,
)
from auracast.sync.store import InMemoryStore

logger = logging.getLogger(__name__)


def _response_fields(result: EnsembleResult) -> dict:
    return {
        "predicted_aqi": round(result.predicted, 2),
        "confidence": round(result.confidence, 3),
        "uncertainty": round(result.uncertainty, 2),
        "confidence_lower": round(result.lower, 2),
        "confidence_upper": round(result.upper, 2),
        "model_predictions": {k: round(v, 2) for k, v in result.model_predictions().items()},
    }


def create_app(orchestrator: PredictionOrchestrator | None = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=logging.INFO,
                            format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
        if app.state.orchestrator is None:
            logger.info("Starting with default models and an in-memory store …")
            app.state.orchestrator = PredictionOrchestrator(default_models(), InMemoryStore())
        yield

    app = FastAPI(
        title="AuraCast Air Quality Forecasting API",
        description="Ensemble AQI forecasts and anomaly detection for monitoring zones.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    def get_orchestrator() -> PredictionOrchestrator:
        if app.state.orchestrator is None:
            raise HTTPException(status_code=503, detail="Models not loaded")
        return app.state.orchestrator

    @app.post("/forecast", response_model=ForecastResponse)
    async def forecast(request: ForecastRequest):
        orch = get_orchestrator()
        try:
            results = await orch.forecast(request.input, request.horizon_hours,
                                          zone_id=request.zone_id)
        except InvalidInput as e:
            raise HTTPException(status_code=422, detail=str(e))
        return ForecastResponse(
            zone_id=request.zone_id,
            forecasts=[HourlyForecast(hour_offset=r.hour_offset, **_response_fields(r))
                       for r in results],
        )

    @app.post("/ensemble", response_model=EnsembleResponse)
    async def ensemble(request: EnsembleRequest):
        try:
            result = combine(request.predictions)
        except InvalidInput as e:
            raise HTTPException(status_code=422, detail=str(e))
        return EnsembleResponse(**_response_fields(result))

    @app.post("/anomalies", response_model=AnomalyResponse)
    async def anomalies(request: AnomalyRequest):
        try:
            summary = summarize_anomalies(request.series, request.sensitivity)
        except (InvalidInput, InsufficientData) as e:
            logger.error("Anomaly detection rejected: %s", e)
            raise HTTPException(status_code=422, detail=str(e))
        return AnomalyResponse(
            anomalies=[AnomalyPoint(index=f.index, value=f.value,
                                    z_score=round(f.z_score, 3), severity=f.severity)
                       for f in summary["anomalies"]],
            total_anomalies=summary["total_anomalies"],
            confidence=summary["confidence"],
        )

    @app.get("/zones/{zone_id}/drift", response_model=DriftResponse)
    async def drift(zone_id: str, split_at: float):
        orch = get_orchestrator()
        if orch.store is None:
            raise HTTPException(status_code=503, detail="No forecast store configured")
        try:
            result = await forecast_drift(orch.store, zone_id, split_at)
        except InsufficientData as e:
            raise HTTPException(status_code=422, detail=str(e))
        return DriftResponse(zone_id=zone_id, split_at=split_at, **result)

    @app.get("/health", response_model=HealthResponse)
    async def health():
        orch = app.state.orchestrator
        return HealthResponse(
            status="healthy" if orch is not None else "degraded",
            models=orch.model_status() if orch is not None else {},
        )

    return app


app = create_app()
