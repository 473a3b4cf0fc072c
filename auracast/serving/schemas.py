"""Pydantic request/response models for the forecast API."""

from pydantic import BaseModel, Field

from auracast.config import DEFAULT_HORIZON_HOURS, MAX_HORIZON_HOURS, DEFAULT_SENSITIVITY
from auracast.ensemble.types import PredictionInput, ModelPrediction, Severity


class ForecastRequest(BaseModel):
    """Hourly forecast request for one zone."""
    zone_id: str = Field(..., min_length=1, description="Monitoring zone ID")
    input: PredictionInput
    horizon_hours: int = Field(DEFAULT_HORIZON_HOURS, ge=1, le=MAX_HORIZON_HOURS)


class EnsembleResponse(BaseModel):
    predicted_aqi: float = Field(..., description="Ensemble AQI estimate")
    confidence: float
    uncertainty: float
    confidence_lower: float = Field(..., description="Lower bound (95% interval)")
    confidence_upper: float = Field(..., description="Upper bound (95% interval)")
    model_predictions: dict[str, float] = {}


class HourlyForecast(EnsembleResponse):
    hour_offset: int


class ForecastResponse(BaseModel):
    zone_id: str
    forecasts: list[HourlyForecast]


class EnsembleRequest(BaseModel):
    """Combine predictions produced elsewhere."""
    predictions: list[ModelPrediction]


class AnomalyRequest(BaseModel):
    series: list[float]
    sensitivity: float = Field(DEFAULT_SENSITIVITY, ge=0, le=1)


class AnomalyPoint(BaseModel):
    index: int
    value: float
    z_score: float
    severity: Severity


class AnomalyResponse(BaseModel):
    anomalies: list[AnomalyPoint]
    total_anomalies: int
    confidence: float


class HealthResponse(BaseModel):
    status: str = "healthy"
    models: dict[str, bool] = {}


class DriftResponse(BaseModel):
    """KS comparison of forecasts issued before and after ``split_at``."""
    zone_id: str
    split_at: float
    ks_statistic: float
    p_value: float
    drift_detected: bool
    reference_mean: float
    current_mean: float
    reference_count: int
    current_count: int
