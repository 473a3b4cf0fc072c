"""Value types exchanged between model stubs, combiner and scorer."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Pollutants(BaseModel):
    model_config = ConfigDict(frozen=True)

    pm25: float = Field(0.0, ge=0)
    pm10: float = Field(0.0, ge=0)
    no2: float = Field(0.0, ge=0)
    so2: float = Field(0.0, ge=0)
    o3: float = Field(0.0, ge=0)
    co: float = Field(0.0, ge=0)


class WeatherConditions(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: float = 25.0
    humidity: float = Field(50.0, ge=0, le=100)
    wind_speed: float = Field(0.0, ge=0)
    wind_direction: float = Field(0.0, ge=0, lt=360)


class PredictionInput(BaseModel):
    """One forecast step's worth of model input."""
    model_config = ConfigDict(frozen=True)

    current_aqi: float = Field(..., ge=0, description="Current AQI reading")
    pollutants: Pollutants = Field(default_factory=Pollutants)
    weather: WeatherConditions = Field(default_factory=WeatherConditions)
    time_of_day: int = Field(..., ge=0, le=23, description="Hour of day")
    day_of_week: int = Field(..., ge=0, le=6, description="Day of week, 0 = Sunday")
    historical: tuple[float, ...] | None = Field(None, description="Past AQI values, oldest first")

    @classmethod
    def at(cls, when: datetime, **kwargs) -> "PredictionInput":
        """Build an input whose clock fields come from ``when``."""
        return cls(time_of_day=when.hour, day_of_week=(when.weekday() + 1) % 7, **kwargs)

    def shifted(self, hours: int) -> "PredictionInput":
        """Advance the wall clock by ``hours``; measurements are carried over."""
        total = self.time_of_day + hours
        return self.model_copy(update={
            "time_of_day": total % 24,
            "day_of_week": (self.day_of_week + total // 24) % 7,
        })


class ModelPrediction(BaseModel):
    model_config = ConfigDict(frozen=True)

    model: str
    prediction: float
    confidence: float = Field(..., ge=0, le=1)
    uncertainty: float = Field(..., ge=0)


class EnsembleResult(BaseModel):
    """Combined estimate; ``confidence_interval`` always brackets ``predicted``."""
    model_config = ConfigDict(frozen=True)

    predicted: float
    confidence: float = Field(..., ge=0, le=1)
    uncertainty: float = Field(..., ge=0)
    confidence_interval: tuple[float, float]
    members: tuple[ModelPrediction, ...] = ()
    hour_offset: int | None = None

    @model_validator(mode="after")
    def _check_interval(self):
        lo, hi = self.confidence_interval
        if not lo <= self.predicted <= hi:
            raise ValueError(f"interval [{lo}, {hi}] does not contain {self.predicted}")
        return self

    @property
    def lower(self) -> float:
        return self.confidence_interval[0]

    @property
    def upper(self) -> float:
        return self.confidence_interval[1]

    def model_predictions(self) -> dict[str, float]:
        return {m.model: m.prediction for m in self.members}


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AnomalyFlag(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    value: float
    z_score: float
    is_anomaly: bool
    severity: Severity
