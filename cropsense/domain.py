"""Domain vocabulary and strict schemas for weather and soil snapshots.

This module defines the contract between the prediction core and whatever
renders it: enums, agronomic thresholds, physical ranges, and the Pydantic
models that flow out of the orchestrator. No interpretation logic lives here.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field


class _StrictBaseModel(BaseModel):
    """Base model with strict extra handling."""

    model_config = ConfigDict(extra="forbid")


class _FrozenModel(BaseModel):
    """Immutable model, safe to share read-only across concurrent callers."""

    model_config = ConfigDict(extra="forbid", frozen=True)


class Domain(str, Enum):
    """Prediction domains served by the inference service."""
    WEATHER = "weather"
    SOIL = "soil"


class Trend(str, Enum):
    """Direction of change between a current and a predicted value."""
    ASCENDING = "ascending"
    DESCENDING = "descending"
    STABLE = "stable"


class Level(str, Enum):
    """Three-way classification of a raw measurement."""
    LOW = "low"
    OPTIMAL = "optimal"
    HIGH = "high"


# ---------------------------------------------------------------------------
# Thresholds and ranges (heuristics, tuned by agronomists; not derived)
# ---------------------------------------------------------------------------

TREND_THRESHOLD_RATIO = 0.05

PH_BOUNDS: Tuple[float, float] = (6.0, 8.0)

# (low_range, optimal_range) per nutrient, mg/kg
NUTRIENT_RANGES: Dict[str, Tuple[Tuple[float, float], Tuple[float, float]]] = {
    "nitrogen": ((0.0, 50.0), (50.0, 100.0)),
    "phosphorus": ((0.0, 30.0), (30.0, 60.0)),
    "potassium": ((0.0, 40.0), (40.0, 80.0)),
}

WEATHER_BOUNDS: Dict[str, Tuple[float, float]] = {
    "temperature": (15.0, 30.0),
    "humidity": (40.0, 80.0),
}

MOISTURE_ALERT_BELOW = 40.0
ORGANIC_MATTER_TARGET = 3.0
HEAT_TREND_ALERT_ABOVE = 32.0

# Ranges the series simulator keeps its generated readings inside.
VALID_RANGES: Dict[str, Tuple[float, float]] = {
    "temperature": (-30.0, 55.0),
    "humidity": (0.0, 100.0),
    "pH": (5.5, 8.5),
    "nitrogen": (20.0, 80.0),
    "phosphorus": (10.0, 40.0),
    "potassium": (8.0, 25.0),
    "organic_matter": (0.0, 10.0),
    "moisture": (0.0, 100.0),
}

# Hard physical limits for predicted values; nutrients have no upper bound.
PHYSICAL_LIMITS: Dict[str, Tuple[float, float]] = {
    "temperature": (-60.0, 60.0),
    "humidity": (0.0, 100.0),
    "pH": (0.0, 14.0),
    "nitrogen": (0.0, float("inf")),
    "phosphorus": (0.0, float("inf")),
    "potassium": (0.0, float("inf")),
}

WEATHER_VARIABLES: Tuple[str, ...] = ("temperature", "humidity")
SOIL_VARIABLES: Tuple[str, ...] = ("pH", "nitrogen", "phosphorus", "potassium")

SERIES_LENGTH = 24

# Values substituted for missing readings when building model inputs.
WEATHER_DEFAULTS: Dict[str, float] = {"temperature": 25.0, "humidity": 70.0}
SOIL_DEFAULTS: Dict[str, float] = {"pH": 7.0, "nitrogen": 45.0, "phosphorus": 25.0, "potassium": 35.0}


def clamp(value: float, name: str) -> float:
    """Clamp a value into the valid range registered for `name`."""
    low, high = VALID_RANGES[name]
    return max(low, min(high, value))


def limit(value: float, name: str) -> float:
    """Keep a predicted value within the physical limits for `name`."""
    low, high = PHYSICAL_LIMITS[name]
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Prediction results
# ---------------------------------------------------------------------------

class PredictionResult(_StrictBaseModel):
    """Point forecast per tracked variable with confidence and trend."""
    domain: Domain
    values: Dict[str, float]
    confidence: float = Field(ge=0.0, le=1.0)
    trend: Dict[str, Trend] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

class WeatherLevels(_FrozenModel):
    """Level per weather variable."""
    temperature: Level
    humidity: Level


class WeatherTrends(_FrozenModel):
    """Trend per weather variable."""
    temperature: Trend
    humidity: Trend


class SoilLevels(_FrozenModel):
    """Level for pH and each tracked nutrient."""
    pH: Level
    nitrogen: Level
    phosphorus: Level
    potassium: Level


class SoilTrends(_FrozenModel):
    """Trend for pH and each tracked nutrient."""
    pH: Trend
    nitrogen: Trend
    phosphorus: Trend
    potassium: Trend


class WeatherCurrent(_FrozenModel):
    """Current weather observation as exposed to the dashboard."""
    temperature: float
    humidity: float
    feels_like: float | None = None
    pressure: float | None = None
    description: str = "no description"
    condition: str = "Clear"
    condition_code: int | None = None
    wind_speed: float | None = None
    observed_at: datetime | None = None


class WeatherPrediction(_FrozenModel):
    """Predicted next weather values."""
    next_temperature: float
    next_humidity: float
    trend: Trend
    trend_analysis: WeatherTrends
    confidence: float = Field(ge=0.0, le=1.0)


class ForecastDay(_FrozenModel):
    """One entry of the short textual forecast."""
    time: str
    temperature: str
    condition: str


class WeatherSnapshot(_FrozenModel):
    """Complete weather result for one point in time."""
    current: WeatherCurrent
    prediction: WeatherPrediction
    levels: WeatherLevels
    alerts: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    forecast: Tuple[ForecastDay, ...] = ()
    generated_at: datetime | None = None


class SoilCurrent(_FrozenModel):
    """Current soil reading."""
    pH: float
    nitrogen: float
    phosphorus: float
    potassium: float
    organic_matter: float
    moisture: float


class SoilPrediction(_FrozenModel):
    """Predicted next soil values with per-nutrient trends."""
    pH: float
    nitrogen: float
    phosphorus: float
    potassium: float
    confidence: float = Field(ge=0.0, le=1.0)
    trend_analysis: SoilTrends


class SoilSnapshot(_FrozenModel):
    """Complete soil result for one point in time."""
    current: SoilCurrent
    prediction: SoilPrediction
    nutrient_levels: SoilLevels
    alerts: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    generated_at: datetime | None = None
