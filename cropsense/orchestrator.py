"""Compose weather and soil snapshots from observations, synthetic history and model predictions."""
from __future__ import annotations

import datetime as dt
import random
from dataclasses import asdict
from typing import Any, Callable, Dict

from cropsense.app_types import CacheStats
from cropsense.cache_manager import MODEL_STATUS_PREFIX, SnapshotCache
from cropsense.check_inference import get_inference_status
from cropsense.config import Settings
from cropsense.data_sources import WeatherDataSource, build_data_source
from cropsense.domain import (
    SOIL_VARIABLES,
    TREND_THRESHOLD_RATIO,
    WEATHER_VARIABLES,
    Domain,
    ForecastDay,
    SoilCurrent,
    SoilPrediction,
    SoilSnapshot,
    WeatherCurrent,
    WeatherPrediction,
    WeatherSnapshot,
)
from cropsense.inference_client import InferenceClient
from cropsense.prediction_gateway import PredictionGateway
from cropsense.rules_engine import (
    day_labels,
    simple_forecast,
    soil_alerts,
    soil_recommendations,
    weather_alerts,
    weather_recommendations,
)
from cropsense.series_generator import SyntheticSeriesGenerator
from cropsense.trend_engine import classify_soil, classify_weather, trend_map
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="orchestrator")

DEGRADED_WEATHER_ALERT = "Service degraded: showing simulated weather data"
DEGRADED_SOIL_ALERT = "Service degraded: showing simulated soil data"
DEGRADED_RECOMMENDATION = "Live data unavailable: hold field interventions until readings recover"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def weather_fallback_snapshot(confidence: float, now: dt.datetime | None = None,
                              ratio: float = TREND_THRESHOLD_RATIO) -> WeatherSnapshot:
    """Static, clearly labelled weather snapshot used when the pipeline fails outright."""
    now = now or _utcnow()
    current = WeatherCurrent(
        temperature=25.0,
        humidity=65.0,
        feels_like=26.0,
        pressure=1013.0,
        description="simulated data",
        condition="Clear",
        wind_speed=10.0,
        observed_at=now,
    )
    predicted = {"temperature": 26.0, "humidity": 63.0}
    trends = trend_map(current, predicted, ratio, variables=WEATHER_VARIABLES)
    prediction = WeatherPrediction(
        next_temperature=predicted["temperature"],
        next_humidity=predicted["humidity"],
        trend=trends["temperature"],
        trend_analysis=trends,
        confidence=confidence,
    )
    labels = day_labels(now.date())
    return WeatherSnapshot(
        current=current,
        prediction=prediction,
        levels=classify_weather(current),
        alerts=(DEGRADED_WEATHER_ALERT,),
        recommendations=(DEGRADED_RECOMMENDATION,),
        forecast=(
            ForecastDay(time=labels[0], temperature="26°C", condition="Clear"),
            ForecastDay(time=labels[1], temperature="24°C", condition="Clouds"),
            ForecastDay(time=labels[2], temperature="25°C", condition="Clear"),
        ),
        generated_at=now,
    )


def soil_fallback_snapshot(confidence: float, now: dt.datetime | None = None,
                           ratio: float = TREND_THRESHOLD_RATIO) -> SoilSnapshot:
    """Static, clearly labelled soil snapshot used when the pipeline fails outright."""
    current = SoilCurrent(pH=7.0, nitrogen=45.0, phosphorus=25.0, potassium=35.0, organic_matter=3.2, moisture=65.0)
    predicted = {"pH": 7.1, "nitrogen": 46.0, "phosphorus": 26.0, "potassium": 36.0}
    return SoilSnapshot(
        current=current,
        prediction=SoilPrediction(
            **predicted,
            confidence=confidence,
            trend_analysis=trend_map(current, predicted, ratio, variables=SOIL_VARIABLES),
        ),
        nutrient_levels=classify_soil(current),
        alerts=(DEGRADED_SOIL_ALERT,),
        recommendations=(DEGRADED_RECOMMENDATION,),
        generated_at=now or _utcnow(),
    )


class Orchestrator:
    """
    Per-domain pipeline: cache, observe, synthesise history, predict, classify, advise, cache.

    Both public snapshot methods always return a snapshot. A degraded model
    prediction still produces a normal (cached) snapshot at reduced
    confidence; any other failure returns an uncached static fallback.
    """

    def __init__(
        self,
        cache: SnapshotCache,
        gateway: PredictionGateway,
        weather_source: WeatherDataSource,
        generator: SyntheticSeriesGenerator,
        settings: Settings,
        rng: random.Random | None = None,
        status_probe: Callable[[Settings], Dict[str, Any]] = get_inference_status,
    ) -> None:
        self.cache = cache
        self.gateway = gateway
        self.weather_source = weather_source
        self.generator = generator
        self.settings = settings
        self.rng = rng or random.Random()
        self._model_status = cache.cached(MODEL_STATUS_PREFIX, settings.status_ttl_seconds)(
            lambda: status_probe(settings)
        )

    # ------------------------------------------------------------------
    # Weather
    # ------------------------------------------------------------------
    def get_weather_snapshot(self) -> WeatherSnapshot:
        """Return the cached weather snapshot, building a fresh one on a miss."""
        cached = self.cache.get(self.cache.weather_snapshot)
        if cached is not None:
            return cached

        try:
            snapshot = self._build_weather_snapshot()
        except Exception:
            logger.exception("Weather pipeline failed; returning fallback snapshot")
            return weather_fallback_snapshot(self.settings.fallback_confidence,
                                             ratio=self.settings.trend_threshold_ratio)

        self.cache.set(self.cache.weather_snapshot, snapshot)
        return snapshot

    def _build_weather_snapshot(self) -> WeatherSnapshot:
        observation = self.weather_source.fetch_current_weather(
            self.settings.latitude, self.settings.longitude, timezone=self.settings.timezone
        )
        current = WeatherCurrent(**asdict(observation))
        history = self.generator.weather_history(current.temperature, current.humidity)

        outcome = self.gateway.predict_weather(history)
        if outcome.degraded:
            logger.warning("Weather prediction degraded", extra={"reason": outcome.reason})
        result = outcome.value

        trends = trend_map(current, result.values, self.settings.trend_threshold_ratio, variables=WEATHER_VARIABLES)
        prediction = WeatherPrediction(
            next_temperature=result.values["temperature"],
            next_humidity=float(round(result.values["humidity"])),
            trend=trends["temperature"],
            trend_analysis=trends,
            confidence=result.confidence,
        )
        levels = classify_weather(current)

        snapshot = WeatherSnapshot(
            current=current,
            prediction=prediction,
            levels=levels,
            alerts=weather_alerts(current, levels, prediction),
            recommendations=weather_recommendations(levels, prediction),
            forecast=simple_forecast(prediction, current.condition, rng=self.rng),
            generated_at=_utcnow(),
        )
        logger.info(
            "Built weather snapshot",
            extra={"temperature": current.temperature, "trend": prediction.trend.value,
                   "confidence": prediction.confidence, "degraded": outcome.degraded},
        )
        return snapshot

    # ------------------------------------------------------------------
    # Soil
    # ------------------------------------------------------------------
    def get_soil_snapshot(self) -> SoilSnapshot:
        """Return the cached soil snapshot, building a fresh one on a miss."""
        cached = self.cache.get(self.cache.soil_snapshot)
        if cached is not None:
            return cached

        try:
            snapshot = self._build_soil_snapshot()
        except Exception:
            logger.exception("Soil pipeline failed; returning fallback snapshot")
            return soil_fallback_snapshot(self.settings.fallback_confidence,
                                          ratio=self.settings.trend_threshold_ratio)

        self.cache.set(self.cache.soil_snapshot, snapshot)
        return snapshot

    def _build_soil_snapshot(self) -> SoilSnapshot:
        sample = self.generator.soil_sample()
        current = sample.current

        outcome = self.gateway.predict_soil(sample.history)
        if outcome.degraded:
            logger.warning("Soil prediction degraded", extra={"reason": outcome.reason})
        result = outcome.value

        trends = trend_map(current, result.values, self.settings.trend_threshold_ratio, variables=SOIL_VARIABLES)
        prediction = SoilPrediction(
            pH=result.values["pH"],
            nitrogen=result.values["nitrogen"],
            phosphorus=result.values["phosphorus"],
            potassium=result.values["potassium"],
            confidence=result.confidence,
            trend_analysis=trends,
        )
        levels = classify_soil(current)

        snapshot = SoilSnapshot(
            current=current,
            prediction=prediction,
            nutrient_levels=levels,
            alerts=soil_alerts(current, levels),
            recommendations=soil_recommendations(current, levels),
            generated_at=_utcnow(),
        )
        logger.info(
            "Built soil snapshot",
            extra={"pH": current.pH, "confidence": prediction.confidence, "degraded": outcome.degraded},
        )
        return snapshot

    # ------------------------------------------------------------------
    # Housekeeping
    # ------------------------------------------------------------------
    def get_model_status(self) -> Dict[str, Any]:
        """Inference health, probed at most once per status TTL."""
        return self._model_status()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def invalidate(self, domain: Domain | None = None) -> None:
        """Drop cached snapshots for one domain, or everything when domain is None."""
        self.cache.invalidate_domain(domain)


def build_orchestrator(settings: Settings, cache: SnapshotCache) -> Orchestrator:
    """Wire the production collaborators from settings."""
    gateway = PredictionGateway(
        InferenceClient(settings),
        fallback_confidence=settings.fallback_confidence,
        trend_ratio=settings.trend_threshold_ratio,
        weather_route=settings.inference_weather_path,
        soil_route=settings.inference_soil_path,
    )
    return Orchestrator(
        cache=cache,
        gateway=gateway,
        weather_source=build_data_source(settings),
        generator=SyntheticSeriesGenerator(),
        settings=settings,
    )
