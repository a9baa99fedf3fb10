"""Turn a 24-point series into a model prediction, or a local fallback when the model is unusable.

The gateway is the only place that talks to the inference client. It always
returns a PredictionResult wrapped in Ok or Degraded; inference failures are
never raised to the caller.
"""
from __future__ import annotations

import math
import random
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from cropsense.app_types import Degraded, Ok, Outcome
from cropsense.domain import (
    SERIES_LENGTH,
    SOIL_DEFAULTS,
    SOIL_VARIABLES,
    TREND_THRESHOLD_RATIO,
    WEATHER_DEFAULTS,
    WEATHER_VARIABLES,
    Domain,
    PredictionResult,
    limit,
)
from cropsense.inference_client import InferenceClient, InferenceError
from cropsense.trend_engine import get_field, trend_map
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="prediction_gateway")

DEFAULT_CONFIDENCE = {
    Domain.WEATHER: 0.8,
    Domain.SOIL: 0.75,
}

# Full width of the uniform noise applied to the last reading when the model is unavailable.
FALLBACK_NOISE = {
    "temperature": 2.0,
    "humidity": 5.0,
    "pH": 0.2,
    "nitrogen": 3.0,
    "phosphorus": 2.0,
    "potassium": 2.0,
}

_DOMAIN_SHAPE: Dict[Domain, Tuple[Tuple[str, ...], Dict[str, float]]] = {
    Domain.WEATHER: (WEATHER_VARIABLES, WEATHER_DEFAULTS),
    Domain.SOIL: (SOIL_VARIABLES, SOIL_DEFAULTS),
}


def _numeric(value: Any, default: float) -> float:
    """Return value as a finite float, or the default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return float(value)


def _prepare_vector(history: Sequence[Any], variables: Sequence[str], defaults: Mapping[str, float]) -> List[float]:
    """Flatten the last SERIES_LENGTH readings, padding with defaults to an exact length."""
    target = SERIES_LENGTH * len(variables)
    vector: List[float] = []
    for point in list(history)[-SERIES_LENGTH:]:
        for name in variables:
            vector.append(_numeric(get_field(point, name), defaults[name]))

    while len(vector) < target:
        # keep the variable interleaving intact while padding
        vector.append(defaults[variables[len(vector) % len(variables)]])
    return vector[:target]


def prepare_weather_vector(history: Sequence[Any]) -> List[float]:
    """48 floats: temperature, humidity per hour."""
    return _prepare_vector(history, WEATHER_VARIABLES, WEATHER_DEFAULTS)


def prepare_soil_vector(history: Sequence[Any]) -> List[float]:
    """96 floats: pH, N, P, K per hour."""
    return _prepare_vector(history, SOIL_VARIABLES, SOIL_DEFAULTS)


def _normalise_confidence(confidence: float | None, default: float) -> float:
    """Percentages are scaled down; the result always lies in [0, 1]."""
    if confidence is None:
        return default
    if confidence > 1:
        confidence = confidence / 100
    return max(0.0, min(1.0, confidence))


class PredictionGateway:
    """Prepare model inputs, call the inference service once, and fall back locally on failure."""

    def __init__(self, client: InferenceClient, rng: random.Random | None = None,
                 fallback_confidence: float = 0.6, trend_ratio: float = TREND_THRESHOLD_RATIO,
                 weather_route: str = "/predict/clima", soil_route: str = "/predict/suelo") -> None:
        self.client = client
        self.rng = rng or random.Random()
        self.fallback_confidence = fallback_confidence
        self.trend_ratio = trend_ratio
        self.routes = {Domain.WEATHER: weather_route, Domain.SOIL: soil_route}

    def _last_reading(self, domain: Domain, series: Sequence[Any]) -> Dict[str, float]:
        """Last point of the series as a dict, defaults filling any gap."""
        variables, defaults = _DOMAIN_SHAPE[domain]
        last = series[-1] if series else None
        return {name: _numeric(get_field(last, name), defaults[name]) for name in variables}

    def fallback(self, domain: Domain, series: Sequence[Any]) -> PredictionResult:
        """Local estimate: the last reading plus bounded noise, at reduced confidence."""
        last = self._last_reading(domain, series)
        values = {
            name: round(limit(value + (self.rng.random() - 0.5) * FALLBACK_NOISE[name], name), 1)
            for name, value in last.items()
        }
        return PredictionResult(
            domain=domain,
            values=values,
            confidence=self.fallback_confidence,
            trend=trend_map(last, values, self.trend_ratio),
        )

    def predict(self, domain: Domain, series: Sequence[Any]) -> Outcome[PredictionResult]:
        """
        Predict the next value of every tracked variable of `domain`.

        Returns Ok with the model output, or Degraded with a local fallback and
        the reason the model could not be used. Never raises.
        """
        variables, defaults = _DOMAIN_SHAPE[domain]
        series = list(series)
        vector = _prepare_vector(series, variables, defaults)

        try:
            response = self.client.predict(self.routes[domain], vector, min_predictions=len(variables))
        except InferenceError as e:
            reason = f"{type(e).__name__}: {e}"
        except Exception as e:
            logger.exception("Unexpected error calling inference service", extra={"domain": domain.value})
            reason = f"unexpected {type(e).__name__}: {e}"
        else:
            values = {name: round(value, 1) for name, value in zip(variables, response.predictions)}
            result = PredictionResult(
                domain=domain,
                values=values,
                confidence=_normalise_confidence(response.confidence, DEFAULT_CONFIDENCE[domain]),
                trend=trend_map(self._last_reading(domain, series), values, self.trend_ratio),
            )
            logger.info(
                "Model prediction received",
                extra={"domain": domain.value, "values": values, "confidence": result.confidence},
            )
            return Ok(result)

        logger.warning(
            "Inference unavailable, using local fallback",
            extra={"domain": domain.value, "reason": reason},
        )
        return Degraded(self.fallback(domain, series), reason)

    def predict_weather(self, history: Sequence[Any]) -> Outcome[PredictionResult]:
        return self.predict(Domain.WEATHER, history)

    def predict_soil(self, history: Sequence[Any]) -> Outcome[PredictionResult]:
        return self.predict(Domain.SOIL, history)
