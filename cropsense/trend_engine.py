"""Deterministic trend and level classification.

Converts a current/predicted pair into a Trend and raw readings into Levels.
Rules and alerts built on top of these labels live in rules_engine.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Tuple

from cropsense.domain import (
    NUTRIENT_RANGES,
    PH_BOUNDS,
    TREND_THRESHOLD_RATIO,
    WEATHER_BOUNDS,
    Level,
    Trend,
)


def get_field(reading: Any, key: str, default=None):
    """Support attribute, dict, or Mapping access for readings."""
    if reading is None:
        return default
    if isinstance(reading, Mapping):
        return reading.get(key, default)
    return getattr(reading, key, default)


def determine_trend(current: float, predicted: float, ratio: float = TREND_THRESHOLD_RATIO) -> Trend:
    """
    Label the move from `current` to `predicted`.

    The threshold is relative to the magnitude of the current value, so a
    current value of zero makes any non-zero change significant.
    """
    delta = predicted - current
    threshold = abs(current) * ratio
    if delta > threshold:
        return Trend.ASCENDING
    if delta < -threshold:
        return Trend.DESCENDING
    return Trend.STABLE


def classify(value: float, low_bound: float, high_bound: float) -> Level:
    """Three-way split: below low_bound is low, above high_bound is high, bounds are optimal."""
    if value < low_bound:
        return Level.LOW
    if value > high_bound:
        return Level.HIGH
    return Level.OPTIMAL


def classify_ph(ph: float) -> Level:
    return classify(ph, *PH_BOUNDS)


def classify_nutrient(value: float, low_range: Tuple[float, float], optimal_range: Tuple[float, float]) -> Level:
    """Low below the top of the low range, high above the top of the optimal range."""
    return classify(value, low_range[1], optimal_range[1])


def classify_soil(current: Any) -> Dict[str, Level]:
    """Levels for pH and each tracked nutrient of a soil reading."""
    levels = {"pH": classify_ph(float(get_field(current, "pH")))}
    for nutrient, (low_range, optimal_range) in NUTRIENT_RANGES.items():
        levels[nutrient] = classify_nutrient(float(get_field(current, nutrient)), low_range, optimal_range)
    return levels


def classify_weather(current: Any) -> Dict[str, Level]:
    """Levels for temperature and humidity of a weather observation."""
    levels: Dict[str, Level] = {}
    for name, (low, high) in WEATHER_BOUNDS.items():
        value = get_field(current, name)
        if value is None:
            continue
        levels[name] = classify(float(value), low, high)
    return levels


def trend_map(current: Any, predicted: Any, ratio: float = TREND_THRESHOLD_RATIO,
              variables: Iterable[str] | None = None) -> Dict[str, Trend]:
    """
    Per-variable trends between two readings.

    Defaults to every key of `predicted` when it is a mapping. Variables
    missing on either side are skipped rather than guessed.
    """
    if variables is None:
        if not isinstance(predicted, Mapping):
            raise TypeError("variables is required when predicted is not a mapping")
        variables = list(predicted.keys())

    trends: Dict[str, Trend] = {}
    for name in variables:
        cur = get_field(current, name)
        nxt = get_field(predicted, name)
        if cur is None or nxt is None:
            continue
        trends[name] = determine_trend(float(cur), float(nxt), ratio)
    return trends
