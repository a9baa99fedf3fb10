"""Alert and recommendation rules for weather and soil snapshots.

Every rule is evaluated independently and appends at most one message, so a
reading can trigger several alerts at once. The order of the rules below is
the order messages appear in a snapshot.
"""

from __future__ import annotations

import datetime as dt
import random
from typing import Any, List, Mapping

from cropsense.domain import (
    HEAT_TREND_ALERT_ABOVE,
    MOISTURE_ALERT_BELOW,
    ORGANIC_MATTER_TARGET,
    ForecastDay,
    Level,
    Trend,
)
from cropsense.trend_engine import get_field

SOIL_OPTIMAL_MESSAGE = "Soil conditions are optimal, keep the current fertilisation program"
WEATHER_OPTIMAL_MESSAGE = "Weather conditions are favourable, keep the current field schedule"

FORECAST_DAYS = 3


def soil_alerts(current: Any, levels: Mapping[str, Level]) -> List[str]:
    """Alerts for a soil reading: acidity/alkalinity, N, P, K, then moisture."""
    alerts: List[str] = []

    if levels.get("pH") == Level.LOW:
        alerts.append("Low pH: soil is very acidic, consider liming")
    elif levels.get("pH") == Level.HIGH:
        alerts.append("High pH: soil is very alkaline, check drainage")

    if levels.get("nitrogen") == Level.LOW:
        alerts.append("Nitrogen deficiency: impacts vegetative growth")

    if levels.get("phosphorus") == Level.LOW:
        alerts.append("Low phosphorus: may affect root development")

    if levels.get("potassium") == Level.LOW:
        alerts.append("Potassium deficiency: reduces stress resistance")

    moisture = get_field(current, "moisture")
    if moisture is not None and moisture < MOISTURE_ALERT_BELOW:
        alerts.append("Low soil moisture: consider irrigation")

    return alerts


def soil_recommendations(current: Any, levels: Mapping[str, Level]) -> List[str]:
    """Corrective actions for a soil reading; never empty."""
    recommendations: List[str] = []

    if levels.get("pH") == Level.LOW:
        recommendations.append("Apply agricultural lime to raise pH")

    if levels.get("nitrogen") == Level.LOW:
        recommendations.append("Apply nitrogen fertiliser (urea or ammonium sulfate)")

    if levels.get("phosphorus") == Level.LOW:
        recommendations.append("Incorporate diammonium phosphate or rock phosphate")

    if levels.get("potassium") == Level.LOW:
        recommendations.append("Add potassium chloride or potassium sulfate")

    organic_matter = get_field(current, "organic_matter")
    if organic_matter is not None and organic_matter < ORGANIC_MATTER_TARGET:
        recommendations.append("Increase organic matter with compost")

    if not recommendations:
        recommendations.append(SOIL_OPTIMAL_MESSAGE)

    return recommendations


def weather_alerts(current: Any, levels: Mapping[str, Level], prediction: Any) -> List[str]:
    """Alerts for a weather observation plus the predicted heat trend."""
    alerts: List[str] = []

    if levels.get("temperature") == Level.HIGH:
        alerts.append("High temperature: consider additional irrigation")
    if levels.get("temperature") == Level.LOW:
        alerts.append("Low temperature: frost risk")

    if levels.get("humidity") == Level.HIGH:
        alerts.append("High humidity: risk of fungal disease")
    if levels.get("humidity") == Level.LOW:
        alerts.append("Low humidity: water stress in plants")

    next_temperature = get_field(prediction, "next_temperature")
    if (get_field(prediction, "trend") == Trend.ASCENDING
            and next_temperature is not None and next_temperature > HEAT_TREND_ALERT_ABOVE):
        alerts.append("Warming trend: plan sun protection")

    return alerts


def weather_recommendations(levels: Mapping[str, Level], prediction: Any) -> List[str]:
    """Field actions for the current weather; never empty."""
    recommendations: List[str] = []

    if levels.get("temperature") == Level.HIGH:
        recommendations.append("Irrigate early in the morning or late in the afternoon to limit evaporation")
    elif levels.get("temperature") == Level.LOW:
        recommendations.append("Cover sensitive crops overnight")

    if levels.get("humidity") == Level.HIGH:
        recommendations.append("Improve ventilation and scout for fungal disease")
    elif levels.get("humidity") == Level.LOW:
        recommendations.append("Increase irrigation frequency and mulch to retain moisture")

    if get_field(prediction, "trend") == Trend.DESCENDING:
        recommendations.append("Temperatures are dropping: delay sowing of frost-sensitive crops")

    if not recommendations:
        recommendations.append(WEATHER_OPTIMAL_MESSAGE)

    return recommendations


def day_labels(today: dt.date) -> List[str]:
    """'Tomorrow' followed by the weekday names of the next days."""
    labels = ["Tomorrow"]
    for offset in range(2, FORECAST_DAYS + 1):
        labels.append((today + dt.timedelta(days=offset)).strftime("%A"))
    return labels


def simple_forecast(prediction: Any, base_condition: str, rng: random.Random | None = None,
                    today: dt.date | None = None) -> List[ForecastDay]:
    """
    Three-day textual forecast around the predicted temperature.

    Hot days lean Clouds with some Clear, cold days split between Clouds and
    Rain, and mild days mostly vary around the current condition.
    """
    rng = rng or random.Random()
    today = today or dt.date.today()
    next_temperature = float(get_field(prediction, "next_temperature"))

    forecast: List[ForecastDay] = []
    for label in day_labels(today):
        predicted = round(next_temperature + (rng.random() - 0.5) * 4)

        if predicted > 30:
            condition = "Clear" if rng.random() > 0.7 else "Clouds"
        elif predicted < 20:
            condition = "Clouds" if rng.random() > 0.5 else "Rain"
        else:
            roll = rng.random()
            if roll > 0.6:
                condition = "Clear"
            elif roll > 0.3:
                condition = "Clouds"
            else:
                condition = base_condition

        forecast.append(ForecastDay(time=label, temperature=f"{predicted}°C", condition=condition))

    return forecast
