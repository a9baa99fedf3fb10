"""Helpers for fetching current weather from the Open-Meteo forecast API."""
from __future__ import annotations

import datetime as dt
from typing import Dict, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import requests

from cropsense.data_sources.base import CurrentWeather
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag='open_meteo_client')

# No retries or response cache here: one attempt per request, snapshots are cached upstream.
session = requests.Session()

OPEN_METEO_WEATHER_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_VARS = [
    "temperature_2m",
    "relative_humidity_2m",
    "apparent_temperature",
    "surface_pressure",
    "weather_code",
    "wind_speed_10m",
]

EXPECTED_UNITS = {
    "temperature_2m": "°C",
    "relative_humidity_2m": "%",
    "apparent_temperature": "°C",
    "surface_pressure": "hPa",
    "wind_speed_10m": "km/h",
}

# WMO weather interpretation codes -> (description, condition group)
WMO_CODES: Dict[int, Tuple[str, str]] = {
    0: ("clear sky", "Clear"),
    1: ("mainly clear", "Clear"),
    2: ("partly cloudy", "Clouds"),
    3: ("overcast", "Clouds"),
    45: ("fog", "Fog"),
    48: ("depositing rime fog", "Fog"),
    51: ("light drizzle", "Drizzle"),
    53: ("moderate drizzle", "Drizzle"),
    55: ("dense drizzle", "Drizzle"),
    56: ("light freezing drizzle", "Drizzle"),
    57: ("dense freezing drizzle", "Drizzle"),
    61: ("slight rain", "Rain"),
    63: ("moderate rain", "Rain"),
    65: ("heavy rain", "Rain"),
    66: ("light freezing rain", "Rain"),
    67: ("heavy freezing rain", "Rain"),
    71: ("slight snow fall", "Snow"),
    73: ("moderate snow fall", "Snow"),
    75: ("heavy snow fall", "Snow"),
    77: ("snow grains", "Snow"),
    80: ("slight rain showers", "Rain"),
    81: ("moderate rain showers", "Rain"),
    82: ("violent rain showers", "Rain"),
    85: ("slight snow showers", "Snow"),
    86: ("heavy snow showers", "Snow"),
    95: ("thunderstorm", "Thunderstorm"),
    96: ("thunderstorm with slight hail", "Thunderstorm"),
    99: ("thunderstorm with heavy hail", "Thunderstorm"),
}


def describe_weather_code(code: int | None) -> Tuple[str, str]:
    """Map a WMO code to (description, condition); unknown codes read as clear."""
    if code is None:
        return "no description", "Clear"
    return WMO_CODES.get(int(code), ("no description", "Clear"))


def _iso_to_dt_with_tz(s: str, tz_name: str) -> dt.datetime:
    """Interpret Open-Meteo local time string as being in tz_name."""
    naive = dt.datetime.fromisoformat(s)
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        tz = dt.timezone.utc
    return naive.replace(tzinfo=tz)


def _warn_on_unexpected_units(units: dict):
    """Log a warning if Open-Meteo returns units we did not request."""
    if not units:
        return
    for field, expected in EXPECTED_UNITS.items():
        actual = units.get(field)
        if actual and actual != expected:
            logger.warning(
                "Unexpected Open-Meteo unit",
                extra={"field": field, "unit": actual, "expected": expected},
            )


def fetch_current_weather(latitude: float,
                          longitude: float,
                          *,
                          timezone: str = "America/Guayaquil",
                          ) -> CurrentWeather:
    """Fetch the latest available weather observation for the given coordinates."""
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current": ",".join(CURRENT_VARS),
        "timezone": timezone,
        "temperature_unit": "celsius",
        "wind_speed_unit": "kmh",
    }

    resp = session.get(OPEN_METEO_WEATHER_URL, params=params, timeout=10)
    resp.raise_for_status()
    data = resp.json()

    current = data["current"]
    _warn_on_unexpected_units(data.get("current_units", {}))
    code = current.get("weather_code", None)
    description, condition = describe_weather_code(code)
    time = current.get("time", None)
    pressure = current.get("surface_pressure", None)

    weather = CurrentWeather(
        temperature=round(float(current["temperature_2m"]), 1),
        humidity=float(round(current["relative_humidity_2m"])),
        pressure=round(pressure) if pressure is not None else None,
        description=description,
        condition=condition,
        condition_code=int(code) if code is not None else None,
        wind_speed=current.get("wind_speed_10m", None),
        feels_like=current.get("apparent_temperature", None),
        observed_at=_iso_to_dt_with_tz(time, timezone) if time else None,
    )
    logger.debug("Fetched Open-Meteo current weather", extra={"temperature": weather.temperature,
                                                               "humidity": weather.humidity})
    return weather
