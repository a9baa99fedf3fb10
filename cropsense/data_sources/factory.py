"""Factory helpers for choosing a weather data source at startup."""

from __future__ import annotations

from cropsense import config
from cropsense.data_sources.base import CallableWeatherDataSource, WeatherDataSource
from cropsense.data_sources.open_meteo_client import fetch_current_weather
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


DEFAULT_SOURCE_NAME = "open_meteo"


def build_data_source(settings: config.Settings | None = None) -> WeatherDataSource:
    """Instantiate the configured weather data source."""
    settings = settings or config.settings
    source = (settings.weather_source or DEFAULT_SOURCE_NAME).lower()

    if source == "open_meteo":
        logger.info("Using Open-Meteo data source")
        return CallableWeatherDataSource(current_weather=fetch_current_weather, name="open_meteo")

    if source == "openweathermap":
        from .openweather_client import OpenWeatherClient

        api_key = settings.openweather_api_key
        if not api_key:
            raise ValueError("openweather_api_key must be set for the OpenWeatherMap data source")
        logger.info("Using OpenWeatherMap data source")
        return CallableWeatherDataSource(current_weather=OpenWeatherClient(api_key), name="openweathermap")

    raise ValueError(f"Unknown weather source '{source}'")
