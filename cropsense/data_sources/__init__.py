"""Data source factories for plugging different weather backends."""

from .base import CallableWeatherDataSource, CurrentWeather, WeatherDataSource
from .factory import build_data_source
from .open_meteo_client import describe_weather_code, fetch_current_weather
from .openweather_client import OpenWeatherClient

__all__ = [
    "build_data_source",
    "WeatherDataSource",
    "CallableWeatherDataSource",
    "CurrentWeather",
    "OpenWeatherClient",
    "describe_weather_code",
    "fetch_current_weather",
]
