"""Interfaces and helpers for current-weather data sources."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Callable, Optional, Protocol


@dataclass
class CurrentWeather:
    """Normalized current observation, metric units (°C, %, hPa, km/h)."""
    temperature: float
    humidity: float
    pressure: Optional[float] = None
    description: str = "no description"
    condition: str = "Clear"
    condition_code: Optional[int] = None
    wind_speed: Optional[float] = None
    feels_like: Optional[float] = None
    observed_at: Optional[dt.datetime] = None


class WeatherDataSource(Protocol):
    """Interface for anything that can provide the current weather at a fixed point."""

    def fetch_current_weather(
        self,
        latitude: float,
        longitude: float,
        *,
        timezone: str = "auto",
    ) -> CurrentWeather:
        """Return the current weather observation."""
        ...


@dataclass
class CallableWeatherDataSource(WeatherDataSource):
    """Wrap a fetch callable so backends can be swapped without subclassing."""

    current_weather: Callable[..., CurrentWeather]
    name: str = "callable"

    def fetch_current_weather(self, *args, **kwargs) -> CurrentWeather:
        """Delegate to the configured current-weather callable."""
        return self.current_weather(*args, **kwargs)
