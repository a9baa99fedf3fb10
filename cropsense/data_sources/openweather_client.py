"""Current weather from the OpenWeatherMap 2.5 API (requires an API key)."""
from __future__ import annotations

import datetime as dt

import requests

from cropsense.data_sources.base import CurrentWeather
from utils.logging_utils import get_tagged_logger, mask_url

logger = get_tagged_logger(__name__, tag='openweather_client')

session = requests.Session()

OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"


class OpenWeatherClient:
    """Callable data source bound to one API key."""

    def __init__(self, api_key: str, timeout: float = 10.0) -> None:
        if not api_key:
            raise ValueError("OpenWeatherMap requires an API key")
        self.api_key = api_key
        self.timeout = timeout

    def __call__(self, latitude: float, longitude: float, *, timezone: str = "auto") -> CurrentWeather:
        return self.fetch_current_weather(latitude, longitude, timezone=timezone)

    def fetch_current_weather(self, latitude: float, longitude: float, *, timezone: str = "auto") -> CurrentWeather:
        """Fetch the current observation; `timezone` is unused, OpenWeather reports UTC epochs."""
        params = {"lat": latitude, "lon": longitude, "appid": self.api_key, "units": "metric"}
        resp = session.get(OPENWEATHER_URL, params=params, timeout=self.timeout)
        logger.debug("OpenWeatherMap response", extra={"url": mask_url(getattr(resp, "url", OPENWEATHER_URL)),
                                                       "status": resp.status_code})
        resp.raise_for_status()
        return parse_current_weather(resp.json())


def parse_current_weather(data: dict) -> CurrentWeather:
    """Normalize an OpenWeatherMap /weather payload; raises KeyError when `main` is incomplete."""
    main = data["main"]
    weather = (data.get("weather") or [{}])[0]
    wind = data.get("wind") or {}
    observed = data.get("dt")
    wind_speed = wind.get("speed")
    feels_like = main.get("feels_like")
    pressure = main.get("pressure")

    return CurrentWeather(
        temperature=round(float(main["temp"]), 1),
        humidity=float(round(main["humidity"])),
        pressure=round(pressure) if pressure is not None else None,
        description=weather.get("description") or "no description",
        condition=weather.get("main") or "Clear",
        condition_code=weather.get("id"),
        # m/s -> km/h, matching the Open-Meteo source
        wind_speed=round(wind_speed * 3.6, 1) if wind_speed is not None else None,
        feels_like=round(float(feels_like), 1) if feels_like is not None else None,
        observed_at=dt.datetime.fromtimestamp(observed, tz=dt.timezone.utc) if observed else None,
    )
