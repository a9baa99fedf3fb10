"""Synthetic 24-hour weather and soil histories for sites without sensor archives.

The generator combines a small set of base values, deterministic diurnal
cycles and bounded jitter. Outputs are plausible, not reproducible: every
value is clamped into its physical range, so callers can rely on bounds but
never on exact numbers. Pass a seeded `random.Random` to pin the jitter.
"""
from __future__ import annotations

import datetime as dt
import math
import random
from dataclasses import dataclass
from typing import List

from cropsense.domain import SERIES_LENGTH, SoilCurrent, clamp
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="series_generator")

SOIL_BASE_VALUES = {
    "pH": 7.2,
    "nitrogen": 45.3,
    "phosphorus": 23.1,
    "potassium": 12.8,
}


@dataclass
class WeatherPoint:
    """Hourly temperature (°C) and relative humidity (%)."""
    timestamp: dt.datetime
    temperature: float
    humidity: float


@dataclass
class SoilPoint:
    """Hourly soil reading: pH and N/P/K in mg/kg."""
    timestamp: dt.datetime
    pH: float
    nitrogen: float
    phosphorus: float
    potassium: float


@dataclass
class SoilSample:
    """Current soil reading plus the history it was derived from."""
    current: SoilCurrent
    history: List[SoilPoint]


def _hourly_timestamps(now: dt.datetime | None) -> List[dt.datetime]:
    """Return SERIES_LENGTH hourly timestamps ending at `now`, oldest first."""
    now = now or dt.datetime.now(dt.timezone.utc)
    return [now - dt.timedelta(hours=SERIES_LENGTH - 1 - i) for i in range(SERIES_LENGTH)]


class SyntheticSeriesGenerator:
    """Produce bounded, internally consistent weather and soil series."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self.rng = rng or random.Random()

    def _jitter(self, amplitude: float) -> float:
        """Uniform noise in [-amplitude/2, amplitude/2]."""
        return (self.rng.random() - 0.5) * amplitude

    def weather_history(self, temperature: float, humidity: float,
                        now: dt.datetime | None = None) -> List[WeatherPoint]:
        """Build the last 24 hours of weather around a current observation."""
        history: List[WeatherPoint] = []
        for i, ts in enumerate(_hourly_timestamps(now)):
            hours_ago = SERIES_LENGTH - 1 - i
            phase = (SERIES_LENGTH - hours_ago) * math.pi / 12
            temp = temperature + math.sin(phase) * 3 + self._jitter(2)
            hum = humidity + math.cos(phase) * 8 + self._jitter(5)
            history.append(
                WeatherPoint(
                    timestamp=ts,
                    temperature=round(clamp(temp, "temperature"), 1),
                    humidity=float(round(clamp(hum, "humidity"))),
                )
            )
        return history

    def soil_point_from_weather(self, temperature: float, humidity: float,
                                index: int, timestamp: dt.datetime) -> SoilPoint:
        """Derive one soil reading from the weather at the same hour."""
        temp_factor = (temperature - 25) / 10
        humidity_factor = (humidity - 60) / 20
        slow_cycle = math.sin(index * 0.1) * 0.1

        ph = (SOIL_BASE_VALUES["pH"] + humidity_factor * 0.3 + temp_factor * 0.1
              + slow_cycle + self._jitter(0.2))
        # nitrogen mineralises with moisture and volatilises with heat
        nitrogen = (SOIL_BASE_VALUES["nitrogen"] + humidity_factor * 5 - temp_factor * 2
                    + self._jitter(3))
        phosphorus = SOIL_BASE_VALUES["phosphorus"] + temp_factor * 1.5 + self._jitter(2)
        potassium = (SOIL_BASE_VALUES["potassium"] + humidity_factor * 2 + temp_factor * 0.5
                     + self._jitter(1.5))

        return SoilPoint(
            timestamp=timestamp,
            pH=round(clamp(ph, "pH"), 1),
            nitrogen=round(clamp(nitrogen, "nitrogen"), 1),
            phosphorus=round(clamp(phosphorus, "phosphorus"), 1),
            potassium=round(clamp(potassium, "potassium"), 1),
        )

    def soil_history(self, temperature: float, humidity: float,
                     now: dt.datetime | None = None) -> List[SoilPoint]:
        """Simulate 24 hours of weather variation and map each hour to NPK."""
        history: List[SoilPoint] = []
        for i, ts in enumerate(_hourly_timestamps(now)):
            hour_temp = temperature + math.sin(i * math.pi / 12) * 2 + self._jitter(1)
            hour_humidity = humidity + math.cos(i * math.pi / 12) * 5 + self._jitter(2)
            history.append(self.soil_point_from_weather(hour_temp, hour_humidity, i, ts))
        return history

    def soil_sample(self, now: dt.datetime | None = None) -> SoilSample:
        """Draw site weather, simulate a soil history and extract the current reading."""
        temperature = 22 + self.rng.random() * 8
        humidity = 65 + self.rng.random() * 25

        history = self.soil_history(temperature, humidity, now=now)
        last = history[-1]
        current = SoilCurrent(
            pH=last.pH,
            nitrogen=last.nitrogen,
            phosphorus=last.phosphorus,
            potassium=last.potassium,
            organic_matter=round(clamp(3.2 + self._jitter(0.8), "organic_matter"), 2),
            moisture=round(clamp(humidity * 0.85 + self._jitter(10), "moisture"), 1),
        )
        logger.debug(
            "Generated soil sample",
            extra={"site_temperature": round(temperature, 1), "site_humidity": round(humidity, 1)},
        )
        return SoilSample(current=current, history=history)
