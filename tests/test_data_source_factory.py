import unittest

from cropsense.data_sources.base import CallableWeatherDataSource, CurrentWeather
from cropsense.data_sources.factory import build_data_source, DEFAULT_SOURCE_NAME
from cropsense.data_sources.open_meteo_client import fetch_current_weather
from cropsense.data_sources.openweather_client import OpenWeatherClient


class DummySettings:
    def __init__(self, **kwargs):
        for k, v in kwargs.items():
            setattr(self, k, v)
        # provide defaults if not passed
        self.weather_source = getattr(self, "weather_source", DEFAULT_SOURCE_NAME)
        self.openweather_api_key = getattr(self, "openweather_api_key", None)


class TestDataSourceFactory(unittest.TestCase):
    def test_build_open_meteo_default(self):
        ds = build_data_source(DummySettings())
        self.assertIsInstance(ds, CallableWeatherDataSource)
        self.assertIs(ds.current_weather, fetch_current_weather)
        self.assertEqual(ds.name, "open_meteo")

    def test_source_name_is_case_insensitive(self):
        ds = build_data_source(DummySettings(weather_source="Open_Meteo"))
        self.assertEqual(ds.name, "open_meteo")

    def test_openweathermap_branch(self):
        ds = build_data_source(DummySettings(weather_source="openweathermap", openweather_api_key="abc"))
        self.assertIsInstance(ds.current_weather, OpenWeatherClient)
        self.assertEqual(ds.current_weather.api_key, "abc")

    def test_openweathermap_missing_key_raises(self):
        with self.assertRaises(ValueError):
            build_data_source(DummySettings(weather_source="openweathermap"))

    def test_unknown_source_raises(self):
        with self.assertRaises(ValueError):
            build_data_source(DummySettings(weather_source="unknown-source"))

    def test_callable_source_delegates(self):
        seen = {}

        def fake(lat, lon, *, timezone="auto"):
            seen.update(lat=lat, lon=lon, timezone=timezone)
            return CurrentWeather(temperature=20.0, humidity=50.0)

        ds = CallableWeatherDataSource(current_weather=fake)
        result = ds.fetch_current_weather(1.0, 2.0, timezone="UTC")
        self.assertEqual(result.temperature, 20.0)
        self.assertEqual(seen, {"lat": 1.0, "lon": 2.0, "timezone": "UTC"})


if __name__ == "__main__":
    unittest.main()
