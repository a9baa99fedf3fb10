import pytest

from cropsense.domain import Level, SoilCurrent, Trend, WeatherCurrent
from cropsense.trend_engine import (
    classify,
    classify_nutrient,
    classify_ph,
    classify_soil,
    classify_weather,
    determine_trend,
    trend_map,
)


def test_trend_uses_relative_threshold():
    assert determine_trend(7.0, 7.36) == Trend.ASCENDING
    assert determine_trend(7.0, 7.30) == Trend.STABLE
    assert determine_trend(7.0, 6.60) == Trend.DESCENDING
    assert determine_trend(7.0, 7.0) == Trend.STABLE


def test_trend_threshold_scales_with_magnitude():
    # 5% of 100 is 5, so +4 is still stable
    assert determine_trend(100.0, 104.0) == Trend.STABLE
    assert determine_trend(100.0, 105.5) == Trend.ASCENDING
    # negative currents use the absolute value
    assert determine_trend(-10.0, -9.0) == Trend.ASCENDING


def test_trend_from_zero_is_never_stable_unless_equal():
    assert determine_trend(0.0, 0.01) == Trend.ASCENDING
    assert determine_trend(0.0, -0.01) == Trend.DESCENDING
    assert determine_trend(0.0, 0.0) == Trend.STABLE


def test_custom_ratio():
    assert determine_trend(10.0, 10.8, ratio=0.1) == Trend.STABLE
    assert determine_trend(10.0, 10.8, ratio=0.05) == Trend.ASCENDING


@pytest.mark.parametrize(
    "ph, expected",
    [
        (6.0, Level.OPTIMAL),
        (5.999, Level.LOW),
        (8.0, Level.OPTIMAL),
        (8.001, Level.HIGH),
        (7.2, Level.OPTIMAL),
    ],
)
def test_ph_boundaries(ph, expected):
    assert classify_ph(ph) == expected


def test_classify_bounds_are_inclusive():
    assert classify(10, 10, 20) == Level.OPTIMAL
    assert classify(20, 10, 20) == Level.OPTIMAL
    assert classify(9.9, 10, 20) == Level.LOW
    assert classify(20.1, 10, 20) == Level.HIGH


def test_nutrient_uses_range_tops():
    assert classify_nutrient(49.9, (0, 50), (50, 100)) == Level.LOW
    assert classify_nutrient(50, (0, 50), (50, 100)) == Level.OPTIMAL
    assert classify_nutrient(100.5, (0, 50), (50, 100)) == Level.HIGH


def test_classify_soil_reading():
    current = SoilCurrent(pH=7.2, nitrogen=45, phosphorus=23, potassium=13, organic_matter=3.2, moisture=65)
    levels = classify_soil(current)
    assert levels == {
        "pH": Level.OPTIMAL,
        "nitrogen": Level.LOW,
        "phosphorus": Level.LOW,
        "potassium": Level.LOW,
    }


def test_classify_soil_accepts_mapping():
    levels = classify_soil({"pH": 5.5, "nitrogen": 60, "phosphorus": 35, "potassium": 90})
    assert levels["pH"] == Level.LOW
    assert levels["nitrogen"] == Level.OPTIMAL
    assert levels["phosphorus"] == Level.OPTIMAL
    assert levels["potassium"] == Level.HIGH


def test_classify_weather():
    levels = classify_weather(WeatherCurrent(temperature=31, humidity=39))
    assert levels == {"temperature": Level.HIGH, "humidity": Level.LOW}
    assert classify_weather({"temperature": 20}) == {"temperature": Level.OPTIMAL}


def test_trend_map_per_variable():
    current = SoilCurrent(pH=7.2, nitrogen=45, phosphorus=23, potassium=13, organic_matter=3.2, moisture=65)
    predicted = {"pH": 7.25, "nitrogen": 40, "phosphorus": 23.5, "potassium": 15}
    trends = trend_map(current, predicted)
    assert trends == {
        "pH": Trend.STABLE,
        "nitrogen": Trend.DESCENDING,
        "phosphorus": Trend.STABLE,
        "potassium": Trend.ASCENDING,
    }


def test_trend_map_skips_missing_and_requires_variables_for_objects():
    assert trend_map({"a": 1.0}, {"a": 2.0, "b": 3.0}) == {"a": Trend.ASCENDING}
    with pytest.raises(TypeError):
        trend_map({"a": 1.0}, object())
