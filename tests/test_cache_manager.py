import unittest

from cropsense.cache_manager import SOIL_SNAPSHOT_KEY, build_snapshot_cache
from cropsense.cache_store import ExpiringCacheStore
from cropsense.config import Settings
from cropsense.domain import Domain, Level, SoilCurrent, SoilPrediction, SoilSnapshot, Trend


def _soil_snapshot() -> SoilSnapshot:
    return SoilSnapshot(
        current=SoilCurrent(pH=7.0, nitrogen=45, phosphorus=25, potassium=35, organic_matter=3.2, moisture=65),
        prediction=SoilPrediction(
            pH=7.1, nitrogen=46, phosphorus=26, potassium=36, confidence=0.8,
            trend_analysis={"pH": Trend.STABLE, "nitrogen": Trend.STABLE, "phosphorus": Trend.STABLE, "potassium": Trend.STABLE},
        ),
        nutrient_levels={"pH": Level.OPTIMAL, "nitrogen": Level.LOW, "phosphorus": Level.LOW, "potassium": Level.LOW},
        alerts=[],
        recommendations=["ok"],
    )


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestSnapshotCache(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.store = ExpiringCacheStore(clock=self.clock)
        self.cache = build_snapshot_cache(Settings(soil_ttl_seconds=30, weather_ttl_seconds=10), store=self.store)

    def test_snapshot_round_trip_uses_domain_ttl(self):
        snap = _soil_snapshot()
        self.cache.set(self.cache.soil_snapshot, snap)
        self.assertIs(self.cache.get(self.cache.soil_snapshot), snap)
        self.clock.now = 31
        self.assertIsNone(self.cache.get(self.cache.soil_snapshot))

    def test_wrong_type_is_treated_as_miss(self):
        self.store.set(SOIL_SNAPSHOT_KEY, {"not": "a snapshot"}, 100)
        self.assertIsNone(self.cache.get(self.cache.soil_snapshot))
        self.assertFalse(self.store.has(SOIL_SNAPSHOT_KEY))

    def test_set_rejects_wrong_type(self):
        with self.assertRaises(TypeError):
            self.cache.set(self.cache.weather_snapshot, _soil_snapshot())

    def test_invalidate_domain_only_touches_that_domain(self):
        self.cache.set(self.cache.soil_snapshot, _soil_snapshot())
        self.store.set("other", 1, 100)
        self.cache.invalidate_domain(Domain.WEATHER)
        self.assertTrue(self.cache.has(self.cache.soil_snapshot))
        self.cache.invalidate_domain(Domain.SOIL)
        self.assertFalse(self.cache.has(self.cache.soil_snapshot))
        self.assertEqual(self.store.get("other"), 1)
        self.cache.invalidate_domain(None)
        self.assertEqual(self.cache.stats().total_entries, 0)

    def test_cached_decorator_memoises_per_arguments(self):
        calls = {"n": 0}

        @self.cache.cached("square", ttl_seconds=5)
        def square(x):
            calls["n"] += 1
            return x * x

        self.assertEqual(square(3), 9)
        self.assertEqual(square(3), 9)
        self.assertEqual(square(4), 16)
        self.assertEqual(calls["n"], 2)
        self.clock.now = 6
        square(3)
        self.assertEqual(calls["n"], 3)

    def test_cached_decorator_memoises_none_results(self):
        calls = []

        @self.cache.cached("lookup", ttl_seconds=5)
        def lookup(name):
            calls.append(name)
            return None

        self.assertIsNone(lookup("a"))
        self.assertIsNone(lookup("a"))
        self.assertEqual(calls, ["a"])


if __name__ == "__main__":
    unittest.main()
