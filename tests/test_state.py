"""Tests for the subscription registry and departure cache."""

import unittest
import sys
from pathlib import Path

# Add src to path so we can import metronow
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fakes import make_raw
from metronow.departure_cache import DepartureCache
from metronow.models import Departure
from metronow.subscriptions import SubscriptionRegistry


class TestSubscriptionRegistry(unittest.TestCase):
    """Test per-connection subscriptions."""

    def setUp(self):
        self.registry = SubscriptionRegistry()

    def test_set_replaces_whole_list(self):
        self.registry.set("c1", ["A", "B"])
        self.registry.set("c1", ["C"])
        self.assertEqual(self.registry.get("c1"), ["C"])

    def test_get_returns_copy(self):
        stop_ids = ["A"]
        self.registry.set("c1", stop_ids)
        stop_ids.append("B")
        self.registry.get("c1").append("C")
        self.assertEqual(self.registry.get("c1"), ["A"])

    def test_unknown_connection(self):
        self.assertIsNone(self.registry.get("missing"))
        self.registry.remove("missing")
        self.assertEqual(len(self.registry), 0)

    def test_remove(self):
        self.registry.set("c1", ["A"])
        self.registry.remove("c1")
        self.assertNotIn("c1", self.registry)
        self.assertEqual(len(self.registry), 0)

    def test_all_subscribed_stop_ids(self):
        self.registry.set("c1", ["B", "A"])
        self.registry.set("c2", ["A", "C"])
        self.assertEqual(sorted(self.registry.all_subscribed_stop_ids()), ["A", "A", "B", "C"])
        self.assertEqual(sorted(self.registry.connection_ids()), ["c1", "c2"])


class TestDepartureCache(unittest.TestCase):
    """Test the shared departure cache."""

    def setUp(self):
        self.cache = DepartureCache()
        self.departure = Departure.from_raw(make_raw("A"))

    def test_absent_stop(self):
        self.assertIsNone(self.cache.get("A"))
        self.assertFalse(self.cache.has("A"))

    def test_set_overwrites(self):
        self.cache.set("A", [self.departure, self.departure])
        self.cache.set("A", [self.departure])
        self.assertEqual(self.cache.get("A"), [self.departure])
        self.assertTrue(self.cache.has("A"))

    def test_empty_list_is_not_absent(self):
        self.cache.set("A", [])
        self.assertEqual(self.cache.get("A"), [])
        self.assertTrue(self.cache.has("A"))

    def test_stop_ids(self):
        self.cache.set("A", [self.departure])
        self.cache.set("B", [])
        self.assertEqual(sorted(self.cache.stop_ids()), ["A", "B"])
        self.assertEqual(len(self.cache), 2)


if __name__ == "__main__":
    unittest.main()
