"""Tests for departure normalization."""

import unittest
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src to path so we can import metronow
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fakes import make_raw
from metronow.models import Departure, parse_timestamp


class TestParseTimestamp(unittest.TestCase):
    """Test ISO-8601 coercion of upstream timestamps."""

    def test_offset_is_kept(self):
        parsed = parse_timestamp("2024-03-20T10:15:00+01:00")
        self.assertEqual(parsed.utcoffset(), timedelta(hours=1))

    def test_trailing_z(self):
        parsed = parse_timestamp("2024-03-20T09:15:00Z")
        self.assertEqual(parsed, datetime(2024, 3, 20, 9, 15, tzinfo=timezone.utc))

    def test_naive_is_utc(self):
        parsed = parse_timestamp("2024-03-20T09:15:00")
        self.assertEqual(parsed.tzinfo, timezone.utc)

    def test_empty(self):
        self.assertIsNone(parse_timestamp(None))
        self.assertIsNone(parse_timestamp(" "))

    def test_invalid(self):
        with self.assertRaises(ValueError):
            parse_timestamp("tomorrow")


class TestDeparture(unittest.TestCase):
    """Test normalization of raw departure records."""

    def test_from_raw_trims_and_renames(self):
        raw = make_raw(
            " U1040Z101P ",
            scheduled="2024-03-20T10:15:00+01:00",
            predicted="2024-03-20T10:16:30+01:00",
            route=" C ",
            headsign=" Háje\n",
        )
        departure = Departure.from_raw(raw)

        self.assertEqual(departure.stop_id, "U1040Z101P")
        self.assertEqual(departure.route_label, "C")
        self.assertEqual(departure.headsign, "Háje")
        self.assertEqual(departure.predicted_time - departure.scheduled_time, timedelta(seconds=90))

    def test_missing_prediction_falls_back_to_schedule(self):
        departure = Departure.from_raw(make_raw("U1040Z101P", predicted=None))
        self.assertEqual(departure.predicted_time, departure.scheduled_time)

    def test_missing_schedule_is_rejected(self):
        with self.assertRaises(ValueError):
            Departure.from_raw(make_raw("U1040Z101P", scheduled=None))

    def test_blank_stop_is_rejected(self):
        with self.assertRaises(ValueError):
            Departure.from_raw(make_raw("  "))

    def test_to_dict(self):
        departure = Departure.from_raw(make_raw(
            "U1040Z101P",
            scheduled="2024-03-20T10:15:00+01:00",
            predicted="2024-03-20T10:16:00+01:00",
        ))
        self.assertEqual(departure.to_dict(), {
            "stopID": "U1040Z101P",
            "scheduledTime": "2024-03-20T10:15:00+01:00",
            "predictedTime": "2024-03-20T10:16:00+01:00",
            "routeLabel": "C",
            "headsign": "Háje",
        })


if __name__ == "__main__":
    unittest.main()
