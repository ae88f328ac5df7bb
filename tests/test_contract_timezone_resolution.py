from __future__ import annotations

import datetime as dt
import unittest

from suture.util.tz import fmt_ms, resolve_tz, same_local_day, tzinfo_for


class TestTimezoneResolutionContract(unittest.TestCase):
    def test_valid_timezone_identifiers_resolve(self) -> None:
        self.assertEqual(resolve_tz("UTC"), dt.timezone.utc)
        self.assertEqual(resolve_tz("z"), dt.timezone.utc)
        self.assertIsNotNone(resolve_tz("local"))
        self.assertEqual(resolve_tz("+02:00").utcoffset(None), dt.timedelta(hours=2))
        self.assertEqual(resolve_tz("-0530").utcoffset(None), -dt.timedelta(hours=5, minutes=30))

    def test_invalid_timezone_identifiers_raise(self) -> None:
        with self.assertRaises(ValueError):
            resolve_tz("No/Such_Zone")
        with self.assertRaises(ValueError):
            resolve_tz("+25:00")

    def test_local_maps_to_per_instant_zone(self) -> None:
        self.assertIsNone(tzinfo_for("local"))
        self.assertIsNone(tzinfo_for(""))
        self.assertEqual(tzinfo_for("UTC"), dt.timezone.utc)

    def test_same_local_day(self) -> None:
        utc = dt.timezone.utc
        midnight = 1577923200000  # 2020-01-02T00:00:00Z
        self.assertFalse(same_local_day(midnight - 500, midnight + 500, utc))
        self.assertTrue(same_local_day(midnight, midnight + 500, utc))
        plus2 = resolve_tz("+02:00")
        self.assertTrue(same_local_day(midnight - 500, midnight + 500, plus2))

    def test_fmt_ms(self) -> None:
        self.assertEqual(fmt_ms(1577923200000, dt.timezone.utc), "2020-01-02 00:00:00")


if __name__ == "__main__":
    unittest.main(verbosity=2)
