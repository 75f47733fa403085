import os
import time
import unittest
from datetime import date, datetime
from unittest.mock import patch

from painel.errors import InvalidRange, MissingBound, ValidationError
from painel.finance.windows import business_date, day_window, local_midnight_utc, resolve_window
from tests.base import utc


class TestResolveWindow(unittest.TestCase):
    def test_today_uses_business_timezone(self):
        # 02:30 UTC de 01/03 ainda é 29/02 em São Paulo
        window = resolve_window("today", now=utc(2024, 3, 1, 2, 30))
        self.assertEqual(window.start, utc(2024, 2, 29, 3, 0))
        self.assertEqual(window.end, utc(2024, 3, 1, 2, 59, 59, 999000))

    @unittest.skipUnless(hasattr(time, "tzset"), "time.tzset indisponível")
    def test_today_ignores_machine_timezone(self):
        agora = utc(2024, 3, 1, 2, 30)
        janelas = []
        try:
            for tz in ("UTC", "Asia/Tokyo", "America/Los_Angeles"):
                with patch.dict(os.environ, {"TZ": tz}), patch("painel.finance.windows._utcnow", return_value=agora):
                    time.tzset()
                    janelas.append(resolve_window("today"))
        finally:
            time.tzset()

        self.assertEqual(janelas[0], janelas[1])
        self.assertEqual(janelas[0], janelas[2])
        self.assertEqual(janelas[0].start, utc(2024, 2, 29, 3, 0))

    def test_week_starts_on_monday(self):
        # 06/03/2024 é uma quarta-feira
        window = resolve_window("week", now=utc(2024, 3, 6, 15, 0))
        self.assertEqual(window.start, utc(2024, 3, 4, 3, 0))
        self.assertEqual(window.end, utc(2024, 3, 11, 2, 59, 59, 999000))

    def test_week_on_sunday_belongs_to_previous_monday(self):
        window = resolve_window("week", now=utc(2024, 3, 10, 20, 0))
        self.assertEqual(window.start, utc(2024, 3, 4, 3, 0))

    def test_month_covers_leap_february(self):
        window = resolve_window("month", now=utc(2024, 2, 10, 12, 0))
        self.assertEqual(window.start, utc(2024, 2, 1, 3, 0))
        self.assertEqual(window.end, utc(2024, 3, 1, 2, 59, 59, 999000))

    def test_custom_single_day_is_inclusive(self):
        window = resolve_window("custom", date(2024, 3, 1), date(2024, 3, 1))
        self.assertEqual(window.start, utc(2024, 3, 1, 3, 0))
        self.assertEqual(window.end, utc(2024, 3, 2, 2, 59, 59, 999000))
        # 23:00 local do mesmo dia
        self.assertTrue(window.contains(utc(2024, 3, 2, 2, 0)))
        self.assertFalse(window.contains(utc(2024, 3, 2, 3, 0)))

    def test_custom_without_bounds(self):
        with self.assertRaises(MissingBound):
            resolve_window("custom", date(2024, 3, 1), None)
        with self.assertRaises(MissingBound):
            resolve_window("custom")

    def test_custom_inverted_range(self):
        with self.assertRaises(InvalidRange):
            resolve_window("custom", date(2024, 3, 2), date(2024, 3, 1))

    def test_unknown_selector(self):
        with self.assertRaises(ValidationError):
            resolve_window("year")

    def test_bound_errors_are_validation_errors(self):
        self.assertTrue(issubclass(MissingBound, ValidationError))
        self.assertTrue(issubclass(InvalidRange, ValidationError))


class TestBusinessDate(unittest.TestCase):
    def test_naive_instant_is_utc(self):
        self.assertEqual(business_date(datetime(2024, 1, 2, 2, 59)), date(2024, 1, 1))
        self.assertEqual(business_date(datetime(2024, 1, 2, 3, 0)), date(2024, 1, 2))

    def test_local_midnight(self):
        self.assertEqual(local_midnight_utc(date(2024, 1, 1)), utc(2024, 1, 1, 3, 0))

    def test_day_window_contains_local_midnight(self):
        window = day_window(date(2024, 1, 1))
        self.assertTrue(window.contains(datetime(2024, 1, 1, 3, 0)))
        self.assertFalse(window.contains(datetime(2024, 1, 1, 2, 59)))


if __name__ == "__main__":
    unittest.main()
