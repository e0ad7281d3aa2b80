import unittest
from datetime import datetime, timedelta, timezone

from progress_engine.constants import MAX_ETA_DAYS
from progress_engine.trends import eta_after_days, std_dev, variance, weekly_rate, weeks_between

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestTrendAnalyzer(unittest.TestCase):
    def test_weekly_rate_two_points(self):
        series = [(START, 80.0), (START + timedelta(days=28), 78.0)]
        self.assertAlmostEqual(weekly_rate(series), -0.5)

    def test_weekly_rate_uses_first_and_last_only(self):
        series = [
            (START, 100.0),
            (START + timedelta(days=7), 150.0),
            (START + timedelta(days=14), 102.0),
        ]
        self.assertAlmostEqual(weekly_rate(series), 1.0)

    def test_weekly_rate_sparse_series_is_zero(self):
        self.assertEqual(weekly_rate([]), 0.0)
        self.assertEqual(weekly_rate([(START, 80.0)]), 0.0)

    def test_weekly_rate_identical_dates_is_zero(self):
        self.assertEqual(weekly_rate([(START, 80.0), (START, 90.0)]), 0.0)

    def test_weeks_between(self):
        self.assertAlmostEqual(weeks_between(START, START + timedelta(days=3, hours=12)), 0.5)

    def test_variance_population(self):
        self.assertAlmostEqual(variance([2, 4, 4, 4, 5, 5, 7, 9]), 4.0)
        self.assertAlmostEqual(std_dev([2, 4, 4, 4, 5, 5, 7, 9]), 2.0)

    def test_variance_sparse_input(self):
        self.assertEqual(variance([]), 0.0)
        self.assertEqual(variance([80.0]), 0.0)
        self.assertEqual(std_dev([]), 0.0)

    def test_constant_series_has_zero_variance(self):
        self.assertEqual(variance([75.5] * 8), 0.0)

    def test_eta_after_days(self):
        self.assertEqual(eta_after_days(14, START), START + timedelta(days=14))
        self.assertEqual(eta_after_days(MAX_ETA_DAYS, START), START + timedelta(days=MAX_ETA_DAYS))
        self.assertIsNone(eta_after_days(None, START))

    def test_eta_beyond_horizon_is_unknown(self):
        # would overflow datetime if added
        self.assertIsNone(eta_after_days(MAX_ETA_DAYS + 1, START))
        self.assertIsNone(eta_after_days(1e12, START))
        self.assertIsNone(eta_after_days(10, START, max_days=7))


if __name__ == '__main__':
    unittest.main()
