import os
import sys
import unittest
from datetime import datetime, timedelta, timezone

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils.helpers import format_duration, format_timestamp, normalize_mac, timed, to_naive_utc


class TestHelpers(unittest.TestCase):
    def test_format_duration(self):
        self.assertEqual(format_duration(0), "0s")
        self.assertEqual(format_duration(59.9), "59s")
        self.assertEqual(format_duration(60), "1m")
        self.assertEqual(format_duration(3723), "1h 2m 3s")
        self.assertEqual(format_duration(86400 + 5), "1d 5s")
        self.assertEqual(format_duration(-5), "0s")

    def test_normalize_mac(self):
        self.assertEqual(normalize_mac(' aa:bb:cc:dd:ee:01 '), 'AA:BB:CC:DD:EE:01')
        self.assertEqual(normalize_mac(None), '')
        self.assertEqual(normalize_mac('   '), '')

    def test_to_naive_utc(self):
        aware = datetime(2026, 10, 16, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(to_naive_utc(aware), datetime(2026, 10, 16, 12, 0))
        naive = datetime(2026, 10, 16, 12, 0)
        self.assertIs(to_naive_utc(naive), naive)

    def test_format_timestamp(self):
        self.assertEqual(format_timestamp(datetime(2026, 10, 16, 9, 5, 3)), "2026-10-16 09:05:03")

    def test_timed_logs_and_returns(self):
        @timed('sample')
        def sample(x):
            return x * 2

        with self.assertLogs(__name__, level='INFO') as logs:
            self.assertEqual(sample(21), 42)
        self.assertTrue(any('sample took' in line for line in logs.output))


if __name__ == '__main__':
    unittest.main()
