import json
import os
import sys
import unittest
from datetime import datetime

# Add project root to sys.path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.errors import ParseError
from services.snapshot_parser import extract_network_name, parse_snapshot, parse_timestamp


class TestNetworkName(unittest.TestCase):
    def test_segment_before_last(self):
        self.assertEqual(extract_network_name('netmon/site/MaliGrdi/scan'), 'MaliGrdi')
        self.assertEqual(extract_network_name('Lab/scan'), 'Lab')

    def test_single_segment_uses_whole_topic(self):
        self.assertEqual(extract_network_name('Lab'), 'Lab')
        self.assertEqual(extract_network_name('/scan'), '/scan')


class TestParseSnapshot(unittest.TestCase):
    def payload(self, **overrides):
        data = {
            'hostname': 'scanner-1',
            'timestamp': '2026-10-16T12:00:00Z',
            'devices': [
                {'ip': '10.0.0.5', 'mac': 'AA:BB:CC:DD:EE:01'},
                {'ip': '10.0.0.6', 'mac': ''},
            ],
        }
        data.update(overrides)
        return json.dumps(data)

    def test_valid_payload(self):
        snapshot = parse_snapshot('netmon/Lab/scan', self.payload())

        self.assertEqual(snapshot.network_name, 'Lab')
        self.assertEqual(snapshot.hostname, 'scanner-1')
        self.assertEqual(snapshot.timestamp, datetime(2026, 10, 16, 12, 0, 0))
        self.assertEqual(len(snapshot.devices), 2)
        self.assertEqual(snapshot.devices[0].mac, 'AA:BB:CC:DD:EE:01')
        # blank MACs are the reconciler's business, not the parser's
        self.assertEqual(snapshot.devices[1].mac, '')

    def test_bytes_payload(self):
        snapshot = parse_snapshot('netmon/Lab/scan', self.payload().encode('utf-8'))
        self.assertEqual(len(snapshot.devices), 2)

    def test_offset_timestamp_converted_to_utc(self):
        self.assertEqual(parse_timestamp('2026-10-16T14:00:00+02:00'), datetime(2026, 10, 16, 12, 0, 0))

    def test_nanosecond_timestamp(self):
        self.assertEqual(parse_timestamp('2026-10-16T12:00:00.123456789Z'),
                         datetime(2026, 10, 16, 12, 0, 0, 123456))
        self.assertEqual(parse_timestamp('2026-10-16T12:00:00.5Z'),
                         datetime(2026, 10, 16, 12, 0, 0, 500000))

    def test_missing_devices_means_empty_snapshot(self):
        data = json.loads(self.payload())
        del data['devices']
        snapshot = parse_snapshot('netmon/Lab/scan', data)
        self.assertEqual(snapshot.devices, [])

    def test_invalid_payloads(self):
        bad = [
            'not json',
            json.dumps([1, 2, 3]),
            self.payload(timestamp='yesterday'),
            self.payload(timestamp=None),
            self.payload(devices={'mac': 'AA'}),
            self.payload(devices=['AA:BB']),
            self.payload(devices=[{'ip': {'x': 1}, 'mac': 'AA:BB:CC:DD:EE:01'}]),
            self.payload(devices=[{'ip': '10.0.0.5', 'mac': 42}]),
            b'\xff\xfe',
        ]
        for payload in bad:
            with self.subTest(payload=payload):
                with self.assertRaises(ParseError):
                    parse_snapshot('netmon/Lab/scan', payload)

    def test_empty_topic(self):
        with self.assertRaises(ParseError):
            parse_snapshot('  ', self.payload())


if __name__ == '__main__':
    unittest.main()
