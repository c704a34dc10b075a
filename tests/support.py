"""
Shared fixtures for tests that need the Flask app and an in-memory database.
"""
import os
import sys
import unittest
from datetime import datetime
from unittest.mock import MagicMock

# Add parent directory to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app
from extensions import db
from models import DeviceOperationMode

NOW = datetime(2026, 10, 16, 12, 0, 0)

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'API_KEY': 'test-key',
    'NOTIFY_RETRIES': 2,
    'NOTIFY_RETRY_DELAY': 0,
}


class AppTestCase(unittest.TestCase):
    def app_config(self):
        return dict(TEST_CONFIG)

    def setUp(self):
        self.notifier = MagicMock()
        self.app = create_app(self.app_config(), notifier=self.notifier)
        self.ctx = self.app.app_context()
        self.ctx.push()

        self.now = NOW
        self.alert_manager = self.app.extensions['alert_manager']
        self.alert_manager.clock = lambda: self.now
        self.store = self.alert_manager.store
        self.reconciler = self.app.extensions['presence_reconciler']
        self.evaluator = self.app.extensions['threshold_evaluator']

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        self.ctx.pop()

    def make_network(self, name='Lab', last_seen=None, alerting_delay=300, email='ops@example.com'):
        network = self.store.create_network(name, last_seen or self.now)
        network.alerting_delay = alerting_delay
        network.email_address = email
        self.store.save_network(network)
        db.session.commit()
        return network

    def make_device(self, network, mac='AA:BB:CC:DD:EE:01', ip='10.0.0.5',
                    mode=DeviceOperationMode.AUTHORIZED, last_seen=None, online=True):
        device = self.store.create_device(network, mac, ip, last_seen or self.now)
        device.operation_mode = mode
        device.online = online
        self.store.save_device(device)
        db.session.commit()
        return device
