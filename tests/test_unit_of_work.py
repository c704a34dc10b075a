"""
Snapshot reconciliation and threshold evaluation of one network must not
interleave: both wait for the network's lock.
"""
import os
import shutil
import tempfile
import threading
import unittest
from datetime import timedelta

from support import AppTestCase

from extensions import db
from models import AlertRecord, Device, Network

MAC = 'AA:BB:CC:DD:EE:01'


class TestNetworkSerialization(AppTestCase):

    def app_config(self):
        # worker threads need their own connections to the same database
        self.tmpdir = tempfile.mkdtemp()
        config = super().app_config()
        config['SQLALCHEMY_DATABASE_URI'] = 'sqlite:///' + os.path.join(self.tmpdir, 'netmon.db')
        return config

    def tearDown(self):
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
        self.ctx.pop()
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def run_in_thread(self, work):
        started = threading.Event()
        done = threading.Event()
        errors = []

        def target():
            started.set()
            try:
                with self.app.app_context():
                    work()
            except Exception as e:
                errors.append(e)
            finally:
                done.set()

        thread = threading.Thread(target=target)
        thread.start()
        return thread, started, done, errors

    def test_reconcile_waits_for_network_lock(self):
        with self.alert_manager.locks.hold('Lab'):
            thread, started, done, errors = self.run_in_thread(
                lambda: self.reconciler.reconcile('Lab', self.now, [(MAC, '10.0.0.5')])
            )
            self.assertTrue(started.wait(2))
            self.assertFalse(done.wait(0.3))

        thread.join(5)
        self.assertTrue(done.is_set())
        self.assertEqual(errors, [])
        self.assertEqual(Network.query.count(), 1)
        self.assertEqual(Device.query.count(), 1)

    def test_evaluation_waits_for_network_lock(self):
        self.make_network(last_seen=self.now - timedelta(seconds=400))

        with self.alert_manager.locks.hold('Lab'):
            thread, started, done, errors = self.run_in_thread(
                lambda: self.evaluator.evaluate_all(now=self.now)
            )
            self.assertTrue(started.wait(2))
            self.assertFalse(done.wait(0.3))
            self.assertEqual(AlertRecord.query.count(), 0)

        thread.join(5)
        self.assertTrue(done.is_set())
        self.assertEqual(errors, [])
        db.session.rollback()
        self.assertEqual(AlertRecord.query.count(), 1)

    def test_other_network_is_not_blocked(self):
        with self.alert_manager.locks.hold('Office'):
            thread, started, done, errors = self.run_in_thread(
                lambda: self.reconciler.reconcile('Lab', self.now, [(MAC, '10.0.0.5')])
            )
            self.assertTrue(done.wait(5))

        thread.join(5)
        self.assertEqual(errors, [])


if __name__ == '__main__':
    unittest.main()
