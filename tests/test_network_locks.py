import os
import sys
import threading
import time
import unittest

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.network_locks import NetworkLockRegistry


class TestNetworkLockRegistry(unittest.TestCase):

    def test_same_name_same_lock(self):
        locks = NetworkLockRegistry()
        self.assertIs(locks.get('Lab'), locks.get('Lab'))
        self.assertIsNot(locks.get('Lab'), locks.get('Office'))

    def test_hold_is_reentrant(self):
        locks = NetworkLockRegistry()
        with locks.hold('Lab'):
            with locks.hold('Lab'):
                pass

    def test_hold_serializes_same_network(self):
        locks = NetworkLockRegistry()
        events = []

        def worker(tag):
            with locks.hold('Lab'):
                events.append(('enter', tag))
                time.sleep(0.05)
                events.append(('exit', tag))

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(3)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # every enter is immediately followed by its own exit
        for i in range(0, len(events), 2):
            self.assertEqual(events[i][0], 'enter')
            self.assertEqual(events[i + 1], ('exit', events[i][1]))

    def test_different_networks_do_not_block(self):
        locks = NetworkLockRegistry()
        acquired = threading.Event()

        def other():
            with locks.hold('Office'):
                acquired.set()

        with locks.hold('Lab'):
            t = threading.Thread(target=other)
            t.start()
            self.assertTrue(acquired.wait(2))
            t.join()


if __name__ == '__main__':
    unittest.main()
