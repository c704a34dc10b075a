import threading
from contextlib import contextmanager
from typing import Dict


class NetworkLockRegistry:
    """
    One lock per network name.

    Snapshot reconciliation and the scheduled evaluator both read-modify-write
    a network's devices and active alert ids; holding the network's lock for
    the whole unit of work serializes them.
    """

    def __init__(self):
        self._locks: Dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    def get(self, network_name: str) -> threading.RLock:
        with self._lock:
            lock = self._locks.get(network_name)
            if lock is None:
                lock = threading.RLock()
                self._locks[network_name] = lock
            return lock

    @contextmanager
    def hold(self, network_name: str):
        lock = self.get(network_name)
        with lock:
            yield
