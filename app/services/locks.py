import threading
from contextlib import contextmanager


class _Slot:
    __slots__ = ("lock", "holders")

    def __init__(self):
        self.lock = threading.Lock()
        self.holders = 0


class KeyedLocks:
    """One mutex per key, created on demand.

    Used to serialize every read-modify-write a single user triggers, across
    all games, while leaving other users unblocked. A key's mutex is dropped
    once no thread holds or waits on it.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._slots: dict = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    @contextmanager
    def hold(self, key):
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.holders += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._guard:
                slot.holders -= 1
                if slot.holders == 0:
                    del self._slots[key]
