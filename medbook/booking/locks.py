from contextlib import contextmanager
from threading import Lock

from medbook.booking.errors import SlotBusyError


class SlotLocks:
    """Per-slot mutual exclusion for check-and-set sequences.

    Entries are reference counted and dropped once nobody holds or waits on
    them, so the registry only grows with the number of slots in flight.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout
        self._guard = Lock()
        self._entries: dict[int, list] = {}

    @contextmanager
    def hold(self, slot_id: int):
        with self._guard:
            entry = self._entries.setdefault(slot_id, [Lock(), 0])
            entry[1] += 1

        try:
            if not entry[0].acquire(timeout=self.timeout):
                raise SlotBusyError()
            try:
                yield
            finally:
                entry[0].release()
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._entries.pop(slot_id, None)

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
