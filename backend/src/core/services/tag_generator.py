"""
Process-wide unique tag generation.
Every request gets a tag that prefixes its staged upload and its frame files.
"""
from __future__ import annotations

import itertools
import threading
import time
from typing import Callable, Optional


class UniqueTagGenerator:
    """Issues tags of the form ``<time_ns>-<sequence>``.

    The sequence is a monotonically increasing counter guarded by a lock, so
    two callers can never receive the same tag even when the clock stalls,
    goes backwards, or two requests arrive in the same nanosecond.
    """

    def __init__(self, clock: Callable[[], int] = time.time_ns) -> None:
        self._clock = clock
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._issued = 0

    def next_tag(self) -> str:
        with self._lock:
            sequence = next(self._counter)
            self._issued = sequence
            stamp = self._clock()
        return f"{stamp}-{sequence:06d}"

    @property
    def issued(self) -> int:
        """Number of tags handed out since process start."""
        return self._issued


_default_generator: Optional[UniqueTagGenerator] = None
_default_lock = threading.Lock()


def get_tag_generator() -> UniqueTagGenerator:
    """Return the generator shared by every request in this process."""
    global _default_generator
    with _default_lock:
        if _default_generator is None:
            _default_generator = UniqueTagGenerator()
        return _default_generator
