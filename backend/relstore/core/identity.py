"""Identity — time-derived, process-monotonic entity ids.

Invariants:
    - Ids are decimal strings of a millisecond timestamp; a domain may prefix them
      (e.g. "<propertyId>-<stamp>"), and observe() reads the trailing stamp
    - Every id issued by one generator is strictly greater than the previous one,
      even when the clock stands still or goes backwards
    - next_id() is safe to call from several threads

Design Decisions:
    - Clock injected as a callable: tests pin time without patching modules
    - Lock-guarded counter follows the in-memory numbering provider pattern
      (ADR: no global state, one generator per store)
"""

import threading
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IdGenerator:
    """Issues ids like "1718035200000", bumping past collisions."""

    def __init__(self, clock: Clock = utc_now):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            candidate = int(self._clock().timestamp() * 1000)
            if candidate <= self._last:
                candidate = self._last + 1
            self._last = candidate
            return str(candidate)

    def observe(self, existing_id: str) -> None:
        """Advance past an id already in storage so new ids never collide with it."""
        stamp = existing_id.rsplit("-", 1)[-1]
        if not stamp.isdigit():
            return
        with self._lock:
            self._last = max(self._last, int(stamp))
