"""Version clock — how many qualifying changes have happened so far.

A single process-wide counter.  Starts at 0, only ever moves forward by one.
The value has no meaning across process restarts; clients compare it for
equality only.

Thread Safety:
    ``advance()`` holds a ``threading.Lock`` across read-increment-return, so
    concurrent callers always observe distinct, consecutive values.

"""

import threading


class VersionClock:
    """Monotonically increasing build version."""

    __slots__ = ("_lock", "_value")

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def advance(self) -> int:
        """Increment by one and return the new value."""
        with self._lock:
            self._value += 1
            return self._value

    def current(self) -> int:
        """Return the current value without changing it."""
        with self._lock:
            return self._value

    def __repr__(self) -> str:
        return f"VersionClock({self.current()})"
