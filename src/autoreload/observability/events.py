"""Event model for autoreload observability.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


# ---------------------------------------------------------------------------
# Session lifecycle events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SessionOpened:
    """A client session registered and was greeted.

    Attributes:
        session_id: Identifier of the new session.
        version: Version sent in the greeting.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    session_id: str
    version: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SessionClosed:
    """A client session was removed from the registry.

    Attributes:
        session_id: Identifier of the session.
        duration_ms: How long the session was registered.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    session_id: str
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Reload events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ReloadBroadcast:
    """A qualifying watch event advanced the clock and was broadcast.

    Attributes:
        version: The new clock value.
        kind: Watch event kind that triggered the reload.
        path: Path reported by the watch source.
        clients_notified: Sessions the reload was queued for.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    version: int
    kind: Literal["change", "add", "addDir"]
    path: str
    clients_notified: int
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type AutoreloadEvent = SessionOpened | SessionClosed | ReloadBroadcast


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
