"""Observability — a record of sessions coming and going and reloads going out.

Quick Start:
    >>> from autoreload.observability import EventLog
    >>> log = EventLog()
    >>> # Pass to SessionRegistry(event_log=log) / WatchEventAggregator(event_log=log)
    >>> log.stats()["total"]
    0

"""

from autoreload.observability.events import (
    AutoreloadEvent,
    ReloadBroadcast,
    SessionClosed,
    SessionOpened,
    now_ns,
)
from autoreload.observability.log import EventLog

__all__ = [
    "AutoreloadEvent",
    "EventLog",
    "ReloadBroadcast",
    "SessionClosed",
    "SessionOpened",
    "now_ns",
]
