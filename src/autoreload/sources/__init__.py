"""Watch layer — filesystem events for the aggregator.

Wraps watchfiles behind a small subscribe-with-callback interface.
"""

from autoreload.sources.watch import (
    Subscription,
    WatchCallback,
    WatchEvent,
    WatchfilesSource,
    WatchfilesSubscription,
    WatchSource,
    classify_change,
)

__all__ = [
    "Subscription",
    "WatchCallback",
    "WatchEvent",
    "WatchSource",
    "WatchfilesSource",
    "WatchfilesSubscription",
    "classify_change",
]
