"""Reactive layer — change propagation core.

Connects watch events to browser reloads through the version clock, the
session registry, and the wire protocol.
"""

from autoreload.reactive.aggregator import WatchEventAggregator
from autoreload.reactive.clock import VersionClock
from autoreload.reactive.protocol import (
    ReloadMessage,
    VersionMessage,
    WireMessage,
    decode_message,
    encode_message,
)
from autoreload.reactive.registry import Session, SessionRegistry

__all__ = [
    "ReloadMessage",
    "Session",
    "SessionRegistry",
    "VersionClock",
    "VersionMessage",
    "WatchEventAggregator",
    "WireMessage",
    "decode_message",
    "encode_message",
]
