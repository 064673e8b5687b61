"""Transport layer — WebSocket server and the reference client."""

from autoreload.transport.client import (
    COOKIE_NAME,
    RECONNECT_DELAY,
    FileVersionStore,
    MemoryVersionStore,
    Reconciler,
    VersionStore,
)
from autoreload.transport.server import TransportServer

__all__ = [
    "COOKIE_NAME",
    "RECONNECT_DELAY",
    "FileVersionStore",
    "MemoryVersionStore",
    "Reconciler",
    "TransportServer",
    "VersionStore",
]
