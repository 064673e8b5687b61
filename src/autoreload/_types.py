"""Shared type definitions for autoreload."""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, Literal

# Filesystem event kinds a watch target can subscribe to
type EventKind = Literal["change", "add", "addDir"]

# Reconciler connection state
type ClientState = Literal["disconnected", "connecting", "connected"]

# Session identifier (logging and equality only)
type SessionID = str

# ASGI primitives
type Scope = MutableMapping[str, Any]
type Message = MutableMapping[str, Any]
type Receive = Callable[[], Awaitable[Message]]
type Send = Callable[[Message], Awaitable[None]]
type ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]
