"""Client reconciler — the receiving end of the wire protocol.

This is the Python rendition of the logic in ``static/autoreload.js``, for
headless consumers (a process that restarts itself, a test harness, a
screenshot bot) that want the same reload decisions a browser makes.

The rules:

- ``version`` (the greeting): reload only if a version is remembered and it
  differs from the server's.  No remembered version means a first visit,
  so there is nothing to catch up on.
- ``reload`` (a live push): always reload.
- Anything unparseable is ignored with a warning; the connection stays up.

Every reload first persists the new index in the version store.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake

from autoreload import console
from autoreload._errors import ProtocolError
from autoreload.reactive.protocol import VersionMessage, decode_message

if TYPE_CHECKING:
    from websockets.asyncio.client import ClientConnection

    from autoreload._types import ClientState

# Seconds to wait before reconnecting after the transport drops
RECONNECT_DELAY = 1.5

# Cookie name the browser client persists its version under
COOKIE_NAME = "__autoreload"


class VersionStore(Protocol):
    """Persisted last-known version: read, write, or absent."""

    def read(self) -> str | None:
        """Return the stored decimal string, or None if nothing is stored."""

    def write(self, value: str) -> None:
        """Replace the stored value."""


class MemoryVersionStore:
    """Version store that lives as long as the object."""

    __slots__ = ("_value",)

    def __init__(self, value: str | None = None) -> None:
        self._value = value

    def read(self) -> str | None:
        return self._value

    def write(self, value: str) -> None:
        self._value = value


class FileVersionStore:
    """Version store backed by a small text file.

    A missing or empty file reads as "no known version".
    """

    __slots__ = ("path",)

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read(self) -> str | None:
        try:
            value = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        return value or None

    def write(self, value: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(value, encoding="utf-8")


class Reconciler:
    """Decides when to reload based on protocol messages.

    Args:
        store: Where the last-known version is remembered.
        on_reload: Called with the new index after each reload decision.
        reconnect_delay: Seconds between a dropped connection and the retry.

    """

    def __init__(
        self,
        store: VersionStore,
        on_reload: Callable[[int], object] | None = None,
        *,
        reconnect_delay: float = RECONNECT_DELAY,
    ) -> None:
        self._store = store
        self._on_reload = on_reload
        self._reconnect_delay = reconnect_delay
        self._state: ClientState = "disconnected"
        self._reload_count = 0

    @property
    def state(self) -> ClientState:
        return self._state

    @property
    def reload_count(self) -> int:
        return self._reload_count

    def handle(self, text: str | bytes) -> bool:
        """Apply one wire message.

        Returns:
            True if the message caused a reload.

        """
        try:
            message = decode_message(text)
        except ProtocolError as exc:
            console.warn(f"Ignoring malformed message: {exc}")
            return False

        if isinstance(message, VersionMessage):
            stored = self._store.read()
            if not stored or stored == str(message.index):
                return False

        self._reload(message.index)
        return True

    def _reload(self, index: int) -> None:
        self._store.write(str(index))
        self._reload_count += 1
        if self._on_reload is not None:
            self._on_reload(index)

    async def run(self, url: str, *, stop_event: asyncio.Event | None = None) -> None:
        """Connect, listen, and reconnect after a fixed delay, forever.

        Returns once ``stop_event`` is set; otherwise runs until cancelled.

        """
        stop_event = stop_event or asyncio.Event()
        while not stop_event.is_set():
            self._state = "connecting"
            try:
                async with connect(url) as websocket:
                    self._state = "connected"
                    await self._listen_until(websocket, stop_event)
            except (OSError, TimeoutError, ConnectionClosed, InvalidHandshake):
                pass  # Server down or restarting; retry below
            finally:
                self._state = "disconnected"

            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=self._reconnect_delay)

    async def _listen_until(self, websocket: ClientConnection, stop_event: asyncio.Event) -> None:
        async def listen() -> None:
            async for text in websocket:
                self.handle(text)

        listener = asyncio.create_task(listen())
        stopper = asyncio.create_task(stop_event.wait())
        try:
            done, _pending = await asyncio.wait(
                [listener, stopper],
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (listener, stopper):
                if not task.done():
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await task
        if listener in done:
            listener.result()
