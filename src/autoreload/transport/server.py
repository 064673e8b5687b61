"""WebSocket transport — one session per connection.

Each accepted connection is registered with the session registry, which
queues the version greeting.  Two tasks then run side by side:

- the pump forwards the session's queued frames to the socket
- the drain reads (and discards) inbound frames until the socket closes

Whichever finishes first ends the connection; the session is unregistered
on the way out no matter how the socket went away.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING

from websockets.asyncio.server import ServerConnection, serve
from websockets.exceptions import ConnectionClosed

from autoreload import console
from autoreload.config import LogSettings
from autoreload.reactive.registry import Session

if TYPE_CHECKING:
    from websockets.asyncio.server import Server

    from autoreload.reactive.registry import SessionRegistry


class TransportServer:
    """WebSocket server feeding registered sessions.

    Accepts a handshake on any path; the client script uses ``/__autoreload``.

    Args:
        registry: Session registry to register connections with.
        host: Bind address.
        port: Bind port (0 picks a free port).
        log: Console logging toggles (only ``listen`` is used here).

    """

    def __init__(
        self,
        registry: SessionRegistry,
        *,
        host: str = "127.0.0.1",
        port: int = 1238,
        log: LogSettings | None = None,
    ) -> None:
        self._registry = registry
        self._host = host
        self._port = port
        self._log = log or LogSettings()
        self._server: Server | None = None

    @property
    def is_serving(self) -> bool:
        return self._server is not None

    @property
    def port(self) -> int:
        """The bound port (differs from the configured one when that was 0)."""
        if self._server is None:
            return self._port
        for sock in self._server.sockets:
            return sock.getsockname()[1]
        return self._port

    async def start(self) -> None:
        """Bind and start accepting connections."""
        if self._server is not None:
            return
        self._server = await serve(self._handle, self._host, self._port)
        if self._log.listen:
            console.log(f"WS server listening on port {self.port}")

    async def stop(self) -> None:
        """Close the listener and every open connection."""
        if self._server is None:
            return
        server, self._server = self._server, None
        server.close()
        await server.wait_closed()

    async def serve_forever(self) -> None:
        """Start if needed, then serve until cancelled."""
        await self.start()
        assert self._server is not None
        await self._server.serve_forever()

    async def _handle(self, websocket: ServerConnection) -> None:
        session = Session()
        self._registry.register(session)
        try:
            pump = asyncio.create_task(self._pump(websocket, session))
            drain = asyncio.create_task(self._drain(websocket))

            done, pending = await asyncio.wait(
                [pump, drain],
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in pending:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            for task in done:
                task.result()
        finally:
            self._registry.unregister(session)

    async def _pump(self, websocket: ServerConnection, session: Session) -> None:
        """Send queued frames until the session ends or the socket closes."""
        with contextlib.suppress(ConnectionClosed):
            async for frame in self._registry.outbox(session):
                await websocket.send(frame)

    async def _drain(self, websocket: ServerConnection) -> None:
        """Consume inbound frames; clients don't send protocol payloads."""
        with contextlib.suppress(ConnectionClosed):
            async for _ in websocket:
                pass
