"""Client script endpoint — ASGI middleware serving ``/__autoreload.js``.

Wraps any ASGI application.  A request for exactly the serve path gets the
bundled client script with the WebSocket port baked in; everything else is
handed to the wrapped app untouched.

When constructed with a watcher, the middleware also ties the watcher to
the app's lifespan: started on ``lifespan.startup``, stopped on
``lifespan.shutdown``.  Apps that do not speak the lifespan protocol get it
answered by the middleware.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from autoreload import console
from autoreload._errors import AssetError
from autoreload.config import DEFAULT_PORT, DEFAULT_SERVE_PATH

if TYPE_CHECKING:
    from autoreload._types import ASGIApp, Message, Receive, Scope, Send
    from autoreload.app import AutoreloadWatcher

# Literal in the bundled script replaced by the configured port
PORT_PLACEHOLDER = "__AUTORELOAD_PORT__"


def _bundled_script_path() -> Path:
    """Return the absolute path to the bundled client script."""
    return Path(__file__).parent.parent / "static" / "autoreload.js"


def load_client_script(port: int = DEFAULT_PORT, *, path: Path | None = None) -> str:
    """Read the client script and substitute the port.

    Raises:
        AssetError: If the script is missing, unreadable, or has no port
            placeholder.

    """
    script_path = path or _bundled_script_path()
    try:
        raw = script_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read autoreload client script {script_path}: {exc}"
        raise AssetError(msg) from exc

    if PORT_PLACEHOLDER not in raw:
        msg = f"Autoreload client script {script_path} has no {PORT_PLACEHOLDER} placeholder"
        raise AssetError(msg)

    return raw.replace(PORT_PLACEHOLDER, str(port))


class AutoreloadAssetMiddleware:
    """ASGI middleware answering the serve path with the client script.

    The script is loaded once, at construction, so a missing asset fails
    startup rather than the first request.

    Args:
        app: The wrapped ASGI application.
        port: WebSocket port embedded in the script.
        serve_path: Exact request path to answer.
        watcher: Optional watcher to run for the app's lifespan.

    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        port: int = DEFAULT_PORT,
        serve_path: str = DEFAULT_SERVE_PATH,
        watcher: AutoreloadWatcher | None = None,
        script_path: Path | None = None,
    ) -> None:
        self.app = app
        self.serve_path = serve_path
        self.watcher = watcher
        self.body = load_client_script(port, path=script_path).encode("utf-8")
        self.headers: list[tuple[bytes, bytes]] = [
            (b"content-type", b"application/javascript; charset=utf-8"),
            (b"content-length", str(len(self.body)).encode("ascii")),
        ]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope.get("path") == self.serve_path:
            await self._send_script(scope, send)
            return

        if scope["type"] == "lifespan" and self.watcher is not None:
            await self._lifespan(scope, receive, send)
            return

        await self.app(scope, receive, send)

    async def _send_script(self, scope: Scope, send: Send) -> None:
        await send({"type": "http.response.start", "status": 200, "headers": self.headers})
        body = b"" if scope.get("method") == "HEAD" else self.body
        await send({"type": "http.response.body", "body": body})

    async def _lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the watcher for the app's lifespan.

        The wrapped app sees the lifespan messages first.  If it never takes
        the startup message (it returns early or raises on the scope, as
        HTTP-only apps do), the middleware answers the lifespan protocol
        itself so the watcher still runs.
        """
        watcher = self.watcher
        assert watcher is not None
        started = False

        async def wrapped() -> Message:
            nonlocal started
            message = await receive()
            if message["type"] == "lifespan.startup":
                started = True
                await watcher.start()
            elif message["type"] == "lifespan.shutdown":
                await watcher.stop()
            return message

        try:
            await self.app(scope, wrapped, send)
        except Exception as exc:
            if started:
                await watcher.stop()
                raise
            console.warn(f"App rejected the lifespan scope ({exc!r}); running the watcher anyway")
        if not started:
            await self._serve_lifespan(receive, send)

    async def _serve_lifespan(self, receive: Receive, send: Send) -> None:
        watcher = self.watcher
        assert watcher is not None
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    await watcher.start()
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await watcher.stop()
                await send({"type": "lifespan.shutdown.complete"})
                return
