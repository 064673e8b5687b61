"""Autoreload application wiring.

AutoreloadWatcher ties the version clock, session registry, WebSocket
transport and watch-event aggregator into one start/stop unit.  The public
functions (serve_reload, autoreload, watch) are the primary entry points.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import TYPE_CHECKING

from autoreload.config import AutoreloadConfig
from autoreload.observability.log import EventLog
from autoreload.reactive.aggregator import WatchEventAggregator
from autoreload.reactive.clock import VersionClock
from autoreload.reactive.registry import SessionRegistry
from autoreload.serve.asset import AutoreloadAssetMiddleware
from autoreload.transport.server import TransportServer

if TYPE_CHECKING:
    from autoreload._types import ASGIApp
    from autoreload.sources.watch import WatchSource


def _resolve_config(config: AutoreloadConfig | None, overrides: dict[str, object]) -> AutoreloadConfig:
    """Apply keyword overrides on top of an optional base config."""
    if config is None:
        return AutoreloadConfig(**overrides)  # type: ignore[arg-type]
    if overrides:
        return dataclasses.replace(config, **overrides)  # type: ignore[arg-type]
    return config


class AutoreloadWatcher:
    """The file watcher and the reload transport, started and stopped together.

    Flow:
        start()      → bind the WebSocket server, subscribe every watch target
        file change  → clock.advance() → registry.broadcast_reload()
        connection   → registry.register() → version greeting
        stop()       → close subscriptions, close server and connections

    Args:
        config: Autoreload configuration.  Keyword arguments override fields.
        source: Watch source (defaults to watchfiles).
        event_log: Event store; one is created if not given.

    """

    def __init__(
        self,
        config: AutoreloadConfig | None = None,
        *,
        source: WatchSource | None = None,
        event_log: EventLog | None = None,
        **overrides: object,
    ) -> None:
        self.config = _resolve_config(config, overrides)
        self.event_log = event_log if event_log is not None else EventLog()
        self.clock = VersionClock()
        self.registry = SessionRegistry(self.clock, event_log=self.event_log)
        self.server = TransportServer(
            self.registry,
            host=self.config.host,
            port=self.config.port,
            log=self.config.log,
        )
        if source is None:
            from autoreload.sources.watch import WatchfilesSource

            source = WatchfilesSource()
        self.aggregator = WatchEventAggregator(
            self.config.paths,
            source,
            self.clock,
            self.registry,
            log=self.config.log,
            event_log=self.event_log,
        )

    @property
    def version(self) -> int:
        """Current value of the version clock."""
        return self.clock.current()

    async def start(self) -> None:
        """Start the transport, then subscribe to every watch target."""
        await self.server.start()
        self.aggregator.start()

    async def stop(self) -> None:
        """Close subscriptions and the transport.

        Re-raises a subscription failure if one ended the watch.
        """
        self.aggregator.stop()
        await self.server.stop()
        await self.aggregator.wait()

    async def run(self) -> None:
        """Start, then serve until cancelled or a subscription fails."""
        await self.start()
        try:
            await self.aggregator.wait()
            await self.server.serve_forever()
        finally:
            self.aggregator.stop()
            await self.server.stop()


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def serve_reload(
    app: ASGIApp,
    config: AutoreloadConfig | None = None,
    **overrides: object,
) -> AutoreloadAssetMiddleware:
    """Wrap an ASGI app so it serves the client script.

    Only ``port`` and ``serve_path`` matter here.  The script is read
    immediately; a missing asset raises :class:`~autoreload._errors.AssetError`.

    """
    config = _resolve_config(config, overrides)
    return AutoreloadAssetMiddleware(app, port=config.port, serve_path=config.serve_path)


def autoreload(
    app: ASGIApp,
    config: AutoreloadConfig | None = None,
    **overrides: object,
) -> AutoreloadAssetMiddleware:
    """Serve the client script and run the watcher for the app's lifespan.

    Equivalent to :func:`serve_reload` plus an :class:`AutoreloadWatcher`
    started on ``lifespan.startup`` and stopped on ``lifespan.shutdown``.

    """
    config = _resolve_config(config, overrides)
    watcher = AutoreloadWatcher(config)
    return AutoreloadAssetMiddleware(
        app,
        port=config.port,
        serve_path=config.serve_path,
        watcher=watcher,
    )


def watch(config: AutoreloadConfig | None = None, **overrides: object) -> None:
    """Run the watcher and transport in the foreground until interrupted.

    Args:
        config: Autoreload configuration.
        **overrides: Override AutoreloadConfig fields (``paths``, ``port``, ...).

    """
    from autoreload.console import print_banner

    config = _resolve_config(config, overrides)
    warnings = [
        f"Watch path does not exist: {target.path}"
        for target in config.paths
        if not target.path.exists()
    ]
    print_banner(config, warnings=warnings or None)

    watcher = AutoreloadWatcher(config)
    try:
        asyncio.run(watcher.run())
    except KeyboardInterrupt:
        pass
