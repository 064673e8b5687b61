"""Watch-event aggregator — connects watch sources to the registry.

For every configured target it holds one subscription on the watch source.
Each qualifying event runs one advance-and-broadcast cycle:
    1. Advance the version clock
    2. Log what happened (per the log settings)
    3. Queue a reload carrying the new version for every session

The cycle is synchronous, so within the event loop no registration can land
between the advance and the broadcast.  Nothing is debounced or merged here;
two targets watching the same path each run their own cycle.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from autoreload import console
from autoreload.config import LogSettings
from autoreload.observability.events import ReloadBroadcast, now_ns

if TYPE_CHECKING:
    from collections.abc import Sequence

    from autoreload.config import WatchTarget
    from autoreload.observability.log import EventLog
    from autoreload.reactive.clock import VersionClock
    from autoreload.reactive.registry import SessionRegistry
    from autoreload.sources.watch import Subscription, WatchEvent, WatchSource


class WatchEventAggregator:
    """Bridges filesystem notifications to version advancement and broadcast.

    Args:
        targets: Watch targets, subscribed in order.
        source: Watch source providing one subscription per target.
        clock: Version clock to advance.
        registry: Session registry to broadcast through.
        log: Console logging toggles.
        event_log: Optional store for reload events.

    """

    def __init__(
        self,
        targets: Sequence[WatchTarget],
        source: WatchSource,
        clock: VersionClock,
        registry: SessionRegistry,
        *,
        log: LogSettings | None = None,
        event_log: EventLog | None = None,
    ) -> None:
        self._targets = tuple(targets)
        self._source = source
        self._clock = clock
        self._registry = registry
        self._log = log or LogSettings()
        self._event_log = event_log
        self._subscriptions: list[Subscription] = []

    @property
    def targets(self) -> tuple[WatchTarget, ...]:
        return self._targets

    @property
    def subscriptions(self) -> tuple[Subscription, ...]:
        return tuple(self._subscriptions)

    def start(self) -> None:
        """Subscribe to every target.  Calling twice is a no-op."""
        if self._subscriptions:
            return
        for target in self._targets:
            self._subscriptions.append(self._source.subscribe(target, self.handle_event))

    def stop(self) -> None:
        """Close every subscription."""
        for subscription in self._subscriptions:
            subscription.close()

    async def wait(self) -> None:
        """Wait for all subscriptions to end.

        The first subscription failure propagates; the remaining
        subscriptions are closed first.

        """
        if not self._subscriptions:
            return
        try:
            await asyncio.gather(*(s.wait() for s in self._subscriptions))
        except BaseException:
            self.stop()
            raise

    def handle_event(self, event: WatchEvent) -> int:
        """Run one advance-log-broadcast cycle for a qualifying event.

        Returns:
            The new version.

        """
        version = self._clock.advance()

        if self._log.file:
            console.log(console.describe_event(event.kind, event.path))
        if self._log.reload:
            console.log("File changed, reloading client...")

        notified = self._registry.broadcast_reload(version)

        if self._event_log is not None:
            self._event_log.append(
                ReloadBroadcast(
                    version=version,
                    kind=event.kind,
                    path=str(event.path),
                    clients_notified=notified,
                    timestamp_ns=now_ns(),
                )
            )
        return version
