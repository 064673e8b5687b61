"""Shared test fixtures for autoreload."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from autoreload.config import WatchTarget
from autoreload.reactive.clock import VersionClock
from autoreload.reactive.registry import SessionRegistry
from autoreload.sources.watch import WatchCallback, WatchEvent


class FakeSubscription:
    """In-memory subscription handle recorded by FakeWatchSource."""

    def __init__(self, target: WatchTarget, callback: WatchCallback) -> None:
        self.target = target
        self.callback = callback
        self.closed = False
        self._error: BaseException | None = None
        self._ended = asyncio.Event()

    def close(self) -> None:
        self.closed = True
        self._ended.set()

    def fail(self, error: BaseException) -> None:
        """End the subscription with an error, as a broken watcher would."""
        self._error = error
        self._ended.set()

    async def wait(self) -> None:
        await self._ended.wait()
        if self._error is not None:
            raise self._error


class FakeWatchSource:
    """Watch source driven by the test instead of the filesystem.

    ``emit`` delivers an event to every open subscription whose target path
    matches and whose event kinds include ``kind``, the same filtering the
    watchfiles source applies.
    """

    def __init__(self) -> None:
        self.subscriptions: list[FakeSubscription] = []

    def subscribe(self, target: WatchTarget, callback: WatchCallback) -> FakeSubscription:
        subscription = FakeSubscription(target, callback)
        self.subscriptions.append(subscription)
        return subscription

    def emit(self, path: str | Path, kind: str = "change") -> int:
        """Deliver one filesystem event; return how many subscriptions saw it."""
        path = Path(path)
        delivered = 0
        for sub in self.subscriptions:
            if sub.closed or sub.target.path != path or kind not in sub.target.events:
                continue
            sub.callback(WatchEvent(kind=kind, path=path, target=sub.target))  # type: ignore[arg-type]
            delivered += 1
        return delivered


def drain(queue: asyncio.Queue) -> list[object]:
    """Pop everything currently in a queue without waiting."""
    items: list[object] = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


@pytest.fixture
def clock() -> VersionClock:
    return VersionClock()


@pytest.fixture
def registry(clock: VersionClock) -> SessionRegistry:
    return SessionRegistry(clock)


@pytest.fixture
def fake_source() -> FakeWatchSource:
    return FakeWatchSource()
