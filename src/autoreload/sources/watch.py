"""Watch source — turns watchfiles changes into autoreload events.

Each watch target gets its own subscription: an ``awatch`` loop running in
an asyncio task that classifies raw changes into ``change`` / ``add`` /
``addDir`` and invokes a callback for every event whose kind the target
asked for.  Deletions are never reported.

Debouncing belongs to watchfiles; whatever batching it does passes
through, one callback per change in each batch.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from watchfiles import Change, awatch

if TYPE_CHECKING:
    from autoreload._types import EventKind
    from autoreload.config import WatchTarget


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A qualifying filesystem event.

    Attributes:
        kind: Event kind, one of the kinds the target subscribed to.
        path: Path reported by the watch source.
        target: The watch target that produced the event.

    """

    kind: EventKind
    path: Path
    target: WatchTarget


type WatchCallback = Callable[[WatchEvent], None]


class Subscription(Protocol):
    """Handle for one active watch subscription."""

    def close(self) -> None:
        """Stop delivering events."""

    async def wait(self) -> None:
        """Wait until the subscription ends; re-raise its failure, if any."""


class WatchSource(Protocol):
    """Something that can watch a target and call back per matching event."""

    def subscribe(self, target: WatchTarget, callback: WatchCallback) -> Subscription:
        """Start watching ``target``; call ``callback`` for each matching event."""


def classify_change(change: Change, path: Path) -> EventKind | None:
    """Map a watchfiles change to an event kind.

    Returns None for deletions.  An added path is ``addDir`` if it is a
    directory when inspected, ``add`` otherwise.

    """
    if change == Change.modified:
        return "change"
    if change == Change.added:
        return "addDir" if path.is_dir() else "add"
    return None


class WatchfilesSubscription:
    """An ``awatch`` loop for one target, running as an asyncio task."""

    def __init__(self, target: WatchTarget, callback: WatchCallback) -> None:
        self._target = target
        self._callback = callback
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            self._watch_loop(), name=f"autoreload-watch:{target.path}"
        )

    @property
    def target(self) -> WatchTarget:
        return self._target

    @property
    def is_running(self) -> bool:
        """Whether the watch task is still active."""
        return not self._task.done()

    def close(self) -> None:
        self._stop_event.set()

    async def wait(self) -> None:
        await self._task

    async def _watch_loop(self) -> None:
        wanted = set(self._target.events)
        async for raw_changes in awatch(
            self._target.path,
            stop_event=self._stop_event,
            **self._target.options,
        ):
            for change, path_str in sorted(raw_changes, key=lambda c: c[1]):
                path = Path(path_str)
                kind = classify_change(change, path)
                if kind is None or kind not in wanted:
                    continue
                self._callback(WatchEvent(kind=kind, path=path, target=self._target))


class WatchfilesSource:
    """Watch source backed by ``watchfiles.awatch``.

    Must be used from inside a running event loop.
    """

    def subscribe(self, target: WatchTarget, callback: WatchCallback) -> WatchfilesSubscription:
        return WatchfilesSubscription(target, callback)
