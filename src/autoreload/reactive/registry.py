"""Session registry — the set of connected clients and the broadcast fan-out.

Every open transport connection is a :class:`Session`.  A session owns a
queue of outbound text frames; the registry only ever enqueues, and the
transport layer pumps each queue onto its socket.  That keeps broadcasting
synchronous and non-blocking, and gives every session its own in-order
stream: the version greeting first, then reloads in broadcast order.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from autoreload.observability.events import SessionClosed, SessionOpened, now_ns
from autoreload.reactive.protocol import ReloadMessage, VersionMessage, encode_message

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from autoreload._types import SessionID
    from autoreload.observability.log import EventLog
    from autoreload.reactive.clock import VersionClock

# Frames a session may have queued before further broadcasts to it are dropped
MAX_PENDING = 256


def _new_queue() -> asyncio.Queue[str | None]:
    return asyncio.Queue(maxsize=MAX_PENDING)


@dataclass(frozen=True, slots=True)
class Session:
    """A connected client.

    Attributes:
        session_id: Unique identifier for this connection.
        queue: Outbound text frames; ``None`` marks the end of the stream.
        opened_ns: When the session object was created.

    """

    session_id: SessionID = field(default_factory=lambda: uuid.uuid4().hex[:12])
    queue: asyncio.Queue[str | None] = field(default_factory=_new_queue, compare=False, hash=False)
    opened_ns: int = field(default_factory=now_ns, compare=False, hash=False)


class SessionRegistry:
    """Tracks connected sessions and fans reload messages out to them.

    Thread-safe: the session set is protected by a lock.  No other component
    touches the set; callers get frozen snapshots.

    Args:
        clock: Version clock consulted for the greeting.
        event_log: Optional store for session lifecycle events.

    """

    def __init__(self, clock: VersionClock, event_log: EventLog | None = None) -> None:
        self._clock = clock
        self._event_log = event_log
        self._sessions: set[Session] = set()
        self._lock = threading.Lock()

    @property
    def session_count(self) -> int:
        """Number of currently registered sessions."""
        with self._lock:
            return len(self._sessions)

    def sessions(self) -> frozenset[Session]:
        """Snapshot of the registered sessions."""
        with self._lock:
            return frozenset(self._sessions)

    def __contains__(self, session: object) -> bool:
        with self._lock:
            return session in self._sessions

    def register(self, session: Session) -> int:
        """Add a session and greet it with the current version.

        The greeting is queued before the session becomes visible to
        broadcasts, so it is always the first frame the session receives.

        Returns:
            The version the session was greeted with.

        """
        with self._lock:
            if session in self._sessions:
                return self._clock.current()
            version = self._clock.current()
            session.queue.put_nowait(encode_message(VersionMessage(index=version)))
            self._sessions.add(session)

        if self._event_log is not None:
            self._event_log.append(
                SessionOpened(session_id=session.session_id, version=version, timestamp_ns=now_ns())
            )
        return version

    def unregister(self, session: Session) -> bool:
        """Remove a session.  Unregistering an unknown session is a no-op.

        Wakes the session's outbox so the transport pump can finish.

        Returns:
            True if the session was registered.

        """
        with self._lock:
            if session not in self._sessions:
                return False
            self._sessions.discard(session)

        with contextlib.suppress(asyncio.QueueFull):
            session.queue.put_nowait(None)

        if self._event_log is not None:
            ts = now_ns()
            self._event_log.append(
                SessionClosed(
                    session_id=session.session_id,
                    duration_ms=(ts - session.opened_ns) / 1_000_000,
                    timestamp_ns=ts,
                )
            )
        return True

    def broadcast_reload(self, version: int) -> int:
        """Queue a reload message for every registered session.

        Never blocks.  A session whose queue is full is evicted: its pending
        frames are dropped and it is unregistered, which ends its outbox so
        the transport closes the socket.  The client then reconnects and
        catches up from the version greeting.

        Returns:
            Number of sessions the message was queued for.

        """
        frame = encode_message(ReloadMessage(index=version))

        count = 0
        stalled: list[Session] = []
        for session in self.sessions():
            try:
                session.queue.put_nowait(frame)
                count += 1
            except asyncio.QueueFull:
                stalled.append(session)

        for session in stalled:
            self._evict(session)

        return count

    def _evict(self, session: Session) -> None:
        """Drop a session's backlog and unregister it."""
        with contextlib.suppress(asyncio.QueueEmpty):
            while True:
                session.queue.get_nowait()
        self.unregister(session)

    async def outbox(self, session: Session) -> AsyncIterator[str]:
        """Yield the session's queued frames until it is unregistered."""
        while True:
            frame = await session.queue.get()
            if frame is None:
                return
            yield frame
