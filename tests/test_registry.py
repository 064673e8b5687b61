"""Tests for autoreload.reactive.registry — session tracking and fan-out."""

from __future__ import annotations

import asyncio
import json

import pytest

from autoreload.observability.events import SessionClosed, SessionOpened
from autoreload.observability.log import EventLog
from autoreload.reactive.clock import VersionClock
from autoreload.reactive.registry import MAX_PENDING, Session, SessionRegistry
from tests.conftest import drain


def _frames(session: Session) -> list[dict[str, object]]:
    return [json.loads(f) for f in drain(session.queue) if f is not None]  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class TestSession:
    """Verify Session dataclass."""

    def test_frozen(self) -> None:
        session = Session()
        with pytest.raises(AttributeError):
            session.session_id = "other"  # type: ignore[misc]

    def test_unique_ids(self) -> None:
        assert Session().session_id != Session().session_id

    def test_has_queue(self) -> None:
        assert isinstance(Session().queue, asyncio.Queue)

    def test_equality_by_id(self) -> None:
        """Queue is excluded from comparison (compare=False)."""
        assert Session(session_id="s1") == Session(session_id="s1")

    def test_hashable(self) -> None:
        assert len({Session(session_id="s1"), Session(session_id="s1")}) == 1


# ---------------------------------------------------------------------------
# register / unregister
# ---------------------------------------------------------------------------


class TestRegistration:
    """Tests for register/unregister."""

    def test_register_adds_session(self, registry: SessionRegistry) -> None:
        session = Session()
        registry.register(session)
        assert session in registry
        assert registry.session_count == 1

    def test_register_greets_with_current_version(
        self, clock: VersionClock, registry: SessionRegistry
    ) -> None:
        clock.advance()
        clock.advance()
        session = Session()

        assert registry.register(session) == 2
        assert _frames(session) == [{"type": "version", "index": 2}]

    def test_greeting_at_zero(self, registry: SessionRegistry) -> None:
        session = Session()
        registry.register(session)
        assert _frames(session) == [{"type": "version", "index": 0}]

    def test_greeting_only_to_new_session(self, registry: SessionRegistry) -> None:
        first, second = Session(), Session()
        registry.register(first)
        drain(first.queue)
        registry.register(second)

        assert first.queue.empty()
        assert len(_frames(second)) == 1

    def test_double_register_greets_once(self, registry: SessionRegistry) -> None:
        session = Session()
        registry.register(session)
        registry.register(session)
        assert len(_frames(session)) == 1
        assert registry.session_count == 1

    def test_unregister_removes(self, registry: SessionRegistry) -> None:
        session = Session()
        registry.register(session)
        assert registry.unregister(session) is True
        assert session not in registry
        assert registry.session_count == 0

    def test_unregister_is_idempotent(self, registry: SessionRegistry) -> None:
        keep, gone = Session(), Session()
        registry.register(keep)
        registry.register(gone)

        registry.unregister(gone)
        after_once = registry.sessions()
        assert registry.unregister(gone) is False
        assert registry.sessions() == after_once == frozenset({keep})

    def test_unregister_unknown_is_noop(self, registry: SessionRegistry) -> None:
        assert registry.unregister(Session()) is False
        assert registry.session_count == 0

    def test_sessions_is_snapshot(self, registry: SessionRegistry) -> None:
        session = Session()
        registry.register(session)
        snapshot = registry.sessions()
        registry.unregister(session)
        assert session in snapshot
        assert isinstance(snapshot, frozenset)


# ---------------------------------------------------------------------------
# broadcast_reload
# ---------------------------------------------------------------------------


class TestBroadcast:
    """Tests for broadcast_reload."""

    def test_reaches_every_session(self, registry: SessionRegistry) -> None:
        sessions = [Session() for _ in range(3)]
        for s in sessions:
            registry.register(s)
            drain(s.queue)

        assert registry.broadcast_reload(4) == 3
        for s in sessions:
            assert _frames(s) == [{"type": "reload", "index": 4}]

    def test_no_sessions(self, registry: SessionRegistry) -> None:
        assert registry.broadcast_reload(1) == 0

    def test_version_then_reloads_in_order(
        self, clock: VersionClock, registry: SessionRegistry
    ) -> None:
        clock.advance()
        session = Session()
        registry.register(session)
        for _ in range(3):
            registry.broadcast_reload(clock.advance())

        frames = _frames(session)
        assert frames[0] == {"type": "version", "index": 1}
        assert [f["type"] for f in frames[1:]] == ["reload"] * 3
        indices = [f["index"] for f in frames[1:]]
        assert indices == sorted(indices) == [2, 3, 4]

    def test_unregistered_session_not_targeted(self, registry: SessionRegistry) -> None:
        stays, leaves = Session(), Session()
        registry.register(stays)
        registry.register(leaves)
        registry.unregister(leaves)
        drain(stays.queue)
        drain(leaves.queue)

        assert registry.broadcast_reload(7) == 1
        assert leaves.queue.empty()
        assert _frames(stays) == [{"type": "reload", "index": 7}]

    def test_full_queue_does_not_block_others(self, registry: SessionRegistry) -> None:
        stuck, healthy = Session(), Session()
        registry.register(stuck)
        registry.register(healthy)
        drain(healthy.queue)
        while not stuck.queue.full():
            stuck.queue.put_nowait("x")

        assert registry.broadcast_reload(3) == 1
        assert _frames(healthy) == [{"type": "reload", "index": 3}]
        assert stuck.queue.qsize() < MAX_PENDING

    def test_full_queue_session_is_evicted(self, registry: SessionRegistry) -> None:
        stuck = Session()
        registry.register(stuck)
        while not stuck.queue.full():
            stuck.queue.put_nowait("x")

        registry.broadcast_reload(1)

        assert stuck not in registry
        # Backlog dropped; only the end-of-stream marker remains
        assert drain(stuck.queue) == [None]

        registry.broadcast_reload(2)
        assert stuck.queue.empty()

    @pytest.mark.asyncio
    async def test_evicted_outbox_ends(self, registry: SessionRegistry) -> None:
        stuck = Session()
        registry.register(stuck)
        while not stuck.queue.full():
            stuck.queue.put_nowait("x")
        registry.broadcast_reload(1)

        frames = [f async for f in registry.outbox(stuck)]
        assert frames == []


# ---------------------------------------------------------------------------
# outbox
# ---------------------------------------------------------------------------


class TestOutbox:
    """outbox yields frames until the session is unregistered."""

    @pytest.mark.asyncio
    async def test_yields_then_stops_on_unregister(self, registry: SessionRegistry) -> None:
        session = Session()
        registry.register(session)
        registry.broadcast_reload(1)
        registry.unregister(session)

        frames = [json.loads(f) async for f in registry.outbox(session)]
        assert frames == [
            {"type": "version", "index": 0},
            {"type": "reload", "index": 1},
        ]

    @pytest.mark.asyncio
    async def test_waits_for_frames(self, registry: SessionRegistry) -> None:
        session = Session()
        registry.register(session)
        received: list[str] = []

        async def consume() -> None:
            async for frame in registry.outbox(session):
                received.append(frame)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0)
        registry.broadcast_reload(1)
        registry.unregister(session)
        await asyncio.wait_for(task, timeout=1.0)

        assert len(received) == 2


# ---------------------------------------------------------------------------
# Observability
# ---------------------------------------------------------------------------


class TestRegistryEvents:
    """Session lifecycle is recorded when an event log is attached."""

    def test_records_open_and_close(self, clock: VersionClock) -> None:
        log = EventLog()
        registry = SessionRegistry(clock, event_log=log)
        session = Session()

        registry.register(session)
        registry.unregister(session)
        registry.unregister(session)

        opened = log.query(event_type=SessionOpened)
        closed = log.query(event_type=SessionClosed)
        assert len(opened) == 1
        assert opened[0].session_id == session.session_id
        assert opened[0].version == 0
        assert len(closed) == 1
        assert closed[0].duration_ms >= 0
