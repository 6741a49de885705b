"""Tests for notevc.scheduler.autosave — debounced per-document timers."""
from __future__ import annotations

import asyncio
from collections.abc import Callable

from notevc.backends import InMemoryBackend
from notevc.models import ChangeType, Document
from notevc.scheduler import AutoSaveScheduler
from notevc.store import VersionStore

MakeDocument = Callable[..., Document]


class TestSchedule:
    def test_fires_after_interval(
        self, store: VersionStore, loop, make_document: MakeDocument
    ) -> None:
        scheduler = AutoSaveScheduler(store, 60, loop=loop)
        document = make_document("Hello")
        assert scheduler.schedule(document.id, document)
        assert scheduler.pending(document.id)

        loop.advance(59)
        assert store.get_versions(document.id) == []

        loop.advance(1)
        versions = store.get_versions(document.id)
        assert len(versions) == 1
        assert versions[0].change_type is ChangeType.AUTO
        assert not scheduler.pending(document.id)

    def test_reschedule_debounces(
        self, store: VersionStore, loop, make_document: MakeDocument
    ) -> None:
        scheduler = AutoSaveScheduler(store, 60, loop=loop)
        document = make_document("First draft of the note")
        scheduler.schedule(document.id, document)
        first, = loop.active

        loop.advance(1)
        document.update(content="Second, much longer draft of the note", now=loop.time())
        scheduler.schedule(document.id, document)

        assert first.cancelled
        assert len(loop.active) == 1
        assert scheduler.pending_count == 1

        loop.advance(60)
        versions = store.get_versions(document.id)
        assert len(versions) == 1
        assert versions[0].content == "Second, much longer draft of the note"

    def test_timers_are_per_document(
        self, store: VersionStore, loop, make_document: MakeDocument
    ) -> None:
        scheduler = AutoSaveScheduler(store, 60, loop=loop)
        one = make_document("one", id="n1")
        two = make_document("two", id="n2")
        scheduler.schedule(one.id, one)
        scheduler.schedule(two.id, two)
        assert scheduler.pending_count == 2

        loop.advance(60)
        assert len(store.get_versions("n1")) == 1
        assert len(store.get_versions("n2")) == 1

    def test_store_rate_limit_still_applies(
        self, store: VersionStore, loop, make_document: MakeDocument
    ) -> None:
        scheduler = AutoSaveScheduler(store, 30, loop=loop)
        document = make_document("Hello")
        scheduler.schedule(document.id, document)
        loop.advance(30)

        document.update(content="Hello\nwith\nnew\nlines", now=loop.time())
        scheduler.schedule(document.id, document)
        loop.advance(30)

        assert len(store.get_versions(document.id)) == 1

    def test_interval_property(self, store: VersionStore, loop) -> None:
        assert AutoSaveScheduler(store, 42, loop=loop).interval == 42


class TestCancel:
    def test_cancel_prevents_save(
        self, store: VersionStore, loop, make_document: MakeDocument
    ) -> None:
        scheduler = AutoSaveScheduler(store, 60, loop=loop)
        document = make_document()
        scheduler.schedule(document.id, document)
        scheduler.cancel(document.id)

        loop.advance(120)
        assert store.get_versions(document.id) == []
        assert not scheduler.pending(document.id)

    def test_cancel_is_idempotent(self, store: VersionStore, loop) -> None:
        scheduler = AutoSaveScheduler(store, 60, loop=loop)
        scheduler.cancel("n1")
        scheduler.cancel("n1")
        assert scheduler.pending_count == 0

    def test_delete_history_cancels_pending(
        self, store: VersionStore, loop, make_document: MakeDocument
    ) -> None:
        scheduler = AutoSaveScheduler(store, 60, loop=loop)
        document = make_document()
        scheduler.schedule(document.id, document)

        store.delete_history(document.id)
        assert not scheduler.pending(document.id)
        loop.advance(60)
        assert store.get_versions(document.id) == []

    def test_dispose_cancels_everything(
        self, store: VersionStore, loop, make_document: MakeDocument
    ) -> None:
        scheduler = AutoSaveScheduler(store, 60, loop=loop)
        for document_id in ("n1", "n2", "n3"):
            document = make_document(id=document_id)
            scheduler.schedule(document_id, document)

        scheduler.dispose()
        assert scheduler.pending_count == 0
        assert loop.active == []


class TestEventLoop:
    def test_without_loop_nothing_is_scheduled(
        self, store: VersionStore, make_document: MakeDocument
    ) -> None:
        scheduler = AutoSaveScheduler(store, 60)
        document = make_document()
        assert not scheduler.schedule(document.id, document)
        assert scheduler.pending_count == 0

    def test_uses_running_asyncio_loop(self, make_document: MakeDocument) -> None:
        store = VersionStore(InMemoryBackend())
        scheduler = AutoSaveScheduler(store, 0.01)
        document = make_document("Hello")

        async def edit_and_wait() -> None:
            assert scheduler.schedule(document.id, document)
            await asyncio.sleep(0.1)

        asyncio.run(edit_and_wait())
        assert len(store.get_versions(document.id)) == 1
