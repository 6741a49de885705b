"""Shared test fixtures for notevc.

Fixtures defined here are available to all tests in the suite without
needing an explicit import. Add project-wide fixtures here; keep
domain-specific fixtures close to the tests that use them.

Time never comes from the wall clock in these tests: ``FakeLoop`` is
both the timer loop handed to the auto-save scheduler and the clock
handed to the version store, so ``loop.advance(seconds)`` moves
snapshot timestamps and fires due timers in one step.
"""
from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Any

import pytest

from notevc.backends import InMemoryBackend
from notevc.config import VersionControlConfig
from notevc.models import Document
from notevc.quota import QuotaManager
from notevc.store import VersionStore

START_TIME = 1_700_000_000.0


class FakeTimerHandle:
    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Deterministic stand-in for an asyncio loop's ``call_later``."""

    def __init__(self, start: float = START_TIME) -> None:
        self.now = start
        self.handles: list[FakeTimerHandle] = []

    def time(self) -> float:
        return self.now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> FakeTimerHandle:
        handle = FakeTimerHandle(self.now + delay, callback, args)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> list[FakeTimerHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        """Move time forward, firing every timer that falls due in order."""
        target = self.now + seconds
        while True:
            due = sorted(
                (h for h in self.handles if not h.cancelled and h.when <= target),
                key=lambda h: h.when,
            )
            if not due:
                break
            handle = due[0]
            self.handles.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target


@pytest.fixture()
def package_name() -> str:
    """Return the importable package name for assertions."""
    return "notevc"


@pytest.fixture()
def expected_version() -> str:
    """Return the current expected version string.

    Update this fixture when cutting a release so that the version
    test immediately catches stale ``__version__`` values.
    """
    return "0.1.0"


@pytest.fixture()
def loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture()
def config() -> VersionControlConfig:
    return VersionControlConfig()


@pytest.fixture()
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture()
def id_factory() -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"snap-{next(counter)}"


@pytest.fixture()
def quota(backend: InMemoryBackend, config: VersionControlConfig) -> QuotaManager:
    return QuotaManager(backend, config)


@pytest.fixture()
def store(
    backend: InMemoryBackend,
    config: VersionControlConfig,
    quota: QuotaManager,
    loop: FakeLoop,
    id_factory: Callable[[], str],
) -> VersionStore:
    return VersionStore(backend, config, quota=quota, clock=loop.time, id_factory=id_factory)


@pytest.fixture()
def make_document() -> Callable[..., Document]:
    def _make(content: str = "Hello", *, id: str = "n1", title: str = "Notes") -> Document:
        return Document(id=id, title=title, content=content)

    return _make
