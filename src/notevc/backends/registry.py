"""Registry of storage backend implementations.

Built-in backends register themselves under short names.  Third-party
packages can contribute more by declaring entry-points in the
``notevc.backends`` group of their own ``pyproject.toml``::

    [project.entry-points."notevc.backends"]
    redis = "my_package.backends:RedisBackend"

Then at runtime::

    from notevc.backends import backend_registry

    backend_registry.load_entrypoints()
    backend = backend_registry.create("redis", url="redis://localhost")
"""
from __future__ import annotations

import importlib.metadata
import logging
from collections.abc import Callable
from typing import Any

from notevc.backends.base import StorageBackend

logger = logging.getLogger(__name__)

ENTRYPOINT_GROUP = "notevc.backends"


class BackendNotFoundError(KeyError):
    """Raised when a requested backend name is not registered."""

    def __init__(self, name: str, available: list[str]) -> None:
        self.backend_name = name
        self.available = available
        super().__init__(
            f"Storage backend {name!r} is not registered. "
            f"Available backends: {', '.join(available) or '(none)'}."
        )


class BackendAlreadyRegisteredError(ValueError):
    """Raised when attempting to register a name that already exists."""

    def __init__(self, name: str) -> None:
        self.backend_name = name
        super().__init__(f"Storage backend {name!r} is already registered.")


class BackendRegistry:
    """Maps backend names to ``StorageBackend`` subclasses."""

    def __init__(self) -> None:
        self._backends: dict[str, type[StorageBackend]] = {}

    def register(self, name: str) -> Callable[[type[StorageBackend]], type[StorageBackend]]:
        """Return a class decorator registering the class under ``name``.

        Raises
        ------
        BackendAlreadyRegisteredError
            If ``name`` is already in use.
        TypeError
            If the decorated class is not a ``StorageBackend`` subclass.
        """

        def decorator(cls: type[StorageBackend]) -> type[StorageBackend]:
            self.register_class(name, cls)
            return cls

        return decorator

    def register_class(self, name: str, cls: type[StorageBackend]) -> None:
        if name in self._backends:
            raise BackendAlreadyRegisteredError(name)
        if not (isinstance(cls, type) and issubclass(cls, StorageBackend)):
            raise TypeError(
                f"Cannot register {cls!r} under {name!r}: "
                "it must be a subclass of StorageBackend."
            )
        self._backends[name] = cls
        logger.debug("Registered storage backend %r -> %s", name, cls.__qualname__)

    def get(self, name: str) -> type[StorageBackend]:
        try:
            return self._backends[name]
        except KeyError:
            raise BackendNotFoundError(name, self.names()) from None

    def create(self, name: str, **options: Any) -> StorageBackend:
        """Instantiate the backend registered under ``name``."""
        return self.get(name)(**options)

    def names(self) -> list[str]:
        return sorted(self._backends)

    def __contains__(self, name: object) -> bool:
        return name in self._backends

    def __len__(self) -> int:
        return len(self._backends)

    def load_entrypoints(self, group: str = ENTRYPOINT_GROUP) -> int:
        """Register backends declared as package entry-points.

        Entry-points whose name is already registered are skipped, so
        repeated calls are idempotent.  Returns the number of backends
        newly registered.
        """
        loaded = 0
        for ep in importlib.metadata.entry_points(group=group):
            if ep.name in self._backends:
                logger.debug("Backend entry-point %r already registered; skipping.", ep.name)
                continue
            try:
                cls = ep.load()
            except Exception:
                logger.exception("Failed to load backend entry-point %r; skipping.", ep.name)
                continue
            try:
                self.register_class(ep.name, cls)
            except (BackendAlreadyRegisteredError, TypeError):
                logger.warning(
                    "Backend entry-point %r loaded but could not be registered; skipping.",
                    ep.name,
                )
                continue
            loaded += 1
        return loaded


backend_registry = BackendRegistry()
