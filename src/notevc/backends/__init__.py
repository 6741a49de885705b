"""Storage backends for notevc.

``memory`` and ``file`` are registered on import; see
:mod:`notevc.backends.registry` for adding more.
"""
from __future__ import annotations

from notevc.backends.base import StorageBackend
from notevc.backends.file import FileBackend
from notevc.backends.memory import InMemoryBackend
from notevc.backends.registry import (
    BackendAlreadyRegisteredError,
    BackendNotFoundError,
    BackendRegistry,
    backend_registry,
)

backend_registry.register_class("memory", InMemoryBackend)
backend_registry.register_class("file", FileBackend)

__all__ = [
    "BackendAlreadyRegisteredError",
    "BackendNotFoundError",
    "BackendRegistry",
    "FileBackend",
    "InMemoryBackend",
    "StorageBackend",
    "backend_registry",
]
