"""Storage budget accounting and eviction."""
from __future__ import annotations

from notevc.quota.manager import QuotaManager, StorageUsage

__all__ = ["QuotaManager", "StorageUsage"]
