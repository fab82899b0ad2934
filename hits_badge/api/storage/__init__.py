from __future__ import annotations

from hits_badge.api.storage.counter_store import CounterStore, RepoCount, UserRepoCount
from hits_badge.api.storage.errors import StorageError, StorageOperationFailed, StorageUnavailable

__all__ = [
    "CounterStore",
    "RepoCount",
    "UserRepoCount",
    "StorageError",
    "StorageOperationFailed",
    "StorageUnavailable",
]
