"""Offline sync services."""

from moodmentor.services.sync.offline_queue import (
    OfflineQueue,
    MongoOfflineQueue,
    InMemoryOfflineQueue,
    create_offline_queue,
)
from moodmentor.services.sync.sync_service import SyncService

__all__ = [
    "OfflineQueue",
    "MongoOfflineQueue",
    "InMemoryOfflineQueue",
    "create_offline_queue",
    "SyncService",
]
