"""
Managers for povboard.

This package contains focused classes that handle specific aspects of board functionality:
- reorder: Pure stage/task move functions over a working set
- ReorderEngine: Optimistic moves with reversion on persistence failure
- PersistenceBackend / BoardStore: Authoritative board persistence
- StorageManager: JSON files in the .povboard/ folder
- EventBus: Event-driven architecture for decoupled communication
- NotificationListener: User-facing error notices
"""

from povboard.managers.storage_manager import StorageManager
from povboard.managers.board_store import BoardStore, PersistenceBackend
from povboard.managers.reorder_engine import ReorderEngine
from povboard.managers.events import (
    BoardEvent,
    Event,
    EventBus,
    EventListener,
    EventType,
    get_event_bus,
    publish_event,
    subscribe_listener,
)
from povboard.managers.notifications import NotificationListener

__all__ = [
    "StorageManager",
    "BoardStore",
    "PersistenceBackend",
    "ReorderEngine",
    "BoardEvent",
    "Event",
    "EventBus",
    "EventListener",
    "EventType",
    "get_event_bus",
    "publish_event",
    "subscribe_listener",
    "NotificationListener",
]
