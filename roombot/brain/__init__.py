"""
Persistent state ("brain") for RoomBot.

Provides:
- PersistentStore interface
- JSON directory store
- In-memory store
"""

from roombot.brain.store import (
    PersistentStore,
    JsonFileStore,
    MemoryStore,
)

__all__ = [
    "PersistentStore",
    "JsonFileStore",
    "MemoryStore",
]
