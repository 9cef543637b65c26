"""
Abstract Storage Interface

DESIGN DECISION: Stores talk to an abstract key-value backend.
This allows us to:
1. Keep state on the local filesystem in production
2. Use in-memory storage for testing
3. Keep domain logic decoupled from where bytes end up

The interface is intentionally tiny: get/set/remove by string key,
values are JSON documents serialized to text. It mirrors the
async key-value storage a mobile app persists into.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from lifeplanner.models.audit import AuditEvent


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for the local key-value backend.

    Any storage implementation (files, SQLite, in-memory)
    must implement these methods.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> bool:
        """
        Store a value under a key, replacing any previous value.

        Returns:
            True if written successfully

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed and was removed, False if it was absent
        """
        pass

    @abstractmethod
    async def keys(self) -> list[str]:
        """List all stored keys, sorted."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never modify stored events.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class BackendUnavailableError(StorageError):
    """The storage backend could not be opened."""
    pass


class CorruptStateError(StorageError):
    """A persisted document could not be parsed or validated."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Stored state under '{key}' is unreadable: {reason}")


class PersistenceError(StorageError):
    """
    A write-through after a mutation failed.

    The in-memory state already reflects the mutation; only the
    durable copy is stale.
    """

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to persist '{key}': {reason}")
