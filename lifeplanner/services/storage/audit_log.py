"""
Key-Value Audit Storage

The audit trail lives in the same backend as the domain stores, as one
JSON list under its own key. Only the newest `max_events` are kept.
An unreadable log is copied to `<key>-corrupt` before a fresh one starts.
"""

from uuid import UUID

import structlog
from pydantic import TypeAdapter, ValidationError

from lifeplanner.models.audit import AuditEvent
from lifeplanner.services.storage.interface import (
    AuditStorageInterface,
    CorruptStateError,
    KeyValueStorageInterface,
    StorageError,
)


_EVENT_LIST = TypeAdapter(list[AuditEvent])


class KeyValueAuditStorage(AuditStorageInterface):
    """Audit log persisted through a KeyValueStorageInterface."""

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: str,
        max_events: int = 500,
    ):
        self._storage = storage
        self._key = key
        self._max_events = max_events
        self._logger = structlog.get_logger(__name__).bind(audit_key=key)

    async def _read_all(self) -> list[AuditEvent]:
        raw = await self._storage.get(self._key)
        if not raw:
            return []
        try:
            return _EVENT_LIST.validate_json(raw)
        except ValidationError as e:
            raise CorruptStateError(self._key, str(e))

    async def _set_aside_corrupt(self, error: CorruptStateError) -> list[AuditEvent]:
        """Keep the unreadable document under a side key and start empty."""
        backup_key = f"{self._key}-corrupt"
        self._logger.warning("audit_log_reset", backup_key=backup_key, error=error.reason)
        raw = await self._storage.get(self._key)
        if raw is not None:
            await self._storage.set(backup_key, raw)
        return []

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an event, dropping the oldest beyond the cap."""
        try:
            try:
                events = await self._read_all()
            except CorruptStateError as e:
                events = await self._set_aside_corrupt(e)
            events.append(event)
            events = events[-self._max_events:]
            await self._storage.set(
                self._key,
                _EVENT_LIST.dump_json(events).decode("utf-8"),
            )
        except StorageError:
            return False
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        events = [
            e for e in await self._read_all()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = await self._read_all()
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
