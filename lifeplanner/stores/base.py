"""
Persistent Store Base

Every domain store is an instance of a PersistentStore subclass that owns:
- a pydantic state model (the whole in-memory collection)
- the key-value backend and the key it writes to
- a clock, so "now" and "today" are injectable
- an optional audit logger

DESIGN DECISION: Write-through with acknowledgment.
Mutators are coroutines. They change the in-memory state before their
first await (so the change is visible immediately), then await the write
of the full document. If the write fails they raise PersistenceError:
callers can react or explicitly ignore it, but it is never silent.

Lookups by id that find nothing return None and write nothing.
"""

from datetime import date, datetime
from typing import Any, Callable, ClassVar, Generic, Optional, TypeVar
from uuid import UUID

import structlog
from pydantic import BaseModel, ValidationError

from lifeplanner.audit import AuditLogger
from lifeplanner.models.audit import AuditEvent, AuditEventBuilder
from lifeplanner.services.storage import (
    CorruptStateError,
    KeyValueStorageInterface,
    PersistenceError,
    StorageError,
)


StateT = TypeVar("StateT", bound=BaseModel)
ModelT = TypeVar("ModelT", bound=BaseModel)

Clock = Callable[[], datetime]


class DanglingReferenceError(ValueError):
    """A soft reference points at an entity that does not exist."""

    def __init__(self, field: str, target_id: UUID):
        self.field = field
        self.target_id = target_id
        super().__init__(f"{field} refers to missing entity {target_id}")


def find_index(items: list, item_id: UUID) -> Optional[int]:
    """Position of the entity with `item_id` in `items`, or None."""
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return None


def merge(entity: ModelT, changes: dict[str, Any]) -> ModelT:
    """
    Shallow partial update, re-validated through the model.

    The id is never taken from `changes`.
    """
    data = entity.model_dump()
    data.update(changes)
    data["id"] = entity.id
    return type(entity).model_validate(data)


class PersistentStore(Generic[StateT]):
    """Base class for the domain stores."""

    state_model: ClassVar[type[BaseModel]]

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: str,
        clock: Optional[Clock] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._key = key
        self._clock = clock or datetime.now
        self._audit_logger = audit_logger
        self._state: StateT = self.state_model()
        self._logger = structlog.get_logger(type(self).__module__).bind(store_key=key)

    @property
    def key(self) -> str:
        return self._key

    @property
    def state(self) -> StateT:
        return self._state

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self._clock().date()

    def to_document(self) -> str:
        """The JSON document this store persists."""
        return self._state.model_dump_json()

    async def load(self) -> bool:
        """
        Replace in-memory state with the persisted document.

        Returns:
            True if a document was found, False if the store starts empty

        Raises:
            CorruptStateError: If the document cannot be parsed
        """
        raw = await self._storage.get(self._key)
        if raw is None:
            self._state = self.state_model()
            await self._audit(AuditEventBuilder.state_loaded(self._key, found=False))
            return False
        try:
            self._state = self.state_model.model_validate_json(raw)
        except ValidationError as e:
            self._logger.error("state_corrupt", error=str(e))
            raise CorruptStateError(self._key, str(e))
        await self._audit(AuditEventBuilder.state_loaded(self._key, found=True))
        return True

    async def _commit(self, event: Optional[AuditEvent] = None) -> None:
        """Write the full state through to storage, then audit the change."""
        payload = self.to_document()
        try:
            await self._storage.set(self._key, payload)
        except StorageError as e:
            self._logger.error("persist_failed", error=str(e))
            await self._audit(AuditEventBuilder.persist_failed(self._key, str(e)))
            raise PersistenceError(self._key, str(e))
        if event is None:
            event = AuditEventBuilder.state_persisted(self._key)
        await self._audit(event)

    async def _audit(self, event: AuditEvent) -> None:
        if self._audit_logger:
            await self._audit_logger.log(event)

    async def record_event(self, event: AuditEvent) -> None:
        """Audit a domain event that involves no write of this store."""
        await self._audit(event)

    def _not_found(self, entity_type: str, entity_id: UUID) -> None:
        self._logger.debug("entity_not_found", entity_type=entity_type, entity_id=str(entity_id))

    async def _update_in(
        self,
        items: list[ModelT],
        entity_type: str,
        entity_id: UUID,
        changes: dict[str, Any],
    ) -> Optional[ModelT]:
        """Merge `changes` into the entity with `entity_id` and persist."""
        index = find_index(items, entity_id)
        if index is None:
            self._not_found(entity_type, entity_id)
            return None
        updated = merge(items[index], changes)
        items[index] = updated
        await self._commit(AuditEventBuilder.entity_updated(
            entity_type, entity_id, {"fields": sorted(changes)}
        ))
        return updated

    async def _delete_from(
        self,
        items: list[ModelT],
        entity_type: str,
        entity_id: UUID,
    ) -> Optional[ModelT]:
        """Remove the entity with `entity_id` and persist."""
        index = find_index(items, entity_id)
        if index is None:
            self._not_found(entity_type, entity_id)
            return None
        removed = items.pop(index)
        await self._commit(AuditEventBuilder.entity_deleted(entity_type, entity_id))
        return removed
