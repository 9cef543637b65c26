"""
Social Connection Store

Also answers "who should I get in touch with?": a connection is due when it
was never contacted, or when the whole days elapsed since the last contact
reach its frequency threshold (daily 1, weekly 7, monthly 30,
quarterly 90, yearly 365).
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lifeplanner.models.audit import AuditEventBuilder
from lifeplanner.models.social import (
    CONTACT_THRESHOLD_DAYS,
    ContactFrequency,
    Relationship,
    SocialConnection,
)
from lifeplanner.services.scheduling import days_since
from lifeplanner.stores.base import PersistentStore, find_index


def is_due_for_contact(connection: SocialConnection, now: datetime) -> bool:
    if connection.last_contact is None:
        return True
    threshold = CONTACT_THRESHOLD_DAYS[connection.contact_frequency]
    return days_since(connection.last_contact, now) >= threshold


class SocialState(BaseModel):
    connections: list[SocialConnection] = Field(default_factory=list)


class SocialStore(PersistentStore[SocialState]):
    """Connections, newest first."""

    state_model = SocialState

    @property
    def connections(self) -> list[SocialConnection]:
        return list(self._state.connections)

    def get_connection_by_id(self, connection_id: UUID) -> Optional[SocialConnection]:
        index = find_index(self._state.connections, connection_id)
        return None if index is None else self._state.connections[index]

    def get_connections_by_relationship(
        self,
        relationship: Relationship,
    ) -> list[SocialConnection]:
        return [c for c in self._state.connections if c.relationship == relationship]

    def get_connections_due_for_contact(self) -> list[SocialConnection]:
        now = self.now()
        return [c for c in self._state.connections if is_due_for_contact(c, now)]

    async def add_connection(
        self,
        name: str,
        relationship: Relationship,
        contact_frequency: ContactFrequency,
        last_contact: Optional[datetime] = None,
        notes: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> SocialConnection:
        connection = SocialConnection(
            name=name,
            relationship=relationship,
            contact_frequency=contact_frequency,
            last_contact=last_contact,
            notes=notes,
            avatar=avatar,
        )
        self._state.connections.insert(0, connection)
        await self._commit(AuditEventBuilder.entity_created(
            "connection", connection.id, {"name": connection.name}
        ))
        return connection

    async def update_connection(
        self,
        connection_id: UUID,
        **changes: Any,
    ) -> Optional[SocialConnection]:
        return await self._update_in(
            self._state.connections, "connection", connection_id, changes
        )

    async def delete_connection(self, connection_id: UUID) -> Optional[SocialConnection]:
        return await self._delete_from(self._state.connections, "connection", connection_id)

    async def update_last_contact(
        self,
        connection_id: UUID,
        when: Optional[datetime] = None,
    ) -> Optional[SocialConnection]:
        """Record a contact, at `when` or now."""
        return await self._update_in(
            self._state.connections,
            "connection",
            connection_id,
            {"last_contact": when or self.now()},
        )
