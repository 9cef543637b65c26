"""Mood Store: an append-mostly log of mood check-ins, newest first."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lifeplanner.models.audit import AuditEventBuilder
from lifeplanner.models.mood import Mood, MoodEntry
from lifeplanner.stores.base import PersistentStore, find_index


class MoodState(BaseModel):
    entries: list[MoodEntry] = Field(default_factory=list)


class MoodStore(PersistentStore[MoodState]):

    state_model = MoodState

    @property
    def entries(self) -> list[MoodEntry]:
        return list(self._state.entries)

    def get_entry_by_id(self, entry_id: UUID) -> Optional[MoodEntry]:
        index = find_index(self._state.entries, entry_id)
        return None if index is None else self._state.entries[index]

    def get_entries_by_date_range(self, start: datetime, end: datetime) -> list[MoodEntry]:
        """Entries dated within [start, end], inclusive on both ends."""
        return [e for e in self._state.entries if start <= e.date <= end]

    async def add_entry(
        self,
        mood: Mood,
        note: Optional[str] = None,
        tags: Optional[list[str]] = None,
        date: Optional[datetime] = None,
    ) -> MoodEntry:
        entry = MoodEntry(
            date=date or self.now(),
            mood=mood,
            note=note,
            tags=tags or [],
        )
        self._state.entries.insert(0, entry)
        await self._commit(AuditEventBuilder.entity_created(
            "mood_entry", entry.id, {"mood": entry.mood.value}
        ))
        return entry

    async def update_entry(self, entry_id: UUID, **changes: Any) -> Optional[MoodEntry]:
        return await self._update_in(self._state.entries, "mood_entry", entry_id, changes)

    async def delete_entry(self, entry_id: UUID) -> Optional[MoodEntry]:
        return await self._delete_from(self._state.entries, "mood_entry", entry_id)
