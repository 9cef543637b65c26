"""
Learning Store

Resources, timed study sessions and notes, persisted as one document.

DESIGN DECISION: Sessions and notes belong to a resource through
`resource_id`. Deleting a resource deletes its sessions and notes in the
same write. Adding a session for an unknown resource is accepted unless
reference enforcement is on.

The session timer (LearningSessionTimer) keeps the running session in
memory only. If the process dies mid-session, that time is lost.
"""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from lifeplanner.models.audit import AuditEventBuilder
from lifeplanner.models.goal import Priority
from lifeplanner.models.learning import (
    LearningNote,
    LearningResource,
    LearningSession,
    ResourceType,
)
from lifeplanner.services.scheduling import start_of_week
from lifeplanner.stores.base import DanglingReferenceError, PersistentStore, find_index


# Ordered as the weekly report shows them (week starts on Sunday)
WEEKDAY_NAMES = (
    "sunday",
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)

MAX_PROGRESS = 100


class LearningState(BaseModel):
    resources: list[LearningResource] = Field(default_factory=list)
    sessions: list[LearningSession] = Field(default_factory=list)
    notes: list[LearningNote] = Field(default_factory=list)


class SessionAlreadyActiveError(Exception):
    """A learning session is already running."""
    pass


class NoActiveSessionError(Exception):
    """There is no running learning session to end."""
    pass


class LearningStore(PersistentStore[LearningState]):

    state_model = LearningState

    def __init__(self, *args: Any, enforce_references: bool = False, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self._enforce_references = enforce_references

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def resources(self) -> list[LearningResource]:
        return list(self._state.resources)

    @property
    def sessions(self) -> list[LearningSession]:
        return list(self._state.sessions)

    @property
    def notes(self) -> list[LearningNote]:
        return list(self._state.notes)

    def get_resource_by_id(self, resource_id: UUID) -> Optional[LearningResource]:
        index = find_index(self._state.resources, resource_id)
        return None if index is None else self._state.resources[index]

    def get_favorites(self) -> list[LearningResource]:
        return [r for r in self._state.resources if r.favorite]

    def get_resources_by_category(self, category: str) -> list[LearningResource]:
        return [r for r in self._state.resources if r.category == category]

    def get_resources_by_type(self, resource_type: ResourceType) -> list[LearningResource]:
        return [r for r in self._state.resources if r.type == resource_type]

    def get_sessions_by_resource(self, resource_id: UUID) -> list[LearningSession]:
        return [s for s in self._state.sessions if s.resource_id == resource_id]

    def get_notes_by_resource(self, resource_id: UUID) -> list[LearningNote]:
        return [n for n in self._state.notes if n.resource_id == resource_id]

    def get_total_learning_time(self) -> int:
        """Seconds across all sessions of all resources."""
        return sum(s.duration for s in self._state.sessions)

    def get_weekly_learning_time(self) -> dict[str, int]:
        """
        Seconds per weekday for sessions in the current week.

        The week runs from the most recent Sunday 00:00 up to now; keys are
        ordered sunday..saturday and always all present.
        """
        now = self.now()
        week_start = start_of_week(now)
        weekly = {name: 0 for name in WEEKDAY_NAMES}
        for session in self._state.sessions:
            if week_start <= session.start_time <= now:
                day = WEEKDAY_NAMES[(session.start_time.weekday() + 1) % 7]
                weekly[day] += session.duration
        return weekly

    # -------------------------------------------------------------------------
    # Resources
    # -------------------------------------------------------------------------

    async def add_resource(
        self,
        title: str,
        type: ResourceType,
        category: str,
        description: str = "",
        url: Optional[str] = None,
        duration: Optional[int] = None,
        image_url: Optional[str] = None,
        priority: Optional[Priority] = None,
        reminder_date: Optional[datetime] = None,
    ) -> LearningResource:
        resource = LearningResource(
            title=title,
            type=type,
            category=category,
            description=description,
            url=url,
            duration=duration,
            image_url=image_url,
            priority=priority,
            reminder_date=reminder_date,
            created_at=self.now(),
        )
        self._state.resources.append(resource)
        await self._commit(AuditEventBuilder.entity_created(
            "learning_resource", resource.id, {"title": resource.title}
        ))
        return resource

    async def update_resource(
        self,
        resource_id: UUID,
        **changes: Any,
    ) -> Optional[LearningResource]:
        return await self._update_in(
            self._state.resources, "learning_resource", resource_id, changes
        )

    async def delete_resource(self, resource_id: UUID) -> Optional[LearningResource]:
        """Remove a resource together with its sessions and notes."""
        index = find_index(self._state.resources, resource_id)
        if index is None:
            self._not_found("learning_resource", resource_id)
            return None
        removed = self._state.resources.pop(index)
        self._state.sessions = [
            s for s in self._state.sessions if s.resource_id != resource_id
        ]
        self._state.notes = [
            n for n in self._state.notes if n.resource_id != resource_id
        ]
        await self._commit(AuditEventBuilder.entity_deleted("learning_resource", resource_id))
        return removed

    async def favorite_resource(self, resource_id: UUID) -> Optional[LearningResource]:
        """Toggle the favorite flag."""
        resource = self.get_resource_by_id(resource_id)
        if resource is None:
            self._not_found("learning_resource", resource_id)
            return None
        return await self.update_resource(resource_id, favorite=not resource.favorite)

    async def update_progress(
        self,
        resource_id: UUID,
        increment: int,
    ) -> Optional[LearningResource]:
        """
        Add percentage points to a resource, capped at 100.

        The resource is marked completed once it reaches 100.
        """
        resource = self.get_resource_by_id(resource_id)
        if resource is None:
            self._not_found("learning_resource", resource_id)
            return None
        raw = resource.progress + increment
        return await self.update_resource(
            resource_id,
            progress=min(MAX_PROGRESS, raw),
            completed=raw >= MAX_PROGRESS,
        )

    async def mark_as_completed(
        self,
        resource_id: UUID,
        completed: bool,
    ) -> Optional[LearningResource]:
        """Set the completed flag; completing also forces progress to 100."""
        resource = self.get_resource_by_id(resource_id)
        if resource is None:
            self._not_found("learning_resource", resource_id)
            return None
        changes: dict[str, Any] = {"completed": completed}
        if completed:
            changes["progress"] = MAX_PROGRESS
        return await self.update_resource(resource_id, **changes)

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def check_resource(self, resource_id: UUID) -> None:
        if self._enforce_references and self.get_resource_by_id(resource_id) is None:
            raise DanglingReferenceError("resource_id", resource_id)

    async def add_session(
        self,
        resource_id: UUID,
        start_time: datetime,
        duration: int,
        notes: Optional[str] = None,
    ) -> LearningSession:
        self.check_resource(resource_id)
        session = LearningSession(
            resource_id=resource_id,
            start_time=start_time,
            duration=duration,
            notes=notes,
        )
        self._state.sessions.append(session)
        await self._commit(AuditEventBuilder.entity_created(
            "learning_session", session.id, {"resource_id": str(resource_id)}
        ))
        return session

    async def update_session(
        self,
        session_id: UUID,
        **changes: Any,
    ) -> Optional[LearningSession]:
        return await self._update_in(
            self._state.sessions, "learning_session", session_id, changes
        )

    async def delete_session(self, session_id: UUID) -> Optional[LearningSession]:
        return await self._delete_from(self._state.sessions, "learning_session", session_id)

    # -------------------------------------------------------------------------
    # Notes
    # -------------------------------------------------------------------------

    async def add_note(
        self,
        resource_id: UUID,
        content: str,
        tags: Optional[list[str]] = None,
    ) -> LearningNote:
        self.check_resource(resource_id)
        note = LearningNote(
            resource_id=resource_id,
            content=content,
            tags=tags or [],
            created_at=self.now(),
        )
        self._state.notes.append(note)
        await self._commit(AuditEventBuilder.entity_created(
            "learning_note", note.id, {"resource_id": str(resource_id)}
        ))
        return note

    async def update_note(self, note_id: UUID, **changes: Any) -> Optional[LearningNote]:
        return await self._update_in(self._state.notes, "learning_note", note_id, changes)

    async def delete_note(self, note_id: UUID) -> Optional[LearningNote]:
        return await self._delete_from(self._state.notes, "learning_note", note_id)


class LearningSessionTimer:
    """
    Tracks the one learning session that may be running.

    Ending the session commits a LearningSession with the elapsed whole
    seconds and bumps the resource's progress by a fixed increment.
    """

    def __init__(self, store: LearningStore, progress_increment: int = 5):
        self._store = store
        self._progress_increment = progress_increment
        self._resource_id: Optional[UUID] = None
        self._started_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self._started_at is not None

    @property
    def resource_id(self) -> Optional[UUID]:
        return self._resource_id

    def elapsed_seconds(self) -> int:
        if self._started_at is None:
            return 0
        return max(0, int((self._store.now() - self._started_at).total_seconds()))

    async def start(self, resource_id: UUID) -> datetime:
        if self.is_active:
            raise SessionAlreadyActiveError(
                f"A learning session for {self._resource_id} is already running"
            )
        self._store.check_resource(resource_id)
        self._resource_id = resource_id
        self._started_at = self._store.now()
        await self._store.record_event(AuditEventBuilder.learning_session_started(resource_id))
        return self._started_at

    async def end(self, notes: Optional[str] = None) -> LearningSession:
        if self._started_at is None or self._resource_id is None:
            raise NoActiveSessionError("No learning session is running")
        resource_id, started_at = self._resource_id, self._started_at
        duration = self.elapsed_seconds()
        self.cancel()

        session = await self._store.add_session(
            resource_id=resource_id,
            start_time=started_at,
            duration=duration,
            notes=notes,
        )
        await self._store.update_progress(resource_id, self._progress_increment)
        await self._store.record_event(AuditEventBuilder.learning_session_ended(
            resource_id, session.id, duration
        ))
        return session

    def cancel(self) -> None:
        """Drop the running session without recording anything."""
        self._resource_id = None
        self._started_at = None
