"""
Audit Models for the Life Planner

Every store mutation produces one audit event. This gives:
1. A history of what changed and when
2. Debugging information when a write fails
3. A trail for the one-way onboarding transition

DESIGN DECISION: Audit logs are append-only. Old events are only ever
dropped by the size cap of the audit storage, never edited.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Store lifecycle
    STATE_LOADED = "state_loaded"
    STATE_PERSISTED = "state_persisted"
    PERSIST_FAILED = "persist_failed"

    # Entity mutations
    ENTITY_CREATED = "entity_created"
    ENTITY_UPDATED = "entity_updated"
    ENTITY_DELETED = "entity_deleted"

    # Domain events
    RECURRING_MATERIALIZED = "recurring_materialized"
    ONBOARDING_COMPLETED = "onboarding_completed"
    USER_LOGGED_OUT = "user_logged_out"
    LEARNING_SESSION_STARTED = "learning_session_started"
    LEARNING_SESSION_ENDED = "learning_session_ended"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """A single audit event."""

    event_id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When the event occurred (local time)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'goal', 'transaction', 'user')"
    )
    entity_id: Optional[UUID] = None

    # Ties together events of one operation (e.g. one startup run)
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_created("goal", goal.id, store="goal")
        event = AuditEventBuilder.persist_failed("pln-goal-storage", str(exc))
    """

    @staticmethod
    def state_loaded(key: str, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            severity=AuditSeverity.DEBUG,
            description=f"State loaded from {key}" if found else f"No saved state under {key}",
            details={"key": key, "found": found},
        )

    @staticmethod
    def state_persisted(key: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_PERSISTED,
            severity=AuditSeverity.DEBUG,
            description=f"State written to {key}",
            details={"key": key},
        )

    @staticmethod
    def entity_created(
        entity_type: str,
        entity_id: Optional[UUID],
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_CREATED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} created",
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def entity_updated(
        entity_type: str,
        entity_id: Optional[UUID],
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_UPDATED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} updated",
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def entity_deleted(entity_type: str, entity_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTITY_DELETED,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted",
            is_user_action=True,
        )

    @staticmethod
    def persist_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSIST_FAILED,
            severity=AuditSeverity.ERROR,
            description=f"Failed to write {key}",
            error_message=error_message,
            details={"key": key},
        )

    @staticmethod
    def recurring_materialized(
        template_id: UUID,
        occurrences: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECURRING_MATERIALIZED,
            entity_type="recurring_transaction",
            entity_id=template_id,
            correlation_id=correlation_id,
            description=f"Recurring template produced {len(occurrences)} transactions",
            details={"occurrences": occurrences},
        )

    @staticmethod
    def onboarding_completed(user_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ONBOARDING_COMPLETED,
            entity_type="user",
            entity_id=user_id,
            description="User completed onboarding",
            is_user_action=True,
        )

    @staticmethod
    def user_logged_out(user_id: Optional[UUID]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_LOGGED_OUT,
            entity_type="user",
            entity_id=user_id,
            description="User logged out",
            is_user_action=True,
        )

    @staticmethod
    def learning_session_started(resource_id: UUID) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEARNING_SESSION_STARTED,
            entity_type="learning_resource",
            entity_id=resource_id,
            description="Learning session started",
            is_user_action=True,
        )

    @staticmethod
    def learning_session_ended(
        resource_id: UUID,
        session_id: UUID,
        duration_seconds: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEARNING_SESSION_ENDED,
            entity_type="learning_resource",
            entity_id=resource_id,
            description=f"Learning session ended after {duration_seconds}s",
            details={
                "session_id": str(session_id),
                "duration_seconds": duration_seconds,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
