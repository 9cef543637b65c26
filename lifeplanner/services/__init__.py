"""Services package."""

from lifeplanner.services.storage import (
    AuditStorageInterface,
    BackendUnavailableError,
    CorruptStateError,
    InMemoryStorage,
    JsonFileStorage,
    KeyValueAuditStorage,
    KeyValueStorageInterface,
    PersistenceError,
    StorageError,
)
from lifeplanner.services.scheduling import (
    add_months,
    advance_date,
    days_since,
    start_of_week,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "BackendUnavailableError",
    "CorruptStateError",
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueAuditStorage",
    "KeyValueStorageInterface",
    "PersistenceError",
    "StorageError",
    # Calendar helpers
    "add_months",
    "advance_date",
    "days_since",
    "start_of_week",
]
