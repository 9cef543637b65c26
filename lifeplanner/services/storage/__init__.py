"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
Local JSON files are the production backend; memory is for tests.
"""

from lifeplanner.services.storage.interface import (
    AuditStorageInterface,
    BackendUnavailableError,
    CorruptStateError,
    KeyValueStorageInterface,
    PersistenceError,
    StorageError,
)
from lifeplanner.services.storage.audit_log import KeyValueAuditStorage
from lifeplanner.services.storage.json_file import JsonFileStorage
from lifeplanner.services.storage.memory import InMemoryStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "KeyValueStorageInterface",
    # Exceptions
    "BackendUnavailableError",
    "CorruptStateError",
    "PersistenceError",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueAuditStorage",
]
