"""In-memory key-value backend for tests and throwaway sessions."""

from typing import Optional

from lifeplanner.services.storage.interface import (
    KeyValueStorageInterface,
    StorageError,
)


class InMemoryStorage(KeyValueStorageInterface):
    """
    Dict-backed storage.

    Set `fail_writes = True` to make every write raise StorageError,
    which is how tests exercise the persistence failure path.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self.fail_writes = False
        self.write_count = 0

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> bool:
        if self.fail_writes:
            raise StorageError(f"Simulated write failure for {key}")
        self._data[key] = value
        self.write_count += 1
        return True

    async def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def keys(self) -> list[str]:
        return sorted(self._data)
