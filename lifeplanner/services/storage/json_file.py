"""
JSON File Storage Implementation

DESIGN DECISION: Local files are the production backend because:
1. The app is single-user and single-device
2. No database setup required
3. The user can inspect or back up their data by copying a folder

TRADEOFFS:
- One file per key means a write rewrites the whole domain document
  (fine for personal-scale data)
- No transactions across keys (stores are independent anyway)

Writes go to a temporary file first and are then moved into place, so a
crash mid-write leaves the previous document intact.
"""

import os
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from lifeplanner.services.storage.interface import (
    BackendUnavailableError,
    KeyValueStorageInterface,
    StorageError,
)


FILE_SUFFIX = ".json"


class JsonFileStorage(KeyValueStorageInterface):
    """
    Filesystem implementation of the key-value backend.

    Each key is stored as `<data_dir>/<key>.json`.
    """

    def __init__(self, data_dir: Path, write_retry_attempts: int = 3):
        self._data_dir = Path(data_dir)
        self._write_retry_attempts = write_retry_attempts
        self._logger = structlog.get_logger(__name__)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _ensure_dir(self) -> None:
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackendUnavailableError(
                f"Cannot create data directory {self._data_dir}: {e}"
            )

    def _path_for(self, key: str) -> Path:
        if not key or any(sep in key for sep in ("/", "\\")) or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._data_dir / f"{key}{FILE_SUFFIX}"

    async def get(self, key: str) -> Optional[str]:
        """Read a key's file, None if it does not exist."""
        path = self._path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}")

    def _write_atomically(self, path: Path, value: str) -> None:
        tmp_path = path.with_name(f".{path.name}.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)

    async def set(self, key: str, value: str) -> bool:
        """Write a key's file, retrying transient OS errors."""
        path = self._path_for(key)
        self._ensure_dir()
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._write_retry_attempts),
                wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
                retry=retry_if_exception_type(OSError),
                reraise=True,
            ):
                with attempt:
                    self._write_atomically(path, value)
        except OSError as e:
            self._logger.error("storage_write_failed", key=key, error=str(e))
            raise StorageError(f"Failed to write {key}: {e}")
        return True

    async def remove(self, key: str) -> bool:
        """Delete a key's file."""
        path = self._path_for(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to remove {key}: {e}")

    async def keys(self) -> list[str]:
        """List keys that have a file in the data directory."""
        if not self._data_dir.exists():
            return []
        return sorted(
            path.name[: -len(FILE_SUFFIX)]
            for path in self._data_dir.iterdir()
            if path.is_file()
            and path.name.endswith(FILE_SUFFIX)
            and not path.name.startswith(".")
        )
