"""
File-based blob store.

Each key maps to one file under the storage directory. Writes go through a
per-key file lock and an atomic rename so concurrent readers never see a
partial file.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Dict, Optional

import aiofiles
import filelock

from .base import BlobStore, StorageConnectionError, StorageError

logger = logging.getLogger(__name__)

LOCK_TIMEOUT_SECONDS = 10


class FileBlobStore(BlobStore):
    """Blob store backed by a directory tree."""

    def __init__(self, storage_dir: str, create_if_missing: bool = True):
        """
        Initialize the file store.

        Args:
            storage_dir: Root directory for stored blobs.
            create_if_missing: Create the directory if it doesn't exist.
        """
        self.storage_dir = Path(storage_dir)
        self._locks: Dict[str, filelock.FileLock] = {}
        self._locks_lock = threading.Lock()

        if not self.storage_dir.exists():
            if not create_if_missing:
                raise StorageConnectionError(
                    f"Storage directory does not exist: {self.storage_dir}"
                )
            try:
                self.storage_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StorageConnectionError(f"Failed to create storage directory: {e}")

        logger.info(f"Initialized file storage at {self.storage_dir}")

    def _get_lock(self, file_path: Path) -> filelock.FileLock:
        lock_path = f"{file_path}.lock"
        with self._locks_lock:
            if lock_path not in self._locks:
                self._locks[lock_path] = filelock.FileLock(lock_path)
            return self._locks[lock_path]

    def path_for(self, key: str) -> Path:
        """Map a key to a file path, rejecting keys that escape the root."""
        parts = key.replace("\\", "/").split("/")
        if not key or any(part in ("", ".", "..") for part in parts):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.storage_dir.joinpath(*parts)

    async def get(self, key: str) -> Optional[bytes]:
        file_path = self.path_for(key)
        if not file_path.exists():
            return None
        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageConnectionError(f"Failed to read {key}: {e}")

    async def put(self, key: str, data: bytes) -> None:
        file_path = self.path_for(key)
        tmp_path = file_path.with_name(f"{file_path.name}.tmp")
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            with self._get_lock(file_path).acquire(timeout=LOCK_TIMEOUT_SECONDS):
                async with aiofiles.open(tmp_path, "wb") as f:
                    await f.write(data)
                os.replace(tmp_path, file_path)
        except filelock.Timeout:
            logger.error(f"Timeout waiting for lock on {key}")
            raise StorageError(f"Timeout waiting for lock on {key}")
        except OSError as e:
            logger.error(f"Failed to write {key}: {e}")
            raise StorageError(f"Failed to write {key}: {e}")
        logger.debug(f"Stored {len(data)} bytes at {key}")
