"""
Base storage interface for crawl outputs.

The crawler treats persistence as an opaque key-value capability: bytes in,
bytes out. JSON helpers are layered on top for the common case.
"""

import abc
import json
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class BlobStore(abc.ABC):
    """
    Abstract base class for key-value blob stores.

    Keys are slash-separated paths such as ``sellers/123.json``.
    """

    @abc.abstractmethod
    async def get(self, key: str) -> Optional[bytes]:
        """
        Read the value stored under ``key``.

        Returns:
            The stored bytes, or None if the key is absent.

        Raises:
            StorageConnectionError: If the backend cannot be reached.
        """
        pass

    @abc.abstractmethod
    async def put(self, key: str, data: bytes) -> None:
        """
        Store ``data`` under ``key``, replacing any previous value.

        Raises:
            StorageError: If the write fails.
        """
        pass

    async def get_json(self, key: str, default: Any = None) -> Any:
        """Read and decode a JSON value; absent or undecodable values give ``default``."""
        data = await self.get(key)
        if data is None:
            return default
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring undecodable JSON at {key}: {e}")
            return default

    async def put_json(self, key: str, value: Any) -> None:
        """Encode ``value`` as JSON and store it."""
        await self.put(key, json.dumps(value, default=str, ensure_ascii=False).encode("utf-8"))


class StorageError(Exception):
    """Base exception for storage-related errors."""

    pass


class StorageConnectionError(StorageError):
    """Raised when there's an error connecting to the storage backend."""

    pass
