"""
In-process blob store, used for dry runs and tests.
"""

from typing import Dict, Optional

from .base import BlobStore


class MemoryBlobStore(BlobStore):
    """Blob store holding values in a dict owned by the instance."""

    def __init__(self) -> None:
        self._blobs: Dict[str, bytes] = {}

    async def get(self, key: str) -> Optional[bytes]:
        return self._blobs.get(key)

    async def put(self, key: str, data: bytes) -> None:
        self._blobs[key] = bytes(data)

    def keys(self):
        return sorted(self._blobs)
