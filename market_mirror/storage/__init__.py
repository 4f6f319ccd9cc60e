"""
Storage layer for market_mirror.

This package provides the key-value blob stores crawl outputs are written to.
"""

from .base import BlobStore, StorageConnectionError, StorageError
from .factory import create_storage
from .file_storage import FileBlobStore
from .memory_storage import MemoryBlobStore

__all__ = [
    'BlobStore',
    'FileBlobStore',
    'MemoryBlobStore',
    'StorageConnectionError',
    'StorageError',
    'create_storage',
]
