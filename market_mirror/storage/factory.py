"""
Factory for creating storage instances.

Every call builds a new store; runs that need to share one pass it around
explicitly.
"""

import logging
from typing import Dict, Optional, Type

from ..config import StorageConfig
from .base import BlobStore
from .file_storage import FileBlobStore
from .memory_storage import MemoryBlobStore

logger = logging.getLogger(__name__)

# Registry of available storage implementations
STORAGE_REGISTRY: Dict[str, Type[BlobStore]] = {
    "file": FileBlobStore,
    "memory": MemoryBlobStore,
}


def create_storage(config: Optional[StorageConfig] = None) -> BlobStore:
    """
    Create a blob store based on configuration.

    Args:
        config: Storage configuration (optional)

    Returns:
        A new BlobStore instance

    Raises:
        ValueError: If storage type is unknown
    """
    if config is None:
        from ..config import get_config

        config = get_config().storage

    storage_type = config.type.lower()
    if storage_type not in STORAGE_REGISTRY:
        raise ValueError(f"Unknown storage type: {storage_type}")

    if storage_type == "file":
        store: BlobStore = FileBlobStore(config.path)
    else:
        store = MemoryBlobStore()

    logger.info(f"Initialized {storage_type} storage")
    return store
