"""Registry of blob store backends. Add new backends here; STORAGE_BACKEND picks one."""
import logging
from typing import Any, Callable

from whentomeet.config import Settings
from whentomeet.core.errors import ConfigurationError
from whentomeet.storage.base import BlobStore

logger = logging.getLogger(__name__)

_factories: dict[str, Callable[[Settings], BlobStore]] = {}


def register(name: str, factory: Callable[[Settings], Any]) -> None:
    """Register a backend factory (e.g. 'memory', 'redis')."""
    _factories[name] = factory


def list_backends() -> list[str]:
    """List registered backend ids."""
    return list(_factories.keys())


def build_blob_store(settings: Settings) -> BlobStore:
    """Build the backend named by settings.storage_backend. Raises ConfigurationError if unknown."""
    name = settings.storage_backend
    if name not in _factories:
        raise ConfigurationError(f"Unknown storage backend: {name}. Available: {list_backends()}")
    store = _factories[name](settings)
    logger.info("Using %s storage backend", store.backend_id)
    return store


def _init_registry() -> None:
    from whentomeet.storage.file_store import FileBlobStore
    from whentomeet.storage.memory_store import MemoryBlobStore
    from whentomeet.storage.redis_store import RedisBlobStore
    from whentomeet.storage.sql_store import SqlBlobStore

    register("memory", lambda s: MemoryBlobStore())
    register("redis", lambda s: RedisBlobStore(s.redis_url, key_prefix=s.redis_key_prefix))
    register("file", lambda s: FileBlobStore(s.data_dir))
    register("sql", lambda s: SqlBlobStore(s.database_url))


# Register built-in backends on first import
_init_registry()
