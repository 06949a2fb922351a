"""Protocol for blob stores. Every backend exposes the same get/set contract over JSON values."""
from typing import Any, Protocol


class BlobStore(Protocol):
    """Interface for memory, Redis, flat files, SQL. Same contract; only where the JSON lives differs."""

    @property
    def backend_id(self) -> str:
        """Unique id (e.g. 'memory', 'redis') reported by /health."""
        ...

    def get(self, key: str) -> Any | None:
        """
        Return the JSON value stored under a logical key, or None if nothing was ever stored.
        Raises TransientIOError when the backend call fails, ConfigurationError when unconfigured.
        """
        ...

    def set(self, key: str, value: Any) -> None:
        """Replace the value under a logical key (whole-blob overwrite, last writer wins)."""
        ...
