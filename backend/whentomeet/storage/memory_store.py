"""Transient in-process blob store. Data is lost on restart; used for dev and tests."""
import copy
import threading
from typing import Any


class MemoryBlobStore:
    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}
        self._lock = threading.Lock()

    @property
    def backend_id(self) -> str:
        return "memory"

    def get(self, key: str) -> Any | None:
        # Copies in and out so callers mutating a blob never alias the stored value
        with self._lock:
            value = self._data.get(key)
            return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = copy.deepcopy(value)
