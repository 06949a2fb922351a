"""
Flat JSON file blob store: one <key>.json file per logical key under DATA_DIR
(users.json and calendar.json).
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from whentomeet.core.errors import ConfigurationError, TransientIOError

logger = logging.getLogger(__name__)


class FileBlobStore:
    def __init__(self, data_dir: Path | str) -> None:
        self._dir = Path(data_dir)
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"DATA_DIR {self._dir} is not writable: {e}") from e

    @property
    def backend_id(self) -> str:
        return "file"

    def _path(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def get(self, key: str) -> Any | None:
        path = self._path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.exception("Error reading %s", path)
            raise TransientIOError(f"Failed to read {path.name}") from e
        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Corrupt JSON in %s: %s", path, e)
            raise TransientIOError(f"Corrupt data in {path.name}") from e

    def set(self, key: str, value: Any) -> None:
        path = self._path(key)
        # Write to a temp file in the same dir then rename, so readers never see a half-written file
        try:
            fd, tmp = tempfile.mkstemp(dir=self._dir, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, indent=2)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.exception("Error writing %s", path)
            raise TransientIOError(f"Failed to write {path.name}") from e
