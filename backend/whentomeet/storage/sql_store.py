"""
SQL blob store: one kv_blobs row per logical key, payload stored as JSON text.
Works against any SQLAlchemy URL (SQLite for a single host, Postgres for shared deployments).
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from whentomeet.core.errors import ConfigurationError, TransientIOError
from whentomeet.db.base import Base
from whentomeet.db.session import make_engine, make_session_factory
from whentomeet.models.kv_blob import KvBlob

logger = logging.getLogger(__name__)


class SqlBlobStore:
    def __init__(self, database_url: str) -> None:
        if not database_url:
            raise ConfigurationError("DATABASE_URL is not set.")
        try:
            self._engine = make_engine(database_url)
            Base.metadata.create_all(self._engine, tables=[KvBlob.__table__])
        except SQLAlchemyError as e:
            raise ConfigurationError(f"Database unreachable: {e}") from e
        self._session_factory = make_session_factory(self._engine)

    @property
    def backend_id(self) -> str:
        return "sql"

    def get(self, key: str) -> Any | None:
        db = self._session_factory()
        try:
            row = db.query(KvBlob).filter(KvBlob.blob_key == key).first()
            raw = row.payload_json if row else None
        except SQLAlchemyError as e:
            logger.exception("Error fetching %s from database", key)
            raise TransientIOError(f"Failed to fetch {key}") from e
        finally:
            db.close()
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error("Corrupt JSON in kv_blobs[%s]: %s", key, e)
            raise TransientIOError(f"Corrupt data under {key}") from e

    def set(self, key: str, value: Any) -> None:
        payload = json.dumps(value)
        db = self._session_factory()
        try:
            row = db.query(KvBlob).filter(KvBlob.blob_key == key).first()
            now = datetime.now(timezone.utc)
            if row:
                row.payload_json = payload
                row.updated_at = now
            else:
                db.add(KvBlob(blob_key=key, payload_json=payload, updated_at=now))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Error saving %s to database", key)
            raise TransientIOError(f"Failed to save {key}") from e
        finally:
            db.close()

    def dispose(self) -> None:
        self._engine.dispose()
