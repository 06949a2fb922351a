"""One JSON blob per logical key (users, calendar)."""
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from whentomeet.db.base import Base


class KvBlob(Base):
    __tablename__ = "kv_blobs"

    blob_key = Column(String(64), primary_key=True)
    payload_json = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
