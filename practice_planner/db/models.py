"""Database models backing the key-value store."""

from datetime import datetime
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class KeyValueEntry(Base):
    """One JSON-encoded value stored under a string key."""

    __tablename__ = "kv_entries"

    key = Column(String(255), primary_key=True)  # e.g. programs:list, sessions:2024-01-01:program_x
    value = Column(Text, nullable=False)  # JSON
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<KeyValueEntry(key={self.key}, updated_at={self.updated_at})>"
