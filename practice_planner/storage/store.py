"""Key-value persistence on top of the SQL database."""

import json
import logging
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..db import Database, KeyValueEntry, get_db
from ..errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore:
    """JSON values stored under string keys.

    ``set`` and ``delete`` report failure by returning False; ``get`` and
    ``list`` raise StorageError, since a failed read has no safe fallback.
    Every call runs in its own committed transaction, so a write is visible
    to the next read of the same key.
    """

    def __init__(self, db: Optional[Database] = None):
        self.db = db or get_db()

    def get(self, key: str) -> Any:
        """Get the decoded value for a key, or None if absent."""
        try:
            with self.db.get_session() as session:
                entry = session.get(KeyValueEntry, key)
                raw = entry.value if entry is not None else None
        except SQLAlchemyError as e:
            logger.error(f"Storage get error for {key}: {e}")
            raise StorageError(f"Failed to read {key}") from e

        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise StorageError(f"Corrupt value stored under {key}") from e

    def set(self, key: str, value: Any) -> bool:
        """Store a JSON-serializable value. Returns False on failure."""
        try:
            payload = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f"Storage set error for {key}: value is not serializable ({e})")
            return False

        try:
            with self.db.get_session() as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=payload))
                else:
                    entry.value = payload
        except SQLAlchemyError as e:
            logger.error(f"Storage set error for {key}: {e}")
            return False
        return True

    def delete(self, key: str) -> bool:
        """Delete a key. Deleting a missing key succeeds."""
        try:
            with self.db.get_session() as session:
                entry = session.get(KeyValueEntry, key)
                if entry is not None:
                    session.delete(entry)
        except SQLAlchemyError as e:
            logger.error(f"Storage delete error for {key}: {e}")
            return False
        return True

    def list(self, prefix: str = "") -> List[str]:
        """List keys starting with prefix, sorted."""
        stmt = select(KeyValueEntry.key).order_by(KeyValueEntry.key)
        if prefix:
            stmt = stmt.where(KeyValueEntry.key.startswith(prefix, autoescape=True))
        try:
            with self.db.get_session() as session:
                keys = list(session.scalars(stmt))
        except SQLAlchemyError as e:
            logger.error(f"Storage list error for prefix {prefix!r}: {e}")
            raise StorageError(f"Failed to list keys with prefix {prefix!r}") from e
        # LIKE ignores ASCII case on SQLite
        return [key for key in keys if key.startswith(prefix)]

    def clear(self) -> bool:
        """Delete every key."""
        try:
            with self.db.get_session() as session:
                session.query(KeyValueEntry).delete()
        except SQLAlchemyError as e:
            logger.error(f"Storage clear error: {e}")
            return False
        return True
