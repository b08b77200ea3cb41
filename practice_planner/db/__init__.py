"""Database module for the practice planner."""

from .database import Database, get_db, close_db
from .models import Base, KeyValueEntry

__all__ = ["Database", "get_db", "close_db", "Base", "KeyValueEntry"]
