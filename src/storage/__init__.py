"""Storage layer: PostgreSQL connection pooling."""

from src.storage.database import Database, close_database, get_database

__all__ = ["Database", "get_database", "close_database"]
