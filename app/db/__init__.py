"""
Database module - async relational connection.
"""
from app.db.database import get_engine, get_db_session, test_database_connection

__all__ = [
    "get_engine",
    "get_db_session",
    "test_database_connection"
]
