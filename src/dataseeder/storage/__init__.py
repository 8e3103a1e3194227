"""
DataSeeder Storage Module - Database Engine and Session Management.

Thin helpers around the SQLAlchemy async engine used by relational seeders.
The database URL comes from ``settings.DATABASE_URL`` unless given
explicitly; SQLite through aiosqlite is the default driver.
"""

from .database import create_engine, create_session_factory

__all__ = ["create_engine", "create_session_factory"]
