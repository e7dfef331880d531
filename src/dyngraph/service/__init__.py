"""
Service module - persistence for collection metadata.

Provides:
- Database utilities (Base, CollectionRow, create_engine, init_db)
"""

from __future__ import annotations

from .database import Base, CollectionRow, close_db, create_engine, get_database_url, init_db

__all__ = [
    "Base",
    "CollectionRow",
    "create_engine",
    "get_database_url",
    "init_db",
    "close_db",
]
