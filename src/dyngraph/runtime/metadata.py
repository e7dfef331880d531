"""
Collection metadata lookup - answers "is this collection a singleton?".

The executor asks a CollectionMetaLookup first and falls back to the static
table of system collections when the lookup knows nothing about the name.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from ..core.defs import SYSTEM_PREFIX
from ..core.schema_graph import SchemaGraph
from ..service.database import CollectionRow


# Static metadata for built-in system collections, keyed by name without prefix
SYSTEM_COLLECTION_ROWS: dict[str, dict[str, Any]] = {
    "activity": {"singleton": False, "note": "Accountability logs for all events"},
    "collections": {"singleton": False, "note": "Additional collection configuration and metadata"},
    "fields": {"singleton": False, "note": "Additional field configuration and metadata"},
    "files": {"singleton": False, "note": "Metadata for all managed file assets"},
    "folders": {"singleton": False, "note": "Provides virtual directories for files"},
    "permissions": {"singleton": False, "note": "Access permissions for each role"},
    "presets": {"singleton": False, "note": "Presets for collection defaults and bookmarks"},
    "relations": {"singleton": False, "note": "Relationship configuration and metadata"},
    "revisions": {"singleton": False, "note": "Data snapshots for all activity"},
    "roles": {"singleton": False, "note": "Permission groups for system users"},
    "settings": {"singleton": True, "note": "Project configuration options"},
    "users": {"singleton": False, "note": "System users for the platform"},
    "webhooks": {"singleton": False, "note": "Configuration for event-based HTTP requests"},
}


def find_system_collection(collection: str, system_prefix: str = SYSTEM_PREFIX) -> Optional[dict[str, Any]]:
    """Static row for a prefixed system collection name, or None."""
    if not collection.startswith(system_prefix):
        return None
    row = SYSTEM_COLLECTION_ROWS.get(collection[len(system_prefix):])
    if row is None:
        return None
    return {"collection": collection, **row}


class CollectionMetaLookup(Protocol):
    async def get_collection(self, name: str) -> Optional[dict[str, Any]]:
        ...


class SchemaCollectionMeta:
    """Metadata read straight from the schema snapshot."""

    def __init__(self, graph: SchemaGraph):
        self.graph = graph

    async def get_collection(self, name: str) -> Optional[dict[str, Any]]:
        collection = self.graph.get_collection(name)
        if collection is None:
            return None
        return {
            "collection": collection.collection,
            "singleton": collection.singleton,
            "note": collection.note,
        }


class SqlCollectionMeta:
    """
    Metadata read from the "collections" table.

    Usage:
        meta = SqlCollectionMeta(create_engine("sqlite+aiosqlite:///meta.db"))
        row = await meta.get_collection("settings")
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def get_collection(self, name: str) -> Optional[dict[str, Any]]:
        async with self._session_maker() as session:
            result = await session.execute(
                select(CollectionRow).where(CollectionRow.collection == name)
            )
            row = result.scalar_one_or_none()
            return row.to_dict() if row is not None else None
