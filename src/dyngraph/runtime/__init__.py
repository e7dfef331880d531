"""
Runtime module - query execution pipeline.
"""

from __future__ import annotations

from .accessors import (
    AccessorRegistry,
    DataServiceClient,
    HttpItemsAccessor,
    HttpSystemAccessor,
    ItemsAccessor,
    create_http_registry,
)
from .context import Accountability, RequestContext, ResultScope
from .executor import QueryExecutor
from .metadata import SchemaCollectionMeta, SqlCollectionMeta, find_system_collection
from .union import UnionResolver

__all__ = [
    "Accountability",
    "RequestContext",
    "ResultScope",
    "QueryExecutor",
    "UnionResolver",
    "ItemsAccessor",
    "AccessorRegistry",
    "DataServiceClient",
    "HttpItemsAccessor",
    "HttpSystemAccessor",
    "create_http_registry",
    "SchemaCollectionMeta",
    "SqlCollectionMeta",
    "find_system_collection",
]
