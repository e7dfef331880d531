"""
dyngraph - dynamic GraphQL over a runtime-defined relational schema.

Compiles collections, fields and relations into a typed GraphQL schema
(filter input types, many-to-any unions) and resolves queries against it
through generic item accessors.

Usage:
    from dyngraph import Gateway, DynGraphConfig

    gateway = Gateway(DynGraphConfig(schema_path="schema.yaml"))
    app = gateway.app
"""

from __future__ import annotations

from .core import (
    CollectionDef,
    CompiledSchema,
    DynGraphError,
    ExecutionError,
    FieldDef,
    InvalidQueryError,
    PermissionDef,
    QueryPlan,
    RelationDef,
    SchemaConfigError,
    SchemaGraph,
    SchemaOverview,
    ServiceError,
    TypeCompiler,
    ValidationError,
    compile_schema,
    load_schema_file,
    schema_from_dict,
)
from .runtime import (
    Accountability,
    AccessorRegistry,
    DataServiceClient,
    QueryExecutor,
    create_http_registry,
)
from .engine import GraphQLService, SnapshotStore
from .cli.config import DynGraphConfig
from .gateway import Gateway

__version__ = "0.1.0"

__all__ = [
    # Definitions
    "FieldDef",
    "CollectionDef",
    "RelationDef",
    "PermissionDef",
    "SchemaOverview",
    "SchemaGraph",
    # Errors
    "DynGraphError",
    "ValidationError",
    "ExecutionError",
    "ServiceError",
    "InvalidQueryError",
    "SchemaConfigError",
    # Compilation
    "TypeCompiler",
    "CompiledSchema",
    "compile_schema",
    "schema_from_dict",
    "load_schema_file",
    # Runtime
    "QueryPlan",
    "Accountability",
    "QueryExecutor",
    "AccessorRegistry",
    "DataServiceClient",
    "create_http_registry",
    "GraphQLService",
    "SnapshotStore",
    # Gateway
    "DynGraphConfig",
    "Gateway",
]
