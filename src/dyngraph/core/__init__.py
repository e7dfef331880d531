"""
Core module - schema definitions, type compilation and query planning.
"""

from __future__ import annotations

from .defs import (
    RESERVED_PREFIX,
    SYSTEM_PREFIX,
    CollectionDef,
    FieldDef,
    PermissionDef,
    RelationDef,
    SchemaOverview,
)
from .errors import (
    DynGraphError,
    ExecutionError,
    InvalidQueryError,
    SchemaConfigError,
    ServiceError,
    ValidationError,
)
from .query_types import GraphQLParams, NormalizedOrder, QueryPlan
from .schema_graph import RelationInfo, SchemaGraph, get_relation_type
from .scalars import GraphQLJSON, get_graphql_type
from .arguments import decode_arguments
from .sanitizer import sanitize_query
from .selection import SelectionPlan, SelectionPlanner
from .names import TypeNameRegistry
from .filters import FilterTypeBuilder
from .reduce import reduce_schema
from .loader import load_schema_file, schema_from_dict
from .compiler import CompiledSchema, TypeCompiler, compile_schema

__all__ = [
    # Definitions
    "RESERVED_PREFIX",
    "SYSTEM_PREFIX",
    "FieldDef",
    "CollectionDef",
    "RelationDef",
    "PermissionDef",
    "SchemaOverview",
    # Errors
    "DynGraphError",
    "ValidationError",
    "ExecutionError",
    "ServiceError",
    "InvalidQueryError",
    "SchemaConfigError",
    # Query types
    "QueryPlan",
    "NormalizedOrder",
    "GraphQLParams",
    # Schema graph
    "SchemaGraph",
    "RelationInfo",
    "get_relation_type",
    # Scalars
    "GraphQLJSON",
    "get_graphql_type",
    # Query planning
    "decode_arguments",
    "sanitize_query",
    "SelectionPlanner",
    "SelectionPlan",
    # Compiler
    "TypeNameRegistry",
    "FilterTypeBuilder",
    "TypeCompiler",
    "CompiledSchema",
    "compile_schema",
    # Schema sources
    "reduce_schema",
    "schema_from_dict",
    "load_schema_file",
]
