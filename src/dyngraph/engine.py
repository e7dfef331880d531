"""
GraphQL service - validates and executes documents against the compiled snapshot.

    store = SnapshotStore()
    store.swap(overview)
    service = GraphQLService(store, registry)
    result = await service.execute(parse("{ articles { id } }"))
    # {"data": {"articles": [...]}}
"""

from __future__ import annotations

import logging
from inspect import isawaitable
from typing import Any, Callable, Optional

from graphql import (
    DocumentNode,
    GraphQLError,
    GraphQLSchema,
    execute,
    specified_rules,
    validate,
    validate_schema,
)

from .core.compiler import CompiledSchema, Scope, TypeCompiler
from .core.defs import SYSTEM_PREFIX, SchemaOverview
from .core.errors import ExecutionError, ValidationError
from .core.query_types import QueryPlan
from .core.reduce import reduce_schema
from .core.sanitizer import sanitize_query
from .core.schema_graph import SchemaGraph
from .runtime.accessors import AccessorRegistry
from .runtime.context import Accountability, RequestContext
from .runtime.executor import QueryExecutor
from .runtime.metadata import CollectionMetaLookup, SchemaCollectionMeta

logger = logging.getLogger(__name__)


class SnapshotStore:
    """
    Holds the current CompiledSchema.

    swap() compiles a complete new snapshot before replacing the reference,
    so requests that already read ``current`` keep a consistent schema.
    """

    def __init__(self, system_prefix: str = SYSTEM_PREFIX):
        self.system_prefix = system_prefix
        self._current: Optional[CompiledSchema] = None

    @property
    def current(self) -> CompiledSchema:
        if self._current is None:
            raise RuntimeError("Schema not initialized. Call swap() first.")
        return self._current

    @property
    def is_ready(self) -> bool:
        return self._current is not None

    def compile(self, overview: SchemaOverview) -> CompiledSchema:
        return TypeCompiler(SchemaGraph(overview), system_prefix=self.system_prefix).compile()

    def swap(self, overview: SchemaOverview) -> CompiledSchema:
        snapshot = self.compile(overview)
        self._current = snapshot
        logger.info(
            f"Schema snapshot {snapshot.version} active "
            f"({len(snapshot.object_types)} collections)"
        )
        return snapshot


class GraphQLService:
    """
    Executes GraphQL documents for one accountability.

    Admins (and calls without accountability) use the shared snapshot;
    everyone else gets a schema compiled from the overview reduced to their
    read permissions.
    """

    def __init__(
        self,
        store: SnapshotStore,
        accessors: AccessorRegistry,
        metadata: Optional[CollectionMetaLookup] = None,
        accountability: Optional[Accountability] = None,
        sanitize: Callable[..., QueryPlan] = sanitize_query,
    ):
        self.store = store
        self.accessors = accessors
        self.metadata = metadata
        self.accountability = accountability
        self.sanitize = sanitize

    def get_snapshot(self) -> CompiledSchema:
        snapshot = self.store.current
        if self.accountability is None or self.accountability.admin:
            return snapshot

        reduced = reduce_schema(snapshot.overview, self.accountability.permissions, actions=("read",))
        return self.store.compile(reduced)

    def get_schema(self, scope: Scope = "items") -> GraphQLSchema:
        return self.get_snapshot().get_schema(scope)

    async def execute(
        self,
        document: DocumentNode,
        variables: Optional[dict[str, Any]] = None,
        operation_name: Optional[str] = None,
        scope: Scope = "items",
    ) -> dict[str, Any]:
        """
        Validate and execute a parsed document.

        Returns:
            {"data": ..., "errors": [...]} with "errors" omitted when empty

        Raises:
            ValidationError: the schema or the document is invalid (no data was read)
            ExecutionError: the engine failed outside of field resolution
        """
        snapshot = self.get_snapshot()
        schema = snapshot.get_schema(scope)

        schema_errors = validate_schema(schema)
        if schema_errors:
            raise ValidationError(schema_errors)

        validation_errors = validate(schema, document, specified_rules)
        if validation_errors:
            raise ValidationError(validation_errors)

        executor = QueryExecutor(
            self.accessors,
            metadata=self.metadata or SchemaCollectionMeta(SchemaGraph(snapshot.overview)),
            accountability=self.accountability,
            system_prefix=self.store.system_prefix,
            sanitize=self.sanitize,
        )
        context = RequestContext(executor=executor, accountability=self.accountability)

        try:
            result = execute(
                schema,
                document,
                context_value=context,
                variable_values=variables,
                operation_name=operation_name,
            )
            if isawaitable(result):
                result = await result
        except GraphQLError as e:
            raise ExecutionError(e.message)

        return result.formatted
