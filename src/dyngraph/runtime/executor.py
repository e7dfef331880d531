"""
Query executor - runs one top-level GraphQL field against the data layer.

Handles:
- Mapping the root field name back to a collection for the scope
- Decoding and sanitizing the field arguments into a QueryPlan
- Planning the selection set into field paths and deep arguments
- Dispatching to the right accessor, singleton or list read
- Recording the raw result for union type resolution
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

from graphql import (
    ArgumentNode,
    FragmentDefinitionNode,
    GraphQLNamedType,
    GraphQLResolveInfo,
    SelectionNode,
    get_named_type,
)

from ..core.arguments import decode_arguments
from ..core.defs import SYSTEM_PREFIX
from ..core.query_types import QueryPlan
from ..core.sanitizer import sanitize_query
from ..core.selection import SelectionPlanner
from .accessors import AccessorRegistry
from .context import Accountability
from .metadata import CollectionMetaLookup, find_system_collection

logger = logging.getLogger(__name__)


class QueryExecutor:
    """
    Resolves root fields for one request.

    Usage:
        executor = QueryExecutor(registry, metadata=SchemaCollectionMeta(graph))
        context = RequestContext(executor=executor)
        # graphql-core calls executor.resolve(info, "items") for each root field
    """

    def __init__(
        self,
        accessors: AccessorRegistry,
        metadata: Optional[CollectionMetaLookup] = None,
        accountability: Optional[Accountability] = None,
        system_prefix: str = SYSTEM_PREFIX,
        sanitize: Callable[..., QueryPlan] = sanitize_query,
    ):
        self.accessors = accessors
        self.metadata = metadata
        self.accountability = accountability
        self.system_prefix = system_prefix
        self.sanitize = sanitize

    def collection_name(self, field_name: str, scope: str) -> str:
        if scope == "system":
            return f"{self.system_prefix}{field_name}"
        return field_name

    async def resolve(self, info: GraphQLResolveInfo, scope: str) -> Any:
        """Resolve one root field; None when the field selects nothing."""
        field_node = info.field_nodes[0]
        if field_node.selection_set is None:
            return None

        collection = self.collection_name(info.field_name, scope)
        result = await self.get_data(
            collection,
            field_node.selection_set.selections,
            field_node.arguments,
            info.variable_values,
            info.fragments,
            get_named_type(info.return_type),
        )

        results = getattr(info.context, "results", None)
        if results is not None:
            results.record(info.path.key, result)

        return result

    async def get_data(
        self,
        collection: str,
        selections: Sequence[SelectionNode],
        arguments: Optional[Sequence[ArgumentNode]] = None,
        variables: Optional[dict[str, Any]] = None,
        fragments: Optional[dict[str, FragmentDefinitionNode]] = None,
        return_type: Optional[GraphQLNamedType] = None,
    ) -> Any:
        """
        Build a QueryPlan for the collection and read it.

        Args:
            collection: Collection name (system prefix already applied)
            selections: Selection nodes of the root field
            arguments: Argument nodes of the root field
            variables: Operation variable values
            fragments: Named fragment definitions of the document
            return_type: GraphQL type of the root field; lets the planner
                request union discriminators

        Returns:
            One row for singletons, a list of rows otherwise
        """
        args = decode_arguments(arguments, variables)
        plan = self.sanitize(args, self.accountability)

        planner = SelectionPlanner(
            variables=variables,
            fragments=fragments,
            accountability=self.accountability,
            sanitize=self.sanitize,
        )
        selection = planner.plan(selections, parent_type=return_type)
        plan.fields = selection.fields
        if selection.deep:
            plan.deep = selection.deep

        accessor = self.accessors.get(collection, self.accountability)

        if await self.is_singleton(collection):
            return await accessor.read_singleton(plan, strip_non_requested=False)
        return await accessor.read_by_query(plan, strip_non_requested=False)

    async def is_singleton(self, collection: str) -> bool:
        info = None
        if self.metadata is not None:
            info = await self.metadata.get_collection(collection)
        if info is None:
            info = find_system_collection(collection, self.system_prefix)
        return bool(info and info.get("singleton"))
