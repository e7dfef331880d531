"""
Type compiler - converts a SchemaGraph into executable GraphQL schemas.

Produces one object type and one filter input type per collection, and a
root Query per scope:

    items:  every collection not starting with the system prefix
    system: collections starting with the system prefix, exposed with the
            prefix stripped ("system_users" -> field "users")

Usage:
    from dyngraph.core.schema_graph import SchemaGraph
    from dyngraph.core.compiler import TypeCompiler

    compiled = TypeCompiler(SchemaGraph(overview)).compile()
    schema = compiled.get_schema("items")  # GraphQLSchema
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Literal

from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLID,
    GraphQLInputObjectType,
    GraphQLInt,
    GraphQLList,
    GraphQLObjectType,
    GraphQLOutputType,
    GraphQLResolveInfo,
    GraphQLSchema,
    GraphQLString,
    GraphQLUnionType,
)

from .defs import RESERVED_PREFIX, SYSTEM_PREFIX, CollectionDef, FieldDef, SchemaOverview
from .filters import FilterTypeBuilder, filter_type_name
from .names import TypeNameRegistry
from .scalars import get_graphql_type
from .schema_graph import SchemaGraph, is_graphql_name
from ..runtime.union import UnionResolver

logger = logging.getLogger(__name__)


Scope = Literal["items", "system"]

SCOPES: tuple[Scope, ...] = ("items", "system")


def union_type_name(collection: str, field: str) -> str:
    return f"{collection}__{field}"


def get_shared_args() -> dict[str, GraphQLArgument]:
    """Arguments accepted by every root field and every to-many field."""
    return {
        "sort": GraphQLArgument(GraphQLList(GraphQLString)),
        "limit": GraphQLArgument(GraphQLInt),
        "offset": GraphQLArgument(GraphQLInt),
        "page": GraphQLArgument(GraphQLInt),
        "search": GraphQLArgument(GraphQLString),
    }


async def resolve_collection(source: Any, info: GraphQLResolveInfo, scope: Scope, **args: Any) -> Any:
    """Root field resolver; arguments are re-read from the AST by the executor."""
    return await info.context.executor.resolve(info, scope)


@dataclass(frozen=True)
class CompiledSchema:
    """Immutable result of one compilation."""
    version: str
    overview: SchemaOverview
    object_types: dict[str, GraphQLObjectType] = field(default_factory=dict)
    filter_types: dict[str, GraphQLInputObjectType] = field(default_factory=dict)
    schemas: dict[str, GraphQLSchema] = field(default_factory=dict)

    def get_schema(self, scope: Scope) -> GraphQLSchema:
        try:
            return self.schemas[scope]
        except KeyError:
            raise ValueError(f"Unknown scope: {scope}")


class TypeCompiler:
    """
    Compiles a SchemaGraph into GraphQL types.

    The fields of every collection are decided before any type exists:
    a relation field needs its target compiled, a union field needs its
    type name, and a collection left without fields is dropped, which can
    drop relations pointing at it in turn. Object type shells are then
    created for the remaining collections; fields come from partial thunks
    that graphql-core evaluates on first access, so relations may point
    anywhere in the graph, including back at their own collection.

    Anomalies never raise: reserved or invalid names, empty collections,
    relations to unknown collections and clashing type names are logged
    and left out of the schema.
    """

    def __init__(self, graph: SchemaGraph, system_prefix: str = SYSTEM_PREFIX):
        self.graph = graph
        self.system_prefix = system_prefix
        self.names = TypeNameRegistry()
        self.fields: dict[str, list[FieldDef]] = {}
        self.object_types: dict[str, GraphQLObjectType] = {}
        self.filter_types: dict[str, GraphQLInputObjectType] = {}
        self.union_types: dict[str, GraphQLUnionType] = {}

    def compile(self) -> CompiledSchema:
        self.names = TypeNameRegistry()
        self.object_types = {}
        self.union_types = {}

        candidates = self._compilable_collections()
        self.fields = self._plan_fields(candidates)
        self._report_skipped_fields(candidates)
        names = list(self.fields)

        for name in names:
            collection = self.graph.collections[name]
            self.object_types[name] = GraphQLObjectType(
                name=name,
                fields=partial(self.get_fields, collection),
                description=collection.note,
            )

        self.filter_types = FilterTypeBuilder(self.graph, self.names).build(names)

        schemas = {scope: self._build_schema(scope, names) for scope in SCOPES}

        return CompiledSchema(
            version=self.graph.version,
            overview=self.graph.overview,
            object_types=dict(self.object_types),
            filter_types=dict(self.filter_types),
            schemas=schemas,
        )

    def _compilable_collections(self) -> list[str]:
        names = []
        for name in self.graph.collections:
            if not is_graphql_name(name) or name.startswith(RESERVED_PREFIX):
                logger.warning(f"Collection name '{name}' is not a valid GraphQL name. It is ignored.")
                continue
            if not self.graph.exposed_fields(name):
                logger.debug(f"Collection '{name}' has no fields to expose. It is ignored.")
                continue

            clash = next(
                (
                    (type_name, self.names.owner(type_name))
                    for type_name in (name, filter_type_name(name))
                    if type_name in self.names
                ),
                None,
            )
            if clash is not None:
                logger.warning(
                    f"Collection '{name}' needs type name '{clash[0]}', which is already used by "
                    f"{clash[1]}. It is ignored."
                )
                continue

            self.names.claim(name, f"collection '{name}'")
            self.names.claim(filter_type_name(name), f"filter of collection '{name}'")
            names.append(name)
        return names

    def _plan_fields(self, names: list[str]) -> dict[str, list[FieldDef]]:
        """Buildable fields per collection, with union type names claimed."""
        excluded: set[tuple[str, str]] = set()

        while True:
            plan = self._buildable_fields(names, excluded)
            names_with_unions = self.names.copy()
            clashes = []

            for name, fields in plan.items():
                for field_def in fields:
                    info = self.graph.classify_relation(name, field_def.field)
                    if info is None or info.kind != "m2a":
                        continue
                    type_name = union_type_name(name, field_def.field)
                    owner = names_with_unions.claim(type_name, f"union of '{name}.{field_def.field}'")
                    if owner is not None:
                        logger.warning(
                            f"Union for '{name}.{field_def.field}' would be named '{type_name}', "
                            f"which is already used by {owner}. The field is ignored."
                        )
                        clashes.append((name, field_def.field))

            if not clashes:
                self.names = names_with_unions
                return plan
            excluded.update(clashes)

    def _buildable_fields(self, names: list[str], excluded: set[tuple[str, str]]) -> dict[str, list[FieldDef]]:
        kept = list(names)

        while True:
            targets = set(kept)
            plan = {
                name: [
                    f for f in self.graph.exposed_fields(name)
                    if (name, f.field) not in excluded and self._has_target(name, f.field, targets)
                ]
                for name in kept
            }

            if all(plan.values()):
                return plan
            kept = [name for name in kept if plan[name]]

    def _has_target(self, collection: str, field_name: str, targets: set[str]) -> bool:
        info = self.graph.classify_relation(collection, field_name)
        if info is None:
            return True
        if info.kind == "m2a":
            return any(member in targets for member in info.related)  # type: ignore[union-attr]
        return info.related in targets

    def _report_skipped_fields(self, candidates: list[str]):
        for name in candidates:
            collection = self.graph.collections[name]
            if name not in self.fields:
                logger.warning(
                    f"Collection '{name}' has no fields left once unresolved relations are dropped. "
                    f"It is ignored."
                )
            kept = {f.field for f in self.fields.get(name, [])}

            for field_def in collection.fields.values():
                if field_def.field in kept:
                    continue
                if field_def.is_reserved:
                    logger.warning(
                        f"Field '{field_def.field}' in collection '{name}' "
                        f"uses the reserved prefix. It is not included in the GraphQL schema."
                    )
                elif not is_graphql_name(field_def.field):
                    logger.warning(
                        f"Field '{field_def.field}' in collection '{name}' "
                        f"is not a valid GraphQL name. It is not included in the GraphQL schema."
                    )
                else:
                    info = self.graph.classify_relation(name, field_def.field)
                    if info is None:
                        continue
                    if info.kind != "m2a":
                        logger.warning(
                            f"Field '{field_def.field}' in collection '{name}' "
                            f"points to collection '{info.related}', which is not in the schema. It is ignored."
                        )
                    elif union_type_name(name, field_def.field) not in self.names:
                        logger.warning(
                            f"Union '{union_type_name(name, field_def.field)}' has no members. "
                            f"Field '{name}.{field_def.field}' is ignored."
                        )

    def get_fields(self, collection: CollectionDef) -> dict[str, GraphQLField]:
        """Field thunk for one object type."""
        return {
            field_def.field: self._build_field(collection, field_def)
            for field_def in self.fields.get(collection.collection, [])
        }

    def _build_field(self, collection: CollectionDef, field_def: FieldDef) -> GraphQLField:
        info = self.graph.classify_relation(collection.collection, field_def.field)

        if info is None:
            if field_def.field == collection.primary:
                return GraphQLField(GraphQLID, description=field_def.note)
            return GraphQLField(get_graphql_type(field_def.type), description=field_def.note)  # type: ignore[arg-type]

        if info.kind == "m2o":
            return GraphQLField(self.object_types[info.related], description=field_def.note)  # type: ignore[index]

        if info.kind == "o2m":
            args = get_shared_args()
            args["filter"] = GraphQLArgument(self.filter_types[info.related])  # type: ignore[index]
            return GraphQLField(
                GraphQLList(self.object_types[info.related]),  # type: ignore[index]
                args=args,
                description=field_def.note,
            )

        union = self._get_union(
            collection.collection,
            field_def.field,
            discriminator=info.relation.one_collection_field or "",
            allowed=info.related,  # type: ignore[arg-type]
        )
        return GraphQLField(union, description=field_def.note)

    def _get_union(
        self,
        collection: str,
        field: str,
        discriminator: str,
        allowed: tuple[str, ...],
    ) -> GraphQLUnionType:
        name = union_type_name(collection, field)
        if name in self.union_types:
            return self.union_types[name]

        members = []
        for member in allowed:
            object_type = self.object_types.get(member)
            if object_type is None:
                logger.warning(
                    f"Collection '{member}' allowed by '{collection}.{field}' does not exist. "
                    f"It is not a member of union '{name}'."
                )
                continue
            members.append(object_type)

        resolver = UnionResolver(discriminator, [m.name for m in members])
        union = GraphQLUnionType(
            name=name,
            types=members,
            resolve_type=resolver.resolve_type,
            extensions={"discriminator": discriminator},
        )
        self.union_types[name] = union
        return union

    def _build_schema(self, scope: Scope, names: list[str]) -> GraphQLSchema:
        query_fields: dict[str, GraphQLField] = {}

        for name in names:
            is_system = name.startswith(self.system_prefix)
            if (scope == "system") != is_system:
                continue

            field_name = name[len(self.system_prefix):] if is_system else name
            if not is_graphql_name(field_name):
                logger.warning(f"Collection '{name}' cannot be exposed as '{field_name}' in the {scope} scope.")
                continue

            collection = self.graph.collections[name]
            object_type: GraphQLOutputType = self.object_types[name]
            if not collection.singleton:
                object_type = GraphQLList(object_type)

            args = get_shared_args()
            args["filter"] = GraphQLArgument(self.filter_types[name])

            query_fields[field_name] = GraphQLField(
                object_type,
                args=args,
                resolve=partial(resolve_collection, scope=scope),
                description=collection.note,
            )

        if not query_fields:
            logger.warning(f"No collections are exposed in the {scope} scope.")

        return GraphQLSchema(
            query=GraphQLObjectType(name="Query", fields=query_fields)
        )


def compile_schema(overview: SchemaOverview, system_prefix: str = SYSTEM_PREFIX) -> CompiledSchema:
    """Convenience wrapper: overview -> CompiledSchema."""
    return TypeCompiler(SchemaGraph(overview), system_prefix=system_prefix).compile()
