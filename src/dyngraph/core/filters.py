"""
Filter expression builder - one recursive filter input type per collection.

For a collection "articles" with fields id, title, author (m2o -> authors):

    input articles_filter {
        _and: [articles_filter]
        _or: [articles_filter]
        id: articles_id_filter_operators
        title: articles_title_filter_operators
        author: authors_filter
    }

To-many and many-to-any fields are not filterable.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Iterable, Optional

from graphql import (
    GraphQLBoolean,
    GraphQLID,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInputType,
    GraphQLList,
)

from .defs import CollectionDef, FieldDef
from .names import TypeNameRegistry
from .scalars import get_graphql_type
from .schema_graph import SchemaGraph

logger = logging.getLogger(__name__)


# Operators accepting the field's own type
VALUE_OPERATORS = ("_eq", "_neq", "_contains", "_ncontains", "_gt", "_gte", "_lt", "_lte")

# Operators accepting a list of the field's type
LIST_OPERATORS = ("_in", "_nin")

# Operators accepting a boolean flag
FLAG_OPERATORS = ("_null", "_nnull", "_empty", "_nempty")

LOGICAL_OPERATORS = ("_and", "_or")


def filter_type_name(collection: str) -> str:
    return f"{collection}_filter"


def operator_type_name(collection: str, field: str) -> str:
    return f"{collection}_{field}_filter_operators"


def build_operator_type(collection: str, field: str, field_type: GraphQLInputType) -> GraphQLInputObjectType:
    """Build the operator-set input type for one scalar field."""
    fields: dict[str, GraphQLInputField] = {}

    for op in VALUE_OPERATORS:
        fields[op] = GraphQLInputField(field_type)
    for op in LIST_OPERATORS:
        fields[op] = GraphQLInputField(GraphQLList(field_type))
    for op in FLAG_OPERATORS:
        fields[op] = GraphQLInputField(GraphQLBoolean)

    return GraphQLInputObjectType(
        name=operator_type_name(collection, field),
        fields=fields,
    )


class FilterTypeBuilder:
    """
    Builds the filter input types for every given collection.

    Type shells are created first; their fields are supplied by a thunk so
    filter types can reference each other through to-one relations in any
    order, including self references.

    Operator type names are claimed in the given registry; a field whose
    operator type name is already taken is left out of the filter. The
    "<collection>_filter" names are expected to be claimed by the caller.

    Usage:
        builder = FilterTypeBuilder(graph)
        filter_types = builder.build(["articles", "authors"])
        filter_types["articles"]  # GraphQLInputObjectType "articles_filter"
    """

    def __init__(self, graph: SchemaGraph, names: Optional[TypeNameRegistry] = None):
        self.graph = graph
        self.names = names if names is not None else TypeNameRegistry()
        self.filter_types: dict[str, GraphQLInputObjectType] = {}
        self.operator_types: dict[tuple[str, str], GraphQLInputObjectType] = {}

    def build(self, collections: Iterable[str]) -> dict[str, GraphQLInputObjectType]:
        self.filter_types = {}
        self.operator_types = {}

        for name in collections:
            collection = self.graph.get_collection(name)
            if collection is None:
                continue
            self.filter_types[name] = GraphQLInputObjectType(
                name=filter_type_name(name),
                fields=partial(self.get_filter_fields, collection),
            )
            self._build_operator_types(collection)

        return self.filter_types

    def _build_operator_types(self, collection: CollectionDef):
        for field_def in self.graph.exposed_fields(collection.collection):
            if self.graph.classify_relation(collection.collection, field_def.field) is not None:
                continue

            type_name = operator_type_name(collection.collection, field_def.field)
            owner = self.names.claim(type_name, f"filter operators of '{collection.collection}.{field_def.field}'")
            if owner is not None:
                logger.warning(
                    f"Filter operators for '{collection.collection}.{field_def.field}' would be named "
                    f"'{type_name}', which is already used by {owner}. The field is not filterable."
                )
                continue

            field_type = GraphQLID if collection.primary == field_def.field else get_graphql_type(field_def.type)
            self.operator_types[(collection.collection, field_def.field)] = build_operator_type(
                collection.collection, field_def.field, field_type
            )

    def get_filter_fields(self, collection: CollectionDef) -> dict[str, GraphQLInputField]:
        selftype = self.filter_types[collection.collection]
        fields = {
            op: GraphQLInputField(GraphQLList(selftype))
            for op in LOGICAL_OPERATORS
        }

        for field_def in self.graph.exposed_fields(collection.collection):
            intype = self._get_field_filter_type(collection, field_def)
            if intype is not None:
                fields[field_def.field] = GraphQLInputField(intype)

        return fields

    def _get_field_filter_type(self, collection: CollectionDef, field_def: FieldDef):
        info = self.graph.classify_relation(collection.collection, field_def.field)

        if info is None:
            return self.operator_types.get((collection.collection, field_def.field))

        if info.kind == "m2o":
            return self.filter_types.get(info.related)  # type: ignore[arg-type]

        # o2m and m2a fields cannot be filtered on
        return None
