"""
Scalar type mapping - field kinds to GraphQL scalar types.
"""

from __future__ import annotations

from typing import Any, Optional

from graphql import (
    GraphQLBoolean,
    GraphQLFloat,
    GraphQLInputType,
    GraphQLInt,
    GraphQLList,
    GraphQLScalarType,
    GraphQLString,
    ValueNode,
    value_from_ast_untyped,
)


def _serialize_json(value: Any) -> Any:
    return value


def _parse_json_literal(value_node: ValueNode, variables: Optional[dict[str, Any]] = None) -> Any:
    return value_from_ast_untyped(value_node, variables)


GraphQLJSON = GraphQLScalarType(
    name="JSON",
    description="Arbitrary JSON value",
    serialize=_serialize_json,
    parse_value=_serialize_json,
    parse_literal=_parse_json_literal,
)


# Kinds not listed here fall back to String
SCALAR_TYPES: dict[str, GraphQLScalarType] = {
    "boolean": GraphQLBoolean,
    "integer": GraphQLInt,
    "bigInteger": GraphQLInt,
    "float": GraphQLFloat,
    "decimal": GraphQLFloat,
    "json": GraphQLJSON,
}


def get_graphql_type(kind: str) -> GraphQLInputType:
    """
    Map a field kind to its GraphQL type.

    Examples:
        integer -> Int
        csv -> [String]
        uuid -> String
    """
    if kind == "csv":
        return GraphQLList(GraphQLString)
    return SCALAR_TYPES.get(kind, GraphQLString)
