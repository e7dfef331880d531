"""
Argument decoder - GraphQL argument AST to plain Python values.

No coercion happens here: Int/Float literals keep the text the parser
produced, the sanitizer turns them into numbers.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from graphql import (
    ArgumentNode,
    ListValueNode,
    NullValueNode,
    ObjectFieldNode,
    ObjectValueNode,
    ValueNode,
    VariableNode,
)


def decode_arguments(
    nodes: Optional[Sequence[Union[ArgumentNode, ObjectFieldNode]]],
    variables: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """
    Decode argument (or object field) nodes into a dict.

    Example:
        articles(filter: {title: {_eq: $title}}, limit: 5)
        -> {"filter": {"title": {"_eq": <bound $title>}}, "limit": "5"}
    """
    if not nodes:
        return {}

    variables = variables or {}
    return {node.name.value: decode_value(node.value, variables) for node in nodes}


def decode_value(node: ValueNode, variables: dict[str, Any]) -> Any:
    """Decode a single value node. Unbound variables decode to None."""
    if isinstance(node, ObjectValueNode):
        return decode_arguments(node.fields, variables)

    if isinstance(node, ListValueNode):
        return [decode_value(item, variables) for item in node.values]

    if isinstance(node, VariableNode):
        return variables.get(node.name.value)

    if isinstance(node, NullValueNode):
        return None

    # Int, Float, String, Boolean and Enum nodes
    return getattr(node, "value", None)
