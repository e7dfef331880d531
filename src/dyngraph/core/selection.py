"""
Selection planner - GraphQL selection tree to flat field paths.

Walks the selection set of one top-level field and produces:
- fields: dotted leaf paths, e.g. ["title", "author.name", "item:articles.title"]
- deep: per-relation nested query options, keyed along the relation path,
  e.g. {"comments": {"_limit": 5, "_sort": [...]}}

Usage:
    planner = SelectionPlanner(variables=info.variable_values, fragments=info.fragments)
    selection = planner.plan(field_node.selection_set.selections)
    plan.fields = selection.fields
    plan.deep = selection.deep
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from graphql import (
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLIncludeDirective,
    GraphQLNamedType,
    GraphQLObjectType,
    GraphQLSkipDirective,
    GraphQLUnionType,
    InlineFragmentNode,
    SelectionNode,
    get_named_type,
)
from graphql.execution.values import get_directive_values

from .arguments import decode_arguments
from .defs import RESERVED_PREFIX
from .query_types import QueryPlan
from .sanitizer import sanitize_query

if TYPE_CHECKING:
    from ..runtime.context import Accountability


@dataclass
class SelectionPlan:
    """Result of planning one selection set."""
    fields: list[str] = field(default_factory=list)
    deep: dict[str, Any] = field(default_factory=dict)


class SelectionPlanner:
    """
    Turns selection nodes into requested field paths and deep arguments.

    Plain fields contribute "<parent>.<name>"; inline fragments (and named
    fragment spreads) on a nested field contribute "<parent>:<TypeName>",
    which is how polymorphic members are requested from the data layer.
    Only leaf paths are emitted.
    """

    def __init__(
        self,
        variables: Optional[dict[str, Any]] = None,
        fragments: Optional[dict[str, FragmentDefinitionNode]] = None,
        accountability: Optional["Accountability"] = None,
        sanitize: Callable[..., QueryPlan] = sanitize_query,
    ):
        self.variables = variables or {}
        self.fragments = fragments or {}
        self.accountability = accountability
        self.sanitize = sanitize

    def plan(
        self,
        selections: Sequence[SelectionNode],
        parent: Optional[str] = None,
        parent_type: Optional[GraphQLNamedType] = None,
    ) -> SelectionPlan:
        """
        Plan one selection set.

        When the GraphQL type of the selection is given, every union field
        also requests the discriminator on its enclosing row, since member
        types are resolved from that value.
        """
        result = SelectionPlan()
        fields = self._parse_fields(selections, parent, result.deep, parent_type)
        result.fields = list(dict.fromkeys(fields))
        return result

    def _parse_fields(
        self,
        selections: Sequence[SelectionNode],
        parent: Optional[str],
        deep: dict[str, Any],
        parent_type: Optional[GraphQLNamedType] = None,
    ) -> list[str]:
        fields: list[str] = []

        for selection in selections:
            if not self._should_include(selection):
                continue

            if isinstance(selection, (InlineFragmentNode, FragmentSpreadNode)):
                fields.extend(self._parse_fragment(selection, parent, deep, parent_type))
                continue

            if not isinstance(selection, FieldNode):
                continue

            name = selection.name.value
            # GraphQL pointers like __typename are not data fields
            if name.startswith(RESERVED_PREFIX):
                continue

            current = f"{parent}.{name}" if parent else name
            field_type = _field_type(parent_type, name)

            if selection.selection_set:
                discriminator = _discriminator(field_type)
                if discriminator:
                    fields.append(f"{parent}.{discriminator}" if parent else discriminator)
                fields.extend(self._parse_fields(selection.selection_set.selections, current, deep, field_type))
            else:
                fields.append(current)

            if selection.arguments:
                args = decode_arguments(selection.arguments, self.variables)
                options = self.sanitize(args, self.accountability).to_options()
                _merge_at(deep, current.split("."), options)

        return fields

    def _parse_fragment(
        self,
        selection: InlineFragmentNode | FragmentSpreadNode,
        parent: Optional[str],
        deep: dict[str, Any],
        parent_type: Optional[GraphQLNamedType] = None,
    ) -> list[str]:
        if isinstance(selection, FragmentSpreadNode):
            fragment = self.fragments.get(selection.name.value)
            if fragment is None:
                return []
            type_condition = fragment.type_condition
            selection_set = fragment.selection_set
        else:
            type_condition = selection.type_condition
            selection_set = selection.selection_set

        # Untyped fragments and fragments on the root type add no path segment
        if type_condition is None or parent is None:
            return self._parse_fields(selection_set.selections, parent, deep, parent_type)

        type_name = type_condition.name.value
        if type_name.startswith(RESERVED_PREFIX):
            return []

        return self._parse_fields(
            selection_set.selections,
            f"{parent}:{type_name}",
            deep,
            _fragment_type(parent_type, type_name),
        )

    def _should_include(self, selection: SelectionNode) -> bool:
        skip = get_directive_values(GraphQLSkipDirective, selection, self.variables)
        if skip and skip.get("if") is True:
            return False

        include = get_directive_values(GraphQLIncludeDirective, selection, self.variables)
        if include and include.get("if") is False:
            return False

        return True


def _merge_at(target: dict[str, Any], path: list[str], options: dict[str, Any]):
    """Deep-merge options into target at the given key path."""
    node = target
    for key in path[:-1]:
        child = node.get(key)
        if not isinstance(child, dict):
            child = node[key] = {}
        node = child

    last = path[-1]
    existing = node.get(last)
    node[last] = _deep_merge(existing if isinstance(existing, dict) else {}, options)


def _deep_merge(base: dict[str, Any], update: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _field_type(parent_type: Optional[GraphQLNamedType], name: str) -> Optional[GraphQLNamedType]:
    if not isinstance(parent_type, GraphQLObjectType):
        return None
    gql_field = parent_type.fields.get(name)
    return get_named_type(gql_field.type) if gql_field is not None else None


def _fragment_type(parent_type: Optional[GraphQLNamedType], type_name: str) -> Optional[GraphQLNamedType]:
    if isinstance(parent_type, GraphQLUnionType):
        return next((t for t in parent_type.types if t.name == type_name), None)
    if parent_type is not None and parent_type.name == type_name:
        return parent_type
    return None


def _discriminator(field_type: Optional[GraphQLNamedType]) -> Optional[str]:
    if isinstance(field_type, GraphQLUnionType):
        return (field_type.extensions or {}).get("discriminator") or None
    return None
