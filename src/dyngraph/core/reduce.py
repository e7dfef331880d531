"""
Schema reduction - strip a SchemaOverview down to what a set of permissions allows.

    reduced = reduce_schema(overview, accountability.permissions, actions=("read",))

A collection survives when at least one permission grants one of the
actions on it; its fields are narrowed to the union of the granted field
lists (the primary field always stays). A relation survives only when
every collection it mentions survives; the one side keeps its reverse
alias only when that field is still readable.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .defs import CollectionDef, PermissionDef, RelationDef, SchemaOverview


def reduce_schema(
    overview: SchemaOverview,
    permissions: Iterable[PermissionDef],
    actions: Iterable[str] = ("read",),
) -> SchemaOverview:
    actions = set(actions)
    granted: dict[str, list[PermissionDef]] = {}
    for permission in permissions:
        if permission.action in actions:
            granted.setdefault(permission.collection, []).append(permission)

    collections: dict[str, CollectionDef] = {}
    for name, collection in overview.collections.items():
        rules = granted.get(name)
        if not rules:
            continue
        fields = {
            field_name: field_def
            for field_name, field_def in collection.fields.items()
            if field_name == collection.primary or any(rule.allows_field(field_name) for rule in rules)
        }
        collections[name] = replace(collection, fields=fields)

    relations: list[RelationDef] = []
    for relation in overview.relations:
        reduced = _reduce_relation(relation, collections)
        if reduced is not None:
            relations.append(reduced)

    return SchemaOverview(
        collections=collections,
        relations=tuple(relations),
        version=overview.version,
    )


def _reduce_relation(relation: RelationDef, collections: dict[str, CollectionDef]):
    many = collections.get(relation.many_collection)
    if many is None or relation.many_field not in many.fields:
        return None

    if relation.is_polymorphic:
        allowed = tuple(c for c in relation.one_allowed_collections or () if c in collections)
        if not allowed:
            return None
        return replace(relation, one_allowed_collections=allowed)

    one = collections.get(relation.one_collection or "")
    if one is None:
        return None

    if relation.one_field and relation.one_field not in one.fields:
        return replace(relation, one_field=None)

    return relation
