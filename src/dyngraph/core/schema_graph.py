"""
Schema graph - read-only view over collections, fields and relations.

Answers two questions for the type compiler and the filter builder:
- what kind of relation connects field F of collection C (if any)
- which collections a polymorphic field can point to

Usage:
    graph = SchemaGraph(overview)
    info = graph.classify_relation("articles", "author")
    if info and info.kind == "m2o":
        ...
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal, Optional, Union

from .defs import CollectionDef, FieldDef, RelationDef, SchemaOverview

logger = logging.getLogger(__name__)


RelationKind = Literal["m2o", "o2m", "m2a"]

_GRAPHQL_NAME = re.compile(r"^[_a-zA-Z][_a-zA-Z0-9]*$")


def is_graphql_name(name: str) -> bool:
    return bool(_GRAPHQL_NAME.match(name))


@dataclass(frozen=True)
class RelationInfo:
    """
    Classification of a relation from the perspective of one (collection, field).

    related:
        m2o -> the one-side collection name
        o2m -> the many-side collection name
        m2a -> tuple of allowed collection names
    """
    kind: RelationKind
    relation: RelationDef
    related: Union[str, tuple[str, ...]]

    @property
    def is_to_one(self) -> bool:
        return self.kind == "m2o"


def get_relation_type(relation: RelationDef, collection: str, field: str) -> Optional[RelationKind]:
    """Derive the relation kind for (collection, field), or None if it does not match."""
    if relation.many_collection == collection and relation.many_field == field:
        if relation.is_polymorphic:
            return "m2a"
        return "m2o"

    if relation.one_collection == collection and relation.one_field == field:
        return "o2m"

    return None


class SchemaGraph:
    """
    In-memory relation index for a SchemaOverview.

    The index is built once; lookups never mutate state. When two relations
    claim the same (collection, field) pair, the first one wins and the
    conflict is logged.
    """

    def __init__(self, overview: SchemaOverview):
        self.overview = overview
        self._index: dict[tuple[str, str], RelationDef] = {}

        for relation in overview.relations:
            self._register(relation.many_collection, relation.many_field, relation)
            if relation.one_collection and relation.one_field:
                self._register(relation.one_collection, relation.one_field, relation)

    def _register(self, collection: str, field: str, relation: RelationDef):
        key = (collection, field)
        if key in self._index:
            logger.warning(
                f"Multiple relations defined for field '{field}' in collection "
                f"'{collection}'. Only the first one is used."
            )
            return
        self._index[key] = relation

    @property
    def version(self) -> str:
        return self.overview.version

    @property
    def collections(self) -> dict[str, CollectionDef]:
        return self.overview.collections

    def get_collection(self, name: str) -> Optional[CollectionDef]:
        return self.overview.collections.get(name)

    def relation_for(self, collection: str, field: str) -> Optional[RelationDef]:
        """Return the relation bound to (collection, field), if any."""
        return self._index.get((collection, field))

    def classify_relation(self, collection: str, field: str) -> Optional[RelationInfo]:
        """
        Classify the relation for a field.

        Returns:
            RelationInfo, or None when the field is a plain scalar
        """
        relation = self.relation_for(collection, field)
        if relation is None:
            return None

        kind = get_relation_type(relation, collection, field)
        if kind is None:
            return None

        if kind == "m2o":
            related: Union[str, tuple[str, ...]] = relation.one_collection or ""
        elif kind == "o2m":
            related = relation.many_collection
        else:
            related = tuple(relation.one_allowed_collections or ())

        return RelationInfo(kind=kind, relation=relation, related=related)

    def allowed_collections(self, collection: str, field: str) -> tuple[str, ...]:
        """Collections a polymorphic field can point to (empty for non-m2a fields)."""
        info = self.classify_relation(collection, field)
        if info is None or info.kind != "m2a":
            return ()
        return info.related  # type: ignore[return-value]

    def exposed_fields(self, collection: str) -> list[FieldDef]:
        """Fields of a collection that may appear in the GraphQL schema."""
        coll = self.get_collection(collection)
        if coll is None:
            return []
        return [
            f for f in coll.fields.values()
            if not f.is_reserved and is_graphql_name(f.field)
        ]
