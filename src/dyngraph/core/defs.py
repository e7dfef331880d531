"""
Core dataclass definitions for the dyngraph system.

These describe the relational schema the GraphQL layer is generated from:
collections, their fields, and the relations between them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


RESERVED_PREFIX = "__"

# Collections whose names start with this prefix belong to the "system" scope
SYSTEM_PREFIX = "system_"


@dataclass(frozen=True)
class FieldDef:
    """Definition of a collection field."""
    field: str
    type: str = "string"  # string, integer, bigInteger, float, boolean, json, csv, ...
    note: Optional[str] = None

    @property
    def is_reserved(self) -> bool:
        """Field names starting with "__" collide with GraphQL introspection."""
        return self.field.startswith(RESERVED_PREFIX)


@dataclass(frozen=True)
class CollectionDef:
    """Definition of a collection (table-like entity)."""
    collection: str
    fields: dict[str, FieldDef] = field(default_factory=dict)
    primary: str = "id"
    singleton: bool = False
    note: Optional[str] = None


@dataclass(frozen=True)
class RelationDef:
    """
    Definition of a relation.

    The "many" side always stores the foreign key (``many_collection.many_field``).
    The "one" side is either a single collection (m2o / o2m), or, for
    many-to-any relations, a set of allowed collections plus a discriminator
    field on the many side recording which of them a row points to.
    """
    many_collection: str
    many_field: str
    one_collection: Optional[str] = None
    one_field: Optional[str] = None  # reverse alias field on the one side
    one_collection_field: Optional[str] = None  # m2a discriminator
    one_allowed_collections: Optional[tuple[str, ...]] = None  # m2a targets

    @property
    def is_polymorphic(self) -> bool:
        return bool(self.one_collection_field and self.one_allowed_collections)


@dataclass(frozen=True)
class PermissionDef:
    """A single permission row: which fields of a collection an action may touch."""
    collection: str
    action: str = "read"
    fields: tuple[str, ...] = ("*",)

    def allows_field(self, field: str) -> bool:
        return "*" in self.fields or field in self.fields


@dataclass(frozen=True)
class SchemaOverview:
    """Complete snapshot of collections and relations."""
    collections: dict[str, CollectionDef]
    relations: tuple[RelationDef, ...] = ()
    version: str = "1"
