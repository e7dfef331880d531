"""
Schema loader - plain dicts / YAML files to SchemaOverview.

Accepted layout:

    version: "3"
    collections:
      articles:
        primary: id
        note: Blog posts
        fields:
          id: integer                 # shorthand: name -> type
          title: {type: string, note: Headline}
          author: integer
      system_settings:
        singleton: true
        fields: [{field: id, type: integer}, {field: project_name}]
    relations:
      - {many_collection: articles, many_field: author, one_collection: authors, one_field: articles}
      - many_collection: blocks
        many_field: item
        one_collection_field: collection
        one_allowed_collections: [headings, images]
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .defs import CollectionDef, FieldDef, RelationDef, SchemaOverview
from .errors import SchemaConfigError


def schema_from_dict(data: dict[str, Any]) -> SchemaOverview:
    """Build a SchemaOverview from a plain mapping."""
    if not isinstance(data, dict):
        raise SchemaConfigError("Schema must be a mapping")

    collections: dict[str, CollectionDef] = {}
    for name, coll_data in (data.get("collections") or {}).items():
        collections[name] = _parse_collection(name, coll_data or {})

    relations = tuple(_parse_relation(rel) for rel in data.get("relations") or [])

    return SchemaOverview(
        collections=collections,
        relations=relations,
        version=str(data.get("version", "1")),
    )


def _parse_collection(name: str, data: dict[str, Any]) -> CollectionDef:
    if not isinstance(data, dict):
        raise SchemaConfigError(f"Collection '{name}' must be a mapping")

    raw_fields = data.get("fields") or {}
    fields: dict[str, FieldDef] = {}

    if isinstance(raw_fields, dict):
        for field_name, field_data in raw_fields.items():
            fields[field_name] = _parse_field(name, field_name, field_data)
    elif isinstance(raw_fields, list):
        for field_data in raw_fields:
            if not isinstance(field_data, dict) or "field" not in field_data:
                raise SchemaConfigError(f"Fields of collection '{name}' must name themselves with 'field'")
            fields[field_data["field"]] = _parse_field(name, field_data["field"], field_data)
    else:
        raise SchemaConfigError(f"Fields of collection '{name}' must be a mapping or a list")

    return CollectionDef(
        collection=name,
        fields=fields,
        primary=data.get("primary", "id"),
        singleton=bool(data.get("singleton", False)),
        note=data.get("note"),
    )


def _parse_field(collection: str, name: str, data: Any) -> FieldDef:
    if data is None:
        return FieldDef(field=name)
    if isinstance(data, str):
        return FieldDef(field=name, type=data)
    if isinstance(data, dict):
        return FieldDef(field=name, type=data.get("type", "string"), note=data.get("note"))
    raise SchemaConfigError(f"Invalid definition for field '{collection}.{name}'")


def _parse_relation(data: Any) -> RelationDef:
    if not isinstance(data, dict):
        raise SchemaConfigError("Relation must be a mapping")

    try:
        many_collection = data["many_collection"]
        many_field = data["many_field"]
    except KeyError as e:
        raise SchemaConfigError(f"Relation is missing {e.args[0]}")

    allowed = data.get("one_allowed_collections")
    if isinstance(allowed, str):
        allowed = [item.strip() for item in allowed.split(",") if item.strip()]

    return RelationDef(
        many_collection=many_collection,
        many_field=many_field,
        one_collection=data.get("one_collection"),
        one_field=data.get("one_field"),
        one_collection_field=data.get("one_collection_field"),
        one_allowed_collections=tuple(allowed) if allowed else None,
    )


def load_schema_file(path: Path | str) -> SchemaOverview:
    """Load a SchemaOverview from a YAML (or JSON) file."""
    path = Path(path)
    if not path.exists():
        raise SchemaConfigError(f"Schema file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise SchemaConfigError(f"Invalid schema file {path}: {e}")

    return schema_from_dict(data or {})
