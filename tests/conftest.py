from __future__ import annotations

from typing import Any, Optional

import pytest

from dyngraph.core.defs import CollectionDef, FieldDef, RelationDef, SchemaOverview
from dyngraph.core.query_types import QueryPlan
from dyngraph.runtime.accessors import AccessorRegistry


def _collection(name: str, fields: dict[str, str], **kwargs) -> CollectionDef:
    return CollectionDef(
        collection=name,
        fields={f: FieldDef(field=f, type=t) for f, t in fields.items()},
        **kwargs,
    )


@pytest.fixture
def overview() -> SchemaOverview:
    collections = [
        _collection(
            "articles",
            {
                "id": "integer",
                "title": "string",
                "status": "string",
                "rating": "float",
                "tags": "csv",
                "meta": "json",
                "author": "integer",
                "blocks": "alias",
                "__secret": "string",
            },
            note="Blog posts",
        ),
        _collection("authors", {"id": "integer", "name": "string", "mentor": "integer", "articles": "alias"}),
        _collection("article_blocks", {"id": "integer", "article": "integer", "collection": "string", "item": "string"}),
        _collection("headings", {"id": "integer", "text": "string"}),
        _collection("images", {"id": "integer", "url": "string"}),
        _collection("empty_things", {}),
        _collection("system_settings", {"id": "integer", "project_name": "string"}, singleton=True),
        _collection("system_users", {"id": "uuid", "email": "string"}),
    ]
    relations = (
        RelationDef(many_collection="articles", many_field="author", one_collection="authors", one_field="articles"),
        RelationDef(many_collection="authors", many_field="mentor", one_collection="authors"),
        RelationDef(many_collection="article_blocks", many_field="article", one_collection="articles", one_field="blocks"),
        RelationDef(
            many_collection="article_blocks",
            many_field="item",
            one_collection_field="collection",
            one_allowed_collections=("headings", "images"),
        ),
    )
    return SchemaOverview(
        collections={c.collection: c for c in collections},
        relations=relations,
        version="7",
    )


class FakeAccessor:
    def __init__(self, layer: "FakeDataLayer", collection: str):
        self.layer = layer
        self.collection = collection

    async def read_by_query(self, plan: QueryPlan, *, strip_non_requested: bool = True) -> Any:
        return self.layer.read(self.collection, "read_by_query", plan, strip_non_requested)

    async def read_singleton(self, plan: QueryPlan, *, strip_non_requested: bool = True) -> Any:
        return self.layer.read(self.collection, "read_singleton", plan, strip_non_requested)


class FakeDataLayer:
    """Canned rows per collection; records every read."""

    def __init__(self, data: Optional[dict[str, Any]] = None):
        self.data = data or {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple[str, str, QueryPlan, bool]] = []

    def read(self, collection: str, method: str, plan: QueryPlan, strip_non_requested: bool) -> Any:
        self.calls.append((collection, method, plan, strip_non_requested))
        if collection in self.errors:
            raise self.errors[collection]
        return self.data.get(collection)

    def registry(self) -> AccessorRegistry:
        return AccessorRegistry(default=lambda collection, accountability: FakeAccessor(self, collection))


@pytest.fixture
def data_layer() -> FakeDataLayer:
    return FakeDataLayer(
        {
            "articles": [
                {"id": 1, "title": "Hello", "status": "published", "author": {"id": 3, "name": "Ann"}},
                {"id": 2, "title": "Draft", "status": "draft", "author": None},
            ],
            "authors": [{"id": 3, "name": "Ann"}],
            "article_blocks": [
                {"id": 1, "collection": "headings", "item": {"id": 10, "text": "Intro"}},
                {"id": 2, "collection": "images", "item": {"id": 20, "url": "cat.png"}},
            ],
            "system_settings": {"id": 1, "project_name": "Demo"},
            "system_users": [{"id": "u-1", "email": "a@example.com"}],
        }
    )


SCHEMA_YAML = """
version: "2"
collections:
  articles:
    fields:
      id: integer
      title: string
      author: integer
  authors:
    fields: [{field: id, type: integer}, {field: name}]
  system_settings:
    singleton: true
    fields:
      id: integer
      project_name: {type: string, note: Shown in the header}
relations:
  - {many_collection: articles, many_field: author, one_collection: authors}
"""


@pytest.fixture
def schema_file(tmp_path):
    path = tmp_path / "schema.yaml"
    path.write_text(SCHEMA_YAML)
    return path
