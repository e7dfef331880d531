"""
Pydantic models for the data-access query and the GraphQL transport.

QueryPlan is the canonical request handed to item accessors:

    QueryPlan(
        fields=["title", "author.name", "item:articles.title"],
        filter={"_and": [{"status": {"_eq": "published"}}]},
        sort=[NormalizedOrder(field="title", dir="desc")],
        limit=10,
        deep={"comments": {"_limit": 5}},
    )
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


# Marker prefixed to option keys inside ``deep`` so they never collide with field names
DEEP_OPTION_PREFIX = "_"


class NormalizedOrder(BaseModel):
    """
    Normalized sort key.

    Input: "-created_at"
    Normalized: NormalizedOrder(field="created_at", dir="desc")
    """
    field: str
    dir: Literal["asc", "desc"] = "asc"


class QueryPlan(BaseModel):
    """Sanitized query for a single collection read."""
    fields: Optional[List[str]] = None
    filter: Optional[Dict[str, Any]] = None
    sort: Optional[List[NormalizedOrder]] = None
    limit: Optional[int] = None
    offset: Optional[int] = None
    page: Optional[int] = None
    search: Optional[str] = None
    deep: Optional[Dict[str, Any]] = None

    def to_options(self) -> dict[str, Any]:
        """Dump the set options with the deep marker prefixed to every key."""
        data = self.model_dump(exclude_none=True, exclude={"fields", "deep"})
        return {f"{DEEP_OPTION_PREFIX}{key}": value for key, value in data.items()}


class GraphQLParams(BaseModel):
    """
    Body of a GraphQL HTTP request.

    POST /graphql
    {"query": "{ articles { id } }", "variables": {}, "operationName": null}
    """
    model_config = ConfigDict(populate_by_name=True)

    query: str
    variables: Optional[Dict[str, Any]] = None
    operation_name: Optional[str] = Field(default=None, alias="operationName")
