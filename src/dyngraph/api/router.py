"""
FastAPI router for the GraphQL endpoints.

Endpoints:
- POST /graphql           - Executes a document against the items scope
- POST /graphql/system    - Executes a document against the system scope
- GET  /__schema.graphql  - Returns the SDL of a scope (?scope=items|system)

Request body:
    {"query": "{ articles(limit: 5) { id title } }", "variables": {}, "operationName": null}

Error mapping:
- syntax and validation errors -> 400 {"detail": {"errors": [...]}}
- engine failures              -> 500 {"detail": {"errors": [...]}}
- field resolution errors      -> 200 with partial data and "errors"
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from graphql import GraphQLError, parse, print_schema

from ..core.compiler import Scope
from ..core.errors import ExecutionError, ValidationError
from ..core.query_types import GraphQLParams
from ..engine import GraphQLService, SnapshotStore
from ..runtime.accessors import AccessorRegistry
from ..runtime.context import Accountability
from ..runtime.metadata import CollectionMetaLookup

logger = logging.getLogger(__name__)


# Create router
router = APIRouter()

# Global instances (set by configure() / create_graphql_router())
_store: SnapshotStore | None = None
_accessors: AccessorRegistry | None = None
_metadata: CollectionMetaLookup | None = None


def configure(
    store: SnapshotStore,
    accessors: AccessorRegistry,
    metadata: Optional[CollectionMetaLookup] = None,
):
    """Set the snapshot store and data access used by the endpoints."""
    global _store, _accessors, _metadata
    _store = store
    _accessors = accessors
    _metadata = metadata


def get_store() -> SnapshotStore:
    """Get the snapshot store."""
    if _store is None or not _store.is_ready:
        raise HTTPException(status_code=503, detail={"error": "Schema not loaded"})
    return _store


async def get_accountability() -> Accountability:
    """
    Get the accountability for the request.

    MVP: Returns an admin accountability.
    Production: Extract from JWT token or session.
    """
    return Accountability(admin=True)


def get_service(
    store: SnapshotStore = Depends(get_store),
    accountability: Accountability = Depends(get_accountability),
) -> GraphQLService:
    if _accessors is None:
        raise RuntimeError("Accessors not configured. Call configure() first.")
    return GraphQLService(store, _accessors, metadata=_metadata, accountability=accountability)


async def _run(params: GraphQLParams, service: GraphQLService, scope: Scope) -> dict[str, Any]:
    try:
        document = parse(params.query)
    except GraphQLError as e:
        raise HTTPException(status_code=400, detail={"errors": [e.formatted]})

    try:
        return await service.execute(
            document,
            variables=params.variables,
            operation_name=params.operation_name,
            scope=scope,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"errors": e.formatted})
    except ExecutionError as e:
        logger.error(f"GraphQL execution failed: {e}")
        raise HTTPException(status_code=500, detail={"errors": [{"message": str(e)}]})


@router.post("/graphql")
async def graphql_items(
    params: GraphQLParams,
    service: GraphQLService = Depends(get_service),
) -> dict[str, Any]:
    """Execute a GraphQL document against user collections."""
    return await _run(params, service, "items")


@router.post("/graphql/system")
async def graphql_system(
    params: GraphQLParams,
    service: GraphQLService = Depends(get_service),
) -> dict[str, Any]:
    """Execute a GraphQL document against system collections."""
    return await _run(params, service, "system")


@router.get("/__schema.graphql", response_class=PlainTextResponse)
async def get_schema_sdl(
    scope: Literal["items", "system"] = Query("items"),
    service: GraphQLService = Depends(get_service),
) -> str:
    """
    Return the SDL of one scope.

    Usage:
        curl http://localhost:8000/__schema.graphql?scope=system
    """
    return print_schema(service.get_schema(scope))


def create_graphql_router(
    store: SnapshotStore,
    accessors: AccessorRegistry,
    metadata: Optional[CollectionMetaLookup] = None,
) -> APIRouter:
    """
    Create a configured GraphQL API router.

    Args:
        store: Snapshot store holding the compiled schema
        accessors: Accessor registry used for data reads
        metadata: Optional collection metadata lookup

    Returns:
        Configured FastAPI router
    """
    configure(store, accessors, metadata)
    return router
