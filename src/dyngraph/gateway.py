"""
dyngraph Gateway - main entry point for creating a GraphQL application.

Usage:
    from dyngraph import Gateway
    from dyngraph.cli.config import DynGraphConfig

    gateway = Gateway(DynGraphConfig(
        schema_path="schema.yaml",
        data_service_url="http://data:8055",
    ))

    app = gateway.app
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .api import create_graphql_router
from .cli.config import DynGraphConfig
from .core.defs import SchemaOverview
from .core.errors import SchemaConfigError
from .core.loader import load_schema_file, schema_from_dict
from .engine import SnapshotStore
from .runtime.accessors import AccessorRegistry, DataServiceClient, create_http_registry
from .runtime.metadata import CollectionMetaLookup, SqlCollectionMeta
from .service.database import close_db, create_engine

logger = logging.getLogger(__name__)


class Gateway:
    """
    GraphQL gateway over a dynamic relational schema.

    Features:
    - Loads the schema overview from a YAML file or a discovery URL
    - Compiles it into a snapshot, swapped atomically on refresh
    - Provides a FastAPI app with the GraphQL endpoints
    """

    def __init__(
        self,
        config: Optional[DynGraphConfig] = None,
        *,
        overview: Optional[SchemaOverview] = None,
        accessors: Optional[AccessorRegistry] = None,
        metadata: Optional[CollectionMetaLookup] = None,
        title: str = "dyngraph",
    ):
        """
        Initialize gateway.

        Args:
            config: Deployment configuration (defaults apply when omitted)
            overview: Schema overview to serve; loaded from config when omitted
            accessors: Accessor registry; HTTP accessors on config.data_service_url when omitted
            metadata: Collection metadata lookup; SQL-backed when config.database_url is set
            title: FastAPI app title
        """
        self.config = config or DynGraphConfig()
        self.title = title
        self.store = SnapshotStore(system_prefix=self.config.system_prefix)

        self._client: Optional[DataServiceClient] = None
        if accessors is None:
            self._client = DataServiceClient(self.config.data_service_url, timeout=self.config.request_timeout)
            accessors = create_http_registry(self._client, system_prefix=self.config.system_prefix)
        self.accessors = accessors

        self._engine = None
        if metadata is None and self.config.database_url:
            self._engine = create_engine(self.config.database_url)
            metadata = SqlCollectionMeta(self._engine)
        self.metadata = metadata

        if overview is None and self.config.schema_path:
            overview = load_schema_file(self.config.schema_path)
        if overview is not None:
            self.store.swap(overview)

        # Create FastAPI app
        self.app = self._create_app()

        # Store reference to gateway on app for refresh endpoint
        self.app.state.gateway = self

    async def load_overview(self) -> SchemaOverview:
        """Read the schema overview from the configured source."""
        if self.config.schema_path:
            return load_schema_file(self.config.schema_path)
        if self.config.schema_url:
            return await self._fetch_overview(self.config.schema_url)
        raise SchemaConfigError("No schema source configured (schema_path or schema_url)")

    async def _fetch_overview(self, url: str) -> SchemaOverview:
        async with httpx.AsyncClient(timeout=self.config.request_timeout) as client:
            try:
                response = await client.get(f"{url.rstrip('/')}/__schema")
            except httpx.RequestError as e:
                raise SchemaConfigError(f"Could not fetch schema from {url}: {e}")
        if response.status_code != 200:
            raise SchemaConfigError(f"Schema source {url} returned {response.status_code}")
        return schema_from_dict(response.json())

    async def refresh_schema(self) -> dict[str, Any]:
        """
        Reload the schema source and swap the snapshot.
        The previous snapshot stays active when loading fails.
        """
        logger.info("Refreshing schema...")
        try:
            overview = await self.load_overview()
        except SchemaConfigError:
            logger.error("Schema refresh failed, keeping the current snapshot", exc_info=True)
            raise

        snapshot = self.store.swap(overview)
        return {
            "status": "ok",
            "version": snapshot.version,
            "collections": len(snapshot.object_types),
        }

    async def close(self):
        if self._client is not None:
            await self._client.close()
        if self._engine is not None:
            await close_db(self._engine)

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            if not self.store.is_ready and self.config.schema_url:
                try:
                    self.store.swap(await self.load_overview())
                except SchemaConfigError:
                    logger.error("Initial schema load failed", exc_info=True)
            yield
            await self.close()

        app = FastAPI(
            title=self.title,
            description="Dynamic GraphQL over a relational schema",
            version="1.0.0",
            lifespan=lifespan,
        )

        # CORS
        app.add_middleware(
            CORSMiddleware,
            allow_origins=self.config.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        app.include_router(create_graphql_router(self.store, self.accessors, self.metadata))

        # Health check
        @app.get("/health")
        async def health():
            return {"status": "ok", "schema_loaded": self.store.is_ready}

        # Schema refresh endpoint
        @app.post("/__refresh")
        async def refresh_schema():
            """Reload the schema source and swap the compiled snapshot."""
            gateway = app.state.gateway
            try:
                return await gateway.refresh_schema()
            except SchemaConfigError as e:
                raise HTTPException(status_code=502, detail={"error": str(e)})

        return app
