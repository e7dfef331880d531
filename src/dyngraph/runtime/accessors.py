"""
Item accessors - the data-access side of query execution.

The executor never talks to storage directly. It asks an AccessorRegistry
for an accessor bound to (collection, accountability) and hands it a
sanitized QueryPlan:

    accessor = registry.get("articles", accountability)
    rows = await accessor.read_by_query(plan, strip_non_requested=False)

System collections can have specialized accessors; every other collection
goes through the default one. The HTTP accessors below forward plans to a
data service:

    POST {base_url}/items/{collection}/query      -> list of rows
    POST {base_url}/items/{collection}/singleton  -> one row
    POST {base_url}/{system name}/query           -> system rows
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Protocol

import httpx

from ..core.defs import SYSTEM_PREFIX
from ..core.errors import SchemaConfigError, ServiceError
from ..core.query_types import QueryPlan
from .context import Accountability

logger = logging.getLogger(__name__)


class ItemsAccessor(Protocol):
    """Anything that can read a collection by QueryPlan."""

    async def read_by_query(self, plan: QueryPlan, *, strip_non_requested: bool = True) -> Any:
        ...

    async def read_singleton(self, plan: QueryPlan, *, strip_non_requested: bool = True) -> Any:
        ...


AccessorFactory = Callable[[str, Optional[Accountability]], ItemsAccessor]


class AccessorRegistry:
    """
    Dispatch table: collection name -> accessor factory.

    Built once at startup; lookups are plain dict reads.
    """

    def __init__(
        self,
        default: AccessorFactory,
        specialized: Optional[dict[str, AccessorFactory]] = None,
    ):
        self.default = default
        self._factories: dict[str, AccessorFactory] = {}
        for collection, factory in (specialized or {}).items():
            self.register(collection, factory)

    def register(self, collection: str, factory: AccessorFactory):
        if collection in self._factories:
            raise SchemaConfigError(f"Accessor for collection '{collection}' is already registered")
        self._factories[collection] = factory

    def is_specialized(self, collection: str) -> bool:
        return collection in self._factories

    def get(self, collection: str, accountability: Optional[Accountability] = None) -> ItemsAccessor:
        factory = self._factories.get(collection, self.default)
        return factory(collection, accountability)


class DataServiceClient:
    """
    HTTP client for the data service.

    Usage:
        client = DataServiceClient("http://data:8055")
        rows = await client.post("/items/articles/query", {"fields": ["id"]})
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize data service client.

        Args:
            base_url: Base URL of the data service (e.g., "http://data:8055")
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self.transport)
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def post(self, path: str, payload: dict[str, Any]) -> Any:
        """
        POST a JSON payload and return the "data" member of the response.

        Raises:
            ServiceError: If the service is unreachable or answers non-200
        """
        client = await self._get_client()
        url = f"{self.base_url}{path}"

        try:
            response = await client.post(url, json=payload)
        except httpx.RequestError as e:
            raise ServiceError(service=self.base_url, status_code=0, message=str(e))

        if response.status_code != 200:
            raise ServiceError(
                service=self.base_url,
                status_code=response.status_code,
                message=response.text,
            )

        body = response.json()
        if isinstance(body, dict) and "data" in body:
            return body["data"]
        return body


class HttpItemsAccessor:
    """Generic accessor: reads any user collection through the data service."""

    def __init__(self, client: DataServiceClient, collection: str, accountability: Optional[Accountability] = None):
        self.client = client
        self.collection = collection
        self.accountability = accountability

    def _path(self, suffix: str) -> str:
        return f"/items/{self.collection}/{suffix}"

    def _payload(self, plan: QueryPlan, strip_non_requested: bool) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "query": plan.model_dump(mode="json", exclude_none=True),
            "strip_non_requested": strip_non_requested,
        }
        if self.accountability is not None:
            payload["accountability"] = {
                "user": self.accountability.user,
                "role": self.accountability.role,
                "admin": self.accountability.admin,
            }
        return payload

    async def read_by_query(self, plan: QueryPlan, *, strip_non_requested: bool = True) -> Any:
        logger.debug(f"Reading '{self.collection}' with fields {plan.fields}")
        return await self.client.post(self._path("query"), self._payload(plan, strip_non_requested))

    async def read_singleton(self, plan: QueryPlan, *, strip_non_requested: bool = True) -> Any:
        logger.debug(f"Reading singleton '{self.collection}' with fields {plan.fields}")
        return await self.client.post(self._path("singleton"), self._payload(plan, strip_non_requested))


class HttpSystemAccessor(HttpItemsAccessor):
    """Accessor for a system collection: served at its own endpoint, without the prefix."""

    def __init__(
        self,
        client: DataServiceClient,
        collection: str,
        accountability: Optional[Accountability] = None,
        system_prefix: str = SYSTEM_PREFIX,
    ):
        super().__init__(client, collection, accountability)
        self.system_prefix = system_prefix

    def _path(self, suffix: str) -> str:
        name = self.collection
        if name.startswith(self.system_prefix):
            name = name[len(self.system_prefix):]
        return f"/{name}/{suffix}"


# System collections with a dedicated endpoint on the data service
SYSTEM_ACCESSOR_COLLECTIONS = (
    "activity",
    "files",
    "folders",
    "permissions",
    "presets",
    "relations",
    "revisions",
    "roles",
    "settings",
    "users",
    "webhooks",
)


def create_http_registry(client: DataServiceClient, system_prefix: str = SYSTEM_PREFIX) -> AccessorRegistry:
    """Registry with the generic HTTP accessor plus one system accessor per known system collection."""

    def default(collection: str, accountability: Optional[Accountability]) -> ItemsAccessor:
        return HttpItemsAccessor(client, collection, accountability)

    def system(collection: str, accountability: Optional[Accountability]) -> ItemsAccessor:
        return HttpSystemAccessor(client, collection, accountability, system_prefix=system_prefix)

    return AccessorRegistry(
        default=default,
        specialized={f"{system_prefix}{name}": system for name in SYSTEM_ACCESSOR_COLLECTIONS},
    )
