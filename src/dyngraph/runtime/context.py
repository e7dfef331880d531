"""
Request context for GraphQL execution.

One RequestContext is created per request and passed to graphql-core as
``context_value``. Resolvers reach the executor and the result scope
through ``info.context``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Union

from ..core.defs import PermissionDef

if TYPE_CHECKING:
    from .executor import QueryExecutor


@dataclass
class Accountability:
    """
    Represents the user/service making the request.

    Admins see the full schema; everyone else gets a schema reduced to
    their read permissions.
    """
    user: Optional[Union[int, str]] = None
    role: Optional[str] = None
    admin: bool = False
    permissions: list[PermissionDef] = field(default_factory=list)


class ResultScope:
    """
    Raw results of the top-level fields of one request.

    The executor records each top-level result under its response key;
    union type resolution only reads from it, walking a response path
    from the root down to the enclosing object.
    """

    def __init__(self):
        self._results: dict[str, Any] = {}

    def record(self, key: str, data: Any):
        self._results[key] = data

    @property
    def view(self) -> Mapping[str, Any]:
        return MappingProxyType(self._results)

    def lookup(self, path: Sequence[Union[str, int]]) -> Any:
        """
        Follow a response path.

        path[0] is the response key of a top-level field, the rest are
        field names and list indices below it. Returns None when the path
        leads nowhere.
        """
        if not path:
            return None

        node = self._results.get(path[0])  # type: ignore[arg-type]
        for key in path[1:]:
            if isinstance(node, Mapping) and isinstance(key, str):
                node = node.get(key)
            elif isinstance(node, list) and isinstance(key, int) and 0 <= key < len(node):
                node = node[key]
            else:
                return None
        return node


@dataclass
class RequestContext:
    """Context passed through one GraphQL execution."""
    executor: "QueryExecutor"
    accountability: Optional[Accountability] = None
    results: ResultScope = field(default_factory=ResultScope)
