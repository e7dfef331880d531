"""
Custom exceptions for the dyngraph system.
"""

from __future__ import annotations

from typing import Any, Optional

from graphql import GraphQLError


class DynGraphError(Exception):
    """Base exception for all dyngraph errors."""
    pass


class ValidationError(DynGraphError):
    """Raised when a GraphQL document fails validation against the compiled schema."""

    def __init__(self, errors: list[GraphQLError]):
        self.errors = list(errors)
        messages = [e.message for e in self.errors]
        super().__init__(f"GraphQL validation error: {messages}")

    @property
    def formatted(self) -> list[dict[str, Any]]:
        return [e.formatted for e in self.errors]


class ExecutionError(DynGraphError):
    """Raised when the GraphQL engine fails outside of field resolution."""

    def __init__(self, message: str, collection: Optional[str] = None):
        self.collection = collection
        super().__init__(
            f"GraphQL execution error{f' in {collection}' if collection else ''}: {message}"
        )


class ServiceError(DynGraphError):
    """Raised when a data-access call fails."""

    def __init__(self, service: str, status_code: int, message: str):
        self.service = service
        self.status_code = status_code
        super().__init__(f"Service '{service}' returned {status_code}: {message}")


class InvalidQueryError(DynGraphError):
    """Raised when query arguments cannot be sanitized."""
    pass


class SchemaConfigError(DynGraphError):
    """Raised when a schema source or the accessor table is invalid."""
    pass
