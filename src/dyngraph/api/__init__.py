"""
API module - FastAPI endpoints.
"""

from __future__ import annotations

from .router import configure, create_graphql_router, get_accountability, get_store, router

__all__ = [
    "router",
    "configure",
    "get_store",
    "get_accountability",
    "create_graphql_router",
]
