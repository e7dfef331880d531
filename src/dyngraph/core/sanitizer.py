"""
Query sanitizer - turns decoded GraphQL arguments into a canonical QueryPlan.

Input:  {"limit": "5", "sort": ["-date", "title"], "filter": {"id": {"_eq": "1"}}}
Output: QueryPlan(limit=5, sort=[NormalizedOrder(field="date", dir="desc"), ...],
                  filter={"id": {"_eq": 1}})
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Optional

from .errors import InvalidQueryError
from .query_types import NormalizedOrder, QueryPlan

if TYPE_CHECKING:
    from ..runtime.context import Accountability

logger = logging.getLogger(__name__)


def sanitize_query(raw: dict[str, Any], accountability: Optional["Accountability"] = None) -> QueryPlan:
    """
    Sanitize a raw argument mapping.

    Unknown keys are ignored. A limit of -1 is kept as-is and means "no limit"
    to the accessor.
    """
    plan = QueryPlan()

    if raw.get("limit") is not None:
        plan.limit = _to_int("limit", raw["limit"])

    if raw.get("sort"):
        plan.sort = sanitize_sort(raw["sort"])

    if raw.get("filter"):
        plan.filter = sanitize_filter(raw["filter"], accountability)

    if raw.get("offset"):
        plan.offset = _to_int("offset", raw["offset"])

    if raw.get("page"):
        plan.page = _to_int("page", raw["page"])

    if raw.get("search") and isinstance(raw["search"], str):
        plan.search = raw["search"]

    return plan


def sanitize_sort(raw_sort: Any) -> list[NormalizedOrder]:
    """
    Parse sort keys.

    Accepts a comma separated string or a list: "-date,title" / ["-date", "title"]
    """
    if isinstance(raw_sort, str):
        items = raw_sort.split(",")
    elif isinstance(raw_sort, list):
        items = raw_sort
    else:
        raise InvalidQueryError(f"Invalid sort value: {raw_sort!r}")

    order: list[NormalizedOrder] = []
    for item in items:
        item = str(item).strip()
        if not item:
            continue
        if item.startswith("-"):
            order.append(NormalizedOrder(field=item[1:], dir="desc"))
        else:
            order.append(NormalizedOrder(field=item, dir="asc"))
    return order


def sanitize_filter(raw_filter: Any, accountability: Optional["Accountability"] = None) -> dict[str, Any]:
    """
    Normalize a filter tree.

    Leaf strings holding JSON literals ("1", "true") are parsed, and the
    dynamic variables $NOW, $CURRENT_USER and $CURRENT_ROLE are replaced.
    Boolean groups (_and / _or) keep every branch.
    """
    filters = raw_filter
    if isinstance(raw_filter, str):
        try:
            filters = _loads(raw_filter)
        except ValueError:
            logger.warning("Invalid value passed for filter query parameter.")
            raise InvalidQueryError("Filter is not valid JSON")

    if not isinstance(filters, dict):
        raise InvalidQueryError(f"Filter must be an object, got {type(filters).__name__}")

    return _map_leaves(filters, lambda value: _parse_leaf(value, accountability))


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


def _loads(value: str) -> Any:
    """Strict JSON: NaN and Infinity are not numbers."""
    return json.loads(value, parse_constant=_reject_constant)


def _map_leaves(value: Any, func) -> Any:
    if isinstance(value, dict):
        return {key: _map_leaves(item, func) for key, item in value.items()}
    if isinstance(value, list):
        return [_map_leaves(item, func) for item in value]
    return func(value)


def _parse_leaf(value: Any, accountability: Optional["Accountability"]) -> Any:
    if not isinstance(value, str):
        return value

    if value == "$NOW":
        return datetime.now(timezone.utc).isoformat()
    if value == "$CURRENT_USER":
        return accountability.user if accountability else None
    if value == "$CURRENT_ROLE":
        return accountability.role if accountability else None

    try:
        return _loads(value)
    except ValueError:
        return value


def _to_int(name: str, value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidQueryError(f"Invalid {name} value: {value!r}")
