"""
Union resolver - picks the member type of a many-to-any value at serialization time.

The discriminator lives on the object that holds the polymorphic field,
not on the value itself, so the resolver walks the response path back to
that enclosing object inside the request's ResultScope.

    articles[0].item  ->  results["articles"][0]["collection"] == "videos"
                      ->  member type "videos"
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from graphql import GraphQLAbstractType, GraphQLResolveInfo

logger = logging.getLogger(__name__)


class UnionResolver:
    """resolve_type callable for one many-to-any union."""

    def __init__(self, discriminator: str, members: Iterable[str]):
        self.discriminator = discriminator
        self.members = frozenset(members)

    def resolve_type(
        self,
        value: Any,
        info: GraphQLResolveInfo,
        abstract_type: GraphQLAbstractType,
    ) -> Optional[str]:
        """
        Return the member type name, or None when no member matches.

        A None result makes graphql-core report a field error for this value
        only; sibling fields keep resolving.
        """
        results = getattr(info.context, "results", None)
        if results is None:
            return None

        # Drop the union field's own key: what remains leads to the enclosing object
        path = info.path.as_list()[:-1]
        parent = results.lookup(path)
        if not isinstance(parent, Mapping):
            return None

        type_name = parent.get(self.discriminator)
        if type_name in self.members:
            return type_name

        logger.debug(
            f"Discriminator '{self.discriminator}' value {type_name!r} "
            f"does not name a member of {abstract_type.name}"
        )
        return None
