"""
Type name registry - every type name generated for one compilation.

Generated names are plain concatenations ("articles_filter",
"articles_id_filter_operators", "article_blocks__item"), so collection and
field names can produce the same name twice or shadow a built-in type.
The compiler claims each name here before creating the type and leaves
out whatever loses.
"""

from __future__ import annotations

from typing import Optional

from graphql import GraphQLBoolean, GraphQLFloat, GraphQLID, GraphQLInt, GraphQLString

from .scalars import GraphQLJSON


BUILTIN_TYPE_NAMES = frozenset(
    [t.name for t in (GraphQLString, GraphQLInt, GraphQLFloat, GraphQLBoolean, GraphQLID, GraphQLJSON)]
    + ["Query"]
)


class TypeNameRegistry:
    """
    Maps claimed type names to a readable owner.

    Usage:
        names = TypeNameRegistry()
        names.claim("articles", "collection 'articles'")   # None: claimed
        names.claim("articles", "union 'a.b'")             # "collection 'articles'"
    """

    def __init__(self, reserved=BUILTIN_TYPE_NAMES):
        self._owners: dict[str, str] = {name: "a built-in type" for name in reserved}

    def __contains__(self, name: str) -> bool:
        return name in self._owners

    def owner(self, name: str) -> Optional[str]:
        return self._owners.get(name)

    def claim(self, name: str, owner: str) -> Optional[str]:
        """Claim a name. Returns the current owner when it is already taken."""
        existing = self._owners.get(name)
        if existing is None:
            self._owners[name] = owner
        return existing

    def copy(self) -> "TypeNameRegistry":
        registry = TypeNameRegistry(reserved=())
        registry._owners = dict(self._owners)
        return registry
