"""The six Keep a Changelog change categories."""

from __future__ import annotations

from enum import Enum

from chronicle.core.exceptions import InvalidCategoryError


class Category(str, Enum):
    """Type of change grouped under a version.

    Declaration order is the fixed taxonomy order used when a batch of
    changes is flattened; sections inside a version keep insertion order.
    """

    ADDED = "Added"
    CHANGED = "Changed"
    DEPRECATED = "Deprecated"
    REMOVED = "Removed"
    FIXED = "Fixed"
    SECURITY = "Security"

    @property
    def key(self) -> str:
        """Lower-case lookup key ("added")."""
        return self.value.lower()

    @classmethod
    def from_name(cls, name: str | Category) -> Category:
        """Resolve a category name case-insensitively.

        Raises:
            InvalidCategoryError: If the name is not one of the six labels.
        """
        if isinstance(name, cls):
            return name
        if isinstance(name, str):
            wanted = name.strip().lower()
            for category in cls:
                if category.key == wanted:
                    return category
        raise InvalidCategoryError(
            f"Undefined section: {name}",
            details=f"Expected one of: {', '.join(c.value for c in cls)}",
        )

    def __str__(self) -> str:
        return self.value
