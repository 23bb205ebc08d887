"""Sections: changes grouped under one category heading."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from chronicle.changelog.change import Change, split_entries
from chronicle.changelog.taxonomy import Category
from chronicle.core.exceptions import TypeMismatchError


@dataclass
class Section:
    """
    A ``### Category`` heading with its list of changes.

    Entries keep insertion order and are never deduplicated.
    """

    category: Category
    entries: list[Change] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.category = Category.from_name(self.category)

    @property
    def name(self) -> str:
        return self.category.value

    def add(self, value: Change | str | Mapping[str, Any]) -> Section:
        """Append a change and return the section for chaining."""
        self.entries.append(Change.from_value(value))
        return self

    def extend(self, values: Any) -> Section:
        for change in split_entries(values):
            self.entries.append(change)
        return self

    def render(self) -> list[str]:
        """Markdown lines: heading, blank line, one bullet per entry."""
        return [f"### {self.name}", ""] + [change.render() for change in self.entries]

    def to_text(self, indent: int = 0, unit: str = "  ") -> str:
        """Plain listing: category name, then indented bullets."""
        lines = [f"{unit * indent}{self.name}"]
        lines.extend(f"{unit * (indent + 1)}{change.render()}" for change in self.entries)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.name,
            "entries": [change.text for change in self.entries],
        }

    @classmethod
    def from_batch(cls, category: Category | str, batch: Mapping[str, Any]) -> Section:
        """
        Build a section from ``{"added": [...], "changed": [...], ...}``.

        Every list is appended, in taxonomy order, to this one section.
        """
        section = cls(category=Category.from_name(category))
        for key in Category:
            values = batch.get(key.key)
            if values:
                section.extend(values)
        return section

    @classmethod
    def from_value(cls, value: Section | Category | str) -> Section:
        """
        Return an existing Section unchanged, or an empty Section for a
        category name.

        Raises:
            InvalidCategoryError: If the name is not a known category
            TypeMismatchError: For any other value
        """
        if isinstance(value, Section):
            return value
        if isinstance(value, (Category, str)):
            return cls(category=Category.from_name(value))
        raise TypeMismatchError(
            "Only Section instances can be added",
            details=type(value).__name__,
        )
