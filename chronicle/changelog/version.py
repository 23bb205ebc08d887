"""
Version blocks.

A VersionBlock is one ``## [x.y.z] - date`` release entry owning its
category sections. A block never holds two sections of one category.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from chronicle.changelog.section import Section
from chronicle.changelog.semver import VersionId
from chronicle.changelog.taxonomy import Category
from chronicle.core.exceptions import TypeMismatchError

logger = logging.getLogger(__name__)


@dataclass
class VersionBlock:
    """A release heading and its sections, in first-seen order."""

    identifier: VersionId
    sections: list[Section] = field(default_factory=list)

    @classmethod
    def create(cls, version: Any, date: date | str | None = None) -> VersionBlock:
        """Create an empty block for a version string, VersionId or mapping."""
        identifier = VersionId.coerce(version)
        if date is not None:
            identifier = identifier.with_date(date)
        return cls(identifier=identifier)

    @classmethod
    def from_heading(cls, content: str) -> VersionBlock:
        """Create a block from heading text such as ``[1.2.3] - 2024-01-01``."""
        return cls(identifier=VersionId.parse(content))

    @property
    def ver(self) -> str:
        return self.identifier.ver

    @property
    def date(self) -> date:
        return self.identifier.date

    @date.setter
    def date(self, value: date | str) -> None:
        self.identifier = self.identifier.with_date(value)

    @property
    def categories(self) -> list[Category]:
        return [section.category for section in self.sections]

    def get_section(self, name: Category | str) -> Section | None:
        """Find a section by category name, case-insensitively."""
        category = Category.from_name(name)
        for section in self.sections:
            if section.category == category:
                return section
        return None

    def get_or_create_section(self, name: Category | str) -> Section:
        """Return the section for a category, appending an empty one if absent."""
        section = self.get_section(name)
        if section is None:
            section = Section(category=Category.from_name(name))
            self.sections.append(section)
        return section

    def add_or_get_section(self, value: Section | Category | str) -> Section:
        """
        Add a section, or return the one already holding its category.

        When a Section arrives whose category is already present, the
        existing section is returned and the incoming entries are NOT
        merged. Use ``merge_section`` to keep them.

        Raises:
            TypeMismatchError: If the value is not a Section or category name
        """
        if isinstance(value, (Category, str)):
            return self.get_or_create_section(value)
        if not isinstance(value, Section):
            raise TypeMismatchError(
                "Only Section instances can be added",
                details=type(value).__name__,
            )

        existing = self.get_section(value.category)
        if existing is not None:
            if existing is not value and value.entries:
                logger.debug(
                    "Section %s already in %s; %d incoming entries discarded",
                    value.name,
                    self.ver,
                    len(value.entries),
                )
            return existing

        self.sections.append(value)
        return value

    add = add_or_get_section

    def merge_section(self, section: Section) -> Section:
        """Add a section, appending its entries to an existing one of the same category."""
        existing = self.get_or_create_section(section.category)
        if existing is not section:
            existing.entries.extend(section.entries)
        return existing

    def render(self) -> list[str]:
        """Markdown lines: the heading, then each section after a blank line."""
        lines = [f"## {self.identifier.format('markdown')}"]
        for section in self.sections:
            lines.append("")
            lines.extend(section.render())
        return lines

    def to_markdown(self) -> str:
        return "\n".join(self.render()) + "\n\n"

    def to_text(
        self,
        indent: int = 0,
        skip_prefix: bool = False,
        prefix: str = "v",
        unit: str = "  ",
    ) -> str:
        """
        Plain listing for console display::

            v1.2.3 - 2025-01-01
              Added
                - New feature
        """
        lines = [
            unit * indent
            + self.identifier.format("plain", prefix=prefix, skip_prefix=skip_prefix)
        ]
        lines.extend(section.to_text(indent + 1, unit=unit) for section in self.sections)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Structured view: version, ISO date and entry texts per category key."""
        return {
            "version": self.ver,
            "date": self.date.isoformat(),
            "changes": {
                section.category.key: [change.text for change in section.entries]
                for section in self.sections
            },
        }

    def __str__(self) -> str:
        return self.to_markdown()
