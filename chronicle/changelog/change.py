"""
Change entries.

A Change is one bullet of a section. A ChangeSet groups changes by
category for one target version and is what ``Changelog.add_change``
routes into the document.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from chronicle.changelog.semver import VersionId, to_date
from chronicle.changelog.taxonomy import Category
from chronicle.core.exceptions import TypeMismatchError

_BULLET_RE = re.compile(r"^-\s+")


@dataclass(frozen=True)
class Change:
    """A single change line.

    ``target_version`` and ``target_date`` are only used to route the
    change to a version; they are never rendered.
    """

    text: str
    target_version: VersionId | None = None
    target_date: date | None = None

    @classmethod
    def from_text(cls, line: str, **targets: Any) -> Change:
        """Create a Change from a markdown list line, dropping one ``- `` marker."""
        return cls(text=_BULLET_RE.sub("", line, count=1), **targets)

    @classmethod
    def from_value(cls, value: Change | str | Mapping[str, Any]) -> Change:
        """
        Normalize a value into a Change.

        Changes pass through unchanged, strings go through ``from_text``
        and mappings need a ``text`` or ``content`` key, with optional
        ``version`` and ``date`` targets.

        Raises:
            TypeMismatchError: For any other value
        """
        if isinstance(value, Change):
            return value
        if isinstance(value, str):
            return cls.from_text(value)
        if isinstance(value, Mapping):
            text = value.get("text", value.get("content"))
            if text is None:
                raise TypeMismatchError("Change mapping needs a 'text' or 'content' key")
            version = value.get("version")
            return cls(
                text=str(text),
                target_version=VersionId.coerce(version) if version is not None else None,
                target_date=to_date(value["date"]) if value.get("date") else None,
            )
        raise TypeMismatchError(
            f"Cannot create a Change from {type(value).__name__}"
        )

    def render(self) -> str:
        return f"- {self.text}"

    def __str__(self) -> str:
        return self.render()


def split_entries(value: str | Change | Mapping[str, Any] | Iterable[Any]) -> list[Change]:
    """Expand a batch value into Changes.

    A string holds one change per non-empty line; an iterable holds one
    change-like value per item.
    """
    if isinstance(value, str):
        return [Change.from_text(line.strip()) for line in value.splitlines() if line.strip()]
    if isinstance(value, (Change, Mapping)):
        return [Change.from_value(value)]
    if not isinstance(value, Iterable):
        raise TypeMismatchError(f"Cannot read changes from {type(value).__name__}")
    return [Change.from_value(item) for item in value]


@dataclass
class ChangeSet:
    """Changes for one version, grouped by category."""

    version: str
    date: date | None = None
    entries: dict[Category, list[Change]] = field(default_factory=dict)

    def add(self, category: Category | str, value: Any) -> ChangeSet:
        """Append one or more change-like values under a category."""
        key = Category.from_name(category)
        self.entries.setdefault(key, []).extend(split_entries(value))
        return self

    def categories(self) -> Iterator[tuple[Category, list[Change]]]:
        """Yield non-empty categories in taxonomy order."""
        for category in Category:
            changes = self.entries.get(category)
            if changes:
                yield category, changes

    @property
    def target(self) -> VersionId:
        target = VersionId.parse(self.version)
        if self.date is not None:
            target = target.with_date(self.date)
        return target

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ChangeSet:
        """
        Build a ChangeSet from ``{"version", "date", "added", "fixed", ...}``.

        A version may also be given as ``major``/``minor``/``patch`` keys.
        """
        if data.get("version"):
            version = str(data["version"])
        else:
            version = VersionId.coerce(
                {k: data.get(k, 0) for k in ("major", "minor", "patch")}
            ).ver

        change_set = cls(
            version=version,
            date=to_date(data["date"]) if data.get("date") else None,
        )
        for category in Category:
            value = data.get(category.key)
            if value:
                change_set.add(category, value)
        return change_set
