"""
Version identifiers.

A VersionId is a (major, minor, patch) triple with a release date. The
date is metadata only: ordering, equality and hashing use the triple.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from functools import total_ordering
from typing import Any

from chronicle.core.exceptions import FormatError, InvalidDateError

DATE_SEPARATOR = " - "

_NUMBER_RE = re.compile(r"\d+(?:\.\d+){0,2}")
_DATE_RE = re.compile(r"^\s*(\d{4}-\d{2}-\d{2})")


def today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


def to_date(value: date | datetime | str | None) -> date:
    """Normalize a date-like value to a calendar date.

    Datetimes are converted to UTC before the time of day is dropped.
    Strings must start with a ``YYYY-MM-DD`` date; anything after it
    (a time, a "[YANKED]" marker) is ignored.

    Raises:
        InvalidDateError: If the value cannot be read as a date.
    """
    if value is None:
        return today()
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        match = _DATE_RE.match(value)
        if match:
            try:
                return date.fromisoformat(match.group(1))
            except ValueError as e:
                raise InvalidDateError(f"Invalid date: {value}", details=str(e)) from e
        raise InvalidDateError(f"Invalid date: {value}", details="Expected YYYY-MM-DD")
    raise InvalidDateError(f"Invalid date: {value!r}", details=type(value).__name__)


@total_ordering
@dataclass(frozen=True, eq=False)
class VersionId:
    """A semantic version triple with a release date.

    Instances are immutable; use ``with_date`` or ``dataclasses.replace``
    for a changed copy.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    date: date = field(default_factory=today)

    def __post_init__(self) -> None:
        for name in ("major", "minor", "patch"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise FormatError(
                    f"Version component {name} must be a non-negative integer",
                    details=repr(value),
                )
        object.__setattr__(self, "date", to_date(self.date))

    @property
    def ver(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    @classmethod
    def parse(cls, text: str) -> VersionId:
        """
        Parse ``"v1.2.3"``, ``"1.2.3"`` or ``"[1.2.3] - 2024-01-01"``.

        Missing components default to 0 and a missing date defaults to
        today (UTC).

        Raises:
            FormatError: If the version part holds no number
            InvalidDateError: If the date part is not a valid date
        """
        version_part, sep, date_part = str(text).partition(DATE_SEPARATOR)
        match = _NUMBER_RE.search(version_part)
        if not match:
            raise FormatError(f"No version number in: {text}", details=version_part)

        parts = [int(p) for p in match.group(0).split(".")]
        parts += [0] * (3 - len(parts))

        return cls(
            major=parts[0],
            minor=parts[1],
            patch=parts[2],
            date=to_date(date_part) if sep else today(),
        )

    def with_date(self, value: date | datetime | str | None) -> VersionId:
        """A copy of this version with another release date."""
        return replace(self, date=to_date(value))

    @classmethod
    def coerce(cls, value: Any) -> VersionId:
        """Build a VersionId from a VersionId, string or mapping."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, Mapping):
            text = value.get("version") or value.get("content")
            if text:
                parsed = cls.parse(str(text))
                if value.get("date") is not None:
                    parsed = parsed.with_date(value["date"])
                return parsed
            try:
                parts = [int(value.get(name, 0)) for name in ("major", "minor", "patch")]
            except (TypeError, ValueError) as e:
                raise FormatError("Version components must be integers", details=str(e)) from e
            return cls(*parts, date=value.get("date"))
        raise FormatError(f"Cannot read a version from {type(value).__name__}")

    def compare(self, other: Any) -> int:
        """Return -1, 0 or 1 comparing (major, minor, patch) only."""
        other_key = VersionId.coerce(other).key
        if self.key < other_key:
            return -1
        if self.key > other_key:
            return 1
        return 0

    def higher_than(self, other: Any) -> bool:
        return self.compare(other) > 0

    def lower_than(self, other: Any) -> bool:
        return self.compare(other) < 0

    def acceptable_to(self, other: Any) -> bool:
        """True when this version is greater than or equal to ``other``."""
        return not self.lower_than(other)

    def format(self, style: str = "markdown", prefix: str = "v", skip_prefix: bool = False) -> str:
        """
        Format as a heading body or a plain line.

        markdown: ``[1.2.3] - 2024-01-01``
        plain:    ``v1.2.3 - 2024-01-01``
        """
        iso = self.date.isoformat()
        if style == "markdown":
            return f"[{self.ver}]{DATE_SEPARATOR}{iso}"
        if style == "plain":
            return f"{'' if skip_prefix else prefix}{self.ver}{DATE_SEPARATOR}{iso}"
        raise ValueError(f"Unknown version format: {style}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VersionId):
            return NotImplemented
        return self.key == other.key

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VersionId):
            return NotImplemented
        return self.key < other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.ver


def compare(a: Any, b: Any) -> int:
    """Compare two version-like values; -1, 0 or 1."""
    return VersionId.coerce(a).compare(b)
