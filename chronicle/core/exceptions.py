"""Exception hierarchy for changelog parsing and mutation."""

from __future__ import annotations

from typing import Any


class ChangelogError(Exception):
    """Base exception for changelog errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class SequenceError(ChangelogError):
    """A category heading appeared before any version heading."""

    def __init__(self, position: int, heading: str):
        self.position = position
        self.heading = heading
        super().__init__(
            f"Parsing error in block #{position}: "
            "section heading before any version heading",
            details=heading,
        )


class FormatError(ChangelogError):
    """A version string cannot be resolved to a numeric triple."""


class InvalidCategoryError(ChangelogError):
    """A category name outside the Keep a Changelog taxonomy."""


class InvalidDateError(ChangelogError):
    """A release date that cannot be parsed."""


class TypeMismatchError(ChangelogError):
    """A value of the wrong kind was passed where a node is required."""


class DuplicateVersionError(ChangelogError):
    """A version that already exists was added again."""


class VersionNotFoundError(ChangelogError):
    """A version that is not in the changelog was requested."""
