"""Core data models and exceptions for chronicle."""

from chronicle.core.document import Block, BlockType
from chronicle.core.exceptions import (
    ChangelogError,
    DuplicateVersionError,
    FormatError,
    InvalidCategoryError,
    InvalidDateError,
    SequenceError,
    TypeMismatchError,
    VersionNotFoundError,
)

__all__ = [
    "Block",
    "BlockType",
    "ChangelogError",
    "DuplicateVersionError",
    "FormatError",
    "InvalidCategoryError",
    "InvalidDateError",
    "SequenceError",
    "TypeMismatchError",
    "VersionNotFoundError",
]
