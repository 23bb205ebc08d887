"""chronicle: parse, query and edit Keep a Changelog documents."""

from chronicle.changelog import (
    Category,
    Change,
    ChangeSet,
    Changelog,
    Section,
    TitleBlock,
    VersionBlock,
    VersionId,
)
from chronicle.config import ChangelogConfig
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

__version__ = "0.1.0"

__all__ = [
    "Category",
    "Change",
    "ChangeSet",
    "Changelog",
    "ChangelogConfig",
    "ChangelogError",
    "DuplicateVersionError",
    "FormatError",
    "InvalidCategoryError",
    "InvalidDateError",
    "Section",
    "SequenceError",
    "TitleBlock",
    "TypeMismatchError",
    "VersionBlock",
    "VersionId",
    "VersionNotFoundError",
]
