"""Keep a Changelog document model: versions, sections and changes."""

from chronicle.changelog.builder import ChangelogBuilder, ParsedChangelog, TitleBlock
from chronicle.changelog.change import Change, ChangeSet
from chronicle.changelog.document import Changelog
from chronicle.changelog.section import Section
from chronicle.changelog.semver import VersionId, compare
from chronicle.changelog.taxonomy import Category
from chronicle.changelog.version import VersionBlock

__all__ = [
    "Category",
    "Change",
    "ChangeSet",
    "Changelog",
    "ChangelogBuilder",
    "ParsedChangelog",
    "Section",
    "TitleBlock",
    "VersionBlock",
    "VersionId",
    "compare",
]
