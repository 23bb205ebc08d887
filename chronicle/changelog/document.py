"""
The changelog document.

A Changelog owns an ordered list of top-level nodes (the title, free-text
separator blocks and VersionBlocks) plus an index from version string to
VersionBlock. Every operation that inserts or removes a VersionBlock
updates both in the same call.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any, Union

from chronicle.changelog.builder import ChangelogBuilder, OrphanHook, TitleBlock
from chronicle.changelog.change import Change, ChangeSet
from chronicle.changelog.semver import VersionId
from chronicle.changelog.taxonomy import Category
from chronicle.changelog.version import VersionBlock
from chronicle.config import ChangelogConfig
from chronicle.core.document import Block, BlockType
from chronicle.core.exceptions import (
    DuplicateVersionError,
    FormatError,
    VersionNotFoundError,
)
from chronicle.loaders.base import BaseLoader, LoaderRegistry
from chronicle.loaders.markdown import MarkdownLoader

logger = logging.getLogger(__name__)

Node = Union[TitleBlock, Block, VersionBlock]


class Changelog:
    """
    A Keep a Changelog document as a mutable tree.

    Versions are kept in file order, which by convention is newest first.
    Nothing here sorts versions: ``add_version`` always inserts above the
    existing ones.
    """

    def __init__(
        self,
        config: ChangelogConfig | None = None,
        loader: BaseLoader | None = None,
    ) -> None:
        self.config = config or ChangelogConfig()
        self.loader = loader or MarkdownLoader()
        self.title = TitleBlock()
        self.blocks: list[Node] = []
        self.versions: dict[str, VersionBlock] = {}

    # -----------------------------------------------------------------
    # Parsing and I/O
    # -----------------------------------------------------------------

    def parse(self, text: str, on_orphan: OrphanHook | None = None) -> list[Node]:
        """
        Parse changelog text, replacing the current content.

        The document is only replaced once the whole text has been
        structured; a failing parse leaves it untouched.
        Text with no title, description or versions leaves the
        document empty, so ``init`` can still seed it.

        Returns:
            The rebuilt top-level nodes.
        """
        parsed = ChangelogBuilder.build_from_blocks(self.loader.parse(text), on_orphan)

        blocks: list[Node] = [] if parsed.title.is_empty else [parsed.title]
        for version in parsed.versions.values():
            blocks.extend([Block.rule(), Block.paragraph(), version])

        self.title = parsed.title
        self.versions = parsed.versions
        self.blocks = blocks
        logger.debug("Parsed changelog with versions: %s", ", ".join(self.versions))
        return self.blocks

    @classmethod
    def from_text(cls, text: str, config: ChangelogConfig | None = None, **kwargs: Any) -> Changelog:
        changelog = cls(config=config)
        changelog.parse(text, **kwargs)
        return changelog

    @classmethod
    def load(cls, path: Path, config: ChangelogConfig | None = None) -> Changelog:
        """
        Load a changelog file.

        Raises:
            LoaderError: If the file is missing, unsupported or unreadable
        """
        loader = LoaderRegistry.require_loader(path)
        changelog = cls(config=config, loader=loader)
        changelog.parse(loader.read_text(path))
        logger.info("Loaded %s (%d versions)", path, len(changelog.versions))
        return changelog

    def save(self, path: Path) -> None:
        path.write_text(self.render(), encoding="utf-8")
        logger.info("Wrote %s", path)

    def init(self) -> None:
        """Seed an empty document with the standard title and description."""
        if self.blocks:
            return
        self.title = TitleBlock(
            heading=self.config.title,
            content=[Block.paragraph(text) for text in self.config.description],
        )
        self.blocks = [self.title, Block.rule()]

    # -----------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------

    def _version_blocks(self) -> list[VersionBlock]:
        return [node for node in self.blocks if isinstance(node, VersionBlock)]

    @staticmethod
    def _key(version: str | VersionId | VersionBlock) -> str:
        if isinstance(version, (VersionId, VersionBlock)):
            return version.ver
        return str(version).strip().removeprefix("v")

    def get_versions(self) -> list[str]:
        """Version strings in document order."""
        return [block.ver for block in self._version_blocks()]

    def get_version(self, version: str | VersionId) -> VersionBlock | None:
        return self.versions.get(self._key(version))

    def require_version(self, version: str | VersionId) -> VersionBlock:
        """
        Raises:
            VersionNotFoundError: If the version is not in the document
        """
        block = self.get_version(version)
        if block is None:
            raise VersionNotFoundError(f"Version not found: {version}")
        return block

    def get(self, version: str | VersionId) -> dict[str, Any] | None:
        """Structured view of one version, or None."""
        block = self.get_version(version)
        return block.to_dict() if block else None

    def get_latest_version(self) -> VersionBlock | None:
        """The LAST version in the file (by convention the oldest release)."""
        blocks = self._version_blocks()
        return blocks[-1] if blocks else None

    def get_recent_version(self) -> VersionBlock | None:
        """The FIRST version in the file (by convention the newest release)."""
        blocks = self._version_blocks()
        return blocks[0] if blocks else None

    oldest_in_file = get_latest_version
    newest_in_file = get_recent_version

    def highest_version(self) -> VersionBlock | None:
        """The numerically highest version, wherever it sits in the file."""
        blocks = self._version_blocks()
        return max(blocks, key=lambda block: block.identifier) if blocks else None

    # -----------------------------------------------------------------
    # Mutations
    # -----------------------------------------------------------------

    def _separator_start(self, index: int) -> int:
        """Index where the rule + blank pair in front of ``index`` begins."""
        start = index
        previous = self.blocks[start - 1] if start > 0 else None
        if isinstance(previous, Block) and previous.is_blank:
            start -= 1
            previous = self.blocks[start - 1] if start > 0 else None
        if isinstance(previous, Block) and previous.type == BlockType.RULE:
            start -= 1
        return start

    def add_version(
        self, version: str | VersionId, date: date | str | None = None
    ) -> VersionBlock:
        """
        Insert a new version above all existing versions.

        The block is preceded by a rule and a blank paragraph. Without
        existing versions it is appended, reusing a trailing rule.

        Raises:
            DuplicateVersionError: If the version already exists
        """
        block = VersionBlock.create(version, date)
        if block.ver in self.versions:
            raise DuplicateVersionError(f"Version already exists: {block.ver}")

        first = next(
            (i for i, node in enumerate(self.blocks) if isinstance(node, VersionBlock)),
            None,
        )
        if first is None:
            trailing_rule = (
                bool(self.blocks)
                and isinstance(self.blocks[-1], Block)
                and self.blocks[-1].type == BlockType.RULE
            )
            separator = [] if trailing_rule else [Block.rule()]
            self.blocks.extend(separator + [Block.paragraph(), block])
        else:
            at = self._separator_start(first)
            self.blocks[at:at] = [Block.rule(), Block.paragraph(), block]

        self.versions[block.ver] = block
        logger.info("Added version %s", block.ver)
        return block

    def remove_version(self, version: str | VersionId) -> VersionBlock:
        """
        Remove a version and the separator in front of it.

        Raises:
            VersionNotFoundError: If the version is not in the document
        """
        block = self.require_version(version)
        index = next(i for i, node in enumerate(self.blocks) if node is block)
        start = self._separator_start(index)
        del self.blocks[start:index + 1]
        del self.versions[block.ver]
        logger.info("Removed version %s", block.ver)
        return block

    def add_change(self, change: ChangeSet | Mapping[str, Any]) -> VersionBlock:
        """
        Route a change set to its version, creating the version on top if needed.

        Categories are applied in taxonomy order. The call is not atomic:
        an invalid entry can leave earlier categories applied.
        """
        change_set = change if isinstance(change, ChangeSet) else ChangeSet.from_dict(change)
        target = change_set.target
        block = self.versions.get(target.ver)
        if block is None:
            block = self.add_version(target, date=change_set.date)

        for category, changes in change_set.categories():
            section = block.get_or_create_section(category)
            for entry in changes:
                section.add(entry)

        logger.info("Added changes to %s", block.ver)
        return block

    def add_entry(self, change: Change | str | Mapping[str, Any], category: Category | str) -> VersionBlock:
        """
        Route a single change to the version it targets.

        Raises:
            FormatError: If the change has no target version
        """
        entry = Change.from_value(change)
        if entry.target_version is None:
            raise FormatError(f"Change has no target version: {entry.text}")

        block = self.versions.get(entry.target_version.ver)
        if block is None:
            block = self.add_version(
                entry.target_version.ver,
                date=entry.target_date or entry.target_version.date,
            )
        block.get_or_create_section(category).add(entry)
        return block

    # -----------------------------------------------------------------
    # Rendering
    # -----------------------------------------------------------------

    def _render_node(self, node: Node) -> str:
        if isinstance(node, VersionBlock):
            return node.to_markdown()
        if isinstance(node, TitleBlock):
            heading = f"# {node.heading}\n\n" if node.heading is not None else ""
            return heading + "".join(self.loader.render(block) for block in node.content)
        return self.loader.render(node)

    def render(self) -> str:
        """Markdown for the whole document, node by node."""
        return "".join(self._render_node(node) for node in self.blocks)

    def to_text(self) -> str:
        """Plain listing of every version for console display."""
        return "\n\n".join(
            block.to_text(prefix=self.config.version_prefix, unit=self.config.text_indent)
            for block in self._version_blocks()
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title.heading,
            "description": self.title.content_text,
            "versions": [block.to_dict() for block in self._version_blocks()],
        }

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"<Changelog versions={len(self.versions)} blocks={len(self.blocks)}>"
