"""
Changelog structuring pass.

Builds the Title / VersionBlock / Section tree from the flat block list
produced by a loader.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from chronicle.changelog.change import Change
from chronicle.changelog.section import Section
from chronicle.changelog.version import VersionBlock
from chronicle.core.document import Block, BlockType
from chronicle.core.exceptions import SequenceError

logger = logging.getLogger(__name__)

TITLE_LEVEL = 1
VERSION_LEVEL = 2
SECTION_LEVEL = 3

OrphanHook = Callable[[VersionBlock, Block], None]


@dataclass
class TitleBlock:
    """The H1 heading of a changelog and the free text that follows it."""

    heading: str | None = None
    content: list[Block] = field(default_factory=list)

    def add_content(self, block: Block) -> None:
        self.content.append(block)

    @property
    def content_text(self) -> str:
        """Combined text of the content blocks."""
        return "\n\n".join(block.content for block in self.content if not block.is_blank)

    @property
    def is_empty(self) -> bool:
        return self.heading is None and not self.content


@dataclass
class ParsedChangelog:
    """Result of a structuring pass."""

    title: TitleBlock
    versions: dict[str, VersionBlock]


@dataclass
class _ParseState:
    """Fold state carried through one pass."""

    title: TitleBlock = field(default_factory=TitleBlock)
    versions: dict[str, VersionBlock] = field(default_factory=dict)
    version: VersionBlock | None = None
    section: Section | None = None


class ChangelogBuilder:
    """
    Builds changelog trees from blocks.

    Strategy, one block at a time:
    1. H1 replaces the title
    2. H2 opens a new version and closes any open section
    3. H3 opens a section in the current version (SequenceError without one)
    4. Anything else goes to the open section, to the title before the
       first version, or to the orphan hook (dropped by default)

    Horizontal rules are separators and are always dropped; the document
    synthesizes them when rendering.
    """

    @staticmethod
    def build_from_blocks(
        blocks: list[Block],
        on_orphan: OrphanHook | None = None,
    ) -> ParsedChangelog:
        """Build the title and version index from a list of blocks.

        Args:
            blocks: Blocks from a loader, in document order.
            on_orphan: Called with (version, block) for free text directly
                under a version heading with no open section.

        Returns:
            ParsedChangelog with the title and versions in first-seen order.

        Raises:
            SequenceError: If a section heading precedes every version heading.
            FormatError: If a version heading holds no version number.
            InvalidDateError: If a version heading holds an invalid date.
            InvalidCategoryError: If a section heading is not a known category.
        """
        state = _ParseState()
        for position, block in enumerate(blocks, start=1):
            state = ChangelogBuilder._step(state, position, block, on_orphan)

        logger.debug(
            "Structured %d blocks into %d versions", len(blocks), len(state.versions)
        )
        return ParsedChangelog(title=state.title, versions=state.versions)

    @staticmethod
    def _step(
        state: _ParseState,
        position: int,
        block: Block,
        on_orphan: OrphanHook | None,
    ) -> _ParseState:
        level = block.heading_level if block.type == BlockType.HEADING else None

        if level == TITLE_LEVEL:
            state.title = TitleBlock(heading=block.content)

        elif level == VERSION_LEVEL:
            version = VersionBlock.from_heading(block.content)
            if version.ver in state.versions:
                logger.warning("Version %s appears more than once; keeping the last", version.ver)
            state.versions[version.ver] = version
            state.version = version
            state.section = None

        elif level == SECTION_LEVEL:
            if state.version is None:
                raise SequenceError(position, block.content)
            section = Section.from_value(block.content.strip())
            state.section = state.version.add_or_get_section(section)

        elif block.type == BlockType.RULE:
            pass

        elif state.section is not None:
            for change in ChangelogBuilder._changes_from_block(block):
                state.section.add(change)

        elif state.version is None:
            state.title.add_content(block)

        else:
            logger.debug("Dropped %s block under version %s", block.type.value, state.version.ver)
            if on_orphan is not None:
                on_orphan(state.version, block)

        return state

    @staticmethod
    def _changes_from_block(block: Block) -> list[Change]:
        """List items become one change each; other blocks one per non-empty line."""
        if block.type == BlockType.LIST:
            return [Change(text=item) for item in block.items]
        return [
            Change.from_text(line.strip())
            for line in block.content.splitlines()
            if line.strip()
        ]
