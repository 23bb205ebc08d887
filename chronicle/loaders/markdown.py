"""
Markdown loader backed by markdown-it-py.

Only block-level structure matters to a changelog, so the token stream
is reduced to one Block per top-level construct. Inline markup is kept
as raw source text.
"""

from __future__ import annotations

import logging
from typing import ClassVar

from markdown_it import MarkdownIt
from markdown_it.token import Token

from chronicle.core.document import Block, BlockType
from chronicle.loaders.base import BaseLoader, LoaderRegistry

logger = logging.getLogger(__name__)

_LIST_OPEN = ("bullet_list_open", "ordered_list_open")
_LIST_CLOSE = ("bullet_list_close", "ordered_list_close")


@LoaderRegistry.register
class MarkdownLoader(BaseLoader):
    """
    Reads and writes CommonMark changelogs.

    Produces HEADING (ATX levels 1-6), TEXT (paragraphs, blockquotes and
    raw HTML), LIST (depth-1 items only), CODE and RULE blocks.

    markdown-it reads a line underlined with ``---`` as a level-2 setext
    heading. Changelogs use ATX headings throughout and ``---`` only as a
    separator, so by default such a heading becomes a TEXT block followed
    by a RULE.
    """

    SUPPORTED_EXTENSIONS: ClassVar[list[str]] = [".md", ".markdown", ".mdown"]
    LOADER_NAME: ClassVar[str] = "markdown"

    def __init__(self, split_setext_rules: bool = True) -> None:
        super().__init__()
        self.split_setext_rules = split_setext_rules
        self._md = MarkdownIt("commonmark")

    def parse(self, text: str) -> list[Block]:
        self._clear_warnings()
        tokens = self._md.parse(text)

        blocks: list[Block] = []
        position = 0
        while position < len(tokens):
            produced, consumed = self._consume(tokens, position)
            blocks.extend(produced)
            position += consumed

        logger.debug("%d tokens -> %d blocks", len(tokens), len(blocks))
        return blocks

    def _consume(self, tokens: list[Token], start: int) -> tuple[list[Block], int]:
        """Blocks for the construct opening at ``start`` and how many tokens it spans."""
        token = tokens[start]
        kind = token.type

        if kind == "heading_open":
            return self._heading(token, tokens[start + 1]), 3
        if kind == "paragraph_open":
            content = tokens[start + 1].content
            return ([Block.paragraph(content)] if content.strip() else []), 3
        if kind in ("fence", "code_block"):
            return [self._code(token)], 1
        if kind in _LIST_OPEN:
            items, consumed = self._inline_at_depth_one(tokens, start, _LIST_OPEN, _LIST_CLOSE)
            return [Block.bullet_list(items, ordered=kind == "ordered_list_open")], consumed
        if kind == "blockquote_open":
            lines, consumed = self._inline_at_depth_one(
                tokens, start, ("blockquote_open",), ("blockquote_close",)
            )
            quote = Block.paragraph("\n".join(f"> {line}" for line in lines))
            quote.metadata["is_blockquote"] = True
            return [quote], consumed
        if kind == "hr":
            return [Block.rule()], 1
        if kind == "html_block":
            html = Block.paragraph(token.content.rstrip("\n"))
            html.metadata["is_html"] = True
            return [html], 1

        self._warn(f"ignored {kind} token at line {token.map[0] + 1 if token.map else '?'}")
        return [], 1

    def _heading(self, open_token: Token, inline: Token) -> list[Block]:
        level = int(open_token.tag[1:])
        if self.split_setext_rules and open_token.markup == "-":
            return [Block.paragraph(inline.content), Block.rule()]
        return [Block.heading(inline.content, level)]

    @staticmethod
    def _code(token: Token) -> Block:
        metadata: dict[str, object] = {"fenced": token.type == "fence"}
        if token.type == "fence":
            metadata["fence"] = token.markup
            if token.info.strip():
                metadata["language"] = token.info.strip()
        return Block(
            id=Block.generate_id(),
            type=BlockType.CODE,
            content=token.content,
            metadata=metadata,
        )

    def _inline_at_depth_one(
        self,
        tokens: list[Token],
        start: int,
        opening: tuple[str, ...],
        closing: tuple[str, ...],
    ) -> tuple[list[str], int]:
        """
        Inline texts directly inside the container opening at ``start``.

        Text of nested containers of the same kind is dropped with a
        warning. Returns the texts and the number of tokens up to and
        including the closing token.
        """
        texts: list[str] = []
        depth = 0
        end = start
        for end in range(start, len(tokens)):
            kind = tokens[end].type
            if kind in opening:
                depth += 1
            elif kind in closing:
                depth -= 1
                if depth == 0:
                    break
            elif kind == "inline" and depth == 1:
                texts.append(tokens[end].content)
            elif kind == "inline":
                line = tokens[end].map[0] + 1 if tokens[end].map else "?"
                self._warn(f"dropped nested text at line {line}: {tokens[end].content}")
        return texts, end - start + 1

    def render(self, block: Block, indent: int = 0) -> str:
        """
        Markdown for one block followed by a blank line.

        A blank paragraph renders as the empty string, so placeholder
        paragraphs between versions add no text of their own.
        """
        if block.type == BlockType.TEXT and block.is_blank:
            return ""

        if block.type == BlockType.HEADING:
            text = f"{'#' * (block.heading_level or 1)} {block.content}"
        elif block.type == BlockType.RULE:
            text = "---"
        elif block.type == BlockType.LIST:
            ordered = block.metadata.get("ordered", False)
            text = "\n".join(
                f"{n}. {item}" if ordered else f"- {item}"
                for n, item in enumerate(block.items, start=1)
            )
        elif block.type == BlockType.LIST_ITEM:
            text = f"- {block.content}"
        elif block.type == BlockType.CODE:
            text = self._render_code(block)
        else:
            text = block.content

        pad = "  " * indent
        return "\n".join(pad + line if line else line for line in text.split("\n")) + "\n\n"

    @staticmethod
    def _render_code(block: Block) -> str:
        body = block.content.rstrip("\n")
        if not block.metadata.get("fenced", True):
            return "\n".join("    " + line if line else line for line in body.split("\n"))
        fence = block.metadata.get("fence", "```")
        return f"{fence}{block.metadata.get('language', '')}\n{body}\n{fence}"
