"""
Block model for chronicle.

Blocks are the flat, typed units a markdown tokenizer produces. The
changelog structuring pass groups them under headings; free-text blocks
are kept as-is inside the document tree.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class BlockType(Enum):
    """Types of content blocks produced by the markdown loader."""

    TEXT = "text"
    HEADING = "heading"
    CODE = "code"
    LIST = "list"
    LIST_ITEM = "list_item"
    RULE = "rule"


@dataclass
class Block:
    """
    A semantic unit of a markdown document.

    Headings carry their level, lists carry one LIST_ITEM child per
    depth-1 item. ``content`` is always the raw source text of the block
    (for lists, the items formatted as ``- item`` lines).
    """

    id: str
    type: BlockType
    content: str
    heading_level: int | None = None  # For HEADING blocks: 1-6
    children: list[Block] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def generate_id() -> str:
        return f"block_{uuid.uuid4().hex[:12]}"

    @classmethod
    def heading(cls, content: str, level: int) -> Block:
        return cls(
            id=cls.generate_id(),
            type=BlockType.HEADING,
            content=content,
            heading_level=level,
        )

    @classmethod
    def paragraph(cls, content: str = "") -> Block:
        return cls(id=cls.generate_id(), type=BlockType.TEXT, content=content)

    @classmethod
    def rule(cls) -> Block:
        return cls(id=cls.generate_id(), type=BlockType.RULE, content="---")

    @classmethod
    def bullet_list(cls, items: list[str], ordered: bool = False) -> Block:
        """Build a LIST block with one LIST_ITEM child per item."""
        if ordered:
            content = "\n".join(f"{i+1}. {item}" for i, item in enumerate(items))
        else:
            content = "\n".join(f"- {item}" for item in items)

        return cls(
            id=cls.generate_id(),
            type=BlockType.LIST,
            content=content,
            children=[
                cls(id=cls.generate_id(), type=BlockType.LIST_ITEM, content=item)
                for item in items
            ],
            metadata={"ordered": ordered, "item_count": len(items)},
        )

    @property
    def is_blank(self) -> bool:
        """True for an empty paragraph (a placeholder between versions)."""
        return self.type == BlockType.TEXT and not self.content.strip()

    @property
    def items(self) -> list[str]:
        """Item texts of a LIST block."""
        return [child.content for child in self.children]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "content": self.content,
            "heading_level": self.heading_level,
            "children": [child.to_dict() for child in self.children],
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Block:
        return cls(
            id=data["id"],
            type=BlockType(data["type"]),
            content=data["content"],
            heading_level=data.get("heading_level"),
            children=[cls.from_dict(c) for c in data.get("children", [])],
            metadata=data.get("metadata", {}),
        )
