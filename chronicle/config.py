"""Configuration for changelog documents."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_TITLE = "Changelog"

DEFAULT_DESCRIPTION = (
    "All notable changes to this project will be documented in this file.",
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/), "
    "and this project adheres to "
    "[Semantic Versioning](https://semver.org/spec/v2.0.0.html).",
)


@dataclass
class ChangelogConfig:
    """Settings for new documents and plain-text rendering.

    Attributes:
        title: Heading written by ``Changelog.init()``.
        description: Paragraphs written under the title by ``init()``.
        version_prefix: Prefix for plain-text version lines ("v1.2.3").
        text_indent: Indent unit for plain-text listings.
    """

    title: str = DEFAULT_TITLE
    description: tuple[str, ...] = field(default=DEFAULT_DESCRIPTION)
    version_prefix: str = "v"
    text_indent: str = "  "
