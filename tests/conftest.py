"""
Pytest configuration and fixtures for chronicle tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from chronicle.changelog.document import Changelog
from chronicle.loaders.markdown import MarkdownLoader

SAMPLE_CHANGELOG = """# Changelog
All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/), and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).
---

## [1.1.1] - 2024-01-03
### Added
- New feature Y

---

## [1.1.0] - 2024-01-02
### Changed
- Improved performance of module X

---

## [1.0.0] - 2024-01-01
### Added
- Initial release
- Core functionality implemented"""

DESCRIPTION = (
    "The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.0.0/), "
    "and this project adheres to "
    "[Semantic Versioning](https://semver.org/spec/v2.0.0.html)."
)

RENDERED_SAMPLE = (
    "# Changelog\n\n"
    "All notable changes to this project will be documented in this file.\n\n"
    f"{DESCRIPTION}\n\n"
    "---\n\n"
    "## [1.1.1] - 2024-01-03\n\n"
    "### Added\n\n"
    "- New feature Y\n\n"
    "---\n\n"
    "## [1.1.0] - 2024-01-02\n\n"
    "### Changed\n\n"
    "- Improved performance of module X\n\n"
    "---\n\n"
    "## [1.0.0] - 2024-01-01\n\n"
    "### Added\n\n"
    "- Initial release\n"
    "- Core functionality implemented\n\n"
)


@pytest.fixture
def sample_text() -> str:
    """The three-version sample changelog."""
    return SAMPLE_CHANGELOG


@pytest.fixture
def changelog(sample_text: str) -> Changelog:
    """A Changelog parsed from the sample text."""
    return Changelog.from_text(sample_text)


@pytest.fixture
def loader() -> MarkdownLoader:
    return MarkdownLoader()


@pytest.fixture
def changelog_file(tmp_path: Path, sample_text: str) -> Path:
    """The sample changelog written to a temporary CHANGELOG.md."""
    path = tmp_path / "CHANGELOG.md"
    path.write_text(sample_text, encoding="utf-8")
    return path


@pytest.fixture
def rendered_sample() -> str:
    """The sample changelog as ``Changelog.render()`` writes it."""
    return RENDERED_SAMPLE
