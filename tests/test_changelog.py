"""Tests for the Changelog document: parsing, queries, mutation and rendering."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest

from chronicle.changelog.change import Change, ChangeSet
from chronicle.changelog.document import Changelog
from chronicle.changelog.semver import VersionId
from chronicle.changelog.taxonomy import Category
from chronicle.changelog.version import VersionBlock
from chronicle.config import ChangelogConfig
from chronicle.core.document import Block, BlockType
from chronicle.core.exceptions import (
    DuplicateVersionError,
    FormatError,
    SequenceError,
    VersionNotFoundError,
)
from chronicle.loaders.base import LoaderError

NEW_VERSION = "## [1.2.0] - 2025-01-01\n\n"
MIDDLE_VERSION = (
    "---\n\n"
    "## [1.1.0] - 2024-01-02\n\n"
    "### Changed\n\n"
    "- Improved performance of module X\n\n"
)


def _node_kinds(changelog: Changelog) -> list[str]:
    """Short names for the top-level nodes, for layout assertions."""
    kinds = []
    for node in changelog.blocks:
        if isinstance(node, VersionBlock):
            kinds.append(node.ver)
        elif isinstance(node, Block) and node.type == BlockType.RULE:
            kinds.append("rule")
        elif isinstance(node, Block) and node.is_blank:
            kinds.append("blank")
        else:
            kinds.append(type(node).__name__)
    return kinds


# ===================================================================
# Parsing
# ===================================================================


class TestChangelogParse:
    """Tests for parsing the sample changelog."""

    def test_versions_in_file_order(self, changelog):
        assert changelog.get_versions() == ["1.1.1", "1.1.0", "1.0.0"]

    def test_recent_and_latest(self, changelog):
        assert changelog.get_recent_version().ver == "1.1.1"
        assert changelog.get_latest_version().ver == "1.0.0"
        assert changelog.newest_in_file().ver == "1.1.1"
        assert changelog.oldest_in_file().ver == "1.0.0"

    def test_highest_version(self, changelog):
        changelog.add_version("0.9.0", date="2025-01-01")
        assert changelog.get_recent_version().ver == "0.9.0"
        assert changelog.highest_version().ver == "1.1.1"

    def test_rendered_rows(self, changelog):
        rows = changelog.render().split("\n")
        for expected in [
            "# Changelog",
            "All notable changes to this project will be documented in this file.",
            "## [1.1.1] - 2024-01-03",
            "### Added",
            "## [1.1.0] - 2024-01-02",
            "### Changed",
            "- Improved performance of module X",
            "## [1.0.0] - 2024-01-01",
            "- Initial release",
            "- Core functionality implemented",
        ]:
            assert expected in rows

    def test_block_layout(self, changelog):
        assert _node_kinds(changelog) == [
            "TitleBlock",
            "rule", "blank", "1.1.1",
            "rule", "blank", "1.1.0",
            "rule", "blank", "1.0.0",
        ]

    def test_index_matches_blocks(self, changelog):
        in_blocks = [n for n in changelog.blocks if isinstance(n, VersionBlock)]
        assert list(changelog.versions.values()) == in_blocks

    def test_failed_parse_leaves_document(self, changelog, rendered_sample):
        with pytest.raises(SequenceError):
            changelog.parse("# Other\n\n### Added\n\n- x\n")
        assert changelog.get_versions() == ["1.1.1", "1.1.0", "1.0.0"]
        assert changelog.render() == rendered_sample

    def test_orphan_hook(self):
        dropped = []
        changelog = Changelog.from_text(
            "## [1.0.0] - 2024-01-01\n\nNotes without a section.\n",
            on_orphan=lambda version, block: dropped.append(block.content),
        )
        assert dropped == ["Notes without a section."]
        assert changelog.get("1.0.0")["changes"] == {}


# ===================================================================
# Queries
# ===================================================================


class TestChangelogQueries:
    """Tests for version lookup."""

    def test_get(self, changelog):
        assert changelog.get("1.1.0") == {
            "version": "1.1.0",
            "date": "2024-01-02",
            "changes": {"changed": ["Improved performance of module X"]},
        }

    def test_get_missing(self, changelog):
        assert changelog.get("9.9.9") is None

    def test_get_version_accepts_prefix(self, changelog):
        assert changelog.get_version("v1.1.0") is changelog.versions["1.1.0"]

    def test_require_version_missing(self, changelog):
        with pytest.raises(VersionNotFoundError):
            changelog.require_version("2.0.0")

    def test_empty_document(self):
        changelog = Changelog()
        assert changelog.get_versions() == []
        assert changelog.get_latest_version() is None
        assert changelog.get_recent_version() is None
        assert changelog.highest_version() is None
        assert changelog.render() == ""


# ===================================================================
# Mutation
# ===================================================================


class TestAddVersion:
    """Tests for Changelog.add_version."""

    def test_inserted_on_top(self, changelog, rendered_sample):
        block = changelog.add_version("1.2.0", date="2025-01-01")

        assert block.date == date(2025, 1, 1)
        assert changelog.get_versions()[0] == "1.2.0"
        assert changelog.versions["1.2.0"] is block
        assert changelog.render() == rendered_sample.replace(
            "---\n\n## [1.1.1]", "---\n\n" + NEW_VERSION + "---\n\n## [1.1.1]"
        )

    def test_inserted_on_top_regardless_of_rank(self, changelog):
        changelog.add_version("0.1.0")
        assert changelog.get_versions() == ["0.1.0", "1.1.1", "1.1.0", "1.0.0"]

    def test_duplicate_rejected(self, changelog):
        with pytest.raises(DuplicateVersionError):
            changelog.add_version("v1.1.0")

    def test_invalid_version(self, changelog):
        with pytest.raises(FormatError):
            changelog.add_version("next")

    def test_after_init_reuses_rule(self):
        changelog = Changelog()
        changelog.init()
        changelog.add_version("1.0.0", date="2025-01-01")
        assert _node_kinds(changelog) == ["TitleBlock", "rule", "blank", "1.0.0"]

    def test_on_empty_document(self):
        changelog = Changelog()
        changelog.add_version("1.0.0", date="2025-01-01")
        assert changelog.render() == "---\n\n## [1.0.0] - 2025-01-01\n\n"

    def test_caller_version_id_left_untouched(self, changelog):
        identifier = VersionId.parse("2.0.0 - 2024-01-01")

        block = changelog.add_version(identifier, date="2025-01-01")

        assert block.date == date(2025, 1, 1)
        assert identifier.date == date(2024, 1, 1)

        changelog.add_version(replace(identifier, patch=1))

        assert changelog.get_versions()[:2] == ["2.0.1", "2.0.0"]
        assert changelog.versions["2.0.0"] is block
        assert all(key == node.ver for key, node in changelog.versions.items())
        with pytest.raises(DuplicateVersionError):
            changelog.add_version(identifier)


class TestRemoveVersion:
    """Tests for Changelog.remove_version."""

    def test_remove_middle(self, changelog, rendered_sample):
        removed = changelog.remove_version("1.1.0")
        assert removed.ver == "1.1.0"
        assert "1.1.0" not in changelog.versions
        assert changelog.render() == rendered_sample.replace(MIDDLE_VERSION, "")

    def test_remove_first(self, changelog):
        changelog.remove_version("1.1.1")
        assert _node_kinds(changelog) == [
            "TitleBlock", "rule", "blank", "1.1.0", "rule", "blank", "1.0.0",
        ]

    def test_remove_missing(self, changelog):
        with pytest.raises(VersionNotFoundError):
            changelog.remove_version("3.0.0")


class TestAddChange:
    """Tests for Changelog.add_change and add_entry."""

    def test_creates_missing_version(self, changelog):
        block = changelog.add_change(
            {
                "version": "1.2.0",
                "date": "2025-01-01",
                "fixed": ["Bug"],
                "added": ["Feature A", "Feature B"],
            }
        )

        assert changelog.get_versions() == ["1.2.0", "1.1.1", "1.1.0", "1.0.0"]
        assert block.categories == [Category.ADDED, Category.FIXED]
        assert block.to_dict()["changes"] == {
            "added": ["Feature A", "Feature B"],
            "fixed": ["Bug"],
        }
        assert (
            "## [1.2.0] - 2025-01-01\n\n"
            "### Added\n\n"
            "- Feature A\n"
            "- Feature B\n\n"
            "### Fixed\n\n"
            "- Bug\n\n"
            "---\n\n"
            "## [1.1.1]"
        ) in changelog.render()

    def test_reuses_existing_version(self, changelog):
        change_set = ChangeSet(version="1.1.0").add("changed", "- Faster startup").add(
            "security", ["Patched CVE"]
        )
        block = changelog.add_change(change_set)

        assert block is changelog.versions["1.1.0"]
        assert len(changelog.versions) == 3
        assert block.to_dict()["changes"] == {
            "changed": ["Improved performance of module X", "Faster startup"],
            "security": ["Patched CVE"],
        }

    def test_multiline_string_entries(self, changelog):
        block = changelog.add_change({"version": "1.3.0", "added": "- One\n- Two"})
        assert [c.text for c in block.get_section("Added").entries] == ["One", "Two"]

    def test_add_entry_routes_by_target(self, changelog):
        change = Change.from_value({"text": "Routed fix", "version": "1.1.0"})
        block = changelog.add_entry(change, "Fixed")
        assert block is changelog.versions["1.1.0"]
        assert block.to_dict()["changes"]["fixed"] == ["Routed fix"]

    def test_add_entry_creates_version(self, changelog):
        change = Change.from_value({"text": "Early", "version": "2.0.0", "date": "2025-06-01"})
        block = changelog.add_entry(change, Category.ADDED)
        assert changelog.get_versions()[0] == "2.0.0"
        assert block.date == date(2025, 6, 1)

    def test_add_entry_without_target(self, changelog):
        with pytest.raises(FormatError):
            changelog.add_entry("- No target", "Added")


class TestInit:
    """Tests for Changelog.init."""

    def test_init_empty(self, rendered_sample):
        changelog = Changelog()
        changelog.init()
        assert changelog.render() == rendered_sample.split("## [1.1.1]")[0]

    def test_init_is_noop_with_content(self, changelog, rendered_sample):
        changelog.init()
        assert changelog.render() == rendered_sample

    def test_init_uses_config(self):
        changelog = Changelog(config=ChangelogConfig(title="History", description=("Notes.",)))
        changelog.init()
        assert changelog.render() == "# History\n\nNotes.\n\n---\n\n"

    def test_init_after_empty_parse(self, rendered_sample):
        changelog = Changelog.from_text("")
        assert changelog.blocks == []

        changelog.init()

        assert changelog.render() == rendered_sample.split("## [1.1.1]")[0]
        assert _node_kinds(changelog) == ["TitleBlock", "rule"]

    def test_init_after_whitespace_parse(self):
        changelog = Changelog.from_text("\n\n  \n")
        changelog.init()
        assert changelog.render().startswith("# Changelog\n\n")

    def test_versions_without_title_keep_layout(self):
        changelog = Changelog.from_text("## [1.0.0] - 2024-01-01\n\n### Added\n\n- x\n")
        changelog.init()
        assert _node_kinds(changelog) == ["rule", "blank", "1.0.0"]
        assert changelog.render() == "---\n\n## [1.0.0] - 2024-01-01\n\n### Added\n\n- x\n\n"


# ===================================================================
# Rendering and round trips
# ===================================================================


class TestChangelogRender:
    """Tests for render, to_text and to_dict."""

    def test_render_sample(self, changelog, rendered_sample):
        assert changelog.render() == rendered_sample
        assert str(changelog) == rendered_sample

    def test_round_trip_is_stable(self, changelog):
        first = changelog.render()
        reparsed = Changelog.from_text(first)
        assert reparsed.render() == first
        assert reparsed.get_versions() == changelog.get_versions()
        for ver in changelog.get_versions():
            assert reparsed.get(ver) == changelog.get(ver)

    def test_round_trip_after_mutation(self, changelog):
        changelog.add_change({"version": "1.2.0", "date": "2025-01-01", "removed": ["Old flag"]})
        changelog.remove_version("1.1.0")
        rendered = changelog.render()
        reparsed = Changelog.from_text(rendered)
        assert reparsed.render() == rendered
        assert reparsed.get_versions() == ["1.2.0", "1.1.1", "1.0.0"]

    def test_to_text(self, changelog):
        assert changelog.to_text().startswith(
            "v1.1.1 - 2024-01-03\n  Added\n    - New feature Y\n\nv1.1.0 - 2024-01-02"
        )

    def test_to_text_uses_config(self, sample_text):
        changelog = Changelog.from_text(
            sample_text, config=ChangelogConfig(version_prefix="", text_indent="\t")
        )
        assert changelog.to_text().startswith("1.1.1 - 2024-01-03\n\tAdded\n\t\t- New feature Y")

    def test_to_dict(self, changelog):
        data = changelog.to_dict()
        assert data["title"] == "Changelog"
        assert data["description"].startswith("All notable changes")
        assert [v["version"] for v in data["versions"]] == ["1.1.1", "1.1.0", "1.0.0"]

    def test_repr(self, changelog):
        assert repr(changelog) == "<Changelog versions=3 blocks=10>"


class TestChangelogFiles:
    """Tests for load and save."""

    def test_load_and_save(self, changelog_file, rendered_sample, tmp_path):
        changelog = Changelog.load(changelog_file)
        assert changelog.get_versions() == ["1.1.1", "1.1.0", "1.0.0"]

        out = tmp_path / "OUT.md"
        changelog.save(out)
        assert out.read_text(encoding="utf-8") == rendered_sample

    def test_load_missing(self, tmp_path):
        with pytest.raises(LoaderError):
            Changelog.load(tmp_path / "CHANGELOG.md")

    def test_load_unsupported(self, tmp_path):
        with pytest.raises(LoaderError):
            Changelog.load(Path(tmp_path / "CHANGELOG.txt"))
