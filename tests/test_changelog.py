"""Tests for changeset_release.changelog."""

from __future__ import annotations

from changeset_release.changelog import get_changelog_entry


class TestGetChangelogEntry:
    def test_extracts_section_for_version(self, sample_changelog: str) -> None:
        entry = get_changelog_entry(sample_changelog, "1.1.0")

        assert entry.content.startswith("### Minor Changes")
        assert "- abc1234: Add streaming support." in entry.content
        assert "- def5678: Fix a typo in the docs." in entry.content
        # Stops at the next version heading
        assert "First stable release" not in entry.content

    def test_highest_level_is_the_biggest_change(self, sample_changelog: str) -> None:
        assert get_changelog_entry(sample_changelog, "1.1.0").highest_level == 2
        assert get_changelog_entry(sample_changelog, "1.0.0").highest_level == 3

    def test_last_section_runs_to_end_of_file(self, sample_changelog: str) -> None:
        entry = get_changelog_entry(sample_changelog, "1.0.0")
        assert entry.content == "### Major Changes\n\n- 0123456: First stable release."

    def test_unknown_version_is_empty(self, sample_changelog: str) -> None:
        entry = get_changelog_entry(sample_changelog, "9.9.9")
        assert entry.content == ""
        assert entry.highest_level == 0

    def test_heading_with_date_suffix(self) -> None:
        changelog = "# a\n\n## 2.0.0 (2024-05-01)\n\n- Something\n"
        assert get_changelog_entry(changelog, "2.0.0").content == "- Something"

    def test_does_not_match_version_prefix(self) -> None:
        """1.1.0 must not pick up the section for 1.1.0-next.0."""
        changelog = "# a\n\n## 1.1.0-next.0\n\n- Pre\n"
        assert get_changelog_entry(changelog, "1.1.0").content == ""

    def test_ignores_headings_in_code_blocks(self) -> None:
        changelog = (
            "# a\n\n## 1.2.0\n\n### Patch Changes\n\n- Example:\n\n"
            "  ```md\n  ## 1.0.0\n  ```\n\n- Another fix\n\n## 1.1.0\n\n- Old\n"
        )

        entry = get_changelog_entry(changelog, "1.2.0")

        assert "- Another fix" in entry.content
        assert "- Old" not in entry.content
        assert entry.highest_level == 1
