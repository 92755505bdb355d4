"""Tests for the flat YAML reader."""

import pytest

from agent_os_cli.profiles.yaml_mini import get_yaml_array
from agent_os_cli.profiles.yaml_mini import get_yaml_value


@pytest.fixture
def write_yaml(tmp_path):
    def _write(text: str):
        path = tmp_path / "config.yml"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


class TestGetYamlValue:
    def test_plain_value_with_trailing_comment(self, write_yaml):
        path = write_yaml("inherits_from: default   # the parent\n")
        assert get_yaml_value(path, "inherits_from") == "default"

    def test_quoted_value_keeps_hash(self, write_yaml):
        path = write_yaml('name: "hello # not a comment"  # a comment\n')
        assert get_yaml_value(path, "name") == "hello # not a comment"

    def test_single_quotes_are_stripped(self, write_yaml):
        path = write_yaml("profile: 'rails'\n")
        assert get_yaml_value(path, "profile") == "rails"

    def test_flexible_spacing_and_tabs(self, write_yaml):
        path = write_yaml("version   :\t2.1.0\n")
        assert get_yaml_value(path, "version") == "2.1.0"

    def test_missing_key_returns_default(self, write_yaml):
        path = write_yaml("profile: rails\n")
        assert get_yaml_value(path, "version", "1.0.0") == "1.0.0"

    def test_missing_file_returns_default(self, tmp_path):
        assert get_yaml_value(tmp_path / "nope.yml", "profile", "default") == "default"

    def test_empty_value_returns_default(self, write_yaml):
        path = write_yaml("inherits_from:\n")
        assert get_yaml_value(path, "inherits_from", "fallback") == "fallback"

    def test_only_top_level_keys_match(self, write_yaml):
        path = write_yaml("outer:\n  profile: nested\n")
        assert get_yaml_value(path, "profile", "none") == "none"

    def test_key_prefix_does_not_match(self, write_yaml):
        path = write_yaml("profile_name: rails\n")
        assert get_yaml_value(path, "profile", "none") == "none"


class TestGetYamlArray:
    def test_collects_items_until_next_key(self, write_yaml):
        path = write_yaml(
            "exclude_inherited_files:\n"
            "  - standards/backend/*\n"
            "  - 'workflows/planning/*.md'   # quoted\n"
            "other: value\n"
            "  - not/this.md\n"
        )
        assert get_yaml_array(path, "exclude_inherited_files") == [
            "standards/backend/*",
            "workflows/planning/*.md",
        ]

    def test_skips_blank_and_comment_lines(self, write_yaml):
        path = write_yaml("items:\n  - a.md\n\n  # note\n  - b.md\n")
        assert get_yaml_array(path, "items") == ["a.md", "b.md"]

    def test_ignores_items_at_other_indentation(self, write_yaml):
        path = write_yaml("items:\n  - a.md\n      - nested.md\n  - b.md\n")
        assert get_yaml_array(path, "items") == ["a.md", "b.md"]

    def test_flow_list(self, write_yaml):
        path = write_yaml("exclude_inherited_files: [a.md, 'b.md', \"c/*.md\"]\n")
        assert get_yaml_array(path, "exclude_inherited_files") == ["a.md", "b.md", "c/*.md"]

    def test_empty_flow_list(self, write_yaml):
        path = write_yaml("exclude_inherited_files: []\n")
        assert get_yaml_array(path, "exclude_inherited_files") == []

    def test_missing_key_or_file(self, write_yaml, tmp_path):
        path = write_yaml("profile: rails\n")
        assert get_yaml_array(path, "items") == []
        assert get_yaml_array(tmp_path / "missing.yml", "items") == []
