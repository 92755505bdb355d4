"""Tests for installation settings."""

from datetime import datetime

import pytest

from agent_os_cli.exceptions import ConfigError
from agent_os_cli.settings import PROJECT_CONFIG_BANNER
from agent_os_cli.settings import InstallConfig
from agent_os_cli.settings import ProjectConfig
from agent_os_cli.settings import effective_config
from agent_os_cli.settings import load_base_config
from agent_os_cli.settings import load_project_config
from agent_os_cli.settings import render_project_config
from agent_os_cli.settings import validate_config
from agent_os_cli.settings import write_project_config
from agent_os_cli.utils.atomic_write import AtomicFileWriter


class TestInstallConfig:
    def test_defaults(self):
        config = InstallConfig()
        assert config.version == "2.1.0"
        assert config.profile == "default"
        assert config.claude_code_commands is True
        assert config.use_claude_code_subagents is True
        assert config.agent_os_commands is False
        assert config.standards_as_claude_code_skills is True
        assert config.lazy_load_workflows is False

    @pytest.mark.parametrize(("raw", "expected"), [("true", True), ("Yes", True), ("0", False), (" off ", False)])
    def test_bool_strings_are_coerced(self, raw, expected):
        assert InstallConfig(lazy_load_workflows=raw).lazy_load_workflows is expected

    def test_invalid_bool_string(self):
        with pytest.raises(ValueError):
            InstallConfig(lazy_load_workflows="maybe")

    def test_flags_for_compiler(self):
        flags = InstallConfig(lazy_load_workflows=True, use_claude_code_subagents=False).flags()
        assert flags.lazy_load_workflows is True
        assert flags.use_claude_code_subagents is False
        assert flags.compiled_single_command is False


class TestLoading:
    def test_missing_base_config_gives_defaults(self, tmp_path):
        assert load_base_config(tmp_path) == InstallConfig()

    def test_base_config_values(self, tmp_path):
        (tmp_path / "config.yml").write_text(
            "version: 2.1.1\n"
            "base_install: true\n"
            "profile: rails  # team default\n"
            "lazy_load_workflows: yes\n"
            "agent_os_commands: false\n"
        )

        config = load_base_config(tmp_path)

        assert config.version == "2.1.1"
        assert config.profile == "rails"
        assert config.lazy_load_workflows is True
        assert config.agent_os_commands is False

    def test_invalid_base_config(self, tmp_path):
        (tmp_path / "config.yml").write_text("claude_code_commands: sometimes\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_base_config(tmp_path)

    def test_project_not_installed(self, tmp_path):
        assert load_project_config(tmp_path) is None

    def test_project_record(self, tmp_path):
        record = tmp_path / "agent-os" / "config.yml"
        record.parent.mkdir()
        record.write_text("version: 2.0.3\nlast_compiled: '2025-01-02 03:04:05'\nprofile: rails\n")

        recorded = load_project_config(tmp_path)

        assert isinstance(recorded, ProjectConfig)
        assert recorded.version == "2.0.3"
        assert recorded.last_compiled == "2025-01-02 03:04:05"

    def test_invalid_project_record(self, tmp_path):
        record = tmp_path / "agent-os" / "config.yml"
        record.parent.mkdir()
        record.write_text("lazy_load_workflows: maybe\n")

        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_project_config(tmp_path)


class TestEffectiveConfig:
    def test_overrides_win_and_none_is_ignored(self):
        base = InstallConfig(profile="rails", lazy_load_workflows=True)

        config = effective_config(base, profile=None, lazy_load_workflows=False, agent_os_commands=True)

        assert config.profile == "rails"
        assert config.lazy_load_workflows is False
        assert config.agent_os_commands is True

    def test_unknown_override(self):
        with pytest.raises(ConfigError, match="Unknown setting"):
            effective_config(InstallConfig(), colour=True)


class TestValidateConfig:
    @pytest.fixture
    def profiles_dir(self, tmp_path):
        (tmp_path / "default").mkdir()
        return tmp_path

    def test_valid_config_has_no_warnings(self, profiles_dir):
        config, warnings = validate_config(InstallConfig(), profiles_dir)
        assert config == InstallConfig()
        assert warnings == []

    def test_some_output_must_be_enabled(self, profiles_dir):
        config = InstallConfig(claude_code_commands=False, agent_os_commands=False)
        with pytest.raises(ConfigError, match="one of claude_code_commands or agent_os_commands"):
            validate_config(config, profiles_dir)

    def test_skills_need_claude_code_commands(self, profiles_dir):
        config = InstallConfig(claude_code_commands=False, agent_os_commands=True)

        validated, warnings = validate_config(config, profiles_dir)

        assert validated.standards_as_claude_code_skills is False
        assert any("standards_as_claude_code_skills" in w for w in warnings)
        assert any("use_claude_code_subagents" in w for w in warnings)

    def test_profile_must_exist(self, profiles_dir):
        with pytest.raises(ConfigError, match="Profile not found"):
            validate_config(InstallConfig(profile="ghost"), profiles_dir)


class TestProjectConfigRecord:
    def test_record_is_readable_by_the_flat_reader(self, tmp_path):
        config = InstallConfig(profile="rails", lazy_load_workflows=True, agent_os_commands=True)

        with AtomicFileWriter() as writer:
            path = write_project_config(tmp_path, config, writer, compiled_at=datetime(2026, 10, 18, 9, 30))

        assert path == tmp_path / "agent-os" / "config.yml"
        text = path.read_text()
        assert text.startswith("version: 2.1.0\n")
        assert PROJECT_CONFIG_BANNER in text

        recorded = load_project_config(tmp_path)
        assert recorded.settings() == config.settings()
        assert recorded.last_compiled == "2026-10-18 09:30:00"

    def test_settings_follow_banner(self):
        text = render_project_config(InstallConfig(), datetime(2026, 1, 1))
        banner_at = text.index(PROJECT_CONFIG_BANNER)
        assert text.index("profile: default") > banner_at
        assert text.index("last_compiled:") < banner_at
