"""Installation settings.

The base installation's ``config.yml`` supplies defaults, command-line flags
override them, and the effective result is recorded in the project's
``agent-os/config.yml`` so later runs can detect drift.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any
from typing import TypeVar

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import field_validator

from .compiler.models import CompilationFlags
from .exceptions import ConfigError
from .paths import get_base_config_file
from .paths import get_project_config_file
from .profiles.yaml_mini import get_yaml_value
from .utils.atomic_write import AtomicFileWriter

logger = logging.getLogger(__name__)

CURRENT_VERSION = "2.1.0"

TRUE_STRINGS = ("true", "yes", "1", "on")
FALSE_STRINGS = ("false", "no", "0", "off")

# Flags written to and compared against the project record, in file order
FLAG_FIELDS = (
    "claude_code_commands",
    "use_claude_code_subagents",
    "agent_os_commands",
    "standards_as_claude_code_skills",
    "lazy_load_workflows",
)

PROJECT_CONFIG_BANNER = (
    "# ================================================\n"
    "# Compiled with the following settings:\n"
    "#\n"
    "# These settings were used when this project's Agent OS files were compiled.\n"
    "# Re-run the installer to change them.\n"
    "# ================================================\n"
)


class InstallConfig(BaseModel):
    """Settings that shape one installation."""

    version: str = Field(CURRENT_VERSION, description="Agent OS version that compiled the files")
    profile: str = Field("default", description="Profile to compile from")
    claude_code_commands: bool = Field(True, description="Install commands into .claude/commands")
    use_claude_code_subagents: bool = Field(True, description="Delegate command phases to subagents")
    agent_os_commands: bool = Field(False, description="Install tool-agnostic commands into agent-os/commands")
    standards_as_claude_code_skills: bool = Field(True, description="Expose standards as skills")
    lazy_load_workflows: bool = Field(False, description="Point to workflows instead of inlining them")

    @field_validator(*FLAG_FIELDS, mode="before")
    @classmethod
    def coerce_bool(cls, value: Any) -> Any:
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in TRUE_STRINGS:
                return True
            if normalized in FALSE_STRINGS:
                return False
            raise ValueError(f"expected true or false, got '{value}'")
        return value

    def flags(self) -> CompilationFlags:
        """Conditional flags handed to the template compiler."""
        return CompilationFlags(
            use_claude_code_subagents=self.use_claude_code_subagents,
            standards_as_claude_code_skills=self.standards_as_claude_code_skills,
            lazy_load_workflows=self.lazy_load_workflows,
        )

    def settings(self) -> dict[str, Any]:
        """Profile and flags, as recorded in the project config."""
        return {"profile": self.profile, **{name: getattr(self, name) for name in FLAG_FIELDS}}


class ProjectConfig(InstallConfig):
    """Settings recorded by a previous installation."""

    last_compiled: str | None = Field(None, description="Timestamp of the last compilation")


ConfigT = TypeVar("ConfigT", bound=InstallConfig)


def _read_config_file(config_file: Path, model: type[ConfigT]) -> ConfigT:
    values: dict[str, str] = {}
    for name in model.model_fields:
        raw = get_yaml_value(config_file, name, "")
        if raw:
            values[name] = raw

    try:
        return model(**values)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration in {config_file}: {e}") from e


def load_base_config(base_dir: Path) -> InstallConfig:
    """Load defaults from the base installation's config.yml.

    A missing file yields the built-in defaults.
    """
    config_file = get_base_config_file(base_dir)
    if not config_file.exists():
        logger.debug(f"No base config at {config_file}, using defaults")
        return InstallConfig()
    return _read_config_file(config_file, InstallConfig)


def load_project_config(project_dir: Path) -> ProjectConfig | None:
    """Load the settings recorded in a project, or None when not installed."""
    config_file = get_project_config_file(project_dir)
    if not config_file.exists():
        return None
    return _read_config_file(config_file, ProjectConfig)


def effective_config(base: InstallConfig, **overrides: Any) -> InstallConfig:
    """Apply command-line overrides on top of the base config.

    Overrides whose value is None were not given and leave the base value.
    """
    given = {key: value for key, value in overrides.items() if value is not None}
    unknown = set(given) - set(InstallConfig.model_fields)
    if unknown:
        raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
    return InstallConfig(**{**base.model_dump(), **given})


def validate_config(config: InstallConfig, profiles_dir: Path) -> tuple[InstallConfig, list[str]]:
    """Check that a configuration can be installed.

    Args:
        config: Effective configuration
        profiles_dir: Directory holding profile folders

    Returns:
        (config to use, warnings). Skills are switched off when Claude Code
        commands are disabled.

    Raises:
        ConfigError: If no output is enabled or the profile does not exist
    """
    warnings: list[str] = []

    if not config.claude_code_commands and not config.agent_os_commands:
        raise ConfigError("You must have one of claude_code_commands or agent_os_commands set to true")

    if config.use_claude_code_subagents and not config.claude_code_commands:
        warnings.append("use_claude_code_subagents has no effect while claude_code_commands is false")

    if config.standards_as_claude_code_skills and not config.claude_code_commands:
        warnings.append("standards_as_claude_code_skills requires claude_code_commands; disabling it")
        config = config.model_copy(update={"standards_as_claude_code_skills": False})

    if not (profiles_dir / config.profile).is_dir():
        raise ConfigError(f"Profile not found: {profiles_dir / config.profile}")

    for warning in warnings:
        logger.warning(warning)
    return config, warnings


def render_project_config(config: InstallConfig, compiled_at: datetime | None = None) -> str:
    """Text of the project config record."""
    compiled_at = compiled_at or datetime.now()
    header = {"version": config.version, "last_compiled": compiled_at.strftime("%Y-%m-%d %H:%M:%S")}
    dump_options = {"default_flow_style": False, "sort_keys": False}
    return (
        yaml.safe_dump(header, **dump_options)
        + "\n"
        + PROJECT_CONFIG_BANNER
        + "\n"
        + yaml.safe_dump(config.settings(), **dump_options)
    )


def write_project_config(
    project_dir: Path,
    config: InstallConfig,
    writer: AtomicFileWriter,
    compiled_at: datetime | None = None,
) -> Path:
    """Record the settings used for this installation in ``agent-os/config.yml``."""
    destination = get_project_config_file(project_dir)
    writer.write(render_project_config(config, compiled_at), destination)
    logger.info(f"Recorded installation settings in {destination}")
    return destination
