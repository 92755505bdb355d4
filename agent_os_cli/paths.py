"""CLI path policy.

Centralizes where the base installation lives and where compiled output goes
inside a project. Library code receives these paths by injection.
"""

import os
from pathlib import Path

BASE_DIR_ENV = "AGENT_OS_BASE_DIR"

# ===== BASE INSTALLATION =====


def get_base_dir(override: Path | str | None = None) -> Path:
    """Base installation directory.

    Resolution order:
    1. Explicit override (``--base-dir``)
    2. ``AGENT_OS_BASE_DIR`` environment variable
    3. ``~/agent-os``
    """
    if override:
        return Path(override).expanduser()
    env_value = os.environ.get(BASE_DIR_ENV)
    if env_value:
        return Path(env_value).expanduser()
    return Path.home() / "agent-os"


def get_profiles_dir(base_dir: Path) -> Path:
    return base_dir / "profiles"


def get_base_config_file(base_dir: Path) -> Path:
    return base_dir / "config.yml"


# ===== PROJECT DESTINATIONS =====

PROJECT_FOLDER = "agent-os"


def get_project_agent_os_dir(project_dir: Path) -> Path:
    return project_dir / PROJECT_FOLDER


def get_project_config_file(project_dir: Path) -> Path:
    return get_project_agent_os_dir(project_dir) / "config.yml"


def get_claude_commands_dir(project_dir: Path) -> Path:
    return project_dir / ".claude" / "commands" / PROJECT_FOLDER


def get_claude_agents_dir(project_dir: Path) -> Path:
    return project_dir / ".claude" / "agents" / PROJECT_FOLDER


def get_claude_skills_dir(project_dir: Path) -> Path:
    return project_dir / ".claude" / "skills"


def get_managed_dirs(project_dir: Path) -> list[Path]:
    """Directories owned by an installation (removed and rebuilt on re-install)."""
    return [
        get_project_agent_os_dir(project_dir),
        get_claude_agents_dir(project_dir),
        get_claude_commands_dir(project_dir),
    ]
