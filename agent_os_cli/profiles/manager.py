"""Profile listing and creation."""

import logging
import re
import shutil
from pathlib import Path

from ..exceptions import ConfigError
from .schema import DEFAULT_PROFILE
from .schema import PROFILE_CONFIG_FILE

logger = logging.getLogger(__name__)

RESERVED_PROFILE_NAMES = (DEFAULT_PROFILE, "_internal", "_template", "_base", "_system")
PROFILE_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")

# Directories created for a fresh (non-copied) profile
PROFILE_SKELETON_DIRS = (
    "standards",
    "workflows/implementation",
    "workflows/planning",
    "workflows/specification",
)


def list_profiles(base_dir: Path) -> list[str]:
    """Names of all profile directories under ``<base_dir>/profiles``."""
    profiles_dir = Path(base_dir) / "profiles"
    if not profiles_dir.is_dir():
        return []
    return sorted(entry.name for entry in profiles_dir.iterdir() if entry.is_dir())


def validate_profile_name(name: str) -> None:
    """Reject names that are empty, reserved, or could escape the profiles directory.

    Raises:
        ConfigError: With a message describing the problem
    """
    if not name:
        raise ConfigError("Profile name cannot be empty")
    if name in RESERVED_PROFILE_NAMES:
        raise ConfigError(f"Profile name '{name}' is reserved and cannot be used")
    if name.startswith("_"):
        raise ConfigError("Profile names starting with '_' are reserved for internal use")
    if ".." in name or "/" in name or "\\" in name:
        raise ConfigError("Profile name contains invalid characters (path traversal attempt detected)")
    if not PROFILE_NAME_PATTERN.match(name):
        raise ConfigError(
            "Profile name must start with a letter and contain only letters, numbers, hyphens, and underscores"
        )


def _inheriting_config(name: str, parent: str) -> str:
    return (
        f"inherits_from: {parent}\n"
        "\n"
        f"# Profile configuration for {name}\n"
        "#\n"
        "# Uncomment and modify to exclude specific inherited files:\n"
        "# exclude_inherited_files:\n"
        "#   - standards/backend/api/*\n"
        "#   - standards/backend/database/migrations.md\n"
        "#   - workflows/implementation/specific-workflow.md\n"
    )


def _standalone_config(name: str, copied_from: str | None = None) -> str:
    lines = ["inherits_from: false", "", f"# Profile configuration for {name}"]
    if copied_from:
        lines.append(f"# Copied from: {copied_from}")
    return "\n".join(lines) + "\n"


def create_profile(
    base_dir: Path,
    name: str,
    inherit_from: str | None = None,
    copy_from: str | None = None,
    dry_run: bool = False,
) -> list[Path]:
    """Create a new profile.

    Either copies an existing profile (its config is rewritten to stand
    alone) or creates an empty skeleton that optionally inherits.

    Args:
        base_dir: Base installation directory
        name: New profile name
        inherit_from: Parent profile for a fresh skeleton
        copy_from: Existing profile to copy instead of creating a skeleton
        dry_run: Only report what would be created

    Returns:
        Paths created (or that would be created)

    Raises:
        ConfigError: Invalid name, existing target, or unknown source/parent profile
    """
    validate_profile_name(name)
    if inherit_from and copy_from:
        raise ConfigError("Choose either --inherit-from or --copy-from, not both")

    profiles_dir = Path(base_dir) / "profiles"
    profile_dir = profiles_dir / name
    if profile_dir.exists():
        raise ConfigError(f"Profile '{name}' already exists")
    if profile_dir.resolve().parent != profiles_dir.resolve():
        raise ConfigError("Profile name resolves to invalid path")

    for source in (inherit_from, copy_from):
        if source and not (profiles_dir / source).is_dir():
            raise ConfigError(f"Profile '{source}' does not exist")

    config_file = profile_dir / PROFILE_CONFIG_FILE
    if copy_from:
        planned = [profile_dir, config_file]
        if dry_run:
            return planned
        shutil.copytree(profiles_dir / copy_from, profile_dir)
        config_file.write_text(_standalone_config(name, copied_from=copy_from), encoding="utf-8")
        logger.info(f"Created profile '{name}' as a copy of '{copy_from}'")
        return planned

    planned = [profile_dir] + [profile_dir / sub for sub in PROFILE_SKELETON_DIRS] + [config_file]
    if dry_run:
        return planned

    for sub in PROFILE_SKELETON_DIRS:
        (profile_dir / sub).mkdir(parents=True, exist_ok=True)
    config = _inheriting_config(name, inherit_from) if inherit_from else _standalone_config(name)
    config_file.write_text(config, encoding="utf-8")
    logger.info(f"Created profile '{name}'" + (f" inheriting from '{inherit_from}'" if inherit_from else ""))
    return planned
