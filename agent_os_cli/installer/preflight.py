"""Environment checks run before anything is written."""

import logging
import os
import shutil
import uuid
from pathlib import Path

from ..exceptions import PreflightError
from ..paths import get_profiles_dir
from ..paths import get_project_config_file
from ..profiles.yaml_mini import get_yaml_value

logger = logging.getLogger(__name__)

REQUIRED_FREE_BYTES = 10 * 1024 * 1024


def preflight_check(
    target_dir: Path,
    required_tools: tuple[str, ...] = (),
    required_free_bytes: int = REQUIRED_FREE_BYTES,
) -> None:
    """Verify the target can take an installation.

    Args:
        target_dir: Directory that will receive files
        required_tools: Executables that must be on PATH
        required_free_bytes: Minimum free space on the target's filesystem

    Raises:
        PreflightError: On the first failed check
    """
    target_dir = Path(target_dir)
    logger.debug(f"Running pre-flight checks on {target_dir}")

    if not target_dir.is_dir():
        raise PreflightError(f"Target directory does not exist: {target_dir}")
    if not os.access(target_dir, os.W_OK):
        raise PreflightError(f"Target directory is not writable: {target_dir}")

    try:
        free = shutil.disk_usage(target_dir).free
    except OSError as e:
        logger.debug(f"Could not check disk space: {e}")
    else:
        if free < required_free_bytes:
            raise PreflightError(
                f"Insufficient disk space. Required: {required_free_bytes // (1024 * 1024)}MB, "
                f"Available: {free // (1024 * 1024)}MB"
            )

    missing = [tool for tool in required_tools if shutil.which(tool) is None]
    if missing:
        raise PreflightError(f"Required tools not found: {' '.join(missing)}")

    probe = target_dir / f".agent-os-preflight-test-{os.getpid()}-{uuid.uuid4().hex[:8]}"
    try:
        probe.touch()
    except OSError as e:
        raise PreflightError(f"Cannot create files in target directory: {target_dir}") from e
    probe.unlink(missing_ok=True)

    logger.debug("Pre-flight checks passed")


def check_not_base_installation(project_dir: Path) -> None:
    """Refuse to install into the base installation itself.

    Raises:
        PreflightError: If the project's config marks it as the base install
    """
    config_file = get_project_config_file(Path(project_dir))
    if get_yaml_value(config_file, "base_install", "").lower() == "true":
        raise PreflightError(
            "Cannot install Agent OS in the base installation directory. "
            "Move to your project's root folder and run the installer there."
        )


def validate_base_installation(base_dir: Path) -> None:
    """Make sure the base installation exists and holds profiles.

    Raises:
        PreflightError: If the base directory or its profiles folder is missing
    """
    base_dir = Path(base_dir)
    if not base_dir.is_dir():
        raise PreflightError(f"Agent OS base installation not found at {base_dir}")
    if not get_profiles_dir(base_dir).is_dir():
        raise PreflightError(f"Base installation has no profiles directory: {get_profiles_dir(base_dir)}")
    logger.debug(f"Base installation found at: {base_dir}")
