"""Detecting projects whose compiled files no longer match the settings."""

import logging
from dataclasses import dataclass
from typing import Any

from ..settings import InstallConfig
from ..settings import ProjectConfig
from ..utils.version import is_compatible
from ..utils.version import needs_migration

logger = logging.getLogger(__name__)


@dataclass
class SettingDrift:
    """One setting whose recorded value differs from the effective one."""

    name: str
    recorded: Any
    effective: Any


def detect_drift(project: ProjectConfig, effective: InstallConfig) -> list[SettingDrift]:
    recorded_settings = project.settings()
    drift = [
        SettingDrift(name=name, recorded=recorded_settings[name], effective=value)
        for name, value in effective.settings().items()
        if recorded_settings[name] != value
    ]
    for item in drift:
        logger.debug(f"Setting '{item.name}' changed: {item.recorded} -> {item.effective}")
    return drift


def needs_recompile(project: ProjectConfig | None, effective: InstallConfig) -> bool:
    """Whether the project's compiled files must be regenerated.

    True when the project was never installed, its settings drifted, its
    recorded version predates the current layout, or it was compiled by an
    incompatible (different major) version.
    """
    if project is None:
        return True
    if detect_drift(project, effective):
        return True
    if needs_migration(project.version):
        return True
    return not is_compatible(project.version, effective.version)
