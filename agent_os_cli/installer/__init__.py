"""Installing compiled profiles into projects."""

from .drift import detect_drift
from .drift import needs_recompile
from .preflight import check_not_base_installation
from .preflight import preflight_check
from .preflight import validate_base_installation
from .project import OverwritePolicy
from .project import ProjectInstaller
from .reinstall import ReinstallTransaction
from .reinstall import installed_skill_names
from .report import InstallFailure
from .report import InstallReport
from .skills import install_standard_skills
from .skills import render_skill

__all__ = [
    "InstallFailure",
    "InstallReport",
    "OverwritePolicy",
    "ProjectInstaller",
    "ReinstallTransaction",
    "check_not_base_installation",
    "detect_drift",
    "install_standard_skills",
    "installed_skill_names",
    "needs_recompile",
    "preflight_check",
    "render_skill",
    "validate_base_installation",
]
