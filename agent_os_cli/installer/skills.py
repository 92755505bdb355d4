"""Skills generated from standards documents.

Each ``standards/**.md`` document gets a ``.claude/skills/<name>/SKILL.md``
rendered from the profile's ``claude-code-skill-template.md``.
"""

import logging
from pathlib import Path

from ..compiler.naming import humanize_filename
from ..compiler.naming import skill_name
from ..paths import PROJECT_FOLDER
from ..paths import get_claude_skills_dir
from ..profiles.resolver import ProfileResolver
from ..utils.atomic_write import AtomicFileWriter
from ..utils.atomic_write import AtomicWriteError
from .report import InstallReport

logger = logging.getLogger(__name__)

SKILL_TEMPLATE = "claude-code-skill-template.md"
SKILL_FILE = "SKILL.md"


def skill_destination(project_dir: Path, standards_path: str) -> Path:
    return get_claude_skills_dir(project_dir) / skill_name(standards_path) / SKILL_FILE


def render_skill(template: str, standards_path: str) -> str:
    """Fill the skill template placeholders for one standards document.

    Example:
        ``standards/frontend/css.md`` renders ``{{standard_name_humanized}}``
        as ``frontend CSS`` and ``{{standard_file_path}}`` as
        ``agent-os/standards/frontend/css.md``.
    """
    name = standards_path.removeprefix("standards/")
    replacements = {
        "{{standard_name_humanized_capitalized}}": humanize_filename(name, capitalize=True),
        "{{standard_name_humanized}}": humanize_filename(name),
        "{{standard_file_path}}": f"{PROJECT_FOLDER}/{standards_path}",
    }
    for placeholder, value in replacements.items():
        template = template.replace(placeholder, value)
    return template


def install_standard_skills(
    resolver: ProfileResolver,
    profile: str,
    project_dir: Path,
    writer: AtomicFileWriter,
    report: InstallReport,
    overwrite: bool = True,
) -> int:
    """Write one skill per standards document.

    With ``overwrite`` off, a SKILL.md that already exists is left alone and
    reported as skipped.

    Returns:
        Number of skills written (or planned in dry-run mode)
    """
    documents = [path for path in resolver.resolve_files(profile, "standards") if path.endswith(".md")]
    if not documents:
        return 0

    template = resolver.read_file(profile, SKILL_TEMPLATE)
    if template is None:
        logger.error(f"Skill template not found in profile '{profile}': {SKILL_TEMPLATE}")
        for standards_path in documents:
            report.fail(skill_destination(project_dir, standards_path), f"skill template {SKILL_TEMPLATE} not found")
        return 0

    installed = 0
    for standards_path in documents:
        destination = skill_destination(project_dir, standards_path)
        if not overwrite and destination.exists():
            report.skip(destination)
            continue
        try:
            writer.write(render_skill(template, standards_path), destination)
        except AtomicWriteError as e:
            report.fail(destination, str(e))
            continue
        report.record("skills", destination)
        installed += 1

    logger.info(f"Installed {installed} skill(s) from standards")
    return installed
