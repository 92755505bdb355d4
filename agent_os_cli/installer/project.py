"""Installing a compiled profile into a project.

Layout produced (depending on the effective settings):

    agent-os/config.yml                          settings record
    agent-os/standards/...                       copied standards
    agent-os/commands/<command>/<file>.md        tool-agnostic commands
    .claude/commands/agent-os/<command>.md       Claude Code commands
    .claude/agents/agent-os/<agent>.md           Claude Code subagents
    .claude/skills/<name>/SKILL.md               one skill per standard
"""

import logging
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path

from ..compiler.patterns import matches_pattern
from ..compiler.template import TemplateCompiler
from ..exceptions import ConfigError
from ..paths import get_claude_agents_dir
from ..paths import get_claude_commands_dir
from ..paths import get_claude_skills_dir
from ..paths import get_managed_dirs
from ..paths import get_project_agent_os_dir
from ..profiles.resolver import ProfileResolver
from ..settings import InstallConfig
from ..settings import write_project_config
from ..utils.atomic_write import AtomicFileWriter
from ..utils.atomic_write import AtomicWriteError
from ..utils.atomic_write import sweep_stale_temp_files
from .report import InstallReport
from .skills import install_standard_skills

logger = logging.getLogger(__name__)

ORCHESTRATE_TASKS = "commands/orchestrate-tasks/orchestrate-tasks.md"
IMPROVE_SKILLS = "commands/improve-skills/improve-skills.md"
MULTI_AGENT_PATTERN = "commands/*/multi-agent/*"
SINGLE_AGENT_PATTERN = "commands/*/single-agent/**"
AGENTS_PATTERN = "agents/**.md"
AGENT_TEMPLATES_PREFIX = "agents/templates/"

# Numbered phase documents (1-product-concept.md) are embedded, never installed alone
PHASE_FILE_PATTERN = re.compile(r"^[0-9]+-.*\.md$")

# Overwrite category guarding each installation step
STEP_FILE_TYPES = {
    "standards": "standards",
    "skills": "standards",
    "claude_code_commands": "commands",
    "agent_os_commands": "commands",
    "claude_code_agents": "agents",
}


@dataclass(frozen=True)
class OverwritePolicy:
    """Which already-installed files an update may replace.

    By default existing standards, commands and agents are kept so that local
    edits survive a plain re-run. The settings record is always rewritten.
    """

    all: bool = False
    standards: bool = False
    commands: bool = False
    agents: bool = False

    def allows(self, file_type: str) -> bool:
        return self.all or getattr(self, file_type)


def _command_name(relative_path: str) -> str:
    """``commands/plan-product/single-agent/plan-product.md`` -> ``plan-product``"""
    return relative_path.split("/")[1]


class ProjectInstaller:
    """Compiles one profile into a project directory."""

    def __init__(
        self,
        base_dir: Path,
        project_dir: Path,
        config: InstallConfig,
        dry_run: bool = False,
        overwrite: OverwritePolicy | None = None,
    ):
        """
        Args:
            base_dir: Base installation holding ``profiles/``
            project_dir: Project receiving the compiled files
            config: Effective, validated settings
            dry_run: Report destinations without touching the filesystem
            overwrite: Which existing files may be replaced (default: none)
        """
        self.base_dir = Path(base_dir)
        self.project_dir = Path(project_dir)
        self.config = config
        self.dry_run = dry_run
        self.overwrite = overwrite or OverwritePolicy()
        self.profile = config.profile

        self.resolver = ProfileResolver(self.base_dir)
        self.writer = AtomicFileWriter(dry_run=dry_run)
        self.compiler = TemplateCompiler(self.resolver, config.flags(), writer=self.writer)
        self.report = InstallReport(project_dir=self.project_dir, dry_run=dry_run)

    def install(self) -> InstallReport:
        """Run every enabled installation step.

        A file that cannot be written is recorded in the report and the
        remaining files are still installed. Existing files the overwrite
        policy protects are reported as skipped.

        Raises:
            ConfigError: If the profile's inheritance chain is unusable
        """
        chain = self.resolver.resolve_chain(self.profile)
        if not chain.ok:
            raise ConfigError(f"Cannot install profile '{self.profile}': {chain.detail}")

        if not self.dry_run:
            for directory in [*get_managed_dirs(self.project_dir), get_claude_skills_dir(self.project_dir)]:
                sweep_stale_temp_files(directory)

        with self.writer:
            self._write_config()
            self.install_standards()

            if self.config.claude_code_commands:
                if self.config.use_claude_code_subagents:
                    self.install_claude_code_commands_with_delegation()
                    self.install_claude_code_agents()
                else:
                    self.install_claude_code_commands_without_delegation()
                if self.config.standards_as_claude_code_skills:
                    install_standard_skills(
                        self.resolver,
                        self.profile,
                        self.project_dir,
                        self.writer,
                        self.report,
                        overwrite=self.overwrite.allows("standards"),
                    )
                    self.install_improve_skills_command()

            if self.config.agent_os_commands:
                self.install_agent_os_commands()

        logger.info(
            f"Installed profile '{self.profile}' into {self.project_dir}: "
            f"{len(self.report.written)} file(s), {len(self.report.skipped)} kept, "
            f"{len(self.report.failures)} failure(s)"
        )
        return self.report

    # ----- steps -----

    def _write_config(self) -> None:
        try:
            destination = write_project_config(self.project_dir, self.config, self.writer)
        except AtomicWriteError as e:
            self.report.fail(get_project_agent_os_dir(self.project_dir) / "config.yml", str(e))
            return
        self.report.record("config", destination)

    def install_standards(self) -> None:
        destination_root = get_project_agent_os_dir(self.project_dir)
        for relative_path in self.resolver.resolve_files(self.profile, "standards"):
            resolution = self.resolver.resolve_file(self.profile, relative_path)
            if not resolution.ok or resolution.path is None:
                continue

            destination = destination_root / relative_path
            if self._keep_existing(destination, "standards"):
                continue
            try:
                self.writer.copy(resolution.path, destination)
            except AtomicWriteError as e:
                self.report.fail(destination, str(e))
                continue
            self.report.record("standards", destination)

    def install_claude_code_commands_with_delegation(self) -> None:
        target_dir = get_claude_commands_dir(self.project_dir)
        for relative_path in self._profile_files("commands"):
            if matches_pattern(relative_path, MULTI_AGENT_PATTERN) or relative_path == ORCHESTRATE_TASKS:
                destination = target_dir / f"{_command_name(relative_path)}.md"
                self._compile(relative_path, destination, "claude_code_commands")

    def install_claude_code_commands_without_delegation(self) -> None:
        target_dir = get_claude_commands_dir(self.project_dir)
        for relative_path in self._profile_files("commands"):
            if relative_path == ORCHESTRATE_TASKS:
                self._compile(relative_path, target_dir / "orchestrate-tasks.md", "claude_code_commands")
                continue
            if not matches_pattern(relative_path, SINGLE_AGENT_PATTERN):
                continue
            if PHASE_FILE_PATTERN.match(posixpath.basename(relative_path)):
                continue
            destination = target_dir / f"{_command_name(relative_path)}.md"
            self._compile(relative_path, destination, "claude_code_commands", embed_phases=True)

    def install_claude_code_agents(self) -> None:
        target_dir = get_claude_agents_dir(self.project_dir)
        for relative_path in self._profile_files("agents"):
            if relative_path.startswith(AGENT_TEMPLATES_PREFIX):
                continue
            if not matches_pattern(relative_path, AGENTS_PATTERN):
                continue
            # Subagent folders are flattened
            destination = target_dir / posixpath.basename(relative_path)
            self._compile(relative_path, destination, "claude_code_agents")

    def install_improve_skills_command(self) -> None:
        if not self.resolver.resolve_file(self.profile, IMPROVE_SKILLS).ok:
            return
        destination = get_claude_commands_dir(self.project_dir) / "improve-skills.md"
        self._compile(IMPROVE_SKILLS, destination, "claude_code_commands")

    def install_agent_os_commands(self) -> None:
        target_dir = get_project_agent_os_dir(self.project_dir) / "commands"
        for relative_path in self._profile_files("commands"):
            if relative_path == ORCHESTRATE_TASKS:
                destination = target_dir / "orchestrate-tasks" / "orchestrate-tasks.md"
            elif matches_pattern(relative_path, SINGLE_AGENT_PATTERN):
                command, _, rest = relative_path.removeprefix("commands/").partition("/single-agent/")
                destination = target_dir / command / rest
            else:
                continue
            self._compile(relative_path, destination, "agent_os_commands", embed_phases=True)

    # ----- helpers -----

    def _profile_files(self, subdirectory: str) -> list[str]:
        listing = self.resolver.resolve_files(self.profile, subdirectory)
        if not listing.ok:
            self.report.warnings.append(f"Could not list {subdirectory} for profile '{self.profile}': {listing.detail}")
        return listing.paths

    def _keep_existing(self, destination: Path, step: str) -> bool:
        if not destination.exists() or self.overwrite.allows(STEP_FILE_TYPES[step]):
            return False
        logger.debug(f"Keeping existing {destination}")
        self.report.skip(destination)
        return True

    def _compile(self, relative_path: str, destination: Path, step: str, embed_phases: bool = False) -> None:
        resolution = self.resolver.resolve_file(self.profile, relative_path)
        if not resolution.ok or resolution.path is None:
            return
        if self._keep_existing(destination, step):
            return

        try:
            artifact = self.compiler.compile_document(
                resolution.path, destination, self.profile, embed_phases=embed_phases
            )
        except (OSError, UnicodeDecodeError) as e:
            self.report.fail(destination, str(e))
            return

        self.report.warnings.extend(artifact.warnings)
        self.report.record(step, destination)
