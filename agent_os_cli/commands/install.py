"""Install command for the Agent OS CLI.

Compiles the selected profile into the current project.

Example:
    # Install with the base installation's settings
    agent-os install

    # Tool-agnostic commands only, no subagents
    agent-os install --claude-code-commands false --agent-os-commands true

    # Wipe and rebuild an existing installation
    agent-os install --re-install -y
"""

import logging
import sys
from pathlib import Path

import click
from rich.table import Table

from ..console import console
from ..console import print_error
from ..exceptions import ConfigError
from ..exceptions import PreflightError
from ..exceptions import ReinstallError
from ..installer.preflight import check_not_base_installation
from ..installer.preflight import preflight_check
from ..installer.preflight import validate_base_installation
from ..installer.project import OverwritePolicy
from ..installer.project import ProjectInstaller
from ..installer.reinstall import ReinstallTransaction
from ..installer.reinstall import installed_skill_names
from ..installer.report import InstallReport
from ..logging_setup import init_json_logging
from ..paths import get_base_dir
from ..paths import get_claude_agents_dir
from ..paths import get_claude_commands_dir
from ..paths import get_claude_skills_dir
from ..paths import get_profiles_dir
from ..settings import FLAG_FIELDS
from ..settings import InstallConfig
from ..settings import effective_config
from ..settings import load_base_config
from ..settings import load_project_config
from ..settings import validate_config
from ..utils.error_format import escape_markup

logger = logging.getLogger(__name__)

# Summary lines per installation step
STEP_LABELS = {
    "standards": "standards in agent-os/standards",
    "claude_code_commands": "Claude Code commands",
    "claude_code_agents": "Claude Code agents",
    "skills": "Claude Code Skills",
    "agent_os_commands": "agent-os commands",
}


def _flag_option(name: str, help_text: str):
    """Boolean setting accepted as ``--some-flag`` or ``--some_flag``."""
    return click.option(
        f"--{name.replace('_', '-')}",
        f"--{name}",
        name,
        type=click.BOOL,
        default=None,
        metavar="BOOL",
        help=help_text,
    )


def _overwrite_option(kind: str, help_text: str):
    """``--overwrite-<kind>`` flag, also accepted as ``--overwrite_<kind>``."""
    return click.option(f"--overwrite-{kind}", f"--overwrite_{kind}", f"overwrite_{kind}", is_flag=True, help=help_text)


def _show_configuration(config: InstallConfig) -> None:
    table = Table(title="Configuration", show_header=False, title_justify="left")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="yellow")
    table.add_row("Profile", config.profile)
    for name in FLAG_FIELDS:
        table.add_row(name.replace("_", " ").capitalize(), str(getattr(config, name)).lower())
    console.print(table)


def _show_report(report: InstallReport) -> None:
    for warning in report.warnings:
        console.print(f"[yellow]⚠️ {escape_markup(warning)}[/yellow]")

    if report.dry_run:
        console.print("\n[bold]The following files would be created:[/bold]")
        for path in report.relative_paths():
            console.print(f"  - {escape_markup(path)}")
    else:
        for step, label in STEP_LABELS.items():
            count = report.counts.get(step, 0)
            if count:
                console.print(f"[green]✓[/green] Installed {count} {label}")
        if report.counts.get("skills"):
            console.print("[yellow]  👉 Be sure to run the /improve-skills command next using Claude Code[/yellow]")

    if report.skipped:
        console.print(f"\n[yellow]Kept {len(report.skipped)} existing file(s) unchanged:[/yellow]")
        for path in report.relative_paths(report.skipped):
            console.print(f"  - {escape_markup(path)}")
        console.print("[dim]Pass --overwrite-standards, --overwrite-commands, --overwrite-agents[/dim]")
        console.print("[dim]or --overwrite-all to replace them.[/dim]")

    for failure in report.failures:
        console.print(f"[red]✗[/red] {escape_markup(failure.destination)}: {escape_markup(failure.reason)}")


def _confirm_reinstall(project_dir: Path, yes: bool) -> bool:
    console.print("[yellow]This will DELETE your current agent-os/ folder and reinstall from scratch.[/yellow]")
    skills_dir = get_claude_skills_dir(project_dir)
    candidates = (get_claude_agents_dir(project_dir), get_claude_commands_dir(project_dir), skills_dir)
    extra = [path for path in candidates if path.is_dir()]
    if extra:
        console.print("[yellow]This will also DELETE:[/yellow]")
        for path in extra:
            suffix = " (Agent OS skills)" if path == skills_dir else ""
            console.print(f"  - {escape_markup(path.relative_to(project_dir))}/{suffix}")

    if yes:
        return True
    return click.confirm("Are you sure you want to proceed?", default=False)


@click.command()
@click.option("--profile", default=None, help="Profile to install (defaults to the base config's profile)")
@_flag_option("claude_code_commands", "Install Claude Code commands")
@_flag_option("use_claude_code_subagents", "Delegate command phases to Claude Code subagents")
@_flag_option("agent_os_commands", "Install tool-agnostic commands into agent-os/commands")
@_flag_option("standards_as_claude_code_skills", "Expose standards as Claude Code Skills")
@_flag_option("lazy_load_workflows", "Reference workflows instead of inlining them")
@click.option(
    "--re-install", "--re_install", "re_install", is_flag=True, help="Delete and rebuild an existing installation"
)
@_overwrite_option("all", "Replace every existing file")
@_overwrite_option("standards", "Replace existing standards and skills")
@_overwrite_option("commands", "Replace existing commands")
@_overwrite_option("agents", "Replace existing agents")
@click.option("--dry-run", "--dry_run", "dry_run", is_flag=True, help="Show what would be installed without writing")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompts")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option(
    "--base-dir",
    "--base_dir",
    "base_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base installation directory (default: ~/agent-os)",
)
@click.option(
    "--project-dir",
    "--project_dir",
    "project_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project to install into (default: current directory)",
)
def install(
    profile: str | None,
    claude_code_commands: bool | None,
    use_claude_code_subagents: bool | None,
    agent_os_commands: bool | None,
    standards_as_claude_code_skills: bool | None,
    lazy_load_workflows: bool | None,
    re_install: bool,
    overwrite_all: bool,
    overwrite_standards: bool,
    overwrite_commands: bool,
    overwrite_agents: bool,
    dry_run: bool,
    yes: bool,
    verbose: bool,
    base_dir: Path | None,
    project_dir: Path | None,
):
    """Install Agent OS into a project."""
    if verbose:
        init_json_logging(verbose=True)

    base_dir = get_base_dir(base_dir)
    project_dir = (project_dir or Path.cwd()).resolve()

    try:
        check_not_base_installation(project_dir)
        validate_base_installation(base_dir)
        if not dry_run:
            preflight_check(project_dir)

        config = effective_config(
            load_base_config(base_dir),
            profile=profile,
            claude_code_commands=claude_code_commands,
            use_claude_code_subagents=use_claude_code_subagents,
            agent_os_commands=agent_os_commands,
            standards_as_claude_code_skills=standards_as_claude_code_skills,
            lazy_load_workflows=lazy_load_workflows,
        )
        config, warnings = validate_config(config, get_profiles_dir(base_dir))
    except (ConfigError, PreflightError) as e:
        print_error(e)
        sys.exit(1)

    for warning in warnings:
        console.print(f"[yellow]Warning:[/yellow] {escape_markup(warning)}")

    if dry_run:
        console.print("[yellow]DRY RUN - No files will be actually created[/yellow]\n")
    _show_configuration(config)

    try:
        existing = load_project_config(project_dir)
    except ConfigError as e:
        print_error(e)
        sys.exit(1)

    overwrite = OverwritePolicy(
        all=overwrite_all or (re_install and existing is not None),
        standards=overwrite_standards,
        commands=overwrite_commands,
        agents=overwrite_agents,
    )
    installer = ProjectInstaller(base_dir, project_dir, config, dry_run=dry_run, overwrite=overwrite)

    try:
        if re_install and existing is not None:
            if not _confirm_reinstall(project_dir, yes or dry_run):
                console.print("Re-installation cancelled")
                return
            skills = installed_skill_names(installer.resolver, existing.profile, project_dir)
            with ReinstallTransaction(project_dir, skills, dry_run=dry_run) as transaction:
                report = installer.install()
                if report.ok:
                    transaction.mark_complete()
        else:
            if existing is not None:
                profile_name = escape_markup(existing.profile)
                console.print(f"[dim]Updating existing installation (profile '{profile_name}')[/dim]")
            report = installer.install()
    except (ConfigError, ReinstallError) as e:
        print_error(e)
        sys.exit(1)

    _show_report(report)

    if not report.ok:
        if re_install and existing is not None and not dry_run:
            console.print("[red]Re-installation failed; the previous installation was restored.[/red]")
        sys.exit(1)

    if not dry_run:
        console.print("\n[green]✓ Agent OS has been successfully installed in your project![/green]")
