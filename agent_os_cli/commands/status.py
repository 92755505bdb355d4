"""Show how a project's installation compares to the current settings."""

import sys
from pathlib import Path

import click
from rich.table import Table

from ..console import console
from ..console import print_error
from ..exceptions import ConfigError
from ..installer.drift import detect_drift
from ..installer.drift import needs_recompile
from ..paths import get_base_dir
from ..settings import load_base_config
from ..settings import load_project_config
from ..utils.error_format import escape_markup
from ..utils.version import needs_migration


def _format_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return escape_markup(value)


@click.command()
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base installation directory (default: ~/agent-os)",
)
@click.option(
    "--project-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project to inspect (default: current directory)",
)
def status(base_dir: Path | None, project_dir: Path | None):
    """Show recorded vs. current settings for this project."""
    project_dir = (project_dir or Path.cwd()).resolve()

    try:
        base = load_base_config(get_base_dir(base_dir))
        project = load_project_config(project_dir)
    except ConfigError as e:
        print_error(e)
        sys.exit(1)

    if project is None:
        console.print("[yellow]Agent OS is not installed in this project.[/yellow]")
        console.print("Run [cyan]agent-os install[/cyan] to install it.")
        return

    drifted = {item.name for item in detect_drift(project, base)}

    table = Table(title="Installation Settings", show_header=True, header_style="bold cyan")
    table.add_column("Setting", style="green")
    table.add_column("Installed")
    table.add_column("Base config")
    recorded = project.settings()
    for name, value in base.settings().items():
        style = "yellow" if name in drifted else ""
        table.add_row(name, _format_value(recorded[name]), _format_value(value), style=style)
    console.print(table)

    console.print(f"[bold]Installed version:[/bold] {escape_markup(project.version)}")
    console.print(f"[bold]Base version:[/bold] {escape_markup(base.version)}")
    if project.last_compiled:
        console.print(f"[bold]Last compiled:[/bold] {escape_markup(project.last_compiled)}")

    if needs_migration(project.version):
        console.print("[yellow]This installation predates the current layout and must be re-installed.[/yellow]")
    if needs_recompile(project, base):
        console.print("[yellow]Re-run [cyan]agent-os install[/cyan] to bring the project up to date.[/yellow]")
    else:
        console.print("[green]✓ Project is up to date[/green]")
