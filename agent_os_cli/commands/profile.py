"""Profile management commands for the Agent OS CLI."""

import sys
from pathlib import Path

import click
from rich.table import Table

from ..console import console
from ..console import print_error
from ..exceptions import ConfigError
from ..paths import get_base_dir
from ..profiles.manager import create_profile
from ..profiles.manager import list_profiles
from ..profiles.resolver import ProfileResolver
from ..utils.error_format import escape_markup

# Top-level folders summarized by `profile show`
PROFILE_SECTIONS = ("standards", "workflows", "protocols", "commands", "agents")


@click.group(invoke_without_command=True)
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base installation directory (default: ~/agent-os)",
)
@click.pass_context
def profile(ctx: click.Context, base_dir: Path | None):
    """Manage Agent OS profiles."""
    ctx.ensure_object(dict)
    ctx.obj["base_dir"] = get_base_dir(base_dir)
    if ctx.invoked_subcommand is None:
        click.echo("\n" + ctx.get_help())
        ctx.exit()


@profile.command(name="list")
@click.pass_context
def profile_list(ctx: click.Context):
    """List all available profiles."""
    base_dir: Path = ctx.obj["base_dir"]
    profiles = list_profiles(base_dir)

    if not profiles:
        console.print("[yellow]No profiles found.[/yellow]")
        return

    resolver = ProfileResolver(base_dir)
    table = Table(title="Available Profiles", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="green")
    table.add_column("Inherits from", style="yellow")
    table.add_column("Excludes", justify="right")

    for profile_name in profiles:
        loaded = resolver.load_profile(profile_name)
        table.add_row(profile_name, loaded.parent or "-", str(len(loaded.exclude_inherited_files)))

    console.print(table)


@profile.command(name="show")
@click.argument("name")
@click.pass_context
def profile_show(ctx: click.Context, name: str):
    """Show a profile's inheritance chain and visible files."""
    resolver = ProfileResolver(ctx.obj["base_dir"])
    if not resolver.profile_exists(name):
        print_error(f"Profile '{name}' not found")
        sys.exit(1)

    chain = resolver.resolve_chain(name)
    if not chain.ok:
        print_error(f"Profile '{name}' has an invalid inheritance chain: {chain.detail}")
        sys.exit(1)

    console.print(f"[bold]Profile:[/bold] {escape_markup(name)}")
    console.print(f"[bold]Chain:[/bold] {' -> '.join(escape_markup(p.name) for p in chain.profiles)}")

    for loaded in chain.profiles:
        if loaded.exclude_inherited_files:
            console.print(f"[bold]Excluded by {escape_markup(loaded.name)}:[/bold]")
            for pattern in loaded.exclude_inherited_files:
                console.print(f"  - {escape_markup(pattern)}")

    table = Table(title="Visible Files", show_header=True, header_style="bold cyan")
    table.add_column("Section", style="green")
    table.add_column("Files", justify="right")
    for section in PROFILE_SECTIONS:
        table.add_row(section, str(len(resolver.resolve_files(name, section))))
    console.print(table)


@profile.command(name="create")
@click.argument("name")
@click.option("--inherit-from", default=None, help="Create an empty profile inheriting from this one")
@click.option("--copy-from", default=None, help="Create the profile as a copy of this one")
@click.option("--dry-run", is_flag=True, help="Show what would be created")
@click.pass_context
def profile_create(ctx: click.Context, name: str, inherit_from: str | None, copy_from: str | None, dry_run: bool):
    """Create a new profile."""
    base_dir: Path = ctx.obj["base_dir"]
    try:
        created = create_profile(base_dir, name, inherit_from=inherit_from, copy_from=copy_from, dry_run=dry_run)
    except ConfigError as e:
        print_error(e)
        sys.exit(1)

    if dry_run:
        console.print("[bold]Would create:[/bold]")
        for path in created:
            console.print(f"  - {escape_markup(path.relative_to(base_dir))}")
        return

    console.print(f"[green]✓ Profile '{escape_markup(name)}' created[/green]")
    console.print(f"  Location: {escape_markup(base_dir / 'profiles' / name)}")
