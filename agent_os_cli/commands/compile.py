"""Compile a single document through a profile."""

import sys
from pathlib import Path

import click

from ..compiler.template import TemplateCompiler
from ..compiler.template import parse_role_data
from ..console import console
from ..console import print_error
from ..exceptions import ConfigError
from ..paths import get_base_dir
from ..profiles.resolver import ProfileResolver
from ..settings import load_base_config
from ..utils.atomic_write import AtomicFileWriter
from ..utils.atomic_write import AtomicWriteError
from ..utils.error_format import escape_markup


def _locate_source(resolver: ProfileResolver, profile: str, source: str) -> Path:
    """A filesystem path wins; otherwise ``source`` is looked up through the profile chain."""
    candidate = Path(source)
    if candidate.is_file():
        return candidate

    resolution = resolver.resolve_file(profile, source)
    if not resolution.ok or resolution.path is None:
        reason = resolution.detail or resolution.status.value
        raise ConfigError(f"Cannot find '{source}' in profile '{profile}' ({reason})")
    return resolution.path


@click.command(name="compile")
@click.argument("source")
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--profile", default=None, help="Profile resolving references (default: base config's profile)")
@click.option(
    "--role-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Role records (<<<key>>> ... <<<END>>>) substituted into {{key}} placeholders",
)
@click.option("--embed-phases", is_flag=True, help="Embed PHASE documents (single-command mode)")
@click.option("--dry-run", is_flag=True, help="Compile and print without writing")
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Base installation directory (default: ~/agent-os)",
)
def compile_command(
    source: str,
    destination: Path,
    profile: str | None,
    role_file: Path | None,
    embed_phases: bool,
    dry_run: bool,
    base_dir: Path | None,
):
    """Compile SOURCE into DESTINATION.

    SOURCE is a file path or a path relative to the profile root
    (e.g. commands/plan-product/single-agent/plan-product.md).
    """
    base_dir = get_base_dir(base_dir)

    try:
        config = load_base_config(base_dir)
        profile = profile or config.profile
        resolver = ProfileResolver(base_dir)
        source_path = _locate_source(resolver, profile, source)
        roles = parse_role_data(role_file.read_text(encoding="utf-8")) if role_file else None

        with AtomicFileWriter(dry_run=dry_run) as writer:
            compiler = TemplateCompiler(resolver, config.flags(), writer=writer)
            artifact = compiler.compile_document(
                source_path, destination, profile, roles=roles, embed_phases=embed_phases
            )
    except (ConfigError, AtomicWriteError) as e:
        print_error(e)
        sys.exit(1)

    for warning in artifact.warnings:
        console.print(f"[yellow]⚠️ {escape_markup(warning)}[/yellow]")

    if dry_run:
        console.print(artifact.content, markup=False, highlight=False)
    else:
        console.print(f"[green]✓[/green] Compiled {escape_markup(source_path)} -> {escape_markup(destination)}")
