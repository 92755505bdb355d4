"""Agent OS CLI entry point."""

import logging
import signal
import sys

import click

from .commands.compile import compile_command
from .commands.install import install
from .commands.profile import profile
from .commands.status import status
from .logging_setup import init_json_logging

logger = logging.getLogger(__name__)

# Conventional exit status for a process ended by SIGTERM
SIGTERM_EXIT_STATUS = 128 + signal.SIGTERM


def _handle_sigterm(signum, frame):
    """Turn SIGTERM into SystemExit so open writers and re-install snapshots clean up."""
    logger.warning("Received SIGTERM, cleaning up")
    sys.exit(SIGTERM_EXIT_STATUS)


@click.group()
@click.version_option(package_name="agent-os-cli")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output (debug logging to stderr)")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Agent OS - compile profiles of standards, workflows and commands into projects."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    init_json_logging(verbose=verbose)
    signal.signal(signal.SIGTERM, _handle_sigterm)


cli.add_command(install)
cli.add_command(compile_command)
cli.add_command(profile)
cli.add_command(status)


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
