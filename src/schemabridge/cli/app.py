"""
schemabridge CLI application.

This module provides the main CLI application and registers all commands.
Command implementations live in schemabridge.cli.commands.
"""

import sys

import typer

from schemabridge.cli.commands import (
    clusters_command,
    forward_command,
    reverse_command,
    validate_command,
)
from schemabridge.cli.utils import configure_logging, version_callback

# =============================================================================
# Main Application
# =============================================================================

app = typer.Typer(
    help="""schemabridge – relational <-> validation schema converter

Commands:
  • forward: relational schema -> validation schema
  • reverse: validation schema (JSON or pydantic models) -> relational schema
  • validate: check a relational schema
  • clusters: preview domain grouping for modular output
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """schemabridge CLI main callback for global options."""
    configure_logging(verbose)


app.command(name="forward")(forward_command)
app.command(name="reverse")(reverse_command)
app.command(name="validate")(validate_command)
app.command(name="clusters")(clusters_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv, standalone_mode=True)


if __name__ == "__main__":
    main(sys.argv[1:])
