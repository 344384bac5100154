"""
schemabridge CLI utilities.

Shared helpers used across CLI commands.
"""

import logging
import os
import platform
from pathlib import Path

import typer

from schemabridge._version import get_version
from schemabridge.core.errors import IntrospectionError
from schemabridge.core.introspection import introspect_models, load_namespace
from schemabridge.core.ir import ValidationSchema
from schemabridge.core.manifest import ProjectManifest, find_manifest, load_manifest
from schemabridge.core.serialization import load_validation


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"schemabridge version {get_version()}")
        typer.echo(
            f"Python {platform.python_implementation()} {platform.python_version()} "
            f"on {platform.system()}"
        )
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Configure root logging from ``--verbose`` or the LOG_LEVEL environment variable."""
    level_name = "DEBUG" if verbose else os.environ.get("LOG_LEVEL", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("schemabridge").setLevel(level)


def resolve_manifest(manifest: str | None) -> ProjectManifest:
    """Load an explicit manifest path, or ``schemabridge.toml`` from the cwd if present."""
    if manifest:
        return load_manifest(Path(manifest))
    return find_manifest(Path.cwd())


def load_validation_input(source: str) -> ValidationSchema:
    """
    Load a validation schema from a JSON document or a python module.

    ``source`` is a ``.json`` path, a ``.py`` path or a dotted module name.
    """
    if source.endswith(".json"):
        return load_validation(Path(source))
    module = load_namespace(source)
    schema = introspect_models(module)
    if not schema.objects and not schema.enums:
        raise IntrospectionError(f"No pydantic models or enums found in {source}")
    return schema


def print_human_diagnostics(errors: list[str], warnings: list[str]) -> None:
    """Print diagnostics in human-readable format."""
    if errors:
        typer.echo("Validation failed:\n", err=True)
        for err in errors:
            typer.echo(f"ERROR: {err}", err=True)

    if warnings:
        typer.echo("Validation warnings:\n", err=False)
        for warn in warnings:
            typer.echo(f"WARNING: {warn}", err=False)

    if not errors and not warnings:
        typer.echo("OK: schema is valid.")


__all__ = [
    "configure_logging",
    "get_version",
    "load_validation_input",
    "print_human_diagnostics",
    "resolve_manifest",
    "version_callback",
]
