"""
schemabridge CLI commands: forward, reverse, validate, clusters.
"""

from pathlib import Path

import typer

from schemabridge.cli.utils import (
    load_validation_input,
    print_human_diagnostics,
    resolve_manifest,
)
from schemabridge.core.clustering import group_by_domain
from schemabridge.core.errors import ParseError, SchemaBridgeError
from schemabridge.core.forward import relational_to_validation
from schemabridge.core.reverse import ReverseResult, low_confidence, reverse_transform
from schemabridge.core.serialization import (
    dump_schema,
    load_relational,
    write_modular,
    write_schema,
)
from schemabridge.core.validator import validate_schema


def _fail(e: SchemaBridgeError) -> typer.Exit:
    if isinstance(e, ParseError):
        typer.echo(f"Parse error: {e}", err=True)
    else:
        typer.echo(f"Error: {e}", err=True)
    return typer.Exit(code=1)


def _print_report(result: ReverseResult) -> None:
    typer.echo("Relation resolutions:")
    if not result.resolutions:
        typer.echo("  (no reference fields)")
    for r in result.resolutions:
        typer.echo(
            f"  {r.qualified_name} -> {r.match.target_entity} "
            f"[{r.match.strategy.value}, {r.match.confidence:.2f}]"
        )


def forward_command(
    input: str | None = typer.Argument(None, help="Relational schema JSON"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output file or directory"),
    modular: bool = typer.Option(False, "--modular", help="Write one document per domain"),
    manifest: str | None = typer.Option(None, "--manifest", "-m", help="Path to schemabridge.toml"),
) -> None:
    """
    Convert a relational schema to a validation schema.
    """
    try:
        mf = resolve_manifest(manifest)
        schema = load_relational(Path(input or mf.paths.relational))

        errors, warnings = validate_schema(schema)
        if errors:
            print_human_diagnostics(errors, warnings)
            raise typer.Exit(code=1)
        for warning in warnings:
            typer.echo(f"WARNING: {warning}", err=True)

        result = relational_to_validation(schema)

        if modular or mf.output.modular:
            out_dir = Path(output or Path(mf.paths.validation).with_suffix(""))
            groups = group_by_domain(result, mf.domains)
            for path in write_modular(result, groups, out_dir):
                typer.echo(f"Wrote {path}")
        elif output:
            write_schema(result, Path(output))
            typer.echo(f"Wrote {output}")
        else:
            typer.echo(dump_schema(result))

    except SchemaBridgeError as e:
        raise _fail(e) from e


def reverse_command(
    input: str | None = typer.Argument(
        None, help="Validation schema JSON, a .py file or a dotted module with pydantic models"
    ),
    output: str | None = typer.Option(None, "--output", "-o", help="Output file"),
    report: bool = typer.Option(False, "--report", help="Print how each relation was resolved"),
    min_confidence: float | None = typer.Option(
        None, "--min-confidence", help="Flag resolutions below this confidence"
    ),
    manifest: str | None = typer.Option(None, "--manifest", "-m", help="Path to schemabridge.toml"),
) -> None:
    """
    Convert a validation schema to a relational schema, inferring relations.
    """
    try:
        mf = resolve_manifest(manifest)
        schema = load_validation_input(input or mf.paths.validation)
        result = reverse_transform(schema)

        if output:
            write_schema(result.schema, Path(output))
            typer.echo(f"Wrote {output}")
        else:
            typer.echo(dump_schema(result.schema))

        if report:
            _print_report(result)

        threshold = mf.reverse.min_confidence if min_confidence is None else min_confidence
        for r in low_confidence(result, threshold):
            typer.echo(
                f"WARNING: {r.qualified_name} -> {r.match.target_entity} "
                f"({r.match.strategy.value}, {r.match.confidence:.2f}) needs review",
                err=True,
            )

    except SchemaBridgeError as e:
        raise _fail(e) from e


def validate_command(
    input: str | None = typer.Argument(None, help="Relational schema JSON"),
    manifest: str | None = typer.Option(None, "--manifest", "-m", help="Path to schemabridge.toml"),
) -> None:
    """
    Check a relational schema for empty entities/enums and duplicate names.
    """
    try:
        mf = resolve_manifest(manifest)
        schema = load_relational(Path(input or mf.paths.relational))
        errors, warnings = validate_schema(schema)
        print_human_diagnostics(errors, warnings)
        if errors:
            raise typer.Exit(code=1)

    except SchemaBridgeError as e:
        raise _fail(e) from e


def clusters_command(
    input: str | None = typer.Argument(None, help="Validation schema JSON or python module"),
    manifest: str | None = typer.Option(None, "--manifest", "-m", help="Path to schemabridge.toml"),
) -> None:
    """
    Show how validation objects would be grouped into domain modules.
    """
    try:
        mf = resolve_manifest(manifest)
        schema = load_validation_input(input or mf.paths.validation)
        for group in group_by_domain(schema, mf.domains):
            typer.echo(f"{group.name} ({group.display_name})")
            if group.objects:
                typer.echo(f"  objects: {', '.join(group.objects)}")
            if group.enums:
                typer.echo(f"  enums: {', '.join(group.enums)}")

    except SchemaBridgeError as e:
        raise _fail(e) from e
