"""
JSON documents for both schema trees.

Relational documents have an ``entities`` key, validation documents an
``objects`` key; both are plain pydantic dumps of the IR.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ValidationError

from . import ir
from .clustering import DomainGroup
from .errors import ParseError

logger = logging.getLogger(__name__)


def _read_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ParseError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ParseError(f"{path}:{e.lineno}:{e.colno}: invalid JSON: {e.msg}") from e
    if not isinstance(data, dict):
        raise ParseError(f"{path}: expected a JSON object")
    return data


def _validate(model: type[BaseModel], data: dict, path: Path) -> BaseModel:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"{path}: not a valid {model.__name__} document:\n{e}") from e


def load_relational(path: Path) -> ir.RelationalSchema:
    """Load a relational schema document."""
    return _validate(ir.RelationalSchema, _read_json(path), path)  # type: ignore[return-value]


def load_validation(path: Path) -> ir.ValidationSchema:
    """Load a validation schema document."""
    return _validate(ir.ValidationSchema, _read_json(path), path)  # type: ignore[return-value]


def load_schema(path: Path) -> ir.RelationalSchema | ir.ValidationSchema:
    """Load either kind of document, deciding by its top-level keys."""
    data = _read_json(path)
    if "entities" in data:
        return _validate(ir.RelationalSchema, data, path)  # type: ignore[return-value]
    if "objects" in data:
        return _validate(ir.ValidationSchema, data, path)  # type: ignore[return-value]
    raise ParseError(f"{path}: expected an 'entities' or 'objects' key")


def dump_schema(schema: ir.RelationalSchema | ir.ValidationSchema) -> str:
    return schema.model_dump_json(indent=2, exclude_none=True)


def write_schema(schema: ir.RelationalSchema | ir.ValidationSchema, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_schema(schema) + "\n", encoding="utf-8")


def subset(schema: ir.ValidationSchema, group: DomainGroup) -> ir.ValidationSchema:
    """The part of ``schema`` belonging to one domain group."""
    return ir.ValidationSchema(
        objects={n: schema.objects[n] for n in group.objects if n in schema.objects},
        enums={n: schema.enums[n] for n in group.enums if n in schema.enums},
    )


def write_modular(
    schema: ir.ValidationSchema, groups: list[DomainGroup], out_dir: Path
) -> list[Path]:
    """
    Write one document per domain group plus an ``index.json`` manifest.

    Returns:
        Paths written, index last
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    index = []
    for group in groups:
        path = out_dir / f"{group.name}.json"
        write_schema(subset(schema, group), path)
        written.append(path)
        index.append(
            {
                "name": group.name,
                "display_name": group.display_name,
                "file": path.name,
                "objects": group.objects,
                "enums": group.enums,
            }
        )

    index_path = out_dir / "index.json"
    index_path.write_text(json.dumps({"groups": index}, indent=2) + "\n", encoding="utf-8")
    written.append(index_path)
    logger.info(f"Wrote {len(groups)} module(s) to {out_dir}")
    return written
