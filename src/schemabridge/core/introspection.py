"""
Runtime introspection of pydantic models into a ValidationSchema.

The reverse direction consumes already-built validation definitions. In
Python those are pydantic models and Enum classes; this module walks their
field annotations and constraint metadata and produces the validation tree
the reverse transformer works on.
"""

from __future__ import annotations

import datetime
import decimal
import enum
import importlib
import importlib.util
import inspect
import logging
import sys
import types
import typing
import uuid
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from . import ir
from .errors import IntrospectionError

logger = logging.getLogger(__name__)

# Name used for model classes that are not part of the introspected namespace
UNREGISTERED_OBJECT = "Nested"

_STRING_CONSTRAINTS = (
    ("min_length", "min_length"),
    ("max_length", "max_length"),
    ("pattern", "regex"),
)

_NUMBER_CONSTRAINTS = (
    ("gt", "gt"),
    ("ge", "gte"),
    ("lt", "lt"),
    ("le", "lte"),
    ("multiple_of", "multiple_of"),
)


def _is_model(obj: Any) -> bool:
    return inspect.isclass(obj) and issubclass(obj, BaseModel) and obj is not BaseModel


def _is_enum(obj: Any) -> bool:
    return inspect.isclass(obj) and issubclass(obj, enum.Enum) and len(obj.__members__) > 0


class _Introspector:
    """Converts annotations to validation types against a registry of named classes."""

    def __init__(self, registry: dict[type, str]):
        self.registry = registry
        self.extra_enums: dict[str, type[enum.Enum]] = {}

    def string_type(self, metadata: Sequence[Any], *formats: str) -> ir.StringType:
        checks = [ir.StringCheck(kind=kind) for kind in formats]  # type: ignore[arg-type]
        for item in metadata:
            for attr, kind in _STRING_CONSTRAINTS:
                value = getattr(item, attr, None)
                if value is not None:
                    checks.append(ir.StringCheck(kind=kind, value=value))  # type: ignore[arg-type]
        return ir.StringType(checks=checks)

    def number_type(self, metadata: Sequence[Any], is_int: bool) -> ir.NumberType:
        checks = [ir.NumberCheck(kind="int")] if is_int else []
        for item in metadata:
            for attr, kind in _NUMBER_CONSTRAINTS:
                value = getattr(item, attr, None)
                if isinstance(value, (int, float)) and not isinstance(value, bool):
                    checks.append(ir.NumberCheck(kind=kind, value=value))  # type: ignore[arg-type]
        return ir.NumberType(checks=checks)

    def convert(self, annotation: Any, metadata: Sequence[Any] = ()) -> ir.ValidationType:
        """Map a Python type annotation to a validation type."""
        origin = typing.get_origin(annotation)
        args = typing.get_args(annotation)

        if origin is typing.Annotated:
            return self.convert(args[0], [*metadata, *args[1:]])

        if annotation is None or annotation is type(None):
            return ir.NullType()
        if annotation is Any:
            return ir.UnknownType()

        if origin is typing.Union or origin is types.UnionType:
            options = [a for a in args if a is not type(None)]
            if not options:
                return ir.NullType()
            converted = [self.convert(a, metadata) for a in options]
            inner = converted[0] if len(converted) == 1 else ir.UnionType(options=converted)
            if len(options) < len(args):
                return ir.NullableType(inner=inner)
            return inner

        if origin is typing.Literal:
            literals = [
                ir.LiteralType(value=a.value if isinstance(a, enum.Enum) else a) for a in args
            ]
            return literals[0] if len(literals) == 1 else ir.UnionType(options=literals)

        if origin in (list, set, frozenset) or origin is Sequence:
            return ir.ArrayType(element=self.convert(args[0]) if args else ir.UnknownType())
        if origin is tuple:
            return ir.TupleType(items=[self.convert(a) for a in args if a is not Ellipsis])
        if origin in (dict, Mapping):
            key, value = args if len(args) == 2 else (str, Any)
            return ir.RecordType(key_type=self.convert(key), value_type=self.convert(value))

        if not inspect.isclass(annotation):
            logger.debug(f"Unsupported annotation {annotation!r}, using unknown")
            return ir.UnknownType()

        # bool before int: bool is an int subclass
        if issubclass(annotation, bool):
            return ir.BooleanType()
        if _is_enum(annotation):
            return ir.EnumTypeRef(name=self.enum_name(annotation))
        if issubclass(annotation, str):
            return self.string_type(metadata)
        if issubclass(annotation, uuid.UUID):
            return self.string_type(metadata, "uuid")
        if issubclass(annotation, int):
            return self.number_type(metadata, is_int=True)
        if issubclass(annotation, (float, decimal.Decimal)):
            return self.number_type(metadata, is_int=False)
        if issubclass(annotation, (datetime.date, datetime.datetime)):
            return ir.DateType()
        if issubclass(annotation, BaseModel):
            return ir.ObjectRef(name=self.registry.get(annotation, UNREGISTERED_OBJECT))
        return ir.UnknownType()

    def enum_name(self, cls: type[enum.Enum]) -> str:
        name = self.registry.get(cls)
        if name is None:
            name = cls.__name__
            self.extra_enums.setdefault(name, cls)
        return name

    def convert_field(self, name: str, info: FieldInfo) -> ir.ObjectFieldSpec:
        vtype = self.convert(info.annotation, info.metadata)
        if not info.is_required():
            default = info.default
            if isinstance(default, enum.Enum):
                default = default.value
            if isinstance(default, (bool, int, float, str)):
                vtype = ir.DefaultedType(inner=vtype, value=default)
            else:
                vtype = ir.OptionalType(inner=vtype)
        return ir.ObjectFieldSpec(name=name, type=vtype, documentation=info.description)

    def convert_model(self, name: str, cls: type[BaseModel]) -> ir.ObjectSpec:
        fields = [self.convert_field(n, info) for n, info in cls.model_fields.items()]
        return ir.ObjectSpec(name=name, fields=fields, documentation=_own_doc(cls))


def _own_doc(cls: type) -> str | None:
    doc = cls.__dict__.get("__doc__")
    return inspect.cleandoc(doc) if doc else None


def _enum_spec(name: str, cls: type[enum.Enum]) -> ir.ValidationEnumSpec:
    values = [m.value if isinstance(m.value, str) else m.name for m in cls]
    return ir.ValidationEnumSpec(name=name, values=values, documentation=_own_doc(cls))


def introspect_models(namespace: Mapping[str, Any] | types.ModuleType) -> ir.ValidationSchema:
    """
    Build a ValidationSchema from pydantic models and Enum classes.

    Args:
        namespace: Mapping of export name -> model or enum class, or a module
            whose public attributes are scanned

    Returns:
        ValidationSchema with objects and enums in namespace order
    """
    if isinstance(namespace, types.ModuleType):
        items = {k: v for k, v in vars(namespace).items() if not k.startswith("_")}
    else:
        items = dict(namespace)

    models = {name: obj for name, obj in items.items() if _is_model(obj)}
    enums = {name: obj for name, obj in items.items() if _is_enum(obj)}

    registry: dict[type, str] = {}
    for name, obj in [*models.items(), *enums.items()]:
        registry.setdefault(obj, name)

    introspector = _Introspector(registry)
    objects = [introspector.convert_model(name, cls) for name, cls in models.items()]
    enum_specs = [_enum_spec(name, cls) for name, cls in enums.items()]
    enum_specs.extend(_enum_spec(name, cls) for name, cls in introspector.extra_enums.items())

    logger.info(f"Introspected {len(objects)} model(s), {len(enum_specs)} enum(s)")
    return ir.ValidationSchema.build(objects=objects, enums=enum_specs)


def load_namespace(target: str) -> types.ModuleType:
    """
    Import a module given as ``pkg.module`` or as a path to a ``.py`` file.

    Raises:
        IntrospectionError: If the module cannot be found or fails to import
    """
    path = Path(target)
    try:
        if path.suffix == ".py":
            if not path.exists():
                raise IntrospectionError(f"Module file not found: {path}")
            module_name = f"_schemabridge_models_{path.stem}"
            spec = importlib.util.spec_from_file_location(module_name, path)
            if spec is None or spec.loader is None:
                raise IntrospectionError(f"Cannot load module from {path}")
            module = importlib.util.module_from_spec(spec)
            sys.modules[module_name] = module
            spec.loader.exec_module(module)
            return module
        return importlib.import_module(target)
    except IntrospectionError:
        raise
    except Exception as e:
        raise IntrospectionError(f"Failed to import {target}: {e}") from e
