import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .clustering import DomainAssignment, DomainConfig
from .errors import ConfigError

logger = logging.getLogger(__name__)

MANIFEST_NAME = "schemabridge.toml"


@dataclass
class PathsConfig:
    """Default input/output locations."""

    relational: str = "schema.json"
    validation: str = "validation.json"


@dataclass
class OutputConfig:
    """Forward output layout."""

    modular: bool = False


@dataclass
class ReverseConfig:
    """Reverse transform reporting."""

    min_confidence: float = 0.6  # resolutions below this are flagged for review


@dataclass
class ProjectManifest:
    """
    Project manifest loaded from schemabridge.toml.

    Contains default paths, output layout, reverse reporting threshold and
    explicit domain assignments for modular output.
    """

    paths: PathsConfig = field(default_factory=PathsConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    reverse: ReverseConfig = field(default_factory=ReverseConfig)
    domains: DomainConfig = field(default_factory=DomainConfig)


def _paths_config(paths_data: dict) -> PathsConfig:
    # Environment variables win over the file
    return PathsConfig(
        relational=os.environ.get("SCHEMA_PATH", paths_data.get("relational", "schema.json")),
        validation=os.environ.get("OUTPUT_PATH", paths_data.get("validation", "validation.json")),
    )


def load_manifest(path: Path) -> ProjectManifest:
    """
    Load a manifest file.

    ``SCHEMA_PATH`` and ``OUTPUT_PATH`` environment variables override the
    relational and validation paths.

    Raises:
        ConfigError: If the file is not valid TOML or a value has the wrong type
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    paths_data = data.get("paths", {})
    output_data = data.get("output", {})
    reverse_data = data.get("reverse", {})
    domains_data = data.get("domains", {})

    modular = output_data.get("modular", False)
    if not isinstance(modular, bool):
        raise ConfigError(f"[output] modular must be true or false, got {modular!r}")

    min_confidence = reverse_data.get("min_confidence", 0.6)
    if isinstance(min_confidence, bool) or not isinstance(min_confidence, (int, float)):
        raise ConfigError(f"[reverse] min_confidence must be a number, got {min_confidence!r}")
    if not 0.0 <= min_confidence <= 1.0:
        raise ConfigError(f"[reverse] min_confidence must be between 0 and 1, got {min_confidence}")

    domains = DomainConfig(
        domains={
            name: DomainAssignment(
                objects=list(members.get("objects", [])),
                enums=list(members.get("enums", [])),
            )
            for name, members in domains_data.items()
        }
    )

    return ProjectManifest(
        paths=_paths_config(paths_data),
        output=OutputConfig(modular=modular),
        reverse=ReverseConfig(min_confidence=float(min_confidence)),
        domains=domains,
    )


def find_manifest(start: Path | None = None) -> ProjectManifest:
    """
    Load ``schemabridge.toml`` from ``start`` (default: cwd), or defaults if absent.
    """
    path = (start or Path.cwd()) / MANIFEST_NAME
    if not path.exists():
        logger.debug(f"No {MANIFEST_NAME} in {path.parent}, using defaults")
        return ProjectManifest(paths=_paths_config({}))
    return load_manifest(path)
