"""
schemabridge CLI package.

- app.py: main Typer application and global options
- commands.py: forward, reverse, validate and clusters commands
- utils.py: shared helpers (version, logging, input loading, diagnostics)
"""

from schemabridge.cli.app import app, main
from schemabridge.cli.utils import get_version, version_callback

__all__ = [
    "app",
    "main",
    "get_version",
    "version_callback",
]
