"""
agentpacks data resource helpers.

Bundled JSON schemas (stored as YAML) and builtin target layouts are shipped
inside this package and read through importlib.resources.
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Any

import yaml


def get_data_path(subpackage: str, filename: str = "") -> Path:
    """
    Get absolute path to a bundled data file or directory.

    Args:
        subpackage: Name of the data subdirectory (e.g., "schemas"), or "" for
            the data root
        filename: Optional filename within the subdirectory

    Example:
        >>> get_data_path("schemas", "pack.schema.yaml")
        PosixPath('/path/to/agentpacks/data/schemas/pack.schema.yaml')
    """
    base = Path(str(resources.files("agentpacks.data")))
    if subpackage:
        base = base / subpackage
    return base / filename if filename else base


def read_data_yaml(subpackage: str, filename: str) -> Any:
    """Read and parse a bundled YAML data file."""
    path = get_data_path(subpackage, filename)
    return yaml.safe_load(path.read_text(encoding="utf-8"))


__all__ = ["get_data_path", "read_data_yaml"]
