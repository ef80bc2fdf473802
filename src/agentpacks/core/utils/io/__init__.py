"""I/O utilities for agentpacks.

- Core: atomic writes, directory management, text I/O
- JSON: read/write with deterministic formatting
- YAML: safe reads and block-style dumps
"""
from __future__ import annotations

from .core import (
    PathLike,
    atomic_write,
    ensure_directory,
    read_text,
    read_text_or_none,
    remove_path,
    write_text,
)
from .json import (
    dumps_json,
    read_json,
    write_json_atomic,
)
from .yaml import (
    dump_yaml_string,
    read_yaml,
)

__all__ = [
    # core
    "PathLike",
    "ensure_directory",
    "atomic_write",
    "read_text",
    "read_text_or_none",
    "write_text",
    "remove_path",
    # json
    "dumps_json",
    "read_json",
    "write_json_atomic",
    # yaml
    "read_yaml",
    "dump_yaml_string",
]
