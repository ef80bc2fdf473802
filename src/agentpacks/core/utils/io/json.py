"""JSON I/O utilities with atomic writes."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .core import atomic_write

DEFAULT_JSON_CONFIG = {
    "indent": 2,
    "sort_keys": True,
    "ensure_ascii": False,
}

_MISSING = object()


def dumps_json(data: Any, *, sort_keys: bool = True, indent: int = 2) -> str:
    """Serialize ``data`` the way agentpacks writes JSON files (trailing newline)."""
    return json.dumps(data, indent=indent, sort_keys=sort_keys, ensure_ascii=False) + "\n"


def read_json(file_path: Path | str, *, default: Any = _MISSING) -> Any:
    """Read a JSON document.

    Args:
        file_path: Path to JSON file
        default: Value to return if the file doesn't exist. If not provided,
            FileNotFoundError is raised.
    """
    path = Path(file_path)
    if not path.exists():
        if default is not _MISSING:
            return default
        raise FileNotFoundError(f"JSON file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json_atomic(
    file_path: Path | str,
    data: Any,
    *,
    sort_keys: bool | None = None,
    indent: int | None = None,
) -> None:
    """Atomically write JSON to ``file_path`` with a trailing newline."""
    text = dumps_json(
        data,
        sort_keys=DEFAULT_JSON_CONFIG["sort_keys"] if sort_keys is None else sort_keys,
        indent=DEFAULT_JSON_CONFIG["indent"] if indent is None else indent,
    )
    atomic_write(Path(file_path), lambda f: f.write(text))


__all__ = ["dumps_json", "read_json", "write_json_atomic"]
