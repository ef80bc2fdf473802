"""Core I/O primitives for agentpacks.

Generated files and the lockfile are written through ``atomic_write`` so a
crash never leaves a half-written file in place: data goes to a temporary file
in the destination directory, is fsync'd, then swapped in with ``os.replace``.
"""
from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional, TextIO, Union

PathLike = Union[str, Path]


def ensure_directory(path: PathLike, create: bool = True) -> Path:
    """Ensure ``path`` is an existing directory.

    Raises:
        FileNotFoundError: If ``create`` is False and the directory is missing
        NotADirectoryError: If ``path`` exists but is a file
    """
    path = Path(path)
    if path.exists():
        if not path.is_dir():
            raise NotADirectoryError(f"Path exists but is not a directory: {path}")
        return path
    if not create:
        raise FileNotFoundError(f"Directory does not exist: {path}")
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(
    path: PathLike,
    write_fn: Callable[[TextIO], None],
    *,
    encoding: str = "utf-8",
) -> None:
    """Write to ``path`` atomically using a temp file + fsync + rename."""
    path = Path(path)
    ensure_directory(path.parent)

    tmp_path: Optional[Path] = None
    try:
        with tempfile.NamedTemporaryFile(
            "w",
            encoding=encoding,
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            newline="",
        ) as f:
            tmp_path = Path(f.name)
            write_fn(f)
            f.flush()
            os.fsync(f.fileno())
        os.replace(str(tmp_path), str(path))
        tmp_path = None
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


def read_text(path: PathLike) -> str:
    """Read a UTF-8 text file; missing files raise ``FileNotFoundError``."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Text file not found: {path}")
    return path.read_text(encoding="utf-8")


def read_text_or_none(path: PathLike) -> Optional[str]:
    path = Path(path)
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def write_text(path: PathLike, content: str) -> None:
    """Atomically write UTF-8 text to ``path``."""

    def _writer(f: TextIO) -> None:
        f.write(content)

    atomic_write(Path(path), _writer)


def remove_path(path: PathLike) -> bool:
    """Remove a file or a whole directory tree.

    Returns:
        True when something was removed, False when ``path`` did not exist.
    """
    path = Path(path)
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False


__all__ = [
    "PathLike",
    "ensure_directory",
    "atomic_write",
    "read_text",
    "read_text_or_none",
    "write_text",
    "remove_path",
]
