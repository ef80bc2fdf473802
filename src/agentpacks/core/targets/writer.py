"""Output writers used by target generation.

Targets never touch the filesystem directly; they go through an
``OutputWriter``. ``FileSystemWriter`` writes for real (atomically);
``PreviewWriter`` only records what would be written or deleted so the diff
engine can compare it with the current disk state.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from agentpacks.core.utils.io import read_text_or_none, remove_path, write_text

logger = logging.getLogger(__name__)

PathArg = Union[str, Path]


class OutputWriter(ABC):
    """Writes generated files below a project root."""

    def __init__(self, project_root: Path) -> None:
        self.project_root = Path(project_root)
        self.written: Set[Path] = set()

    def resolve(self, path: PathArg) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self.project_root / p

    def wrote(self, path: PathArg) -> bool:
        """True when ``path`` was written through this writer and not deleted since."""
        return self.resolve(path) in self.written

    def _forget(self, resolved: Path) -> None:
        self.written = {p for p in self.written if p != resolved and resolved not in p.parents}

    def relative(self, path: PathArg) -> str:
        resolved = self.resolve(path)
        try:
            return resolved.relative_to(self.project_root).as_posix()
        except ValueError:
            return resolved.as_posix()

    @abstractmethod
    def write_text(self, path: PathArg, content: str) -> Path:
        """Write ``content`` to ``path``; returns the absolute path."""

    @abstractmethod
    def delete(self, path: PathArg) -> bool:
        """Delete a file or directory tree; False when nothing existed."""

    @abstractmethod
    def read_text(self, path: PathArg) -> Optional[str]:
        """Current content of ``path`` as this writer sees it, or None."""


class FileSystemWriter(OutputWriter):
    def write_text(self, path: PathArg, content: str) -> Path:
        resolved = self.resolve(path)
        write_text(resolved, content)
        self.written.add(resolved)
        logger.debug("Wrote %s", resolved)
        return resolved

    def delete(self, path: PathArg) -> bool:
        resolved = self.resolve(path)
        removed = remove_path(resolved)
        self._forget(resolved)
        if removed:
            logger.debug("Deleted %s", resolved)
        return removed

    def read_text(self, path: PathArg) -> Optional[str]:
        return read_text_or_none(self.resolve(path))


class PreviewWriter(OutputWriter):
    """Records writes and deletions in memory; the disk is only read."""

    def __init__(self, project_root: Path) -> None:
        super().__init__(project_root)
        self.files: Dict[Path, str] = {}
        self.deleted: List[Path] = []

    def _is_deleted(self, path: Path) -> bool:
        return any(path == d or d in path.parents for d in self.deleted)

    def _exists(self, path: Path) -> bool:
        if path in self.files or any(path in f.parents for f in self.files):
            return True
        if self._is_deleted(path):
            return False
        return path.exists()

    def write_text(self, path: PathArg, content: str) -> Path:
        resolved = self.resolve(path)
        self.files[resolved] = content
        self.written.add(resolved)
        return resolved

    def delete(self, path: PathArg) -> bool:
        resolved = self.resolve(path)
        existed = self._exists(resolved)
        self._forget(resolved)
        for pending in [f for f in self.files if f == resolved or resolved in f.parents]:
            del self.files[pending]
        if resolved.exists() and resolved not in self.deleted:
            self.deleted.append(resolved)
        return existed

    def read_text(self, path: PathArg) -> Optional[str]:
        resolved = self.resolve(path)
        if resolved in self.files:
            return self.files[resolved]
        if self._is_deleted(resolved):
            return None
        return read_text_or_none(resolved)

    def deleted_files(self) -> List[Path]:
        """Files on disk that would be removed and not written again."""
        out: List[Path] = []
        for d in self.deleted:
            candidates = [d] if d.is_file() else sorted(p for p in d.rglob("*") if p.is_file())
            out.extend(p for p in candidates if p not in self.files)
        return sorted(dict.fromkeys(out))


__all__ = ["OutputWriter", "FileSystemWriter", "PreviewWriter"]
