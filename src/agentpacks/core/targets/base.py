"""Target descriptor contract.

A target is an AI coding tool with its own on-disk conventions. Every target
exposes ``id``, ``name``, ``supported_features`` and ``generate(options)``;
the pipeline treats builtin and caller-supplied targets the same way.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar

from agentpacks.core.packs.model import FEATURE_IDS, FeatureItem, MergedFeatures

from .rendering import is_generated, render_json
from .writer import FileSystemWriter, OutputWriter

I = TypeVar("I", bound=FeatureItem)


@dataclass
class GenerateOptions:
    """Inputs for one target generation run.

    Attributes:
        project_root: Project root; reported paths are relative to it
        features: Merged feature set
        base_dir: Output root relative to ``project_root``
        enabled_features: Requested feature ids (unknown ids are ignored)
        model_profile: Active model profile, if any
        delete_existing: Remove each kind's output directory before writing, and
            single-file outputs whose kind has become empty
        writer: Output writer (a ``FileSystemWriter`` when omitted)
    """

    project_root: Path
    features: MergedFeatures
    base_dir: str = "."
    enabled_features: Sequence[str] = FEATURE_IDS
    model_profile: Optional[str] = None
    delete_existing: bool = True
    writer: Optional[OutputWriter] = None

    @property
    def output_root(self) -> Path:
        return (Path(self.project_root) / self.base_dir) if self.base_dir not in ("", ".") else Path(self.project_root)

    def get_writer(self) -> OutputWriter:
        if self.writer is None:
            self.writer = FileSystemWriter(Path(self.project_root))
        return self.writer


@dataclass
class GenerateResult:
    target_id: str
    files_written: List[str] = field(default_factory=list)
    files_deleted: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": self.target_id,
            "filesWritten": list(self.files_written),
            "filesDeleted": list(self.files_deleted),
            "warnings": list(self.warnings),
        }


class TargetOutput:
    """Writes below the output root and records the result."""

    def __init__(self, target_id: str, options: GenerateOptions) -> None:
        self.writer = options.get_writer()
        self.root = options.output_root
        self.result = GenerateResult(target_id=target_id)
        self.delete_existing = options.delete_existing

    def path(self, relpath: str) -> Path:
        return self.root / relpath

    def write(self, relpath: str, content: str) -> None:
        written = self.writer.write_text(self.path(relpath), content)
        rel = self.writer.relative(written)
        if rel not in self.result.files_written:
            self.result.files_written.append(rel)

    def read(self, relpath: str) -> Optional[str]:
        return self.writer.read_text(self.path(relpath))

    def delete(self, relpath: str) -> None:
        if self.writer.delete(self.path(relpath)):
            self.result.files_deleted.append(self.writer.relative(self.path(relpath)))

    def written_here(self, relpath: str) -> bool:
        """True when this target already wrote ``relpath`` in the current run."""
        return self.writer.relative(self.path(relpath)) in self.result.files_written

    def delete_stale(self, relpath: str) -> None:
        """Remove a generated single-file output whose kind is now empty.

        Hand-written files and files written earlier in the same run (for
        example an ``AGENTS.md`` shared with another target) are kept.
        """
        if not self.delete_existing or self.writer.wrote(self.path(relpath)):
            return
        text = self.read(relpath)
        if text is not None and is_generated(text):
            self.delete(relpath)

    def drop_json_keys(self, relpath: str, keys: Iterable[str], keep: Iterable[str] = ()) -> None:
        """Remove owned ``keys`` from a shared JSON document.

        The file is deleted when only ``keep`` keys (or nothing) remain.
        """
        if not self.delete_existing:
            return
        text = self.read(relpath)
        if text is None:
            return
        try:
            document = json.loads(text)
        except ValueError:
            return
        keys = [key for key in keys if isinstance(document, dict) and key in document]
        if not keys:
            return
        for key in keys:
            del document[key]
        self.save_json(relpath, document, keep)

    def save_json(self, relpath: str, document: Dict[str, Any], keep: Iterable[str] = ()) -> None:
        if set(document) <= set(keep):
            self.delete(relpath)
        else:
            self.write(relpath, render_json(document))

    def warn(self, message: str) -> None:
        self.result.warnings.append(message)


class TargetDescriptor(ABC):
    id: str = ""
    name: str = ""
    supported_features: Tuple[str, ...] = ()

    def effective_features(self, options: GenerateOptions) -> List[str]:
        """Supported ∩ enabled, in canonical order; unsupported ones drop silently."""
        enabled = set(options.enabled_features)
        return [f for f in FEATURE_IDS if f in self.supported_features and f in enabled]

    def applicable(self, items: Sequence[I]) -> List[I]:
        return [item for item in items if item.applies_to(self.id)]

    @abstractmethod
    def generate(self, options: GenerateOptions) -> GenerateResult:
        """Emit this target's files for ``options``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


__all__ = ["GenerateOptions", "GenerateResult", "TargetOutput", "TargetDescriptor"]
