"""Preview diffs of generated output against the files on disk."""
from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

ADDED = "added"
MODIFIED = "modified"
UNCHANGED = "unchanged"
DELETED = "deleted"

CONTEXT_LINES = 3


@dataclass
class DiffResult:
    path: str
    status: str
    diff_lines: List[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.status != UNCHANGED

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "status": self.status, "diffLines": list(self.diff_lines)}


def unified_lines(old_text: str, new_text: str, *, context: int = CONTEXT_LINES) -> List[str]:
    """Hunk headers plus ``" "``/``"-"``/``"+"`` prefixed lines (no file headers)."""
    diff = list(difflib.unified_diff(old_text.splitlines(), new_text.splitlines(), n=context, lineterm=""))
    # The first two lines are the ---/+++ file headers.
    return diff[2:]


def _read_existing(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8")


def diff_file(
    path: Union[str, Path],
    new_content: str,
    *,
    old_content: Optional[str] = None,
    display_path: Optional[str] = None,
) -> DiffResult:
    """Compare ``new_content`` with ``path`` on disk (or with ``old_content``)."""
    shown = display_path or Path(path).as_posix()
    existing = old_content if old_content is not None else _read_existing(Path(path))
    if existing is None:
        lines = new_content.splitlines()
        diff = [f"@@ -0,0 +1,{len(lines)} @@"] + [f"+{line}" for line in lines]
        return DiffResult(shown, ADDED, diff)
    if existing == new_content:
        return DiffResult(shown, UNCHANGED, [])
    diff = unified_lines(existing, new_content)
    if not diff:
        # Differences invisible to splitlines (line endings, trailing newline).
        diff = ["@@ line endings or trailing newline changed @@"]
    return DiffResult(shown, MODIFIED, diff)


def diff_deleted(path: Union[str, Path], *, display_path: Optional[str] = None) -> DiffResult:
    shown = display_path or Path(path).as_posix()
    existing = _read_existing(Path(path)) or ""
    lines = existing.splitlines()
    return DiffResult(shown, DELETED, [f"@@ -1,{len(lines)} +0,0 @@"] + [f"-{line}" for line in lines])


def diff_outputs(
    files: Mapping[Path, str],
    *,
    project_root: Optional[Path] = None,
    deleted: Iterable[Path] = (),
) -> List[DiffResult]:
    """Diff a ``{absolute_path: content}`` mapping, sorted by path.

    ``deleted`` files are reported with status ``deleted`` after the others.
    """

    def _display(p: Path) -> str:
        if project_root is not None:
            try:
                return p.relative_to(project_root).as_posix()
            except ValueError:
                pass
        return p.as_posix()

    results = [diff_file(p, files[p], display_path=_display(p)) for p in sorted(files)]
    results.extend(diff_deleted(p, display_path=_display(p)) for p in sorted(deleted))
    return results


def format_diff(results: Iterable[DiffResult], *, include_unchanged: bool = False) -> str:
    """Render results as unified-style text."""
    chunks: List[str] = []
    for result in results:
        if result.status == UNCHANGED:
            if include_unchanged:
                chunks.append(f"= {result.path} (unchanged)")
            continue
        old = "/dev/null" if result.status == ADDED else f"a/{result.path}"
        new = "/dev/null" if result.status == DELETED else f"b/{result.path}"
        chunks.append("\n".join([f"--- {old}", f"+++ {new}", *result.diff_lines]))
    return "\n".join(chunks) + ("\n" if chunks else "")


def summarize_diff(results: Iterable[DiffResult]) -> Dict[str, int]:
    counts = {ADDED: 0, MODIFIED: 0, UNCHANGED: 0, DELETED: 0}
    for result in results:
        counts[result.status] = counts.get(result.status, 0) + 1
    return counts


__all__ = [
    "ADDED",
    "MODIFIED",
    "UNCHANGED",
    "DELETED",
    "DiffResult",
    "diff_file",
    "diff_deleted",
    "diff_outputs",
    "unified_lines",
    "format_diff",
    "summarize_diff",
]
