"""Preview diff engine."""
from __future__ import annotations

from .engine import (
    ADDED,
    DELETED,
    MODIFIED,
    UNCHANGED,
    DiffResult,
    diff_deleted,
    diff_file,
    diff_outputs,
    format_diff,
    summarize_diff,
    unified_lines,
)

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
