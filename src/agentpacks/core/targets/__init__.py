"""Target generation: descriptors, layouts, writers and the builtin catalogue."""
from __future__ import annotations

from .base import GenerateOptions, GenerateResult, TargetDescriptor, TargetOutput
from .claude_code import ClaudeCodeTarget
from .cursor import CursorTarget
from .generic import GenericTarget, TargetLayout
from .opencode import OpenCodeTarget
from .registry import builtin_targets, load_builtin_layouts, select_targets
from .rendering import GENERATED_HEADER, is_generated, render_markdown
from .writer import FileSystemWriter, OutputWriter, PreviewWriter

__all__ = [
    "TargetDescriptor",
    "GenerateOptions",
    "GenerateResult",
    "TargetOutput",
    "TargetLayout",
    "GenericTarget",
    "ClaudeCodeTarget",
    "CursorTarget",
    "OpenCodeTarget",
    "builtin_targets",
    "load_builtin_layouts",
    "select_targets",
    "GENERATED_HEADER",
    "is_generated",
    "render_markdown",
    "OutputWriter",
    "FileSystemWriter",
    "PreviewWriter",
]
