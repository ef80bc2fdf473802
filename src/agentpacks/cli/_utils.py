"""Shared CLI utilities."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Sequence

from agentpacks.core.config.workspace import CONFIG_FILENAMES
from agentpacks.core.exceptions import (
    ConfigError,
    DependencyResolutionError,
    PackValidationError,
    SchemaValidationError,
)
from agentpacks.core.lockfile.installer import InstallMode

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2

# Errors the user fixes in configuration rather than in the environment.
INVALID_INPUT_ERRORS = (ConfigError, SchemaValidationError, PackValidationError, DependencyResolutionError)


def find_project_root(start: Optional[Path] = None) -> Path:
    """Nearest ancestor of ``start`` (default: cwd) holding a workspace config.

    Falls back to ``start`` itself when none is found.
    """
    here = (start or Path.cwd()).resolve()
    for candidate in (here, *here.parents):
        if any((candidate / name).is_file() for name in CONFIG_FILENAMES):
            return candidate
    return here


def get_repo_root(args: argparse.Namespace) -> Path:
    if getattr(args, "repo_root", None):
        return Path(args.repo_root).resolve()
    return find_project_root()


def split_ids(values: Optional[Sequence[str]]) -> Optional[List[str]]:
    """Flatten repeated/comma-separated id options; ``None`` when not given."""
    if not values:
        return None
    out: List[str] = []
    for value in values:
        out.extend(v.strip() for v in value.split(",") if v.strip())
    return out or None


def lock_mode_from_args(args: argparse.Namespace) -> InstallMode:
    if getattr(args, "frozen", False):
        return InstallMode.FROZEN
    if getattr(args, "update", False):
        return InstallMode.UPDATE
    return InstallMode.INSTALL


def exit_code_for(error: Exception) -> int:
    return EXIT_INVALID if isinstance(error, INVALID_INPUT_ERRORS) else EXIT_FAILURE


__all__ = [
    "EXIT_OK",
    "EXIT_FAILURE",
    "EXIT_INVALID",
    "find_project_root",
    "get_repo_root",
    "split_ids",
    "lock_mode_from_args",
    "exit_code_for",
]
