"""Workspace configuration."""
from __future__ import annotations

from .workspace import (
    CONFIG_FILENAMES,
    ENV_PREFIX,
    WorkspaceConfig,
    env_overrides,
    find_config_file,
    load_workspace_config,
)

__all__ = [
    "CONFIG_FILENAMES",
    "ENV_PREFIX",
    "WorkspaceConfig",
    "env_overrides",
    "find_config_file",
    "load_workspace_config",
]
