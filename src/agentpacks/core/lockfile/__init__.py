"""Lockfile and remote source installation."""
from __future__ import annotations

from .installer import (
    ENTRY_POINT_GROUP,
    InstallMode,
    InstallOutcome,
    InstallReport,
    SourceInstaller,
    SourceResolver,
    discover_resolvers,
    required_source_keys,
)
from .lock import (
    DEFAULT_LOCKFILE_NAME,
    LOCKFILE_VERSION,
    FrozenCheck,
    Lockfile,
    LockfileManager,
    LockfileSourceEntry,
    compute_integrity,
    compute_tree_integrity,
    is_lockfile_frozen_valid,
    verify_integrity,
)
from .sources import SourceRef, source_key

__all__ = [
    "LOCKFILE_VERSION",
    "DEFAULT_LOCKFILE_NAME",
    "Lockfile",
    "LockfileSourceEntry",
    "LockfileManager",
    "FrozenCheck",
    "compute_integrity",
    "compute_tree_integrity",
    "verify_integrity",
    "is_lockfile_frozen_valid",
    "SourceRef",
    "source_key",
    "ENTRY_POINT_GROUP",
    "SourceResolver",
    "InstallMode",
    "InstallOutcome",
    "InstallReport",
    "SourceInstaller",
    "discover_resolvers",
    "required_source_keys",
]
