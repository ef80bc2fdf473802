"""Lockfile management.

The lockfile pins every remote pack source to a concrete version together with
content hashes of what was installed from it:

    {
      "lockfileVersion": 1,
      "sources": {
        "github:acme/packs": {
          "requestedRef": "main",
          "resolvedRef": "3f2c...",
          "resolvedAt": "2026-01-01T00:00:00Z",
          "integrity": {"base": "sha256-..."}
        }
      }
    }

A missing lockfile is an empty lockfile. A present one is schema-validated.
"""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, NamedTuple

from agentpacks.core.exceptions import IntegrityError, LockfileError, SchemaValidationError
from agentpacks.core.schemas import validate_payload
from agentpacks.core.utils.io import read_json, write_json_atomic

logger = logging.getLogger(__name__)

LOCKFILE_VERSION = 1
DEFAULT_LOCKFILE_NAME = "agentpacks.lock"


def compute_integrity(content: bytes | str) -> str:
    """Return ``sha256-<hex>`` for ``content`` (str is hashed as UTF-8)."""
    data = content.encode("utf-8") if isinstance(content, str) else content
    return "sha256-" + hashlib.sha256(data).hexdigest()


def compute_tree_integrity(files: Mapping[str, bytes | str]) -> str:
    """Hash a ``{relpath: content}`` tree deterministically.

    Paths are sorted and each entry contributes its path, a NUL, its length
    and its bytes, so moving bytes between files changes the digest.
    """
    digest = hashlib.sha256()
    for relpath in sorted(files):
        content = files[relpath]
        data = content.encode("utf-8") if isinstance(content, str) else content
        digest.update(relpath.replace("\\", "/").encode("utf-8"))
        digest.update(b"\0")
        digest.update(str(len(data)).encode("ascii"))
        digest.update(b"\0")
        digest.update(data)
    return "sha256-" + digest.hexdigest()


def verify_integrity(actual: str, expected: str, *, label: str = "") -> None:
    """Raise ``IntegrityError`` unless ``actual == expected``."""
    if actual != expected:
        what = f" for {label}" if label else ""
        raise IntegrityError(
            f"Integrity mismatch{what}: expected {expected}, got {actual}",
            context={"item": label, "expected": expected, "actual": actual},
        )


@dataclass(frozen=True, slots=True)
class LockfileSourceEntry:
    """One locked source.

    Attributes:
        requested_ref: Ref as requested in the config (``latest`` when floating)
        resolved_ref: Concrete version or commit it resolved to
        resolved_at: ISO-8601 UTC timestamp of the resolution
        integrity: ``sha256-`` hash per contained pack/skill
    """

    requested_ref: str
    resolved_ref: str
    resolved_at: str
    integrity: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "requestedRef": self.requested_ref,
            "resolvedRef": self.resolved_ref,
            "resolvedAt": self.resolved_at,
            "integrity": dict(sorted(self.integrity.items())),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LockfileSourceEntry:
        return cls(
            requested_ref=str(data["requestedRef"]),
            resolved_ref=str(data["resolvedRef"]),
            resolved_at=str(data["resolvedAt"]),
            integrity={str(k): str(v) for k, v in (data.get("integrity") or {}).items()},
        )


@dataclass
class Lockfile:
    version: int = LOCKFILE_VERSION
    sources: dict[str, LockfileSourceEntry] = field(default_factory=dict)

    def get(self, key: str) -> LockfileSourceEntry | None:
        return self.sources.get(key)

    def set(self, key: str, entry: LockfileSourceEntry) -> None:
        self.sources[key] = entry

    def to_dict(self) -> dict[str, Any]:
        return {
            "lockfileVersion": self.version,
            "sources": {k: self.sources[k].to_dict() for k in sorted(self.sources)},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, source: str = "") -> Lockfile:
        """Parse a lockfile document.

        Raises:
            LockfileError: On an unsupported version or schema violation
        """
        version = data.get("lockfileVersion") if isinstance(data, Mapping) else None
        if version != LOCKFILE_VERSION:
            raise LockfileError(
                f"Unsupported lockfileVersion {version!r} (expected {LOCKFILE_VERSION})",
                context={"path": source},
            )
        try:
            validate_payload(dict(data), "lockfile", source=source)
        except SchemaValidationError as e:
            raise LockfileError(str(e), context={"path": source, "errors": e.errors}) from e
        return cls(
            version=LOCKFILE_VERSION,
            sources={str(k): LockfileSourceEntry.from_dict(v) for k, v in data["sources"].items()},
        )


class FrozenCheck(NamedTuple):
    valid: bool
    missing: list[str]


def is_lockfile_frozen_valid(lockfile: Lockfile, required_keys: Iterable[str]) -> FrozenCheck:
    """Check that every required key is locked.

    ``missing`` lists all absent keys, in the order requested.
    """
    missing = [k for k in dict.fromkeys(required_keys) if k not in lockfile.sources]
    return FrozenCheck(valid=not missing, missing=missing)


class LockfileManager:
    """Loads and saves the project lockfile.

    Output is deterministic: sources and integrity maps are written with
    sorted keys through an atomic write.
    """

    def __init__(self, project_root: Path, lockfile_path: Path | str | None = None) -> None:
        self.project_root = Path(project_root)
        path = Path(lockfile_path) if lockfile_path is not None else Path(DEFAULT_LOCKFILE_NAME)
        self.path = path if path.is_absolute() else self.project_root / path

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Lockfile:
        """Load the lockfile, or an empty one if it does not exist.

        Raises:
            LockfileError: If the file is unreadable JSON or invalid
        """
        if not self.exists():
            logger.debug("No lockfile at %s; starting empty", self.path)
            return Lockfile()
        try:
            data = read_json(self.path)
        except ValueError as e:
            raise LockfileError(f"Lockfile is not valid JSON: {self.path}: {e}", context={"path": str(self.path)}) from e
        return Lockfile.from_dict(data, source=str(self.path))

    def save(self, lockfile: Lockfile) -> None:
        write_json_atomic(self.path, lockfile.to_dict(), sort_keys=True)
        logger.debug("Saved lockfile %s (%d sources)", self.path, len(lockfile.sources))


__all__ = [
    "LOCKFILE_VERSION",
    "DEFAULT_LOCKFILE_NAME",
    "compute_integrity",
    "compute_tree_integrity",
    "verify_integrity",
    "LockfileSourceEntry",
    "Lockfile",
    "FrozenCheck",
    "is_lockfile_frozen_valid",
    "LockfileManager",
]
