"""Remote pack source installation under lockfile control.

Network access is delegated to ``SourceResolver`` plugins (one per source
kind). The installer owns the policy:

- ``INSTALL``: locked sources are reused; an intact install directory means no
  resolver call at all. Unlocked sources are resolved, fetched and recorded.
- ``UPDATE``: every source is re-resolved and re-recorded.
- ``FROZEN``: every source must already be locked (checked for all sources
  before any resolver call); nothing is ever re-resolved.

Payloads are hashed before anything touches the disk. Extraction goes to a
temporary sibling directory that replaces the install directory only once
complete, and the lockfile is saved after each successful source.
"""
from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from importlib.metadata import entry_points
from pathlib import Path
from typing import Callable, Iterable, Mapping, Protocol, Sequence, runtime_checkable

from agentpacks.core.exceptions import FrozenLockfileError, SourceResolutionError
from agentpacks.core.utils.io import ensure_directory, remove_path

from .lock import (
    Lockfile,
    LockfileManager,
    LockfileSourceEntry,
    compute_tree_integrity,
    is_lockfile_frozen_valid,
    verify_integrity,
)
from .sources import SourceRef

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "agentpacks.sources"
DEFAULT_SOURCES_DIR = Path(".agentpacks") / "sources"

Payload = Mapping[str, Mapping[str, bytes]]


@runtime_checkable
class SourceResolver(Protocol):
    """Network adapter for one source kind (``github``, ``npm``, ``registry``)."""

    kind: str

    def resolve(self, ref: SourceRef) -> str:
        """Resolve a possibly floating ref (``latest``, a branch) to a concrete one."""
        ...

    def fetch(self, ref: SourceRef, resolved_ref: str) -> Payload:
        """Download ``resolved_ref`` as ``{item_name: {relpath: bytes}}``."""
        ...


class InstallMode(str, Enum):
    INSTALL = "install"
    UPDATE = "update"
    FROZEN = "frozen"


@dataclass(frozen=True, slots=True)
class InstallOutcome:
    source_key: str
    action: str  # "reused" | "installed" | "updated"
    resolved_ref: str
    path: str

    def to_dict(self) -> dict[str, str]:
        return {
            "sourceKey": self.source_key,
            "action": self.action,
            "resolvedRef": self.resolved_ref,
            "path": self.path,
        }


@dataclass
class InstallReport:
    outcomes: list[InstallOutcome] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {"sources": [o.to_dict() for o in self.outcomes]}


def discover_resolvers() -> dict[str, SourceResolver]:
    """Instantiate resolvers registered under the ``agentpacks.sources`` group."""
    found: dict[str, SourceResolver] = {}
    for ep in entry_points(group=ENTRY_POINT_GROUP):
        factory = ep.load()
        resolver = factory() if callable(factory) else factory
        kind = getattr(resolver, "kind", ep.name)
        found.setdefault(str(kind), resolver)
        logger.debug("Registered source resolver %s from %s", kind, ep.value)
    return found


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _safe_relpath(relpath: str) -> Path:
    rel = Path(relpath.replace("\\", "/"))
    if rel.is_absolute() or not rel.parts or ".." in rel.parts:
        raise SourceResolutionError(f"Refusing unsafe path in source payload: {relpath!r}")
    return rel


def read_tree(root: Path) -> dict[str, bytes]:
    """Read every file under ``root`` as ``{posix_relpath: bytes}``."""
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class SourceInstaller:
    """Install remote pack sources into ``<project>/.agentpacks/sources``."""

    def __init__(
        self,
        project_root: Path,
        manager: LockfileManager,
        resolvers: Mapping[str, SourceResolver] | None = None,
        *,
        sources_dir: Path | str = DEFAULT_SOURCES_DIR,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        self.project_root = Path(project_root)
        self.manager = manager
        self.resolvers = dict(resolvers) if resolvers is not None else discover_resolvers()
        sources_path = Path(sources_dir)
        self.sources_dir = sources_path if sources_path.is_absolute() else self.project_root / sources_path
        self.clock = clock

    def install_dir(self, ref: SourceRef) -> Path:
        return self.sources_dir / ref.install_dir_name()

    def install(self, refs: Iterable[str | SourceRef], mode: InstallMode = InstallMode.INSTALL) -> InstallReport:
        """Install every remote ref; local refs are ignored.

        Raises:
            FrozenLockfileError: In frozen mode, if any source is not locked
            IntegrityError: If a payload does not match its locked hash
            SourceResolutionError: If no resolver handles a source kind, or a
                resolver fails
        """
        remote = self._unique_remote(refs)
        lockfile = self.manager.load()

        if mode is InstallMode.FROZEN:
            check = is_lockfile_frozen_valid(lockfile, [r.source_key() for r in remote])
            if not check.valid:
                raise FrozenLockfileError(
                    "Frozen install: sources missing from lockfile: " + ", ".join(check.missing),
                    missing=check.missing,
                    context={"lockfile": str(self.manager.path)},
                )

        report = InstallReport()
        for ref in remote:
            outcome = self._install_one(ref, lockfile, mode)
            report.outcomes.append(outcome)
        return report

    def _unique_remote(self, refs: Iterable[str | SourceRef]) -> list[SourceRef]:
        out: dict[str, SourceRef] = {}
        for raw in refs:
            ref = raw if isinstance(raw, SourceRef) else SourceRef.parse(raw)
            if ref.is_remote:
                out.setdefault(ref.source_key(), ref)
        return list(out.values())

    def _resolver_for(self, ref: SourceRef) -> SourceResolver:
        resolver = self.resolvers.get(ref.kind)
        if resolver is None:
            raise SourceResolutionError(
                f"No source resolver registered for '{ref.kind}' (needed by {ref.raw})",
                context={"kind": ref.kind, "ref": ref.raw},
            )
        return resolver

    def _is_intact(self, dest: Path, entry: LockfileSourceEntry) -> bool:
        if not dest.is_dir() or not entry.integrity:
            return False
        for item, expected in entry.integrity.items():
            item_dir = dest / item
            if not item_dir.is_dir() or compute_tree_integrity(read_tree(item_dir)) != expected:
                return False
        return True

    def _install_one(self, ref: SourceRef, lockfile: Lockfile, mode: InstallMode) -> InstallOutcome:
        key = ref.source_key()
        dest = self.install_dir(ref)
        entry = lockfile.get(key)

        if entry is not None and (
            mode is InstallMode.FROZEN
            or (mode is InstallMode.INSTALL and entry.requested_ref == ref.requested_ref)
        ):
            if self._is_intact(dest, entry):
                logger.debug("Reusing locked source %s@%s", key, entry.resolved_ref)
                return InstallOutcome(key, "reused", entry.resolved_ref, str(dest))
            payload = self._fetch(ref, entry.resolved_ref)
            for item, expected in entry.integrity.items():
                if item not in payload:
                    raise SourceResolutionError(
                        f"Locked item '{item}' missing from {key}@{entry.resolved_ref}",
                        context={"source": key, "item": item},
                    )
                verify_integrity(compute_tree_integrity(payload[item]), expected, label=f"{key}/{item}")
            self._extract(payload, dest)
            logger.info("Installed %s@%s from lockfile", key, entry.resolved_ref)
            return InstallOutcome(key, "installed", entry.resolved_ref, str(dest))

        resolver = self._resolver_for(ref)
        try:
            resolved = resolver.resolve(ref)
        except SourceResolutionError:
            raise
        except Exception as e:
            raise SourceResolutionError(f"Failed to resolve {ref.raw}: {e}", context={"source": key}) from e
        payload = self._fetch(ref, resolved)
        integrity = {item: compute_tree_integrity(files) for item, files in payload.items()}
        self._extract(payload, dest)

        lockfile.set(
            key,
            LockfileSourceEntry(
                requested_ref=ref.requested_ref,
                resolved_ref=resolved,
                resolved_at=self.clock(),
                integrity=integrity,
            ),
        )
        self.manager.save(lockfile)
        action = "updated" if entry is not None else "installed"
        logger.info("%s %s -> %s", action.capitalize(), key, resolved)
        return InstallOutcome(key, action, resolved, str(dest))

    def _fetch(self, ref: SourceRef, resolved_ref: str) -> Payload:
        resolver = self._resolver_for(ref)
        try:
            payload = resolver.fetch(ref, resolved_ref)
        except SourceResolutionError:
            raise
        except Exception as e:
            raise SourceResolutionError(
                f"Failed to fetch {ref.raw}@{resolved_ref}: {e}", context={"source": ref.source_key()}
            ) from e
        if not payload:
            raise SourceResolutionError(f"Source {ref.raw}@{resolved_ref} contained no packs")
        return payload

    def _extract(self, payload: Payload, dest: Path) -> None:
        # Validate every path before creating anything.
        for item in payload:
            _safe_relpath(item)
        planned = [
            (Path(item) / _safe_relpath(relpath), data)
            for item, files in payload.items()
            for relpath, data in files.items()
        ]

        ensure_directory(dest.parent)
        tmp_dir = Path(tempfile.mkdtemp(prefix=f".{dest.name}.", suffix=".tmp", dir=str(dest.parent)))
        try:
            for rel, data in planned:
                target = tmp_dir / rel
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_bytes(data)
            remove_path(dest)
            os.replace(str(tmp_dir), str(dest))
        except BaseException:
            remove_path(tmp_dir)
            raise


def required_source_keys(refs: Sequence[str]) -> list[str]:
    """Lockfile keys of the remote refs in ``refs`` (config order, deduplicated)."""
    keys: dict[str, None] = {}
    for raw in refs:
        ref = SourceRef.parse(raw)
        if ref.is_remote:
            keys.setdefault(ref.source_key(), None)
    return list(keys)


__all__ = [
    "ENTRY_POINT_GROUP",
    "DEFAULT_SOURCES_DIR",
    "SourceResolver",
    "InstallMode",
    "InstallOutcome",
    "InstallReport",
    "SourceInstaller",
    "discover_resolvers",
    "read_tree",
    "required_source_keys",
]
