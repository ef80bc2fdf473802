"""End-to-end generation: config → sources → packs → resolve → merge → targets.

Everything is rebuilt from scratch on each call; the lockfile is the only
state carried between runs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from agentpacks.core.config.workspace import WorkspaceConfig, load_workspace_config
from agentpacks.core.diff.engine import DiffResult, diff_outputs
from agentpacks.core.exceptions import DependencyResolutionError
from agentpacks.core.lockfile.installer import InstallMode, InstallReport, SourceInstaller, SourceResolver
from agentpacks.core.lockfile.lock import LockfileManager
from agentpacks.core.lockfile.sources import SourceRef
from agentpacks.core.models.profiles import check_model_ids, resolve_models
from agentpacks.core.packs.loader import PackLoader
from agentpacks.core.packs.merger import MergeResult, merge_packs
from agentpacks.core.packs.model import LoadedPack
from agentpacks.core.packs.resolver import DependencyResolution, resolve_dependencies
from agentpacks.core.packs.validation import raise_for_issues, validate_manifests
from agentpacks.core.targets.base import GenerateOptions, GenerateResult, TargetDescriptor
from agentpacks.core.targets.registry import select_targets
from agentpacks.core.targets.writer import FileSystemWriter, OutputWriter, PreviewWriter

logger = logging.getLogger(__name__)


@dataclass
class GenerationReport:
    packs: List[str]
    resolution: DependencyResolution
    results: List[GenerateResult] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    model_warnings: List[str] = field(default_factory=list)
    diffs: List[DiffResult] = field(default_factory=list)
    install: Optional[InstallReport] = None
    preview: bool = False

    @property
    def files_written(self) -> List[str]:
        return list(dict.fromkeys(p for r in self.results for p in r.files_written))

    @property
    def files_deleted(self) -> List[str]:
        return list(dict.fromkeys(p for r in self.results for p in r.files_deleted))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "packs": list(self.packs),
            "preview": self.preview,
            "resolution": self.resolution.to_dict(),
            "targets": [r.to_dict() for r in self.results],
            "warnings": list(self.warnings),
            "modelWarnings": list(self.model_warnings),
            "diffs": [d.to_dict() for d in self.diffs],
            "install": self.install.to_dict() if self.install else None,
        }


def has_remote_refs(refs: Iterable[str]) -> bool:
    return any(SourceRef.parse(r).is_remote for r in refs)


def install_sources(
    project_root: Path,
    config: WorkspaceConfig,
    mode: InstallMode = InstallMode.INSTALL,
    resolvers: Optional[Mapping[str, SourceResolver]] = None,
) -> InstallReport:
    manager = LockfileManager(project_root, config.lockfile)
    installer = SourceInstaller(project_root, manager, resolvers)
    return installer.install(config.packs, mode)


def load_enabled_packs(project_root: Path, config: WorkspaceConfig) -> List[LoadedPack]:
    packs = PackLoader(project_root).load_refs(config.packs)
    disabled = set(config.disabled)
    enabled = [p for p in packs if p.name not in disabled]
    if len(enabled) != len(packs):
        logger.info("Disabled packs skipped: %s", ", ".join(sorted(disabled & {p.name for p in packs})))
    return enabled


def resolve_and_merge(packs: Sequence[LoadedPack]) -> tuple[DependencyResolution, MergeResult]:
    """Validate, resolve and merge ``packs``.

    Raises:
        PackValidationError: On load-time manifest problems
        DependencyResolutionError: When the graph has cycles, conflicts or
            missing dependencies (``context`` carries the full resolution)
    """
    manifests = [p.manifest for p in packs]
    raise_for_issues(validate_manifests(manifests))

    resolution = resolve_dependencies(manifests)
    if not resolution.ok:
        problems: List[str] = []
        problems.extend(f"cycle: {' -> '.join(c)}" for c in resolution.cycles)
        problems.extend(f"conflict: {a} <-> {b}" for a, b in resolution.conflict_pairs)
        problems.extend(f"missing: {p} requires {d}" for p, d in resolution.missing_deps)
        raise DependencyResolutionError(
            "Pack dependency resolution failed: " + "; ".join(problems),
            context=resolution.to_dict(),
        )

    by_name = {p.name: p for p in packs}
    ordered = [by_name[name] for name in resolution.sorted]
    return resolution, merge_packs(ordered)


def generate_workspace(
    project_root: Path,
    config: Optional[WorkspaceConfig] = None,
    *,
    targets: Optional[Sequence[str]] = None,
    profile: Optional[str] = None,
    delete: Optional[bool] = None,
    preview: bool = False,
    lock_mode: InstallMode = InstallMode.INSTALL,
    resolvers: Optional[Mapping[str, SourceResolver]] = None,
    extra_targets: Iterable[TargetDescriptor] = (),
    writer: Optional[OutputWriter] = None,
) -> GenerationReport:
    """Run the whole pipeline for one project.

    Explicit arguments override the workspace config. With ``preview`` no
    generated file is written; the report carries diffs instead.
    """
    project_root = Path(project_root).resolve()
    config = config or load_workspace_config(project_root)
    profile = profile if profile is not None else config.model_profile
    delete_existing = config.delete if delete is None else delete

    install_report: Optional[InstallReport] = None
    if has_remote_refs(config.packs):
        install_report = install_sources(project_root, config, lock_mode, resolvers)

    packs = load_enabled_packs(project_root, config)
    resolution, merged = resolve_and_merge(packs)
    features = merged.features

    selected = select_targets(targets if targets is not None else config.target_ids, extra_targets)
    if writer is None:
        writer = PreviewWriter(project_root) if preview else FileSystemWriter(project_root)

    report = GenerationReport(
        packs=list(resolution.sorted),
        resolution=resolution,
        warnings=list(merged.warnings),
        install=install_report,
        preview=preview,
    )

    if features.models is not None:
        if profile and profile not in features.models.profiles:
            report.model_warnings.append(f'Model profile "{profile}" not found; base model settings used.')
        report.model_warnings.extend(check_model_ids(resolve_models(features.models, profile)))

    for base_dir in config.base_dirs:
        for target in selected:
            options = GenerateOptions(
                project_root=project_root,
                features=features,
                base_dir=base_dir,
                enabled_features=config.feature_ids,
                model_profile=profile,
                delete_existing=delete_existing,
                writer=writer,
            )
            result = target.generate(options)
            report.results.append(result)
            logger.info("Generated %s in %s: %d files", target.id, base_dir, len(result.files_written))

    if isinstance(writer, PreviewWriter):
        report.diffs = diff_outputs(writer.files, project_root=project_root, deleted=writer.deleted_files())
    return report


__all__ = [
    "GenerationReport",
    "has_remote_refs",
    "install_sources",
    "load_enabled_packs",
    "resolve_and_merge",
    "generate_workspace",
]
