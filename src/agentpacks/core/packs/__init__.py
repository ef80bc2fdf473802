"""Packs: data model, loading, validation, dependency resolution and merge."""
from __future__ import annotations

from .loader import PackLoader, load_manifest, load_pack_dir
from .merger import MergeResult, merge_packs
from .model import (
    FEATURE_IDS,
    WILDCARD,
    Agent,
    Command,
    FeatureItem,
    LoadedPack,
    McpServerEntry,
    MergedFeatures,
    PackManifest,
    Rule,
    Skill,
    normalize_feature_ids,
    parse_allow_list,
)
from .resolver import DependencyResolution, resolve_dependencies
from .validation import ValidationIssue, raise_for_issues, validate_manifests, validate_pack_dir

__all__ = [
    "FEATURE_IDS",
    "WILDCARD",
    "PackManifest",
    "FeatureItem",
    "Rule",
    "Command",
    "Agent",
    "Skill",
    "McpServerEntry",
    "LoadedPack",
    "MergedFeatures",
    "normalize_feature_ids",
    "parse_allow_list",
    "PackLoader",
    "load_manifest",
    "load_pack_dir",
    "DependencyResolution",
    "resolve_dependencies",
    "MergeResult",
    "merge_packs",
    "ValidationIssue",
    "validate_manifests",
    "raise_for_issues",
    "validate_pack_dir",
]
