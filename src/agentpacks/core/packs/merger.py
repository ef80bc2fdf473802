"""Merge an ordered list of packs into one feature set.

The merger never reorders: whatever order the caller supplies is the
precedence order. Named items are first-pack-wins with one warning per
skipped duplicate; ignore patterns are a plain union.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, TypeVar

from agentpacks.core.models.config import merge_models_configs

from .model import FeatureItem, LoadedPack, McpServerEntry, MergedFeatures

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=FeatureItem)


@dataclass
class MergeResult:
    features: MergedFeatures
    warnings: List[str] = field(default_factory=list)


def _skip_warning(kind: str, name: str, pack: str, owner: str) -> str:
    return f'{kind} "{name}" from pack "{pack}" skipped (already defined by pack "{owner}").'


def _merge_named(
    merged: List[T],
    owners: Dict[str, str],
    incoming: Sequence[T],
    pack_name: str,
    warnings: List[str],
) -> None:
    for item in incoming:
        owner = owners.get(item.name)
        if owner is not None:
            warnings.append(_skip_warning(item.kind, item.name, pack_name, owner))
            continue
        owners[item.name] = pack_name
        merged.append(item)


def merge_packs(packs: Sequence[LoadedPack]) -> MergeResult:
    """Merge ``packs`` in the given order."""
    features = MergedFeatures()
    warnings: List[str] = []
    owners: Dict[str, Dict[str, str]] = {k: {} for k in ("rules", "commands", "agents", "skills")}
    seen_ignore: Dict[str, None] = {}

    for pack in packs:
        _merge_named(features.rules, owners["rules"], pack.rules, pack.name, warnings)
        _merge_named(features.commands, owners["commands"], pack.commands, pack.name, warnings)
        _merge_named(features.agents, owners["agents"], pack.agents, pack.name, warnings)
        _merge_named(features.skills, owners["skills"], pack.skills, pack.name, warnings)

        for server in pack.mcp_servers:
            existing = features.mcp_servers.get(server.name)
            if existing is not None:
                warnings.append(_skip_warning("MCP server", server.name, pack.name, existing.pack_name))
                continue
            features.mcp_servers[server.name] = McpServerEntry(
                name=server.name, config=dict(server.config), pack_name=pack.name
            )

        for pattern in pack.ignore_patterns:
            seen_ignore.setdefault(pattern, None)

    features.ignore_patterns = list(seen_ignore)

    models, model_warnings = merge_models_configs((p.name, p.models) for p in packs if p.models is not None)
    features.models = models
    warnings.extend(model_warnings)

    for warning in warnings:
        logger.info(warning)
    logger.debug("Merged %d packs: %s", len(packs), features.counts())
    return MergeResult(features=features, warnings=warnings)


__all__ = ["MergeResult", "merge_packs"]
