"""Builtin target catalogue and target selection."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from agentpacks.core.exceptions import TargetError
from agentpacks.core.packs.model import WILDCARD
from agentpacks.data import read_data_yaml

from .base import TargetDescriptor
from .claude_code import ClaudeCodeTarget
from .cursor import CursorTarget
from .generic import GenericTarget, TargetLayout
from .opencode import OpenCodeTarget


def load_builtin_layouts() -> List[TargetLayout]:
    data = read_data_yaml("", "targets.yaml") or {}
    return [TargetLayout.from_dict(entry) for entry in data.get("targets") or []]


def builtin_targets() -> List[TargetDescriptor]:
    """Fresh instances of every builtin target, bespoke ones first."""
    targets: List[TargetDescriptor] = [ClaudeCodeTarget(), CursorTarget(), OpenCodeTarget()]
    targets.extend(GenericTarget(layout) for layout in load_builtin_layouts())
    return targets


def select_targets(
    ids: Optional[Sequence[str]] = None,
    extra: Iterable[TargetDescriptor] = (),
) -> List[TargetDescriptor]:
    """Targets for ``ids`` in request order (``None`` or ``"*"`` means all).

    ``extra`` descriptors are added to the catalogue and take precedence over
    a builtin with the same id.

    Raises:
        TargetError: If any requested id is unknown (all unknown ids listed)
    """
    catalogue: Dict[str, TargetDescriptor] = {t.id: t for t in builtin_targets()}
    for target in extra:
        catalogue[target.id] = target

    if ids is None or WILDCARD in ids:
        return list(catalogue.values())

    requested = list(dict.fromkeys(ids))
    unknown = [i for i in requested if i not in catalogue]
    if unknown:
        raise TargetError(
            f"Unknown target(s): {', '.join(unknown)}",
            context={"unknown": unknown, "available": sorted(catalogue)},
        )
    return [catalogue[i] for i in requested]


__all__ = ["load_builtin_layouts", "builtin_targets", "select_targets"]
