"""Dependency graph resolution for packs.

``resolve_dependencies`` is a pure function: it never raises on a bad graph.
Cycles, conflicts and missing dependencies are all collected so one run
reports everything; callers decide whether to abort.
"""
from __future__ import annotations

from collections import deque
from typing import Any, Dict, List, NamedTuple, Protocol, Sequence, Set, Tuple


class ManifestLike(Protocol):
    name: str
    dependencies: List[str]
    conflicts: List[str]


class DependencyResolution(NamedTuple):
    sorted: List[str]
    cycles: List[List[str]]
    conflict_pairs: List[Tuple[str, str]]
    missing_deps: List[Tuple[str, str]]

    @property
    def ok(self) -> bool:
        return not self.cycles and not self.conflict_pairs and not self.missing_deps

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "sorted": list(self.sorted),
            "cycles": [list(c) for c in self.cycles],
            "conflictPairs": [list(p) for p in self.conflict_pairs],
            "missingDeps": [list(m) for m in self.missing_deps],
        }


def _topological_order(names: List[str], deps: List[List[int]]) -> List[int]:
    """Kahn's algorithm over index adjacency; dependencies come first.

    In-degree counts dependents. Nodes nothing depends on are consumed first
    and the result is reversed, so independent packs keep their input order.
    """
    indeg = [0] * len(names)
    for edges in deps:
        for d in edges:
            indeg[d] += 1

    ready = deque(i for i in reversed(range(len(names))) if indeg[i] == 0)
    order: List[int] = []
    while ready:
        n = ready.popleft()
        order.append(n)
        for d in reversed(deps[n]):
            indeg[d] -= 1
            if indeg[d] == 0:
                ready.append(d)
    order.reverse()
    return order


def _canonical_cycle(cycle: List[int]) -> Tuple[int, ...]:
    body = cycle[:-1]
    pivot = body.index(min(body))
    return tuple(body[pivot:] + body[:pivot])


def _trace_cycles(residual: List[int], deps: List[List[int]]) -> List[List[int]]:
    """Iterative DFS restricted to ``residual``; each cycle is closed (``[a, b, a]``)."""
    in_residual = set(residual)
    visited: Set[int] = set()
    found: List[List[int]] = []
    seen: Set[Tuple[int, ...]] = set()

    for start in residual:
        if start in visited:
            continue
        path: List[int] = [start]
        on_path = {start: 0}
        stack = [iter([d for d in deps[start] if d in in_residual])]
        visited.add(start)
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                stack.pop()
                done = path.pop()
                del on_path[done]
                continue
            if nxt in on_path:
                cycle = path[on_path[nxt]:] + [nxt]
                key = _canonical_cycle(cycle)
                if key not in seen:
                    seen.add(key)
                    found.append(cycle)
                continue
            if nxt in visited:
                continue
            visited.add(nxt)
            on_path[nxt] = len(path)
            path.append(nxt)
            stack.append(iter([d for d in deps[nxt] if d in in_residual]))
    return found


def resolve_dependencies(manifests: Sequence[ManifestLike]) -> DependencyResolution:
    """Resolve load order, cycles, conflicts and missing dependencies.

    Duplicate names keep their first occurrence; uniqueness itself is
    enforced by load-time validation. Self-references are ignored here.
    """
    nodes: List[ManifestLike] = []
    index: Dict[str, int] = {}
    for manifest in manifests:
        if manifest.name in index:
            continue
        index[manifest.name] = len(nodes)
        nodes.append(manifest)
    names = [m.name for m in nodes]

    missing: List[Tuple[str, str]] = []
    deps: List[List[int]] = []
    for manifest in nodes:
        edges: List[int] = []
        for dep in dict.fromkeys(manifest.dependencies or []):
            if dep not in index:
                missing.append((manifest.name, dep))
            elif dep != manifest.name:
                edges.append(index[dep])
        deps.append(edges)

    order = _topological_order(names, deps)
    cycles: List[List[str]] = []
    if len(order) < len(nodes):
        placed = set(order)
        residual = [i for i in range(len(nodes)) if i not in placed]
        cycles = [[names[i] for i in c] for c in _trace_cycles(residual, deps)]

    conflicts: List[Tuple[str, str]] = []
    conflict_keys: Set[Tuple[str, str]] = set()
    for manifest in nodes:
        for other in manifest.conflicts or []:
            if other == manifest.name or other not in index:
                continue
            key = tuple(sorted((manifest.name, other)))
            if key in conflict_keys:
                continue
            conflict_keys.add(key)  # type: ignore[arg-type]
            conflicts.append((manifest.name, other))

    return DependencyResolution(
        sorted=[names[i] for i in order],
        cycles=cycles,
        conflict_pairs=conflicts,
        missing_deps=missing,
    )


__all__ = ["DependencyResolution", "resolve_dependencies"]
