"""Tests for pack dependency resolution (order, cycles, conflicts, missing deps)."""
from __future__ import annotations

from typing import List

import pytest

from agentpacks.core.packs.model import PackManifest
from agentpacks.core.packs.resolver import resolve_dependencies


def m(name: str, deps: List[str] | None = None, conflicts: List[str] | None = None) -> PackManifest:
    return PackManifest(name=name, dependencies=list(deps or []), conflicts=list(conflicts or []))


class TestTopologicalOrder:
    def test_dependency_precedes_dependent(self) -> None:
        result = resolve_dependencies([m("a"), m("b", ["a"])])
        assert result.sorted == ["a", "b"]
        assert result.ok

    def test_dependency_declared_after_dependent_is_moved_first(self) -> None:
        result = resolve_dependencies([m("app", ["base"]), m("base")])
        assert result.sorted == ["base", "app"]
        assert result.ok

    def test_independent_packs_keep_input_order(self) -> None:
        result = resolve_dependencies([m("c"), m("a"), m("b")])
        assert result.sorted == ["c", "a", "b"]

    @pytest.mark.parametrize(
        "manifests",
        [
            [m("a"), m("b", ["a"]), m("c", ["b"]), m("d", ["a", "c"])],
            [m("d", ["a", "c"]), m("c", ["b"]), m("b", ["a"]), m("a")],
            [m("x", ["y", "z"]), m("y", ["z"]), m("z"), m("w")],
        ],
    )
    def test_every_pack_follows_its_dependencies(self, manifests: List[PackManifest]) -> None:
        result = resolve_dependencies(manifests)
        assert result.ok
        assert sorted(result.sorted) == sorted(x.name for x in manifests)
        position = {name: i for i, name in enumerate(result.sorted)}
        for manifest in manifests:
            for dep in manifest.dependencies:
                assert position[dep] < position[manifest.name]

    def test_empty_input(self) -> None:
        result = resolve_dependencies([])
        assert result.sorted == []
        assert result.ok


class TestCycles:
    def test_two_node_cycle(self) -> None:
        result = resolve_dependencies([m("a", ["b"]), m("b", ["a"])])
        assert not result.ok
        assert len(result.cycles) == 1
        assert {"a", "b"} <= set(result.cycles[0])

    def test_cycle_is_trimmed_to_repeated_node(self) -> None:
        # "entry" depends on the cycle but is not part of it
        result = resolve_dependencies([m("entry", ["a"]), m("a", ["b"]), m("b", ["c"]), m("c", ["a"])])
        assert not result.ok
        assert len(result.cycles) == 1
        cycle = result.cycles[0]
        assert "entry" not in cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"a", "b", "c"}

    def test_dependency_of_cycle_is_not_reported(self) -> None:
        result = resolve_dependencies([m("a", ["b", "base"]), m("b", ["a"]), m("base")])
        assert len(result.cycles) == 1
        assert "base" not in result.cycles[0]

    def test_disjoint_cycles_are_all_reported(self) -> None:
        result = resolve_dependencies(
            [m("a", ["b"]), m("b", ["a"]), m("x", ["y"]), m("y", ["z"]), m("z", ["x"])]
        )
        members = [set(c) for c in result.cycles]
        assert {"a", "b"} in members
        assert {"x", "y", "z"} in members

    def test_acyclic_nodes_still_sorted(self) -> None:
        result = resolve_dependencies([m("free"), m("a", ["b"]), m("b", ["a"])])
        assert "free" in result.sorted
        assert "a" not in result.sorted


class TestConflicts:
    def test_conflict_with_present_pack(self) -> None:
        result = resolve_dependencies([m("a", conflicts=["b"]), m("b")])
        assert result.conflict_pairs == [("a", "b")]
        assert not result.ok

    def test_mutual_conflict_reported_once(self) -> None:
        result = resolve_dependencies([m("a", conflicts=["b"]), m("b", conflicts=["a"])])
        assert result.conflict_pairs == [("a", "b")]

    def test_conflict_with_absent_pack_is_ignored(self) -> None:
        result = resolve_dependencies([m("a", conflicts=["ghost"])])
        assert result.conflict_pairs == []
        assert result.ok


class TestMissingDependencies:
    def test_all_missing_dependencies_reported(self) -> None:
        result = resolve_dependencies([m("a", ["x", "y"]), m("b", ["x"])])
        assert result.missing_deps == [("a", "x"), ("a", "y"), ("b", "x")]
        assert not result.ok

    def test_missing_dependency_does_not_block_sorting(self) -> None:
        result = resolve_dependencies([m("a", ["ghost"]), m("b", ["a"])])
        assert result.sorted == ["a", "b"]


class TestResolutionPayload:
    def test_to_dict_shape(self) -> None:
        payload = resolve_dependencies([m("a", ["b"]), m("b", ["a"]), m("c", conflicts=["a"])]).to_dict()
        assert payload["ok"] is False
        assert payload["conflictPairs"] == [["c", "a"]]
        assert payload["missingDeps"] == []
        assert payload["cycles"]
