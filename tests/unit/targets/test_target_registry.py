"""Tests for the builtin target catalogue and target selection."""
from __future__ import annotations

import pytest

from agentpacks.core.exceptions import TargetError
from agentpacks.core.targets import (
    ClaudeCodeTarget,
    GenerateOptions,
    GenerateResult,
    GenericTarget,
    TargetDescriptor,
    builtin_targets,
    load_builtin_layouts,
    select_targets,
)


class EchoTarget(TargetDescriptor):
    id = "echo"
    name = "Echo"
    supported_features = ("rules",)

    def generate(self, options: GenerateOptions) -> GenerateResult:
        return GenerateResult(target_id=self.id)


class TestBuiltinTargets:
    def test_catalogue(self) -> None:
        ids = [t.id for t in builtin_targets()]
        assert ids[:3] == ["claudecode", "cursor", "opencode"]
        assert len(ids) == len(set(ids)) == 20
        for expected in ("agentsmd", "copilot", "geminicli", "codexcli", "windsurf", "zed", "antigravity"):
            assert expected in ids

    def test_yaml_layouts_are_generic_targets(self) -> None:
        layouts = load_builtin_layouts()
        assert all(layout.features for layout in layouts)
        assert {layout.id for layout in layouts}.isdisjoint({"claudecode", "cursor", "opencode"})

    def test_fresh_instances(self) -> None:
        assert builtin_targets()[0] is not builtin_targets()[0]


class TestSelectTargets:
    def test_request_order_and_deduplication(self) -> None:
        assert [t.id for t in select_targets(["cursor", "claudecode", "cursor"])] == ["cursor", "claudecode"]

    @pytest.mark.parametrize("ids", [None, ["*"]])
    def test_all(self, ids) -> None:
        assert len(select_targets(ids)) == 20

    def test_unknown_ids_all_reported(self) -> None:
        with pytest.raises(TargetError) as excinfo:
            select_targets(["cursor", "nope", "missing"])
        assert "nope" in str(excinfo.value)
        assert excinfo.value.context["unknown"] == ["nope", "missing"]

    def test_extra_descriptor_is_selectable(self) -> None:
        selected = select_targets(["echo"], extra=[EchoTarget()])
        assert isinstance(selected[0], EchoTarget)

    def test_extra_descriptor_overrides_builtin(self) -> None:
        class Replacement(GenericTarget):
            def __init__(self) -> None:
                super().__init__(ClaudeCodeTarget().layout)

        selected = select_targets(["claudecode"], extra=[Replacement()])
        assert isinstance(selected[0], Replacement)
