"""Tests for load-time manifest validation."""
from __future__ import annotations

from pathlib import Path

import pytest

from agentpacks.core.exceptions import PackValidationError
from agentpacks.core.packs.model import PackManifest
from agentpacks.core.packs.validation import raise_for_issues, summarize, validate_manifests, validate_pack_dir


def codes(issues):
    return [i.code for i in issues]


class TestValidateManifests:
    def test_clean_set_has_no_issues(self) -> None:
        issues = validate_manifests([PackManifest("a"), PackManifest("b", dependencies=["a"])])
        assert issues == []

    def test_self_conflict(self) -> None:
        issues = validate_manifests([PackManifest("a", conflicts=["a"])])
        assert codes(issues) == ["self-conflict"]

    def test_self_dependency(self) -> None:
        issues = validate_manifests([PackManifest("a", dependencies=["a"])])
        assert codes(issues) == ["self-dependency"]

    def test_depends_on_and_conflicts_with_same_pack(self) -> None:
        issues = validate_manifests([PackManifest("a", dependencies=["b"], conflicts=["b"]), PackManifest("b")])
        assert codes(issues) == ["dependency-conflict"]

    def test_mutual_dependents_declaring_conflict(self) -> None:
        issues = validate_manifests(
            [PackManifest("a", dependencies=["b"]), PackManifest("b", dependencies=["a"], conflicts=["a"])]
        )
        assert "dependency-conflict" in codes(issues)

    def test_duplicate_names(self) -> None:
        issues = validate_manifests([PackManifest("a"), PackManifest("a")])
        assert codes(issues) == ["duplicate-name"]

    def test_raise_for_issues_lists_everything(self) -> None:
        issues = validate_manifests([PackManifest("a", conflicts=["a"]), PackManifest("b", dependencies=["b"])])
        with pytest.raises(PackValidationError) as excinfo:
            raise_for_issues(issues)
        reported = excinfo.value.context["issues"]
        assert [i["code"] for i in reported] == ["self-conflict", "self-dependency"]

    def test_raise_for_issues_ignores_warnings(self) -> None:
        raise_for_issues([])


class TestValidatePackDir:
    def test_valid_pack(self, make_pack) -> None:
        path = make_pack("base", rules={"overview": ({"root": True}, "# Overview\n")})
        report = summarize(validate_pack_dir(path), pack="base")
        assert report["ok"] is True
        assert report["errors"] == 0

    def test_schema_errors_become_issues(self, tmp_path: Path) -> None:
        pack_dir = tmp_path / "broken"
        pack_dir.mkdir()
        (pack_dir / "pack.yaml").write_text("name: broken\ndependencies: nope\n", encoding="utf-8")
        issues = validate_pack_dir(pack_dir)
        assert issues
        assert all(i.code == "schema" for i in issues)

    def test_secret_in_models_is_a_warning(self, make_pack) -> None:
        path = make_pack(
            "leaky",
            models={"providers": {"openai": {"options": {"apiKey": "sk-abcdefghijklmnopqrstuvwxyz"}}}},
        )
        issues = validate_pack_dir(path)
        secrets = [i for i in issues if i.code == "secret"]
        assert secrets
        assert all(i.severity == "warning" for i in secrets)
        assert summarize(issues)["ok"] is True

    def test_empty_item_warns(self, make_pack) -> None:
        path = make_pack("thin", commands={"noop": ({"description": "nothing"}, "")})
        issues = validate_pack_dir(path)
        assert "empty-item" in codes(issues)

    def test_missing_directory_is_load_error(self, tmp_path: Path) -> None:
        issues = validate_pack_dir(tmp_path / "absent")
        assert codes(issues) == ["load-error"]
