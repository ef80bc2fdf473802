"""Tests for the lockfile document, integrity hashing and frozen validation."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from agentpacks.core.exceptions import IntegrityError, LockfileError
from agentpacks.core.lockfile import (
    LOCKFILE_VERSION,
    Lockfile,
    LockfileManager,
    LockfileSourceEntry,
    compute_integrity,
    compute_tree_integrity,
    is_lockfile_frozen_valid,
    verify_integrity,
)


def entry(ref: str = "main", resolved: str = "abc123") -> LockfileSourceEntry:
    return LockfileSourceEntry(
        requested_ref=ref,
        resolved_ref=resolved,
        resolved_at="2026-01-01T00:00:00Z",
        integrity={"base": compute_integrity(b"base")},
    )


class TestComputeIntegrity:
    def test_format(self) -> None:
        digest = compute_integrity(b"hello")
        assert digest.startswith("sha256-")
        assert len(digest) == len("sha256-") + 64

    def test_deterministic(self) -> None:
        assert compute_integrity(b"payload") == compute_integrity(b"payload")

    def test_str_hashed_as_utf8(self) -> None:
        assert compute_integrity("héllo") == compute_integrity("héllo".encode("utf-8"))

    @pytest.mark.parametrize("other", [b"payloaD", b"payload ", b"", b"payload\n"])
    def test_any_change_changes_hash(self, other: bytes) -> None:
        assert compute_integrity(b"payload") != compute_integrity(other)


class TestComputeTreeIntegrity:
    def test_independent_of_mapping_order(self) -> None:
        a = {"a.md": b"1", "b/c.md": b"2"}
        b = {"b/c.md": b"2", "a.md": b"1"}
        assert compute_tree_integrity(a) == compute_tree_integrity(b)

    def test_moving_bytes_between_files_changes_hash(self) -> None:
        assert compute_tree_integrity({"a": b"xy", "b": b""}) != compute_tree_integrity({"a": b"x", "b": b"y"})

    def test_renaming_a_file_changes_hash(self) -> None:
        assert compute_tree_integrity({"a.md": b"1"}) != compute_tree_integrity({"b.md": b"1"})


class TestVerifyIntegrity:
    def test_match(self) -> None:
        verify_integrity(compute_integrity(b"x"), compute_integrity(b"x"))

    def test_mismatch(self) -> None:
        with pytest.raises(IntegrityError, match="pack/base"):
            verify_integrity(compute_integrity(b"x"), compute_integrity(b"y"), label="pack/base")


class TestFrozenValidation:
    def test_all_locked(self) -> None:
        lockfile = Lockfile(sources={"github:a/b": entry()})
        check = is_lockfile_frozen_valid(lockfile, ["github:a/b"])
        assert check.valid
        assert check.missing == []

    def test_missing_keys_in_request_order(self) -> None:
        lockfile = Lockfile(sources={"npm:present": entry()})
        check = is_lockfile_frozen_valid(lockfile, ["registry:z", "npm:present", "github:a/b", "npm:y"])
        assert not check.valid
        assert check.missing == ["registry:z", "github:a/b", "npm:y"]

    def test_empty_requirements(self) -> None:
        assert is_lockfile_frozen_valid(Lockfile(), []).valid


class TestLockfileManager:
    def test_missing_file_is_empty_lockfile(self, tmp_path: Path) -> None:
        manager = LockfileManager(tmp_path)
        lockfile = manager.load()
        assert lockfile.version == LOCKFILE_VERSION
        assert lockfile.sources == {}
        assert not manager.exists()

    def test_save_then_load(self, tmp_path: Path) -> None:
        manager = LockfileManager(tmp_path)
        lockfile = Lockfile()
        lockfile.set("github:acme/packs", entry())
        manager.save(lockfile)

        data = json.loads((tmp_path / "agentpacks.lock").read_text(encoding="utf-8"))
        assert data["lockfileVersion"] == 1
        assert data["sources"]["github:acme/packs"]["resolvedRef"] == "abc123"
        assert manager.load().get("github:acme/packs") == entry()

    def test_output_is_deterministic(self, tmp_path: Path) -> None:
        manager = LockfileManager(tmp_path, "custom.lock")
        first = Lockfile(sources={"b": entry(), "a": entry()})
        second = Lockfile(sources={"a": entry(), "b": entry()})
        manager.save(first)
        text_one = manager.path.read_text(encoding="utf-8")
        manager.save(second)
        assert manager.path.read_text(encoding="utf-8") == text_one
        assert text_one.endswith("\n")

    def test_unsupported_version(self, tmp_path: Path) -> None:
        (tmp_path / "agentpacks.lock").write_text('{"lockfileVersion": 2, "sources": {}}', encoding="utf-8")
        with pytest.raises(LockfileError, match="lockfileVersion"):
            LockfileManager(tmp_path).load()

    def test_schema_violation(self, tmp_path: Path) -> None:
        bad = {"lockfileVersion": 1, "sources": {"npm:x": {"requestedRef": "latest"}}}
        (tmp_path / "agentpacks.lock").write_text(json.dumps(bad), encoding="utf-8")
        with pytest.raises(LockfileError):
            LockfileManager(tmp_path).load()

    def test_invalid_json(self, tmp_path: Path) -> None:
        (tmp_path / "agentpacks.lock").write_text("{not json", encoding="utf-8")
        with pytest.raises(LockfileError, match="not valid JSON"):
            LockfileManager(tmp_path).load()
