import os
import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'agentpacks' and tests/ as 'helpers'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from agentpacks.core.stdlib_logging import reset_stdlib_logging_for_tests
from helpers.packs import write_pack, write_workspace


@pytest.fixture(autouse=True)
def _isolate_agentpacks_env(monkeypatch):
    """Environment overrides from a developer shell must not leak into tests."""
    for key in list(os.environ):
        if key.startswith("AGENTPACKS_"):
            monkeypatch.delenv(key, raising=False)
    yield
    reset_stdlib_logging_for_tests()


@pytest.fixture
def project(tmp_path, monkeypatch):
    """An empty project root; the working directory is moved into it."""
    root = tmp_path / "project"
    root.mkdir()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def make_pack(project):
    """Factory writing a pack directory under ``<project>/packs/<name>``."""

    def _make(name, **kwargs):
        return write_pack(project / "packs" / name, name=name, **kwargs)

    return _make


@pytest.fixture
def make_workspace(project):
    """Factory writing ``agentpacks.yaml`` at the project root."""

    def _make(**config):
        return write_workspace(project, **config)

    return _make
