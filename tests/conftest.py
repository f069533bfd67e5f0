"""Shared test fixtures for dev-workspaces."""

from pathlib import Path

import pytest

from dev_workspaces.config import load_config, parse_config

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def nested_config():
    return load_config(FIXTURES / "workspaces-nested.yaml")


@pytest.fixture
def git_config():
    return load_config(FIXTURES / "workspaces-git.yaml")


@pytest.fixture
def tmp_root(tmp_path):
    root = tmp_path / "dev"
    root.mkdir()
    return root


@pytest.fixture
def make_config(tmp_root):
    """Parse a YAML body (everything but ``root``) rooted at ``tmp_root``."""

    def _make(body: str):
        return parse_config(f"root: {tmp_root}\n{body}")

    return _make


@pytest.fixture
def fake_cloner():
    """Stand-in for git.clone.clone_project that records calls and creates the dir."""
    calls = []

    def _clone(path, project_git):
        calls.append((path, project_git.repo))
        path.mkdir()

    _clone.calls = calls
    return _clone
