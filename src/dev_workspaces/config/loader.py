"""Load workspaces.yaml into a resolved Config tree."""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from dev_workspaces.config.model import Config, Project, ProjectGit, Workspace, resolve_git_settings
from dev_workspaces.config.settings import CloneStrategy, GitHost, GitProtocol, GitSettings
from dev_workspaces.errors import ConfigNotFoundError, ParseError
from dev_workspaces.paths import absolute_path, config_path

logger = logging.getLogger(__name__)


def load_config(path: Path | str | None = None) -> Config:
    """Read and parse the workspaces config file.

    Args:
        path: Path to workspaces.yaml. Defaults to ``paths.config_path()``.

    Returns:
        Config with git settings resolved at every node.

    Raises:
        ConfigNotFoundError: If the file doesn't exist.
        ParseError: If the YAML is malformed or violates the schema.
        PathError: If root cannot be made absolute.
    """
    source = config_path(path)
    try:
        with open(source) as f:
            text = f.read()
    except FileNotFoundError as exc:
        raise ConfigNotFoundError(f"Config file not found: {source}") from exc
    logger.debug("Loaded config from %s", source)
    return parse_config(text, source=str(source))


def parse_config(text: str, source: str = "<string>") -> Config:
    """Parse config YAML text into a resolved Config."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ParseError(f"Malformed YAML in {source}") from exc

    if not isinstance(data, dict):
        raise ParseError(f"Config at {source} is not a YAML mapping")

    raw_root = data.get("root")
    if raw_root is None or raw_root == "":
        raise ParseError(f"Config at {source} is missing 'root'")
    if not isinstance(raw_root, str):
        raise ParseError(
            f"Config at {source}: 'root' must be a path string, got {type(raw_root).__name__}"
        )

    config = Config(
        root=absolute_path(raw_root),
        git=_parse_git_settings(data.get("git"), "git"),
        workspaces=_parse_workspaces(data.get("workspaces"), "workspaces"),
    )
    return resolve_git_settings(config)


# ── Schema helpers ──────────────────────────────────────────────────


def _mapping(value: Any, where: str) -> dict:
    """Empty YAML values (``key:``) count as empty mappings."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"{where}: expected a mapping, got {type(value).__name__}")
    return value


def _check_name(name: Any, where: str) -> str:
    # Plain scalar keys such as ``2048:`` load as numbers; they are still names.
    if isinstance(name, (bool, int, float)):
        name = str(name)
    if not isinstance(name, str) or not name:
        raise ParseError(f"{where}: names must be non-empty strings, got {name!r}")
    if name in (".", "..") or "/" in name or (os.sep != "/" and os.sep in name):
        raise ParseError(f"{where}: {name!r} is not a single path component")
    return name


def _enum(cls: type[Enum], value: Any, where: str):
    if value is None:
        return None
    try:
        return cls(str(value).lower())
    except ValueError:
        valid = ", ".join(m.value for m in cls)
        raise ParseError(f"{where}: unknown value {value!r} (valid: {valid})") from None


def _parse_git_settings(value: Any, where: str) -> GitSettings:
    raw = _mapping(value, where)
    return GitSettings(
        host=_enum(GitHost, raw.get("host"), f"{where}.host"),
        protocol=_enum(GitProtocol, raw.get("protocol"), f"{where}.protocol"),
        clone_strategy=_enum(CloneStrategy, raw.get("clone_strategy"), f"{where}.clone_strategy"),
    )


def _parse_project(value: Any, where: str) -> Project:
    raw = _mapping(value, where)
    if raw.get("git") is None:
        return Project()
    git = _mapping(raw["git"], f"{where}.git")
    repo = git.get("repo")
    if not isinstance(repo, str) or not repo.strip("/"):
        raise ParseError(f"{where}.git: 'repo' is required (owner/name)")
    return Project(git=ProjectGit(
        repo=repo.strip("/"),
        settings=_parse_git_settings(git, f"{where}.git"),
    ))


def _parse_workspace(value: Any, where: str) -> Workspace:
    raw = _mapping(value, where)
    projects = {
        _check_name(name, f"{where}.projects"): _parse_project(p, f"{where}.projects.{name}")
        for name, p in _mapping(raw.get("projects"), f"{where}.projects").items()
    }
    children = _parse_workspaces(raw.get("workspaces"), f"{where}.workspaces")

    collisions = sorted(set(projects) & set(children))
    if collisions:
        raise ParseError(
            f"{where}: {', '.join(collisions)} declared as both project and workspace"
        )

    git = raw.get("git")
    return Workspace(
        projects=projects,
        git=_parse_git_settings(git, f"{where}.git") if git is not None else None,
        workspaces=children,
    )


def _parse_workspaces(value: Any, where: str) -> dict[str, Workspace]:
    return {
        _check_name(name, where): _parse_workspace(ws, f"{where}.{name}")
        for name, ws in _mapping(value, where).items()
    }
