"""Config path resolution.

Resolves the location of the workspaces config file and turns user-supplied
paths into absolute ones. Uses environment variables when available, falls
back to conventional defaults.

Environment variables:
    WORKSPACES_CONFIG: config file (default: ~/.config/workspaces/workspaces.yaml)
    WORKSPACES_FALLBACK_USER: fallback identity for the SSH username retry loop
"""

from __future__ import annotations

import os
from pathlib import Path

from dev_workspaces.errors import PathError

_DEFAULT_CONFIG_SUBPATH = ".config/workspaces/workspaces.yaml"
_DEFAULT_FALLBACK_USER = "workspaces"


def expand_path(raw: str | Path) -> Path:
    """Expand a leading ``~`` to the home directory.

    Raises:
        PathError: If the home directory cannot be determined.
    """
    try:
        return Path(raw).expanduser()
    except RuntimeError as exc:
        raise PathError(f"Could not expand home directory in {raw}") from exc


def absolute_path(raw: str | Path) -> Path:
    """Return ``raw`` as an absolute path, expanding ``~``.

    Relative paths are rejected rather than resolved against the current
    directory, since the result decides where directories get created.
    """
    path = expand_path(raw)
    if not path.is_absolute():
        raise PathError(f"Path is not absolute: {raw}")
    return path


def config_path(override: str | Path | None = None) -> Path:
    """Return the path to workspaces.yaml."""
    if override:
        return expand_path(override)
    env = os.environ.get("WORKSPACES_CONFIG")
    if env:
        return expand_path(env)
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise PathError("Could not determine home directory") from exc
    return home / _DEFAULT_CONFIG_SUBPATH


def fallback_username() -> str:
    """Return the fallback identity tried after ``git`` when a host asks for a username."""
    return os.environ.get("WORKSPACES_FALLBACK_USER") or _DEFAULT_FALLBACK_USER


def env_username() -> str | None:
    """Return the current user's login name from the environment, if set."""
    return os.environ.get("USER") or os.environ.get("USERNAME") or None
