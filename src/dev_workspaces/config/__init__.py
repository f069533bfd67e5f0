"""Config model: the declared workspace/project tree and its git settings."""

from dev_workspaces.config.loader import load_config, parse_config
from dev_workspaces.config.model import Config, Project, ProjectGit, Workspace
from dev_workspaces.config.settings import CloneStrategy, GitHost, GitProtocol, GitSettings

__all__ = [
    "load_config",
    "parse_config",
    "Config",
    "Workspace",
    "Project",
    "ProjectGit",
    "GitSettings",
    "GitHost",
    "GitProtocol",
    "CloneStrategy",
]
