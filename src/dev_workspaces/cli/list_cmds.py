"""List CLI commands."""

import argparse

from dev_workspaces.cli.common import fail, load
from dev_workspaces.errors import WorkspacesError


def cmd_list_workspaces(args: argparse.Namespace) -> int:
    try:
        config = load(args)
    except WorkspacesError as e:
        return fail("Failed to load config", e)

    for path in config.collect_workspace_paths():
        print(path)
    return 0


def cmd_list_projects(args: argparse.Namespace) -> int:
    try:
        config = load(args)
    except WorkspacesError as e:
        return fail("Failed to load config", e)

    for path in config.collect_project_paths():
        print(path)
    return 0
