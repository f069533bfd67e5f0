"""Config CLI commands."""

import argparse

from dev_workspaces.cli.common import fail
from dev_workspaces.errors import WorkspacesError
from dev_workspaces.paths import config_path


def cmd_config_path(args: argparse.Namespace) -> int:
    try:
        path = config_path(args.config)
    except WorkspacesError as e:
        return fail("Failed to resolve config path", e)

    print(path)
    return 0
