"""Doctor CLI command."""

import argparse

from dev_workspaces.cli.common import fail, load
from dev_workspaces.errors import WorkspacesError


def cmd_doctor(args: argparse.Namespace) -> int:
    from dev_workspaces.restore.doctor import doctor

    try:
        diagnosis = doctor(load(args))
    except WorkspacesError as e:
        return fail("Failed to diagnose workspaces", e)

    print(diagnosis.summary())
    return 0 if diagnosis.healthy else 1
