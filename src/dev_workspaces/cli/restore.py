"""Restore CLI commands."""

import argparse

from dev_workspaces.cli.common import fail, load
from dev_workspaces.errors import WorkspacesError


def _print_result(result) -> None:
    if not result.changed:
        print("  Nothing to restore.")
        return
    for path in result.created_workspaces:
        print(f"  Created workspace: {path}")
    for path in result.created_projects:
        print(f"  Created project:   {path}")
    for path in result.cloned_projects:
        print(f"  Cloned project:    {path}")


def _cloner(args: argparse.Namespace):
    from dev_workspaces.git.clone import clone_project
    from dev_workspaces.git.terminal import Terminal

    terminal = Terminal(quiet=args.quiet)
    return lambda path, project_git: clone_project(path, project_git, terminal=terminal)


def cmd_restore_project(args: argparse.Namespace) -> int:
    from dev_workspaces.restore.engine import ProjectTarget, restore

    try:
        result = restore(load(args), ProjectTarget(args.path), cloner=_cloner(args))
    except WorkspacesError as e:
        return fail("Failed to restore project", e)

    _print_result(result)
    return 0


def cmd_restore_workspace(args: argparse.Namespace) -> int:
    from dev_workspaces.restore.engine import AllWorkspacesTarget, WorkspaceTarget, restore

    if args.all:
        target = AllWorkspacesTarget(include_projects=args.include_projects)
        context = "Failed to restore workspaces"
    else:
        target = WorkspaceTarget(args.path, include_projects=args.include_projects)
        context = "Failed to restore workspace"

    try:
        result = restore(load(args), target, cloner=_cloner(args))
    except WorkspacesError as e:
        return fail(context, e)

    _print_result(result)
    return 0
