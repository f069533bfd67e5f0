"""Unified CLI for dev workspaces.

Usage:
    workspaces list workspaces
    workspaces list projects
    workspaces doctor
    workspaces config path
    workspaces restore project <path>
    workspaces restore workspace <path> [--include-projects]
    workspaces restore workspace --all [--include-projects]
"""

import argparse
import logging
import sys

from dev_workspaces.cli.config_cmds import cmd_config_path
from dev_workspaces.cli.doctor import cmd_doctor
from dev_workspaces.cli.list_cmds import cmd_list_projects, cmd_list_workspaces
from dev_workspaces.cli.restore import cmd_restore_project, cmd_restore_workspace


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workspaces",
        description="Materialize and repair a declarative tree of workspaces and projects",
    )
    parser.add_argument(
        "--config", default=None,
        help="Path to workspaces.yaml (default: $WORKSPACES_CONFIG or ~/.config/workspaces/workspaces.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "-q", "--quiet", action="store_true",
        help="Suppress clone progress output",
    )
    sub = parser.add_subparsers(dest="command")

    # list
    ls = sub.add_parser("list", help="List declared paths")
    ls_sub = ls.add_subparsers(dest="subcommand")
    ls_sub.add_parser("workspaces", help="List declared workspace paths")
    ls_sub.add_parser("projects", help="List declared project paths")

    # doctor
    sub.add_parser("doctor", help="Report missing workspaces and projects")

    # config
    cfg = sub.add_parser("config", help="Config file operations")
    cfg_sub = cfg.add_subparsers(dest="subcommand")
    cfg_sub.add_parser("path", help="Print the resolved config file path")

    # restore
    res = sub.add_parser("restore", help="Create missing workspaces and projects")
    res_sub = res.add_subparsers(dest="subcommand")

    res_proj = res_sub.add_parser("project", help="Restore a single project")
    res_proj.add_argument("path", help="Project path (absolute, or relative to root)")

    res_ws = res_sub.add_parser("workspace", help="Restore a workspace or all workspaces")
    which = res_ws.add_mutually_exclusive_group(required=True)
    which.add_argument(
        "path", nargs="?", default=None,
        help="Workspace path (absolute, or relative to root)",
    )
    which.add_argument(
        "--all", action="store_true",
        help="Restore every missing workspace",
    )
    res_ws.add_argument(
        "--include-projects", action="store_true",
        help="Also restore the projects declared under the workspace",
    )

    return parser


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.command:
        parser.print_help()
        return 0

    dispatch = {
        ("list", "workspaces"): cmd_list_workspaces,
        ("list", "projects"): cmd_list_projects,
        ("config", "path"): cmd_config_path,
        ("restore", "project"): cmd_restore_project,
        ("restore", "workspace"): cmd_restore_workspace,
    }

    # Handle top-level commands (no subcommand)
    if args.command == "doctor":
        return cmd_doctor(args)

    subcommand: str | None = getattr(args, "subcommand", None)
    handler = dispatch.get((args.command, subcommand or ""))
    if handler:
        return handler(args)

    parser.parse_args([args.command, "--help"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
