"""Helpers shared by the CLI command modules."""

import argparse
import sys

from dev_workspaces.config import Config, load_config
from dev_workspaces.errors import error_chain


def load(args: argparse.Namespace) -> Config:
    return load_config(getattr(args, "config", None))


def fail(context: str, exc: BaseException) -> int:
    """Print ``ERROR: <context>: <cause chain>`` to stderr and return exit code 1."""
    print(f"ERROR: {context}: {error_chain(exc)}", file=sys.stderr)
    return 1
