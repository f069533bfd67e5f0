"""Git module: cloning with credential negotiation and progress reporting."""

from dev_workspaces.git.clone import clone_project
from dev_workspaces.git.credentials import CredentialHelper, negotiate
from dev_workspaces.git.progress import Progress, TransferProgress
from dev_workspaces.git.terminal import Terminal

__all__ = [
    "clone_project",
    "negotiate",
    "CredentialHelper",
    "Progress",
    "TransferProgress",
    "Terminal",
]
