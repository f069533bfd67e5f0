"""Restore module: diagnosis of the declared tree and repair of what is missing."""

from dev_workspaces.restore.doctor import Diagnosis, doctor
from dev_workspaces.restore.engine import (
    AllWorkspacesTarget,
    ProjectTarget,
    RestoreResult,
    WorkspaceTarget,
    restore,
)

__all__ = [
    "Diagnosis",
    "doctor",
    "restore",
    "RestoreResult",
    "ProjectTarget",
    "WorkspaceTarget",
    "AllWorkspacesTarget",
]
