"""Create missing workspace directories and materialize missing projects.

Restore is best-effort rather than transactional: it starts from a doctor
snapshot, the first failure aborts the rest of the batch, and nothing is
rolled back. Every step skips nodes that already exist, so running restore
again is the way to recover from a partial run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from dev_workspaces.config.model import Config, Project, ProjectGit
from dev_workspaces.errors import FsError
from dev_workspaces.restore.doctor import Diagnosis, doctor

logger = logging.getLogger(__name__)

Cloner = Callable[[Path, ProjectGit], None]


@dataclass(frozen=True)
class ProjectTarget:
    path: Path | str


@dataclass(frozen=True)
class WorkspaceTarget:
    path: Path | str
    include_projects: bool = False


@dataclass(frozen=True)
class AllWorkspacesTarget:
    include_projects: bool = False


RestoreTarget = ProjectTarget | WorkspaceTarget | AllWorkspacesTarget


@dataclass
class RestoreResult:
    """What a restore run changed on disk."""

    created_workspaces: list[Path] = field(default_factory=list)
    created_projects: list[Path] = field(default_factory=list)
    cloned_projects: list[Path] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created_workspaces or self.created_projects or self.cloned_projects)


def create_dir(path: Path) -> bool:
    """Create a single directory level; return False if it already existed.

    Raises:
        FsError: On any OS failure other than already-exists.
    """
    try:
        path.mkdir()
    except FileExistsError:
        return False
    except OSError as exc:
        raise FsError(f"Could not create directory {path}") from exc
    logger.debug("Created %s", path)
    return True


class _Restorer:
    def __init__(self, config: Config, diagnosis: Diagnosis, cloner: Cloner):
        self.config = config
        self.cloner = cloner
        self.missing_workspaces = set(diagnosis.missing_workspaces)
        self.missing_projects = set(diagnosis.missing_projects)
        self.result = RestoreResult()

    def workspace(self, raw_path: Path | str, include_projects: bool) -> None:
        path = self.config.resolve_path(raw_path)
        ws = self.config.lookup_workspace(path)

        if path in self.missing_workspaces and create_dir(path):
            self.result.created_workspaces.append(path)

        if not include_projects:
            return

        for project_path in ws.collect_subtree_project_paths(path):
            self.project(project_path)

    def project(self, raw_path: Path | str) -> None:
        path = self.config.resolve_path(raw_path)
        project = self.config.lookup_project(path)

        # Only the owning workspace is ensured, never further ancestors.
        self.workspace(path.parent, include_projects=False)

        if path not in self.missing_projects:
            return
        self._materialize(path, project)

    def _materialize(self, path: Path, project: Project) -> None:
        if path.exists():
            logger.debug("Skipping %s: already exists", path)
            return

        if project.git is None:
            if create_dir(path):
                self.result.created_projects.append(path)
            return

        self.cloner(path, project.git)
        self.result.cloned_projects.append(path)


def restore(
    config: Config,
    target: RestoreTarget,
    cloner: Cloner | None = None,
) -> RestoreResult:
    """Restore ``target`` from the declared tree.

    Args:
        config: Loaded config.
        target: A project, a workspace, or all workspaces.
        cloner: Called as ``cloner(path, project_git)`` for git-backed
            projects. Defaults to ``git.clone.clone_project``.

    Returns:
        RestoreResult listing what was created or cloned.

    Raises:
        NotFoundError: If the target path is not declared.
        FsError: If a directory cannot be created.
        TransportError, AuthExhausted: If a clone fails.
    """
    if cloner is None:
        from dev_workspaces.git.clone import clone_project

        cloner = clone_project

    diagnosis = doctor(config)
    restorer = _Restorer(config, diagnosis, cloner)

    if isinstance(target, ProjectTarget):
        restorer.project(target.path)
    elif isinstance(target, WorkspaceTarget):
        restorer.workspace(target.path, target.include_projects)
    elif isinstance(target, AllWorkspacesTarget):
        for ws_path in diagnosis.missing_workspaces:
            restorer.workspace(ws_path, target.include_projects)
    else:
        raise TypeError(f"Unknown restore target: {target!r}")

    return restorer.result
