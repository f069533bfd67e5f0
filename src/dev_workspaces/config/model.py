"""The declared workspace/project tree.

Nodes own their children only; paths are never stored on nodes but derived
from the chain of map keys below ``Config.root``.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field, replace
from pathlib import Path

from dev_workspaces.config.settings import DEFAULT_GIT_SETTINGS, GitSettings
from dev_workspaces.errors import NotFoundError
from dev_workspaces.paths import expand_path


@dataclass(frozen=True)
class ProjectGit:
    """Repository backing a project: ``owner/name`` plus a settings overlay."""

    repo: str
    settings: GitSettings = field(default_factory=GitSettings)


@dataclass(frozen=True)
class Project:
    git: ProjectGit | None = None


@dataclass(frozen=True)
class Workspace:
    projects: dict[str, Project] = field(default_factory=dict)
    git: GitSettings | None = None
    workspaces: dict[str, Workspace] = field(default_factory=dict)

    def walk(self, path: Path) -> Iterator[tuple[Path, Workspace]]:
        """Yield ``(path, workspace)`` for this workspace and every descendant, parents first."""
        yield path, self
        for name, child in self.workspaces.items():
            yield from child.walk(path / name)

    def collect_project_paths(self, path: Path) -> list[Path]:
        """Paths of the projects declared directly in this workspace."""
        return [path / name for name in self.projects]

    def collect_subtree_project_paths(self, path: Path) -> list[Path]:
        """Paths of every project in this workspace and its descendants."""
        paths: list[Path] = []
        for ws_path, ws in self.walk(path):
            paths.extend(ws.collect_project_paths(ws_path))
        return paths


@dataclass(frozen=True)
class Config:
    root: Path
    git: GitSettings = DEFAULT_GIT_SETTINGS
    workspaces: dict[str, Workspace] = field(default_factory=dict)

    def walk_workspaces(self) -> Iterator[tuple[Path, Workspace]]:
        for name, ws in self.workspaces.items():
            yield from ws.walk(self.root / name)

    def collect_workspace_paths(self) -> list[Path]:
        """One path per declared workspace at any depth, parents before children."""
        return [path for path, _ in self.walk_workspaces()]

    def collect_project_paths(self) -> list[Path]:
        """One path per declared project at any depth."""
        paths: list[Path] = []
        for ws_path, ws in self.walk_workspaces():
            paths.extend(ws.collect_project_paths(ws_path))
        return paths

    def resolve_path(self, raw: str | Path) -> Path:
        """Interpret a user-supplied path: ``~`` expands, relative paths hang off root."""
        path = expand_path(raw)
        if not path.is_absolute():
            path = self.root / path
        return path

    def _key_chain(self, path: Path) -> tuple[str, ...]:
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            raise NotFoundError(f"{path} is not under root {self.root}") from None
        return relative.parts

    def lookup_workspace(self, path: str | Path) -> Workspace:
        """Return the workspace declared at ``path``.

        Raises:
            NotFoundError: If no workspace is declared there.
        """
        path = Path(path)
        chain = self._key_chain(path)
        if not chain:
            raise NotFoundError(f"Could not find workspace: {path}")

        children = self.workspaces
        ws = None
        for name in chain:
            ws = children.get(name)
            if ws is None:
                raise NotFoundError(f"Could not find workspace: {path}")
            children = ws.workspaces
        return ws

    def lookup_project(self, path: str | Path) -> Project:
        """Return the project declared at ``path``.

        Raises:
            NotFoundError: If no project is declared there.
        """
        path = Path(path)
        if len(self._key_chain(path)) < 2:
            raise NotFoundError(f"Expected project path to be below a workspace: {path}")
        workspace = self.lookup_workspace(path.parent)
        project = workspace.projects.get(path.name)
        if project is None:
            raise NotFoundError(f"Could not find project: {path}")
        return project


# ── Overlay ─────────────────────────────────────────────────────────


def _resolve_project(project: Project, inherited: GitSettings) -> Project:
    if project.git is None:
        return project
    settings = project.git.settings.overlay(inherited)
    return replace(project, git=replace(project.git, settings=settings))


def _resolve_workspace(ws: Workspace, inherited: GitSettings) -> Workspace:
    settings = (ws.git or GitSettings()).overlay(inherited)
    return Workspace(
        projects={name: _resolve_project(p, settings) for name, p in ws.projects.items()},
        git=settings,
        workspaces={name: _resolve_workspace(c, settings) for name, c in ws.workspaces.items()},
    )


def resolve_git_settings(config: Config) -> Config:
    """Return a copy of ``config`` with every node's git settings fully determined.

    A field set at a node is kept; otherwise the nearest ancestor's value is
    used; otherwise the github/https/branch default applies. Every workspace
    and project is visited exactly once.
    """
    root_settings = config.git.overlay(DEFAULT_GIT_SETTINGS)
    return Config(
        root=config.root,
        git=root_settings,
        workspaces={
            name: _resolve_workspace(ws, root_settings)
            for name, ws in config.workspaces.items()
        },
    )
