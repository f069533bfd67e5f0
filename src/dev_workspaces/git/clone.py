"""Clone a project's repository with pygit2.

Each clone gets its own Terminal, Progress bar and negotiation state; the
only thing shared between projects is the filesystem.
"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path

import pygit2

from dev_workspaces.config.model import ProjectGit
from dev_workspaces.errors import FsError, ParseError, TransportError
from dev_workspaces.git.credentials import CredentialCallback, CredentialHelper, negotiate
from dev_workspaces.git.progress import Progress, TransferProgress
from dev_workspaces.git.terminal import Terminal

logger = logging.getLogger(__name__)

BARE_DIR = ".bare"


class _CloneCallbacks(pygit2.RemoteCallbacks):
    def __init__(self, credentials: CredentialCallback, transfer: TransferProgress):
        super().__init__()
        self._on_credentials = credentials
        self._on_transfer = transfer

    def credentials(self, url, username_from_url, allowed_types):
        return self._on_credentials(url, username_from_url, allowed_types)

    def transfer_progress(self, stats):
        self._on_transfer.update(stats)


class Pygit2Transport:
    """One ``attempt`` = one ``pygit2.clone_repository`` call into ``path``."""

    def __init__(self, path: Path, bare: bool = False, terminal: Terminal | None = None):
        self.path = path
        self.bare = bare
        self.terminal = terminal or Terminal()

    def attempt(self, url: str, credentials: CredentialCallback) -> pygit2.Repository:
        transfer = TransferProgress(Progress("Fetch", self.terminal))
        callbacks = _CloneCallbacks(credentials, transfer)
        self.terminal.status("Cloning", url)
        try:
            return pygit2.clone_repository(url, str(self.path), bare=self.bare, callbacks=callbacks)
        except pygit2.GitError as exc:
            raise TransportError(f"Failed to clone {url}") from exc
        finally:
            self.terminal.clear()


def clone_project(
    path: Path,
    project_git: ProjectGit,
    terminal: Terminal | None = None,
    helper: CredentialHelper | None = None,
) -> None:
    """Clone ``project_git.repo`` into ``path``.

    The branch strategy makes an ordinary working-tree clone at ``path``.
    The worktree strategy creates ``path`` and bare-clones into
    ``path/.bare`` so worktrees can be added next to it.

    Does nothing if ``path`` already exists.

    Raises:
        FsError: If the project directory cannot be created.
        ParseError: If the git settings were not resolved by the loader.
        TransportError: If the clone fails for a non-auth reason.
        AuthExhausted: If no credentials were accepted.
    """
    if path.exists():
        logger.debug("Skipping clone of %s: %s exists", project_git.repo, path)
        return

    settings = project_git.settings
    if not settings.is_resolved:
        raise ParseError(f"Git settings for {path} were not resolved: {settings}")

    target = path
    worktree = settings.clone_strategy.is_worktree
    if worktree:
        try:
            path.mkdir()
        except OSError as exc:
            raise FsError(f"Could not create project directory {path}") from exc
        target = path / BARE_DIR

    url_for = partial(settings.host.url, settings.protocol, project_git.repo)
    transport = Pygit2Transport(target, bare=worktree, terminal=terminal)
    logger.info("Cloning %s into %s", project_git.repo, target)
    try:
        negotiate(transport, url_for, helper=helper)
    except Exception:
        if worktree:
            # An empty project dir would make the next restore skip this project.
            _remove_if_empty(path)
        raise


def _remove_if_empty(path: Path) -> None:
    try:
        path.rmdir()
    except OSError as exc:
        logger.debug("Leaving %s in place: %s", path, exc)
