"""Git settings carried at every level of the workspace tree."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class GitHost(Enum):
    GITHUB = "github"
    GITLAB = "gitlab"

    @property
    def domain(self) -> str:
        return _HOST_DOMAINS[self]

    def url(self, protocol: GitProtocol, repo: str, username: str | None = None) -> str:
        """Build the clone URL for ``repo`` (``owner/name``) on this host.

        ``username`` only applies to SSH, where it defaults to ``git``.
        """
        if protocol is GitProtocol.SSH:
            return f"{username or DEFAULT_SSH_USER}@{self.domain}:{repo}.git"
        return f"https://{self.domain}/{repo}.git"


class GitProtocol(Enum):
    HTTPS = "https"
    SSH = "ssh"


class CloneStrategy(Enum):
    BRANCH = "branch"
    WORKTREE = "worktree"

    @property
    def is_worktree(self) -> bool:
        return self is CloneStrategy.WORKTREE


_HOST_DOMAINS = {
    GitHost.GITHUB: "github.com",
    GitHost.GITLAB: "gitlab.com",
}

DEFAULT_SSH_USER = "git"


@dataclass(frozen=True)
class GitSettings:
    """Host/protocol/clone-strategy triple; ``None`` means "inherit"."""

    host: GitHost | None = None
    protocol: GitProtocol | None = None
    clone_strategy: CloneStrategy | None = None

    def overlay(self, parent: GitSettings) -> GitSettings:
        """Fill every unset field from ``parent``; fields set here always win."""
        return GitSettings(
            host=self.host if self.host is not None else parent.host,
            protocol=self.protocol if self.protocol is not None else parent.protocol,
            clone_strategy=(
                self.clone_strategy if self.clone_strategy is not None
                else parent.clone_strategy
            ),
        )

    @property
    def is_resolved(self) -> bool:
        return None not in (self.host, self.protocol, self.clone_strategy)


DEFAULT_GIT_SETTINGS = GitSettings(
    host=GitHost.GITHUB,
    protocol=GitProtocol.HTTPS,
    clone_strategy=CloneStrategy.BRANCH,
)
