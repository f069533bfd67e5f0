"""Compare the declared tree against the filesystem."""

from dataclasses import dataclass, field
from pathlib import Path

from dev_workspaces.config.model import Config


@dataclass
class Diagnosis:
    """Declared paths that are absent on disk."""

    missing_workspaces: list[Path] = field(default_factory=list)
    missing_projects: list[Path] = field(default_factory=list)

    @property
    def healthy(self) -> bool:
        return not self.missing_workspaces and not self.missing_projects

    def summary(self) -> str:
        lines = ["Dev Workspaces Doctor Diagnosis", "=" * 40]
        lines.append(f"\nMissing workspaces ({len(self.missing_workspaces)}):")
        for w in self.missing_workspaces:
            lines.append(f"  {w}")
        lines.append(f"\nMissing projects ({len(self.missing_projects)}):")
        for p in self.missing_projects:
            lines.append(f"  {p}")
        if self.healthy:
            lines.append("\nEverything declared is present.")
        return "\n".join(lines)


def doctor(config: Config) -> Diagnosis:
    """Report every declared workspace and project path that does not exist.

    Only presence is checked; an existing path of the wrong kind is never
    reported. Nothing on disk is touched.
    """
    return Diagnosis(
        missing_workspaces=[p for p in config.collect_workspace_paths() if not p.exists()],
        missing_projects=[p for p in config.collect_project_paths() if not p.exists()],
    )
