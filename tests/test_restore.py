"""Tests for the restore module: doctor diagnosis and the restore engine."""

import pytest

from dev_workspaces.errors import FsError, NotFoundError
from dev_workspaces.restore import (
    AllWorkspacesTarget,
    ProjectTarget,
    WorkspaceTarget,
    doctor,
    restore,
)
from dev_workspaces.restore.engine import create_dir

SIMPLE = """
workspaces:
  w0:
    projects:
      p0:
"""

MIXED = """
workspaces:
  personal:
    projects:
      notes:
      dotfiles:
        git:
          repo: someone/dotfiles
  work:
    projects:
      api:
    workspaces:
      forks:
        projects:
          lib:
"""


@pytest.fixture
def simple(make_config):
    return make_config(SIMPLE)


@pytest.fixture
def mixed(make_config):
    return make_config(MIXED)


class TestDoctor:
    def test_everything_missing(self, simple, tmp_root):
        diagnosis = doctor(simple)
        assert diagnosis.missing_workspaces == [tmp_root / "w0"]
        assert diagnosis.missing_projects == [tmp_root / "w0" / "p0"]
        assert not diagnosis.healthy

    def test_everything_present(self, mixed):
        for path in mixed.collect_workspace_paths() + mixed.collect_project_paths():
            path.mkdir(parents=True, exist_ok=True)
        diagnosis = doctor(mixed)
        assert diagnosis.missing_workspaces == []
        assert diagnosis.missing_projects == []
        assert diagnosis.healthy

    def test_wrong_kind_counts_as_present(self, simple, tmp_root):
        (tmp_root / "w0").mkdir()
        (tmp_root / "w0" / "p0").write_text("not a directory")
        assert doctor(simple).healthy

    def test_reports_all_declared_paths(self, mixed):
        diagnosis = doctor(mixed)
        assert diagnosis.missing_workspaces == mixed.collect_workspace_paths()
        assert diagnosis.missing_projects == mixed.collect_project_paths()

    def test_read_only(self, mixed, tmp_root):
        doctor(mixed)
        doctor(mixed)
        assert list(tmp_root.iterdir()) == []

    def test_summary_lists_paths(self, simple, tmp_root):
        summary = doctor(simple).summary()
        assert str(tmp_root / "w0") in summary
        assert str(tmp_root / "w0" / "p0") in summary
        assert "Missing workspaces (1)" in summary


class TestRestoreWorkspace:
    def test_workspace_with_projects(self, simple, tmp_root, fake_cloner):
        result = restore(simple, WorkspaceTarget(tmp_root / "w0", include_projects=True), cloner=fake_cloner)
        assert (tmp_root / "w0").is_dir()
        assert (tmp_root / "w0" / "p0").is_dir()
        assert result.created_workspaces == [tmp_root / "w0"]
        assert result.created_projects == [tmp_root / "w0" / "p0"]

    def test_workspace_without_projects(self, simple, tmp_root, fake_cloner):
        result = restore(simple, WorkspaceTarget(tmp_root / "w0"), cloner=fake_cloner)
        assert (tmp_root / "w0").is_dir()
        assert not (tmp_root / "w0" / "p0").exists()
        assert result.created_projects == []

    def test_relative_workspace_path(self, simple, tmp_root, fake_cloner):
        restore(simple, WorkspaceTarget("w0"), cloner=fake_cloner)
        assert (tmp_root / "w0").is_dir()

    def test_git_projects_are_cloned(self, mixed, tmp_root, fake_cloner):
        result = restore(mixed, WorkspaceTarget(tmp_root / "personal", include_projects=True), cloner=fake_cloner)
        assert fake_cloner.calls == [(tmp_root / "personal" / "dotfiles", "someone/dotfiles")]
        assert result.cloned_projects == [tmp_root / "personal" / "dotfiles"]
        assert result.created_projects == [tmp_root / "personal" / "notes"]

    def test_include_projects_covers_nested_workspaces(self, mixed, tmp_root, fake_cloner):
        restore(mixed, WorkspaceTarget(tmp_root / "work", include_projects=True), cloner=fake_cloner)
        assert (tmp_root / "work" / "api").is_dir()
        assert (tmp_root / "work" / "forks" / "lib").is_dir()

    def test_undeclared_workspace(self, simple, tmp_root, fake_cloner):
        with pytest.raises(NotFoundError):
            restore(simple, WorkspaceTarget(tmp_root / "nope"), cloner=fake_cloner)

    def test_existing_workspace_untouched(self, simple, tmp_root, fake_cloner):
        (tmp_root / "w0").mkdir()
        marker = tmp_root / "w0" / "keep.txt"
        marker.write_text("x")
        result = restore(simple, WorkspaceTarget(tmp_root / "w0"), cloner=fake_cloner)
        assert result.created_workspaces == []
        assert marker.read_text() == "x"

    def test_nested_workspace_with_missing_parent_fails(self, mixed, tmp_root, fake_cloner):
        with pytest.raises(FsError):
            restore(mixed, WorkspaceTarget(tmp_root / "work" / "forks"), cloner=fake_cloner)


class TestRestoreProject:
    def test_creates_owning_workspace(self, simple, tmp_root, fake_cloner):
        result = restore(simple, ProjectTarget(tmp_root / "w0" / "p0"), cloner=fake_cloner)
        assert (tmp_root / "w0" / "p0").is_dir()
        assert result.created_workspaces == [tmp_root / "w0"]

    def test_git_project_cloned(self, mixed, tmp_root, fake_cloner):
        restore(mixed, ProjectTarget("personal/dotfiles"), cloner=fake_cloner)
        assert fake_cloner.calls == [(tmp_root / "personal" / "dotfiles", "someone/dotfiles")]

    def test_existing_project_is_noop(self, mixed, tmp_root, fake_cloner):
        (tmp_root / "personal" / "dotfiles").mkdir(parents=True)
        result = restore(mixed, ProjectTarget(tmp_root / "personal" / "dotfiles"), cloner=fake_cloner)
        assert fake_cloner.calls == []
        assert not result.changed

    def test_only_one_ancestor_level(self, mixed, tmp_root, fake_cloner):
        # "work" is missing, so "work/forks" cannot be created on its own.
        with pytest.raises(FsError):
            restore(mixed, ProjectTarget(tmp_root / "work" / "forks" / "lib"), cloner=fake_cloner)
        assert not (tmp_root / "work").exists()

    def test_undeclared_project(self, simple, tmp_root, fake_cloner):
        with pytest.raises(NotFoundError):
            restore(simple, ProjectTarget(tmp_root / "w0" / "nope"), cloner=fake_cloner)
        assert not (tmp_root / "w0").exists()


class TestRestoreAll:
    def test_all_workspaces_with_projects(self, mixed, tmp_root, fake_cloner):
        restore(mixed, AllWorkspacesTarget(include_projects=True), cloner=fake_cloner)
        assert doctor(mixed).healthy

    def test_all_workspaces_without_projects(self, mixed, tmp_root, fake_cloner):
        restore(mixed, AllWorkspacesTarget(), cloner=fake_cloner)
        diagnosis = doctor(mixed)
        assert diagnosis.missing_workspaces == []
        assert len(diagnosis.missing_projects) == 4
        assert fake_cloner.calls == []

    def test_idempotent(self, mixed, fake_cloner):
        first = restore(mixed, AllWorkspacesTarget(include_projects=True), cloner=fake_cloner)
        calls_after_first = list(fake_cloner.calls)
        second = restore(mixed, AllWorkspacesTarget(include_projects=True), cloner=fake_cloner)
        assert first.changed
        assert not second.changed
        assert fake_cloner.calls == calls_after_first

    def test_fail_fast_keeps_partial_progress(self, mixed, tmp_root):
        def broken_cloner(path, project_git):
            raise FsError(f"boom at {path}")

        with pytest.raises(FsError, match="boom"):
            restore(mixed, AllWorkspacesTarget(include_projects=True), cloner=broken_cloner)

        # "personal/notes" comes before the failing clone and stays on disk;
        # "work" is never reached.
        assert (tmp_root / "personal" / "notes").is_dir()
        assert not (tmp_root / "work").exists()

    def test_rerun_after_failure_completes(self, mixed, tmp_root, fake_cloner):
        def broken_cloner(path, project_git):
            raise FsError("boom")

        with pytest.raises(FsError):
            restore(mixed, AllWorkspacesTarget(include_projects=True), cloner=broken_cloner)
        restore(mixed, WorkspaceTarget(tmp_root / "personal", include_projects=True), cloner=fake_cloner)
        restore(mixed, AllWorkspacesTarget(include_projects=True), cloner=fake_cloner)
        assert doctor(mixed).healthy

    def test_all_only_visits_missing_workspaces(self, mixed, tmp_root, fake_cloner):
        (tmp_root / "personal").mkdir()
        restore(mixed, AllWorkspacesTarget(include_projects=True), cloner=fake_cloner)
        assert not (tmp_root / "personal" / "notes").exists()
        assert (tmp_root / "work" / "api").is_dir()


class TestCreateDir:
    def test_already_exists_is_not_an_error(self, tmp_path):
        assert create_dir(tmp_path) is False

    def test_missing_parent_is_fs_error(self, tmp_path):
        with pytest.raises(FsError):
            create_dir(tmp_path / "a" / "b")
