"""Tests for multipr.git.ops against a real temporary repository."""

from pathlib import Path

import pytest

from multipr.constants import ChangeKind
from multipr.exceptions import GitError
from multipr.git.ops import GitOps, open_repository
from tests.helpers.repo import run_git


class TestGitRunner:
    """Tests for repository validation and read-only queries."""

    def test_invalid_repo(self, tmp_path: Path) -> None:
        with pytest.raises(GitError):
            GitOps(tmp_path)

    def test_current_branch(self, tmp_repo: Path) -> None:
        assert GitOps(tmp_repo).current_branch() == "main"

    def test_current_ref_on_branch(self, tmp_repo: Path) -> None:
        assert GitOps(tmp_repo).current_ref() == "main"

    def test_current_ref_when_detached(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        sha = ops.current_commit()
        run_git("checkout", "-q", "--detach", cwd=tmp_repo)

        assert ops.current_branch() == "HEAD"
        assert ops.current_ref() == sha

    def test_remote_url(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        assert ops.remote_url("origin") is None
        run_git("remote", "add", "origin", "git@github.com:acme/widgets.git", cwd=tmp_repo)
        assert ops.remote_url("origin") == "git@github.com:acme/widgets.git"


class TestOpenRepository:
    """Tests for open_repository."""

    def test_from_subdirectory(self, tmp_repo: Path) -> None:
        ops = open_repository(tmp_repo / "src")
        assert ops.repo_path == tmp_repo.resolve()

    def test_outside_repository(self, tmp_path: Path) -> None:
        outside = tmp_path / "elsewhere"
        outside.mkdir()
        with pytest.raises(GitError, match="Not a git repository"):
            open_repository(outside)


class TestListChangedFiles:
    """Tests for GitOps.list_changed_files."""

    def test_clean_tree(self, tmp_repo: Path) -> None:
        assert GitOps(tmp_repo).list_changed_files() == []

    def test_change_kinds(self, tmp_repo: Path) -> None:
        (tmp_repo / "src" / "app.py").write_text("print('changed')\n")
        (tmp_repo / "src" / "util.py").unlink()
        (tmp_repo / "notes").mkdir()
        (tmp_repo / "notes" / "new file.txt").write_text("hello\n")
        (tmp_repo / "added.py").write_text("x = 1\n")
        run_git("add", "added.py", cwd=tmp_repo)

        refs = {ref.path: ref for ref in GitOps(tmp_repo).list_changed_files()}

        assert refs["src/app.py"].kind is ChangeKind.MODIFIED
        assert refs["src/util.py"].kind is ChangeKind.DELETED
        assert refs["notes/new file.txt"].kind is ChangeKind.UNTRACKED
        assert refs["added.py"].kind is ChangeKind.ADDED

    def test_size_and_mtime(self, tmp_repo: Path) -> None:
        (tmp_repo / "src" / "app.py").write_text("12345")
        (tmp_repo / "src" / "util.py").unlink()

        refs = {ref.path: ref for ref in GitOps(tmp_repo).list_changed_files()}

        assert refs["src/app.py"].size == 5
        assert refs["src/app.py"].mtime is not None
        assert refs["src/util.py"].size is None

    def test_staged_rename(self, tmp_repo: Path) -> None:
        run_git("mv", "README.md", "GUIDE.md", cwd=tmp_repo)

        refs = GitOps(tmp_repo).list_changed_files()

        assert len(refs) == 1
        assert refs[0].path == "GUIDE.md"
        assert refs[0].kind is ChangeKind.RENAMED
        assert refs[0].original_path == "README.md"


class TestBranching:
    """Tests for branch creation and checkout."""

    def test_create_branch_from_base(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        run_git("checkout", "-q", "-b", "work", cwd=tmp_repo)

        name = ops.create_branch("feature/a-1", base="main")

        assert name == "feature/a-1"
        assert ops.current_branch() == "feature/a-1"
        assert ops.branch_exists("feature/a-1")

    def test_missing_base_branches_from_current(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        ops.create_branch("feature/a-1", base="does-not-exist")
        assert ops.current_branch() == "feature/a-1"

    def test_pull_without_upstream_is_best_effort(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        ops.create_branch("feature/a-1", base="main", pull=True)
        assert ops.current_branch() == "feature/a-1"

    def test_duplicate_branch_fails(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        with pytest.raises(GitError):
            ops.create_branch("main")

    def test_checkout(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        ops.create_branch("feature/a-1")
        ops.checkout("main")
        assert ops.current_branch() == "main"


class TestStagingAndCommit:
    """Tests for staging, committing and pushing."""

    def test_stage_and_commit(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        (tmp_repo / "src" / "app.py").write_text("print('changed')\n")
        (tmp_repo / "src" / "util.py").write_text("print('also changed')\n")

        ops.reset_staging_area()
        ops.stage_path("src/app.py")
        sha = ops.commit("Update app\n\nFiles modified:\n- src/app.py")

        assert len(sha) == 40
        assert run_git("show", "--name-only", "--format=", "HEAD", cwd=tmp_repo).split() == ["src/app.py"]
        assert "Files modified:" in run_git("log", "-1", "--format=%B", cwd=tmp_repo)

    def test_reset_unstages(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        (tmp_repo / "src" / "app.py").write_text("print('changed')\n")
        run_git("add", "src/app.py", cwd=tmp_repo)

        ops.reset_staging_area()

        assert run_git("diff", "--cached", "--name-only", cwd=tmp_repo).strip() == ""

    def test_stage_deletion(self, tmp_repo: Path) -> None:
        ops = GitOps(tmp_repo)
        (tmp_repo / "src" / "util.py").unlink()

        ops.stage_deletion("src/util.py")
        ops.commit("Remove util")

        assert run_git("show", "--name-status", "--format=", "HEAD", cwd=tmp_repo).split() == ["D", "src/util.py"]

    def test_stage_deletion_of_unknown_path(self, tmp_repo: Path) -> None:
        GitOps(tmp_repo).stage_deletion("never/existed.py")

    def test_commit_with_nothing_staged_fails(self, tmp_repo: Path) -> None:
        with pytest.raises(GitError):
            GitOps(tmp_repo).commit("Empty")

    def test_push(self, tmp_repo: Path, bare_remote: Path) -> None:
        ops = GitOps(tmp_repo)
        ops.create_branch("feature/a-1")
        (tmp_repo / "a.py").write_text("a = 1\n")
        ops.stage_path("a.py")
        ops.commit("Add a")

        ops.push("feature/a-1")

        assert "feature/a-1" in run_git("branch", "--list", cwd=bare_remote)
        assert run_git("rev-parse", "--abbrev-ref", "feature/a-1@{upstream}", cwd=tmp_repo).strip() == "origin/feature/a-1"
