"""Pytest configuration and fixtures for multipr tests."""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from tests.helpers.repo import GITHUB_URL, run_git


@pytest.fixture
def tmp_repo(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary git repository with one commit on ``main``.

    Yields:
        Path to the temporary repository
    """
    repo = tmp_path / "repo"
    repo.mkdir()
    orig_dir = os.getcwd()
    os.chdir(repo)

    run_git("init", "-q", "-b", "main", cwd=repo)
    run_git("config", "user.email", "test@test.com", cwd=repo)
    run_git("config", "user.name", "Test", cwd=repo)
    run_git("config", "commit.gpgsign", "false", cwd=repo)

    (repo / "README.md").write_text("# Test Repo\n")
    (repo / "src").mkdir()
    (repo / "src" / "app.py").write_text("print('app')\n")
    (repo / "src" / "util.py").write_text("print('util')\n")
    run_git("add", "-A", cwd=repo)
    run_git("commit", "-q", "-m", "Initial commit", cwd=repo)

    yield repo

    os.chdir(orig_dir)


@pytest.fixture
def bare_remote(tmp_repo: Path) -> Path:
    """Attach a bare repository as ``origin``.

    Fetch URL points at GitHub so hosting detection sees a GitHub repo;
    pushes go to the local bare repository.

    Returns:
        Path to the bare repository
    """
    bare = tmp_repo.parent / "remote.git"
    run_git("init", "-q", "--bare", str(bare), cwd=tmp_repo.parent)
    run_git("remote", "add", "origin", GITHUB_URL, cwd=tmp_repo)
    run_git("config", "remote.origin.pushurl", str(bare), cwd=tmp_repo)
    run_git("push", "-q", "origin", "main", cwd=tmp_repo)
    return bare
