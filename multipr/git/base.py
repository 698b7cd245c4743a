"""GitRunner base class -- low-level git command execution."""

import subprocess
from pathlib import Path

from multipr.exceptions import GitError
from multipr.logging import get_logger

logger = get_logger("git.base")


class GitRunner:
    """Low-level git command runner with repository validation.

    Provides the subprocess execution layer and the read-only queries the
    bucket workflow needs before touching anything (current branch,
    commit, remote URL). GitOps adds the mutating operations.
    """

    def __init__(self, repo_path: str | Path = ".") -> None:
        """Initialize git runner.

        Args:
            repo_path: Path to the git repository

        Raises:
            GitError: If the path is not a git repository
        """
        self.repo_path = Path(repo_path).resolve()
        self._validate_repo()

    def _validate_repo(self) -> None:
        """Validate that repo_path is a git repository (or worktree)."""
        if not (self.repo_path / ".git").exists():
            raise GitError(
                f"Not a git repository: {self.repo_path}",
                details={"path": str(self.repo_path)},
            )

    def _run(
        self,
        *args: str,
        check: bool = True,
        capture: bool = True,
        timeout: int = 60,
    ) -> subprocess.CompletedProcess[str]:
        """Run a git command.

        Args:
            *args: Git command arguments
            check: Whether to raise on non-zero exit
            capture: Whether to capture output
            timeout: Timeout in seconds

        Returns:
            Completed process result

        Raises:
            GitError: If the command fails (when check=True) or times out
        """
        cmd = ["git", "-C", str(self.repo_path), *args]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            return subprocess.run(
                cmd,
                capture_output=capture,
                text=True,
                check=check,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise GitError(
                f"Git command timed out after {timeout}s: {' '.join(args)}",
                command=" ".join(cmd),
                exit_code=-1,
            ) from e
        except subprocess.CalledProcessError as e:
            raise GitError(
                f"Git command failed: {e.stderr.strip() if e.stderr else str(e)}",
                command=" ".join(cmd),
                exit_code=e.returncode,
            ) from e

    def current_branch(self) -> str:
        """Get the current branch name.

        Returns:
            Current branch name
        """
        result = self._run("rev-parse", "--abbrev-ref", "HEAD")
        return result.stdout.strip()

    def current_commit(self) -> str:
        """Get the current commit SHA.

        Returns:
            Full 40-character commit SHA
        """
        result = self._run("rev-parse", "HEAD")
        return result.stdout.strip()

    def current_ref(self) -> str:
        """Get something ``checkout`` can return to.

        Returns:
            The current branch name, or the commit SHA when HEAD is detached
        """
        branch = self.current_branch()
        if branch == "HEAD":
            return self.current_commit()
        return branch

    def remote_url(self, remote: str = "origin") -> str | None:
        """Get the URL configured for a remote.

        Args:
            remote: Remote name

        Returns:
            Remote URL, or None if the remote is not configured
        """
        result = self._run("config", "--get", f"remote.{remote}.url", check=False)
        url = result.stdout.strip()
        return url or None
