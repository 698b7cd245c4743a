"""GitOps -- the git operations the bucket pipeline drives."""

import subprocess
from datetime import datetime
from pathlib import Path

from multipr.constants import DEFAULT_REMOTE, ChangeKind
from multipr.exceptions import GitError
from multipr.git.base import GitRunner
from multipr.logging import get_logger
from multipr.types import FileRef

logger = get_logger("git.ops")

PUSH_TIMEOUT = 300


class GitOps(GitRunner):
    """Git operations for change listing, branching, staging and publishing.

    Inherits command execution from GitRunner. Every method maps to one
    step of the per-bucket pipeline and raises GitError on failure.
    """

    def list_changed_files(self) -> list[FileRef]:
        """List changed paths in the working tree.

        Uses NUL-separated porcelain output so paths with spaces or quotes
        come through verbatim. Untracked directories are expanded to files.

        Returns:
            One FileRef per changed path, in git's order
        """
        result = self._run("status", "--porcelain=v1", "-z", "--untracked-files=all")
        entries = result.stdout.split("\0")
        refs: list[FileRef] = []

        i = 0
        while i < len(entries):
            entry = entries[i]
            i += 1
            if len(entry) < 4:
                continue

            code, path = entry[:2], entry[3:]
            original: str | None = None
            if "R" in code or "C" in code:
                # Rename and copy entries are followed by the source path
                original = entries[i] if i < len(entries) else None
                i += 1

            if path.endswith("/"):
                continue

            size, mtime = self._stat(path)
            refs.append(
                FileRef(
                    path=path,
                    kind=ChangeKind.from_porcelain(code),
                    original_path=original,
                    size=size,
                    mtime=mtime,
                )
            )

        return refs

    def _stat(self, path: str) -> tuple[int | None, datetime | None]:
        full_path = self.repo_path / path
        try:
            stats = full_path.stat()
        except OSError:
            return None, None
        if not full_path.is_file():
            return None, None
        return stats.st_size, datetime.fromtimestamp(stats.st_mtime)

    def branch_exists(self, branch: str) -> bool:
        """Check if a local branch exists."""
        result = self._run("branch", "--list", branch, check=False)
        return bool(result.stdout.strip())

    def checkout(self, ref: str) -> None:
        """Checkout a branch or commit.

        Args:
            ref: Branch name or commit SHA
        """
        self._run("checkout", ref)
        logger.info(f"Checked out {ref}")

    def create_branch(self, branch: str, base: str | None = None, pull: bool = False) -> str:
        """Create a branch and switch to it.

        Switching to ``base`` first is best-effort: if it cannot be checked
        out, the branch is created from whatever is currently checked out.

        Args:
            branch: Branch name to create
            base: Branch to start from
            pull: Fast-forward ``base`` from its upstream before branching

        Returns:
            The created branch name
        """
        if base and base.strip():
            try:
                self.checkout(base)
            except GitError as e:
                logger.warning(f"Could not check out {base}, branching from current HEAD: {e}")
            else:
                if pull:
                    self._pull_ff_only(base)

        self._run("checkout", "-b", branch)
        logger.info(f"Created branch {branch} from {base or 'HEAD'}")
        return branch

    def _pull_ff_only(self, branch: str) -> None:
        try:
            result = self._run("pull", "--ff-only", check=False)
        except GitError as e:
            logger.debug(f"Pull of {branch} skipped: {e}")
            return
        if result.returncode != 0:
            logger.debug(f"Pull of {branch} skipped: {result.stderr.strip()}")

    def reset_staging_area(self) -> None:
        """Unstage everything, leaving the working tree untouched."""
        self._run("reset", "-q")

    def stage_path(self, path: str) -> None:
        """Stage a new or modified file."""
        self._run("add", "--", path)

    def stage_deletion(self, path: str) -> None:
        """Stage the removal of a file that is gone from the working tree."""
        self._run("rm", "-q", "--cached", "--ignore-unmatch", "--", path)

    def commit(self, message: str) -> str:
        """Commit the staged changes.

        Args:
            message: Commit message (may span multiple lines)

        Returns:
            Commit SHA
        """
        self._run("commit", "-q", "-m", message)
        commit_sha = self.current_commit()
        logger.info(f"Created commit {commit_sha[:8]}: {message.splitlines()[0][:50]}")
        return commit_sha

    def push(
        self,
        branch: str,
        remote: str = DEFAULT_REMOTE,
        set_upstream: bool = True,
    ) -> None:
        """Push a branch to a remote.

        Args:
            branch: Branch to push
            remote: Remote name
            set_upstream: Set upstream tracking
        """
        args = ["push"]
        if set_upstream:
            args.append("--set-upstream")
        args.extend([remote, branch])

        self._run(*args, timeout=PUSH_TIMEOUT)
        logger.info(f"Pushed {branch} to {remote}")


def open_repository(path: str | Path = ".") -> GitOps:
    """Open the git repository containing ``path``.

    Args:
        path: Any directory inside the working tree

    Returns:
        GitOps rooted at the top level of the working tree

    Raises:
        GitError: If ``path`` is not inside a git working tree
    """
    result = subprocess.run(
        ["git", "-C", str(Path(path).resolve()), "rev-parse", "--show-toplevel"],
        capture_output=True,
        text=True,
        check=False,
        timeout=30,
    )
    if result.returncode != 0:
        raise GitError(f"Not a git repository: {Path(path).resolve()}", exit_code=result.returncode)
    return GitOps(result.stdout.strip())
