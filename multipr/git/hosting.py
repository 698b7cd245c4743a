"""Hosting-service adapters for creating change requests.

GitHub requests are created through the GitHub CLI (``gh``). Bitbucket
has no widely adopted CLI, so it only ever produces a browser URL that
opens a pre-filled pull-request form. Both can build that manual URL,
which is the fallback whenever automated creation is unavailable.
"""

from __future__ import annotations

import re
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import quote, urlencode

from multipr.constants import DEFAULT_REMOTE, HostKind
from multipr.exceptions import HostingError, ToolingUnavailableError, UnsupportedHostError
from multipr.logging import get_logger

if TYPE_CHECKING:
    from multipr.git.base import GitRunner

logger = get_logger("git.hosting")

GH_TIMEOUT = 60

_SCP_REMOTE_RE = re.compile(r"^(?:[\w.-]+@)?(?P<host>[\w.-]+):(?P<path>(?!/).+)$")
_GITHUB_PR_URL_RE = re.compile(r"https://github\.com/\S+")


def detect_host_kind(remote_url: str | None) -> HostKind:
    """Classify a remote URL by hosting service."""
    if not remote_url:
        return HostKind.UNKNOWN
    if "github.com" in remote_url:
        return HostKind.GITHUB
    if "bitbucket.org" in remote_url:
        return HostKind.BITBUCKET
    return HostKind.UNKNOWN


def repository_web_url(remote_url: str) -> str:
    """Convert a remote URL into the repository's browser URL.

    Handles scp-style SSH (``git@github.com:owner/repo.git``), ``ssh://``
    and ``https://`` remotes, dropping credentials and the ``.git`` suffix.
    """
    url = remote_url.strip()

    match = _SCP_REMOTE_RE.match(url)
    if match and "://" not in url:
        url = f"https://{match.group('host')}/{match.group('path')}"
    elif url.startswith(("ssh://", "git://", "http://", "https://")):
        rest = url.split("://", 1)[1]
        host_part, _, path = rest.partition("/")
        host = host_part.rsplit("@", 1)[-1].split(":", 1)[0]
        url = f"https://{host}/{path}"

    url = url.rstrip("/")
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


@dataclass(frozen=True)
class RepositoryContext:
    """Where the working tree lives and which service hosts it."""

    root: Path
    remote: str
    remote_url: str | None
    host_kind: HostKind
    web_url: str | None

    @classmethod
    def detect(cls, runner: GitRunner, remote: str = DEFAULT_REMOTE) -> RepositoryContext:
        """Build the context from the repository's remote configuration.

        Args:
            runner: GitRunner for the working tree
            remote: Remote that branches are pushed to

        Returns:
            RepositoryContext; ``host_kind`` is UNKNOWN if the remote is missing
        """
        remote_url = runner.remote_url(remote)
        host_kind = detect_host_kind(remote_url)
        web_url = repository_web_url(remote_url) if remote_url else None
        logger.debug(f"Detected {host_kind} repository at {web_url or '(no remote)'}")
        return cls(
            root=runner.repo_path,
            remote=remote,
            remote_url=remote_url,
            host_kind=host_kind,
            web_url=web_url,
        )


class HostingAdapter(ABC):
    """Creates change requests on one hosting service."""

    kind: HostKind = HostKind.UNKNOWN
    supports_automation: bool = False

    def __init__(self, context: RepositoryContext) -> None:
        self.context = context

    @property
    def web_url(self) -> str:
        return self.context.web_url or ""

    def ensure_available(self) -> None:
        """Check prerequisites for automated creation.

        Raises:
            ToolingUnavailableError: If the CLI is missing or not authenticated
        """
        return None

    def create_change_request(self, source_branch: str, base_branch: str, title: str, description: str) -> str:
        """Create a change request and return its URL."""
        raise ToolingUnavailableError(
            f"{self.kind.label} has no automated pull request path",
            tool=str(self.kind),
        )

    @abstractmethod
    def build_manual_request_url(self, source_branch: str, base_branch: str, title: str, description: str) -> str:
        """Build a browser URL that opens a pre-filled change-request form."""


class GitHubAdapter(HostingAdapter):
    """GitHub, through the ``gh`` CLI."""

    kind = HostKind.GITHUB
    supports_automation = True

    def ensure_available(self) -> None:
        try:
            version = subprocess.run(
                ["gh", "--version"], capture_output=True, text=True, check=False, timeout=GH_TIMEOUT
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            version = None
        if version is None or version.returncode != 0:
            raise ToolingUnavailableError(
                "GitHub CLI not found",
                tool="gh",
                hint="Install from: https://cli.github.com/",
            )

        try:
            auth = subprocess.run(
                ["gh", "auth", "status"], capture_output=True, text=True, check=False, timeout=GH_TIMEOUT
            )
        except subprocess.TimeoutExpired:
            auth = None
        if auth is None or auth.returncode != 0:
            raise ToolingUnavailableError(
                "GitHub CLI found but not authenticated",
                tool="gh",
                hint="Run: gh auth login",
            )

    def create_change_request(self, source_branch: str, base_branch: str, title: str, description: str) -> str:
        cmd = [
            "gh",
            "pr",
            "create",
            "--title",
            title,
            "--body",
            description or "",
            "--base",
            base_branch,
            "--head",
            source_branch,
        ]

        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=GH_TIMEOUT,
                cwd=str(self.context.root),
            )
        except FileNotFoundError as e:
            raise ToolingUnavailableError("GitHub CLI not found", tool="gh") from e
        except subprocess.CalledProcessError as e:
            raise HostingError(
                f"gh pr create failed: {(e.stderr or '').strip() or e}",
                command=" ".join(cmd[:3]),
                exit_code=e.returncode,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise HostingError(f"gh pr create timed out after {GH_TIMEOUT}s", command=" ".join(cmd[:3])) from e

        match = _GITHUB_PR_URL_RE.search(result.stdout)
        if match:
            url = match.group(0)
        else:
            url = f"{self.web_url}/pulls"
        logger.info("PR created: %s", url)
        return url

    def build_manual_request_url(self, source_branch: str, base_branch: str, title: str, description: str) -> str:
        query = urlencode({"expand": "1", "title": title, "body": description}, quote_via=quote)
        return f"{self.web_url}/compare/{quote(base_branch, safe='/')}...{quote(source_branch, safe='/')}?{query}"


class BitbucketAdapter(HostingAdapter):
    """Bitbucket, through pre-filled pull-request URLs only."""

    kind = HostKind.BITBUCKET

    def build_manual_request_url(self, source_branch: str, base_branch: str, title: str, description: str) -> str:
        query = urlencode(
            {"source": source_branch, "dest": base_branch, "title": title, "description": description},
            quote_via=quote,
        )
        return f"{self.web_url}/pull-requests/new?{query}"


_ADAPTERS: dict[HostKind, type[HostingAdapter]] = {
    HostKind.GITHUB: GitHubAdapter,
    HostKind.BITBUCKET: BitbucketAdapter,
}


def adapter_for(context: RepositoryContext) -> HostingAdapter:
    """Pick the hosting adapter for a repository.

    Raises:
        UnsupportedHostError: If the remote is not GitHub or Bitbucket
    """
    adapter_cls = _ADAPTERS.get(context.host_kind)
    if adapter_cls is None or not context.web_url:
        raise UnsupportedHostError(context.remote_url)
    return adapter_cls(context)
