"""multipr git package -- repository access and hosting adapters.

Re-exports core classes for convenient access:
    from multipr.git import GitOps, GitRunner, RepositoryContext
"""

from multipr.git.base import GitRunner
from multipr.git.hosting import (
    BitbucketAdapter,
    GitHubAdapter,
    HostingAdapter,
    RepositoryContext,
    adapter_for,
)
from multipr.git.ops import GitOps, open_repository

__all__ = [
    "GitRunner",
    "GitOps",
    "open_repository",
    "RepositoryContext",
    "HostingAdapter",
    "GitHubAdapter",
    "BitbucketAdapter",
    "adapter_for",
]
