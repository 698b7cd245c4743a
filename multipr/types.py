"""Core data types for buckets, changed files and run results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from multipr.constants import ChangeKind, PipelineStep


@dataclass(frozen=True)
class FileRef:
    """One changed file in the working tree.

    ``path`` is the unique key across the pool and every bucket.
    ``size`` and ``mtime`` are display-only.
    """

    path: str
    kind: ChangeKind = ChangeKind.MODIFIED
    original_path: str | None = None
    size: int | None = None
    mtime: datetime | None = None

    @property
    def is_deletion(self) -> bool:
        return self.kind is ChangeKind.DELETED


@dataclass
class Bucket:
    """A named group of files destined for one branch and one change request."""

    name: str
    title: str
    description: str = ""
    files: dict[str, FileRef] = field(default_factory=dict)
    depends_on: str | None = None
    branch_name: str | None = None
    order: int | None = None

    @property
    def paths(self) -> list[str]:
        return list(self.files)

    def is_empty(self) -> bool:
        return not self.files


@dataclass
class ProcessingResult:
    """Outcome of running the pipeline for one bucket."""

    bucket_name: str
    success: bool
    branch_name: str | None = None
    base_branch: str | None = None
    url: str | None = None
    manual: bool = False
    error: str | None = None
    failed_step: PipelineStep | None = None

    @classmethod
    def succeeded(
        cls,
        bucket_name: str,
        branch_name: str,
        base_branch: str,
        url: str,
        manual: bool,
    ) -> ProcessingResult:
        return cls(
            bucket_name=bucket_name,
            success=True,
            branch_name=branch_name,
            base_branch=base_branch,
            url=url,
            manual=manual,
        )

    @classmethod
    def failed(
        cls,
        bucket_name: str,
        error: str,
        step: PipelineStep,
        branch_name: str | None = None,
        base_branch: str | None = None,
    ) -> ProcessingResult:
        return cls(
            bucket_name=bucket_name,
            success=False,
            branch_name=branch_name,
            base_branch=base_branch,
            error=error,
            failed_step=step,
        )


@dataclass(frozen=True)
class BrokenEdge:
    """A dependency edge removed by the resolver to break a cycle."""

    bucket: str
    depends_on: str
    cycle: tuple[str, ...]


@dataclass
class Resolution:
    """Processing order computed by the dependency resolver."""

    order: list[str] = field(default_factory=list)
    broken: list[BrokenEdge] = field(default_factory=list)


@dataclass
class DependencyUpdate:
    """Result of BucketStore.set_dependency."""

    bucket: str
    depends_on: str | None
    applied: bool
    broken: list[BrokenEdge] = field(default_factory=list)

    @property
    def warning(self) -> str | None:
        if self.applied:
            return None
        for edge in self.broken:
            if edge.bucket == self.bucket:
                return (
                    f"Circular dependency detected involving {self.bucket} "
                    f"({' -> '.join(edge.cycle)} -> {edge.cycle[0]}). Dependency removed."
                )
        return f"Dependency of {self.bucket} on {self.depends_on} was not applied."
