"""Markdown previews of what a run will do."""

from __future__ import annotations

from collections.abc import Sequence

from multipr.constants import HostKind
from multipr.types import Bucket


def planned_base(bucket: Bucket, planned: Sequence[Bucket], default_base: str) -> str:
    """Describe the base branch a bucket will be created from.

    A dependency that is itself part of the run gets a fresh branch during
    the run, so its name is not known yet. A ``branch_name`` left over from
    an earlier run is never reused as a base.
    """
    if bucket.depends_on:
        for other in planned:
            if other.name == bucket.depends_on:
                return f"<branch of {other.name}>"
    return default_base


def _file_lines(bucket: Bucket) -> list[str]:
    lines = [f"- Files ({len(bucket.files)}):"]
    lines.extend(f"  - {ref.path} ({ref.kind})" for ref in bucket.files.values())
    return lines


def render_plan_preview(buckets: Sequence[Bucket], host_kind: HostKind, default_base: str) -> str:
    """Render the plan for every bucket about to be processed."""
    lines = [
        "# Multi-PR Plan Preview",
        "",
        f"Repository type: {host_kind}",
        f"Default base branch: {default_base}",
        "",
    ]
    for bucket in buckets:
        lines.append(f"## {bucket.name}")
        lines.append(f"- Base branch: {planned_base(bucket, buckets, default_base)}")
        if bucket.depends_on:
            lines.append(f"- Depends on: {bucket.depends_on}")
        lines.extend(_file_lines(bucket))
        lines.append("")
    return "\n".join(lines)


def render_bucket_preview(bucket: Bucket, buckets: Sequence[Bucket], default_base: str) -> str:
    """Render a single bucket with its title, description and files."""
    lines = [
        f"# Preview: {bucket.name}",
        "",
        f"- Title: {bucket.title}",
        f"- Description: {bucket.description or '(none)'}",
    ]
    if bucket.depends_on:
        lines.append(f"- Depends on: {bucket.depends_on}")
    lines.append(f"- Base branch: {planned_base(bucket, buckets, default_base)}")
    lines.extend(_file_lines(bucket))
    return "\n".join(lines)
