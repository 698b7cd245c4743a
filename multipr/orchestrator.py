"""Per-bucket branch, stage, commit, push and request pipeline."""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Iterable
from typing import TypeVar

from multipr.config import MultiPRConfig
from multipr.constants import BRANCH_SUFFIX_DIGITS, Event, PipelineStep
from multipr.events import ChangeNotifier
from multipr.exceptions import (
    GitError,
    MultiPRError,
    PipelineStepError,
    ToolingUnavailableError,
    UnsupportedHostError,
)
from multipr.git.hosting import HostingAdapter
from multipr.git.ops import GitOps
from multipr.logging import clear_bucket_context, get_bucket_logger, get_logger, set_bucket_context
from multipr.types import Bucket, ProcessingResult

logger = get_logger("orchestrator")

T = TypeVar("T")

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str, max_length: int) -> str:
    """Lower-case ``name`` and collapse non-alphanumeric runs to single dashes."""
    slug = _NON_ALNUM_RE.sub("-", name.lower()).strip("-")
    slug = slug[:max_length].strip("-")
    return slug or "bucket"


def build_commit_message(bucket: Bucket) -> str:
    """Title, optional description, then a manifest of every file in the bucket."""
    parts = [bucket.title, ""]
    if bucket.description:
        parts.extend([bucket.description, ""])
    parts.append("Files modified:")
    parts.extend(f"- {path}" for path in bucket.files)
    return "\n".join(parts)


class WorkflowOrchestrator:
    """Turn ordered buckets into branches and change requests.

    Buckets are processed one at a time. A failure in one bucket becomes
    that bucket's ProcessingResult and never stops the run. Whatever
    happens, the branch that was checked out before the run is checked
    out again at the end.
    """

    def __init__(
        self,
        git: GitOps,
        host: HostingAdapter | None,
        config: MultiPRConfig | None = None,
        notifier: ChangeNotifier | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.git = git
        self.host = host
        self.config = config or MultiPRConfig()
        self.notifier = notifier
        self.clock = clock

    def preflight(self, use_automation: bool) -> bool:
        """Check that a run can start, before any side effect.

        Args:
            use_automation: Whether automated change-request creation is wanted

        Returns:
            True if requests will be created automatically

        Raises:
            UnsupportedHostError: If the remote is not a supported host
            ToolingUnavailableError: If automation was requested but the CLI is unusable
        """
        if self.host is None:
            raise UnsupportedHostError(None)
        if not (use_automation and self.host.supports_automation):
            return False
        self.host.ensure_available()
        return True

    def make_branch_name(self, bucket_name: str, taken: Iterable[str] = ()) -> str:
        """Derive a fresh branch name for a bucket.

        The name is ``<prefix><slug>-<suffix>`` where the suffix is the last
        digits of the millisecond clock. If that branch already exists
        locally or in ``taken``, ``-2``, ``-3``... is appended.
        """
        slug = slugify(bucket_name, self.config.max_slug_length)
        suffix = str(int(self.clock() * 1000))[-BRANCH_SUFFIX_DIGITS:]
        candidate = f"{self.config.branch_prefix}{slug}-{suffix}"

        taken = set(taken)
        name = candidate
        counter = 2
        while name in taken or self.git.branch_exists(name):
            name = f"{candidate}-{counter}"
            counter += 1
        return name

    def process_all(
        self,
        buckets: Iterable[Bucket],
        default_base_branch: str | None = None,
        use_automation: bool = True,
    ) -> list[ProcessingResult]:
        """Run the pipeline for every non-empty bucket, in the given order.

        Args:
            buckets: Buckets in resolver order
            default_base_branch: Base for buckets without a usable dependency
            use_automation: Create requests through the hosting CLI when supported

        Returns:
            One ProcessingResult per non-empty bucket
        """
        if self.host is None:
            raise UnsupportedHostError(None)

        default_base = default_base_branch or self.config.default_base_branch
        automated = use_automation and self.host.supports_automation
        original_branch = self.git.current_ref()
        created: dict[str, str] = {}
        results: list[ProcessingResult] = []

        logger.info(f"Processing buckets from {original_branch} (default base {default_base})")

        try:
            for bucket in buckets:
                if bucket.is_empty():
                    logger.info(f"Skipping empty bucket {bucket.name}")
                    continue
                result = self._process_bucket(bucket, default_base, automated, created)
                results.append(result)
                self._emit(
                    Event.BUCKET_PROCESSED,
                    {
                        "bucket": result.bucket_name,
                        "success": result.success,
                        "branch": result.branch_name,
                        "url": result.url,
                        "error": result.error,
                    },
                )
        finally:
            clear_bucket_context()
            self._restore_branch(original_branch)

        succeeded = sum(1 for r in results if r.success)
        logger.info(f"Run complete: {succeeded} succeeded, {len(results) - succeeded} failed")
        self._emit(
            Event.RUN_COMPLETE,
            {"succeeded": succeeded, "failed": len(results) - succeeded, "original_branch": original_branch},
        )
        return results

    def resolve_base(self, bucket: Bucket, default_base: str, created: dict[str, str]) -> str:
        """Pick the base branch for a bucket.

        A bucket whose dependency already got a branch in this run is
        stacked on that branch. Otherwise it starts from ``default_base``.
        """
        if bucket.depends_on:
            branch = created.get(bucket.depends_on)
            if branch:
                return branch
            logger.info(
                f"Dependency {bucket.depends_on} of {bucket.name} has no branch in this run, "
                f"using {default_base}"
            )
        return default_base

    def _process_bucket(
        self,
        bucket: Bucket,
        default_base: str,
        automated: bool,
        created: dict[str, str],
    ) -> ProcessingResult:
        base = self.resolve_base(bucket, default_base, created)
        branch: str | None = None
        log = get_bucket_logger(bucket.name)

        try:
            branch = self._run_step(PipelineStep.BRANCH, bucket, self._create_branch, bucket, base, created)
            self._run_step(PipelineStep.STAGE, bucket, self._stage, bucket)
            self._run_step(PipelineStep.COMMIT, bucket, self.git.commit, build_commit_message(bucket))
            self._run_step(PipelineStep.PUSH, bucket, self.git.push, branch, self.config.remote)
            url, manual = self._run_step(PipelineStep.REQUEST, bucket, self._request, bucket, branch, base, automated)
        except PipelineStepError as e:
            log.error(e.message)
            return ProcessingResult.failed(
                bucket.name,
                e.message,
                PipelineStep(e.step),
                branch_name=branch,
                base_branch=base,
            )

        log.info(f"{'Manual request URL' if manual else 'Change request'}: {url}")
        return ProcessingResult.succeeded(bucket.name, branch, base, url, manual)

    def _run_step(self, step: PipelineStep, bucket: Bucket, fn: Callable[..., T], *args: object) -> T:
        set_bucket_context(bucket=bucket.name, step=str(step))
        self._emit(Event.STEP_STARTED, {"bucket": bucket.name, "step": str(step)})
        try:
            return fn(*args)
        except (MultiPRError, OSError) as e:
            error = e.message if isinstance(e, MultiPRError) else str(e)
            raise PipelineStepError(f"{step} failed: {error}", step=str(step), bucket=bucket.name) from e

    def _create_branch(self, bucket: Bucket, base: str, created: dict[str, str]) -> str:
        name = self.make_branch_name(bucket.name, taken=created.values())
        self.git.create_branch(name, base=base, pull=self.config.pull_base)
        bucket.branch_name = name
        created[bucket.name] = name
        return name

    def _stage(self, bucket: Bucket) -> None:
        self.git.reset_staging_area()
        for ref in bucket.files.values():
            if ref.is_deletion:
                self.git.stage_deletion(ref.path)
                continue
            if ref.original_path:
                self.git.stage_deletion(ref.original_path)
            self.git.stage_path(ref.path)

    def _request(self, bucket: Bucket, branch: str, base: str, automated: bool) -> tuple[str, bool]:
        host = self.host
        if host is None:
            raise UnsupportedHostError(None)
        if automated:
            try:
                url = host.create_change_request(branch, base, bucket.title, bucket.description)
                return url, False
            except ToolingUnavailableError as e:
                logger.warning(f"{e.message}, falling back to a manual request URL")
        url = host.build_manual_request_url(branch, base, bucket.title, bucket.description)
        return url, True

    def _restore_branch(self, branch: str) -> None:
        try:
            self.git.checkout(branch)
        except GitError as e:
            logger.error(f"Could not switch back to {branch}: {e}")

    def _emit(self, event: Event, data: dict) -> None:
        if self.notifier is not None:
            self.notifier.emit(event, data)
