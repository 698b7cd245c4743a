"""Tests for multipr.reporter."""

from multipr.constants import PipelineStep
from multipr.reporter import OutcomeReport
from multipr.types import ProcessingResult


def _ok(name: str, manual: bool = False) -> ProcessingResult:
    return ProcessingResult.succeeded(name, f"feature/{name}-1", "main", f"https://example/{name}", manual)


def _fail(name: str, error: str = "push failed: rejected") -> ProcessingResult:
    return ProcessingResult.failed(name, error, PipelineStep.PUSH)


class TestOutcomeReport:
    """Tests for OutcomeReport aggregation."""

    def test_partition(self) -> None:
        report = OutcomeReport.from_results([_ok("a"), _fail("b"), _ok("c")])
        assert [r.bucket_name for r in report.successes] == ["a", "c"]
        assert [r.bucket_name for r in report.failures] == ["b"]
        assert report.success_count == 2
        assert report.failure_count == 1
        assert report.total == 3

    def test_failure_lines(self) -> None:
        report = OutcomeReport.from_results([_fail("b", "commit failed: nothing to commit")])
        assert report.failure_lines() == ["• b: commit failed: nothing to commit"]

    def test_should_clear_needs_one_success(self) -> None:
        assert OutcomeReport.from_results([_ok("a"), _fail("b")]).should_clear
        assert not OutcomeReport.from_results([_fail("a"), _fail("b")]).should_clear
        assert not OutcomeReport.from_results([]).should_clear

    def test_has_manual(self) -> None:
        assert OutcomeReport.from_results([_ok("a", manual=True)]).has_manual
        assert not OutcomeReport.from_results([_ok("a")]).has_manual


class TestSummary:
    """Tests for OutcomeReport.summary."""

    def test_automated(self) -> None:
        report = OutcomeReport.from_results([_ok("a"), _ok("b")])
        assert report.summary("GitHub", automated=True) == "Successfully created 2 PRs on GitHub!"

    def test_manual(self) -> None:
        report = OutcomeReport.from_results([_ok("a", manual=True)])
        assert report.summary("Bitbucket", automated=False) == (
            "Created 1 branches! Open Bitbucket to create PRs."
        )

    def test_automated_with_manual_fallback(self) -> None:
        report = OutcomeReport.from_results([_ok("a"), _ok("b", manual=True)])
        assert report.summary("GitHub", automated=True).startswith("Created 2 branches!")

    def test_with_failures(self) -> None:
        report = OutcomeReport.from_results([_ok("a"), _fail("b")])
        assert report.summary("GitHub", automated=True).splitlines() == [
            "Successfully created 1 PRs on GitHub!",
            "1 PRs failed:",
            "• b: push failed: rejected",
        ]

    def test_nothing_processed(self) -> None:
        assert OutcomeReport.from_results([]).summary("GitHub", automated=True) == (
            "No buckets with files to process."
        )
