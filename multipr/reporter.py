"""Aggregate per-bucket results into a run report."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from multipr.types import ProcessingResult


@dataclass
class OutcomeReport:
    """Successes and failures of one processing run.

    Pure aggregation: no retries and no side effects. The caller decides
    what to do with failures and whether to clear buckets.
    """

    successes: list[ProcessingResult] = field(default_factory=list)
    failures: list[ProcessingResult] = field(default_factory=list)

    @classmethod
    def from_results(cls, results: Iterable[ProcessingResult]) -> OutcomeReport:
        report = cls()
        for result in results:
            (report.successes if result.success else report.failures).append(result)
        return report

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return self.success_count + self.failure_count

    @property
    def has_manual(self) -> bool:
        return any(r.manual for r in self.successes)

    @property
    def should_clear(self) -> bool:
        """Buckets are consumed once at least one of them made it through."""
        return self.success_count > 0

    def failure_lines(self) -> list[str]:
        return [f"• {r.bucket_name}: {r.error}" for r in self.failures]

    def summary(self, host_label: str, automated: bool) -> str:
        """One-line headline for the run.

        Args:
            host_label: Display name of the hosting service
            automated: Whether requests were meant to be created automatically
        """
        lines: list[str] = []
        if self.success_count:
            if automated and not self.has_manual:
                lines.append(f"Successfully created {self.success_count} PRs on {host_label}!")
            else:
                lines.append(f"Created {self.success_count} branches! Open {host_label} to create PRs.")
        if self.failure_count:
            lines.append(f"{self.failure_count} PRs failed:")
            lines.extend(self.failure_lines())
        if not lines:
            lines.append("No buckets with files to process.")
        return "\n".join(lines)
