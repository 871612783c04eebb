"""Pass/fail aggregation over parsed runs."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from sdetkit.logs import LogEntry
from sdetkit.models import TestResult, TestStatus, result_key


@dataclass(frozen=True)
class TestSummary:
    __test__ = False

    pass_count: int
    fail_count: int
    avg_duration_ms: float


@dataclass(frozen=True)
class SuiteSummary:
    suite: str
    passed: int
    failed: int
    failure_rate: float

    def __str__(self) -> str:
        return f"Suite={self.suite} Pass={self.passed} Fail={self.failed} FailureRate={self.failure_rate:.4f}"


def summarize_by_test(entries: Iterable[LogEntry]) -> dict[str, TestSummary]:
    """Group runs by ``Suite|Test`` and count outcomes; the average spans every run."""
    grouped: dict[str, list[LogEntry]] = {}
    for entry in entries:
        grouped.setdefault(result_key(entry.suite, entry.test), []).append(entry)

    summaries: dict[str, TestSummary] = {}
    for key, runs in grouped.items():
        statuses = [TestStatus.parse(run.status) for run in runs]
        summaries[key] = TestSummary(
            pass_count=statuses.count(TestStatus.PASS),
            fail_count=statuses.count(TestStatus.FAIL),
            avg_duration_ms=sum(run.duration_ms for run in runs) / len(runs),
        )
    return summaries


def summarize_by_suite(results: Iterable[TestResult]) -> list[SuiteSummary]:
    counts: dict[str, list[int]] = {}
    for result in results:
        tally = counts.setdefault(result.suite, [0, 0])
        if result.is_pass:
            tally[0] += 1
        elif result.is_fail:
            tally[1] += 1

    summaries = []
    for suite, (passed, failed) in counts.items():
        total = passed + failed
        rate = failed / total if total else 0.0
        summaries.append(SuiteSummary(suite=suite, passed=passed, failed=failed, failure_rate=rate))
    summaries.sort(key=lambda item: (-item.failure_rate, item.suite))
    return summaries
