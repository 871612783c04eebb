"""Regression detection between two result snapshots."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from sdetkit.models import TestId, TestResult, TestStatus


@dataclass
class DiffResult:
    new_failures: list[TestResult] = field(default_factory=list)
    fixed: list[TestResult] = field(default_factory=list)
    still_failing: list[TestResult] = field(default_factory=list)


def compute_diff(yesterday: Iterable[TestResult], today: Iterable[TestResult]) -> DiffResult:
    """Classify today's results against yesterday's, keyed by suite and test.

    - new failure: FAIL today, missing or PASS yesterday
    - fixed: PASS today, FAIL yesterday
    - still failing: FAIL today, FAIL yesterday
    """
    previous: dict[TestId, TestStatus | None] = {
        result.test_id: TestStatus.parse(result.status) for result in yesterday
    }
    diff = DiffResult()
    for result in today:
        before = previous.get(result.test_id)
        seen = result.test_id in previous
        if result.is_fail:
            if not seen or before is TestStatus.PASS:
                diff.new_failures.append(result)
            elif before is TestStatus.FAIL:
                diff.still_failing.append(result)
        elif result.is_pass and before is TestStatus.FAIL:
            diff.fixed.append(result)
    return diff
