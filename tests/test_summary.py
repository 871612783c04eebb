from __future__ import annotations

import pytest

from sdetkit.logs import parse_lines
from sdetkit.models import TestResult
from sdetkit.summary import summarize_by_suite, summarize_by_test


def test_summarize_by_test_counts_outcomes(sample_log_lines: list[str]) -> None:
    summary = summarize_by_test(parse_lines(sample_log_lines))

    assert summary["Checkout|ApplyCoupon"].fail_count == 2
    assert summary["Checkout|ApplyCoupon"].pass_count == 0
    assert summary["Checkout|AddToCart"].pass_count == 1
    assert summary["Search|BasicSearch"].avg_duration_ms == pytest.approx(85.0)


def test_summarize_by_test_empty_input() -> None:
    assert summarize_by_test([]) == {}


def test_summarize_by_suite_orders_by_failure_rate() -> None:
    results = [
        TestResult("Checkout", "AddToCart", "PASS"),
        TestResult("Checkout", "ApplyCoupon", "FAIL"),
        TestResult("Checkout", "ApplyCoupon", "fail"),
        TestResult("Search", "BasicSearch", "PASS"),
        TestResult("Search", "BasicSearch", "PASS"),
    ]

    summaries = summarize_by_suite(results)

    assert [item.suite for item in summaries] == ["Checkout", "Search"]
    assert summaries[0].failed == 2
    assert summaries[0].failure_rate == pytest.approx(2 / 3)
    assert summaries[1].failure_rate == 0.0
    assert str(summaries[0]) == "Suite=Checkout Pass=1 Fail=2 FailureRate=0.6667"


def test_suite_without_pass_or_fail_has_zero_rate() -> None:
    summaries = summarize_by_suite([TestResult("Flaky", "Skipped", "SKIP")])

    assert summaries[0].passed == 0
    assert summaries[0].failure_rate == 0.0
