from __future__ import annotations

from pathlib import Path

import pytest

from sdetkit.logging import reset_logging

_TIMING_TEST_FILES = {
    "test_timeout.py",
    "test_retry_cancellation.py",
    "test_concurrency.py",
    "test_retry_timing.py",
}


@pytest.hookimpl(trylast=True)
def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    del config
    for item in items:
        path = Path(str(getattr(item, "path", item.fspath)))
        if path.name in _TIMING_TEST_FILES:
            item.add_marker(pytest.mark.timing)


@pytest.fixture
def sample_log_lines() -> list[str]:
    return [
        "2025-12-17T10:01:00Z INFO  Suite=Checkout Test=AddToCart DurationMs=120 Status=PASS",
        "2025-12-17T10:01:01Z INFO  Suite=Checkout Test=ApplyCoupon DurationMs=450 Status=FAIL Error=Assertion",
        "2025-12-17T10:01:02Z WARN  Suite=Checkout Test=ApplyCoupon DurationMs=470 Status=FAIL Error=Timeout",
        "2025-12-17T10:01:03Z INFO  Suite=Search   Test=BasicSearch DurationMs=80  Status=PASS",
        "2025-12-17T10:01:04Z INFO  Suite=Search   Test=BasicSearch DurationMs=90  Status=PASS",
    ]


@pytest.fixture(autouse=True)
def _reset_package_logger():
    yield
    reset_logging()
