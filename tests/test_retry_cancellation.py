from __future__ import annotations

import asyncio

import pytest

from sdetkit.cancellation import CancellationToken
from sdetkit.errors import ErrorCode, OperationCancelled
from sdetkit.models import Outcome
from sdetkit.retry import RetryPolicy, constant_backoff, run_with_retry


@pytest.mark.asyncio
async def test_cancelled_token_prevents_first_attempt() -> None:
    calls = {"count": 0}
    token = CancellationToken()
    token.cancel("shutdown")

    async def operation() -> Outcome:
        calls["count"] += 1
        return Outcome.success()

    with pytest.raises(OperationCancelled) as excinfo:
        await run_with_retry(operation, policy=RetryPolicy(), cancel_token=token)

    assert calls["count"] == 0
    assert excinfo.value.code == ErrorCode.CANCELLED
    assert "shutdown" in str(excinfo.value)


@pytest.mark.asyncio
async def test_cancel_during_backoff_aborts_sleep() -> None:
    calls = {"count": 0}
    token = CancellationToken()

    async def operation() -> Outcome:
        calls["count"] += 1
        return Outcome.failure("Timeout")

    policy = RetryPolicy(max_attempts=3, backoff=constant_backoff(30.0))
    loop = asyncio.get_running_loop()
    loop.call_later(0.05, token.cancel, "user abort")
    started = loop.time()

    with pytest.raises(OperationCancelled):
        await run_with_retry(operation, policy=policy, cancel_token=token)

    assert calls["count"] == 1
    assert loop.time() - started < 5.0


@pytest.mark.asyncio
async def test_cancel_while_work_in_flight_stops_before_next_attempt() -> None:
    calls = {"count": 0}
    token = CancellationToken()

    async def operation() -> Outcome:
        calls["count"] += 1
        token.cancel("stop after this one")
        await asyncio.sleep(0)
        return Outcome.failure("Timeout")

    with pytest.raises(OperationCancelled):
        await run_with_retry(
            operation,
            policy=RetryPolicy(max_attempts=5, backoff=constant_backoff(0.0)),
            cancel_token=token,
        )

    assert calls["count"] == 1


@pytest.mark.asyncio
async def test_uncancelled_token_lets_retry_finish() -> None:
    outcomes = iter([Outcome.failure("Timeout"), Outcome.success()])
    token = CancellationToken()

    async def operation() -> Outcome:
        return next(outcomes)

    result = await run_with_retry(
        operation,
        policy=RetryPolicy(max_attempts=2, backoff=constant_backoff(0.01)),
        cancel_token=token,
    )

    assert result.is_pass
