import pytest
from unittest.mock import AsyncMock

from utils.retry import RetryExhausted, RetryPolicy, linear_backoff


def test_linear_backoff_grows_with_attempt():
    backoff = linear_backoff(1000)

    assert backoff(1) == 1.0
    assert backoff(2) == 2.0


async def test_returns_first_success_without_sleeping():
    sleep = AsyncMock()
    policy = RetryPolicy(max_attempts=3, sleep=sleep)
    operation = AsyncMock(return_value=b"data")

    assert await policy.run(operation) == b"data"
    operation.assert_awaited_once()
    sleep.assert_not_awaited()


async def test_retries_until_success():
    sleep = AsyncMock()
    policy = RetryPolicy(max_attempts=3, sleep=sleep)
    operation = AsyncMock(side_effect=[ConnectionError("boom"), b"data"])

    assert await policy.run(operation) == b"data"
    assert operation.await_count == 2
    sleep.assert_awaited_once_with(1.0)


async def test_gives_up_after_max_attempts_without_final_sleep():
    sleep = AsyncMock()
    policy = RetryPolicy(max_attempts=3, backoff=linear_backoff(1000), sleep=sleep)
    error = ConnectionError("still down")
    operation = AsyncMock(side_effect=error)

    with pytest.raises(RetryExhausted) as exc_info:
        await policy.run(operation, label="download")

    assert operation.await_count == 3
    assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]
    assert exc_info.value.attempts == 3
    assert exc_info.value.last_error is error
