import asyncio
import logging

import pytest

from konverge._core.actions.retrying import ConvergenceError, ConvergenceStoppedError, \
                                            ConvergenceTimeoutError, PermanentError, \
                                            TemporaryError, exponential, jittered, \
                                            run_until


class Countdown:
    """ A check that fails N times, and then succeeds with a result. """

    def __init__(self, failures: int, result: object = None) -> None:
        super().__init__()
        self.failures = failures
        self.result = result
        self.calls = 0

    async def __call__(self) -> object:
        self.calls += 1
        if self.calls <= self.failures:
            raise TemporaryError(f"failure #{self.calls}")
        return self.result


async def test_immediate_success_does_not_sleep(looptime):
    check = Countdown(0, result='done')
    result = await run_until(check, timeout=60, interval=10)
    assert result == 'done'
    assert check.calls == 1
    assert looptime == 0


async def test_success_after_failures(looptime):
    check = Countdown(2, result=123)
    result = await run_until(check, timeout=60, interval=10)
    assert result == 123
    assert check.calls == 3
    assert looptime == 20


async def test_success_at_the_last_attempt_before_the_deadline(looptime):
    check = Countdown(2, result=123)
    result = await run_until(check, timeout=25, interval=10)
    assert result == 123
    assert check.calls == 3
    assert looptime == 20


async def test_timeout_keeps_the_slack_of_one_interval(looptime):
    check = Countdown(999)
    with pytest.raises(ConvergenceTimeoutError) as err:
        await run_until(check, timeout=25, interval=10)
    assert check.calls == 3
    assert err.value.attempts == 3
    assert err.value.elapsed == 30
    assert looptime == 30


async def test_timeout_carries_only_the_last_error():
    check = Countdown(999)
    with pytest.raises(ConvergenceTimeoutError) as err:
        await run_until(check, timeout=25, interval=10)
    assert isinstance(err.value, ConvergenceError)
    assert isinstance(err.value.last_error, TemporaryError)
    assert str(err.value.last_error) == "failure #3"
    assert err.value.__cause__ is err.value.last_error
    assert "failure #3" in str(err.value)


async def test_zero_timeout_makes_exactly_one_attempt(looptime):
    check = Countdown(999)
    with pytest.raises(ConvergenceTimeoutError) as err:
        await run_until(check, timeout=0, interval=10)
    assert check.calls == 1
    assert err.value.attempts == 1
    assert looptime == 0


async def test_zero_timeout_succeeds_on_the_first_attempt(looptime):
    check = Countdown(0, result='done')
    result = await run_until(check, timeout=0, interval=10)
    assert result == 'done'
    assert looptime == 0


async def test_interval_longer_than_timeout_still_attempts_once(looptime):
    check = Countdown(999)
    with pytest.raises(ConvergenceTimeoutError):
        await run_until(check, timeout=5, interval=10)
    assert check.calls == 1
    assert looptime == 10


async def test_permanent_errors_are_not_retried(looptime):
    calls = []

    async def check() -> None:
        calls.append(None)
        raise PermanentError("never ever")

    with pytest.raises(PermanentError, match="never ever"):
        await run_until(check, timeout=60, interval=10)
    assert len(calls) == 1
    assert looptime == 0


@pytest.mark.parametrize('error_cls', [TemporaryError, ValueError, LookupError, RuntimeError])
async def test_arbitrary_errors_are_retried(looptime, error_cls):
    calls = []

    def check() -> None:
        calls.append(None)
        if len(calls) < 3:
            raise error_cls("not yet")

    await run_until(check, timeout=60, interval=10)
    assert len(calls) == 3
    assert looptime == 20


async def test_sync_checks_are_supported():
    result = await run_until(lambda: 'sync-result', timeout=10, interval=1)
    assert result == 'sync-result'


async def test_cancellations_propagate(looptime):
    async def check() -> None:
        raise asyncio.CancelledError()

    with pytest.raises(asyncio.CancelledError):
        await run_until(check, timeout=60, interval=10)
    assert looptime == 0


@pytest.mark.parametrize('interval', [0, -1])
async def test_nonpositive_interval_is_rejected(interval):
    with pytest.raises(ValueError, match="interval"):
        await run_until(Countdown(0), timeout=60, interval=interval)


async def test_negative_timeout_is_rejected():
    with pytest.raises(ValueError, match="timeout"):
        await run_until(Countdown(0), timeout=-1, interval=10)


async def test_custom_delays_are_used_instead_of_interval(looptime):
    check = Countdown(999)
    with pytest.raises(ConvergenceTimeoutError) as err:
        await run_until(check, timeout=10, interval=100, delays=exponential(1))
    assert err.value.attempts == 4  # at 0, 1, 3, 7; then sleeps until 15.
    assert looptime == 15


async def test_exhausted_delays_reuse_the_last_one(looptime):
    check = Countdown(3, result='done')
    result = await run_until(check, timeout=100, interval=100, delays=[1, 2])
    assert result == 'done'
    assert looptime == 1 + 2 + 2


async def test_stopper_interrupts_the_sleep(looptime):
    stopper = asyncio.Event()
    asyncio.get_running_loop().call_later(15, stopper.set)
    check = Countdown(999)
    with pytest.raises(ConvergenceStoppedError) as err:
        await run_until(check, timeout=100, interval=10, stopper=stopper)
    assert err.value.attempts == 2
    assert isinstance(err.value.last_error, TemporaryError)
    assert looptime == 15


async def test_stopper_set_in_advance_stops_after_one_attempt(looptime):
    stopper = asyncio.Event()
    stopper.set()
    check = Countdown(999)
    with pytest.raises(ConvergenceStoppedError):
        await run_until(check, timeout=100, interval=10, stopper=stopper)
    assert check.calls == 1
    assert looptime == 0


async def test_stopper_does_not_prevent_the_success(looptime):
    stopper = asyncio.Event()
    asyncio.get_running_loop().call_later(100, stopper.set)
    check = Countdown(1, result='done')
    result = await run_until(check, timeout=60, interval=10, stopper=stopper)
    assert result == 'done'
    assert looptime == 10


async def test_retries_are_logged(caplog):
    caplog.set_level(logging.DEBUG)
    await run_until(Countdown(1), timeout=60, interval=10)
    messages = [record.getMessage() for record in caplog.records]
    assert "Attempt #1 failed; will retry in 10s: failure #1" in messages
    assert "Attempt #2 succeeded." in messages


async def test_custom_logger_is_used(caplog):
    caplog.set_level(logging.DEBUG)
    await run_until(Countdown(1), timeout=60, interval=10, logger=logging.getLogger('xyz'))
    assert caplog.records
    assert all(record.name == 'xyz' for record in caplog.records)


async def test_growing_delays_are_cut_at_the_deadline(looptime):
    check = Countdown(999)
    with pytest.raises(ConvergenceTimeoutError) as err:
        await run_until(check, timeout=600, interval=10, delays=exponential(1))
    assert err.value.attempts == 10  # at 0, 1, 3, 7, ..., 511; then sleeps until 600.
    assert looptime == 600


async def test_short_remainder_still_sleeps_the_interval(looptime):
    check = Countdown(999)
    with pytest.raises(ConvergenceTimeoutError) as err:
        await run_until(check, timeout=10, interval=5, delays=[8, 100])
    assert err.value.attempts == 2  # at 0, 8; then sleeps for 5 (not 2, not 100).
    assert looptime == 13


async def test_no_attempt_after_the_final_sleep(looptime):
    check = Countdown(2, result='done')
    with pytest.raises(ConvergenceTimeoutError) as err:
        await run_until(check, timeout=15, interval=10)
    assert err.value.attempts == 2
    assert check.calls == 2
    assert looptime == 20


async def test_zero_delays_let_other_tasks_run(looptime):
    ticks = 0
    calls = 0

    async def ticker() -> None:
        nonlocal ticks
        while True:
            ticks += 1
            await asyncio.sleep(0)

    def check() -> None:
        nonlocal calls
        calls += 1
        if calls >= 100:
            raise PermanentError("enough")
        raise TemporaryError("not yet")

    task = asyncio.create_task(ticker())
    try:
        with pytest.raises(PermanentError):
            await run_until(check, timeout=1, interval=1, delays=jittered([0.0], spread=0.0))
    finally:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
    assert calls == 100
    assert ticks >= 99
    assert looptime == 0
