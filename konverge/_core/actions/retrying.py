"""
Convergence validation: repeated checks of the eventually consistent state.

A check (a "predicate") is a zero-argument function, sync or async, which
either returns (the state has converged) or raises (not yet, or never).
The validator re-invokes the check until it succeeds, fails permanently,
or the deadline is reached -- whatever happens first::

    async def replicas_ready() -> None:
        dep = await read_deployment(...)
        if dep['status'].get('readyReplicas') != 3:
            raise konverge.TemporaryError("Not all replicas are ready.")

    await konverge.run_until(replicas_ready, timeout=600, interval=10)

All errors are treated as retryable by default, even those that will never
resolve (e.g. a malformed request). To stop early, the check can raise
:class:`PermanentError`, which is escalated as is.

The deadline is checked after every failed attempt and after every sleep,
so that no attempt is started after the deadline. Since the checks are not
interrupted while running, the total time can exceed the timeout by one
interval (plus the duration of the last attempt). An always-failing check
with the timeout of 25s and the interval of 10s makes 3 attempts in ~30s.
"""
import asyncio
import itertools
import logging
import random
from typing import Awaitable, Callable, Iterable, Iterator, Optional, TypeVar, Union

from konverge._cogs.aiokits import aiotime
from konverge._cogs.helpers import typedefs

_T = TypeVar('_T')

# A check can be either sync or async; the sync ones are called directly (not in threads).
Predicate = Callable[[], Union[_T, Awaitable[_T]]]

logger = logging.getLogger('konverge.retrying')


class TemporaryError(Exception):
    """ A potentially recoverable error, should be retried: "not yet converged". """


class PermanentError(Exception):
    """ A fatal error of a check, the retries are useless. """


class ConvergenceError(Exception):
    """
    A terminal failure of the convergence validation.

    Only the last error of the check is kept, not the whole history.
    It is also chained as the cause of this error.
    """
    def __init__(
            self,
            __msg: str,
            *,
            last_error: BaseException,
            attempts: int,
            elapsed: float,
    ) -> None:
        super().__init__(__msg)
        self.last_error = last_error
        self.attempts = attempts
        self.elapsed = elapsed


class ConvergenceTimeoutError(ConvergenceError):
    """ The state has not converged within the allowed time. """


class ConvergenceStoppedError(ConvergenceError):
    """ The validation was stopped from outside before the state has converged. """


def fixed(interval: float) -> Iterator[float]:
    """ The same delay between all attempts. """
    return itertools.repeat(interval)


def exponential(
        initial: float,
        factor: float = 2,
        maximum: Optional[float] = None,
) -> Iterator[float]:
    """ Growing delays: initial, initial*factor, initial*factor^2, ... up to the maximum. """
    delay = initial
    while True:
        yield delay if maximum is None else min(delay, maximum)
        delay *= factor


def jittered(
        delays: Iterable[float],
        spread: float,
        *,
        rng: Optional[random.Random] = None,
) -> Iterator[float]:
    """ Randomize the delays by ±spread (in seconds), but never below zero. """
    uniform = rng.uniform if rng is not None else random.uniform
    for delay in delays:
        yield max(0.0, delay + uniform(-spread, spread))


async def run_until(
        fn: Predicate[_T],
        *,
        timeout: float,
        interval: float,
        delays: Optional[Iterable[float]] = None,
        stopper: Optional[asyncio.Event] = None,
        logger: typedefs.Logger = logger,
) -> _T:
    """
    Invoke the check until it succeeds, fails permanently, or times out.

    The result of the first successful attempt is returned. The errors are:

    * :class:`PermanentError` -- as raised by the check, with no retries.
    * :class:`ConvergenceTimeoutError` -- if the deadline is reached.
    * :class:`ConvergenceStoppedError` -- if the stopper is set while sleeping.

    The delays between the attempts are the fixed ``interval`` by default.
    Other strategies (e.g. :func:`exponential`, :func:`jittered`) can be
    injected via ``delays``; if they are exhausted, the last delay is reused.
    The ``interval`` is required and validated even then: it remains the slack
    allowed beyond the timeout, so every sleep is cut to the longer of
    the interval and the time left until the deadline.

    Timeouts are measured by the wall-clock (event loop) time from the start
    of the first attempt, not by the number of attempts. If the deadline
    is reached while sleeping, the validation fails when the sleep is over,
    with no extra attempt after that final sleep.
    """
    if interval <= 0:
        raise ValueError(f"The interval must be positive, got {interval!r}.")
    if timeout < 0:
        raise ValueError(f"The timeout must be non-negative, got {timeout!r}.")

    loop = asyncio.get_running_loop()
    started = loop.time()
    source_of_delays: Iterator[float] = iter(delays) if delays is not None else fixed(interval)
    last_delay = interval
    for attempt in itertools.count(1):
        try:
            result = await invoke(fn)
        except PermanentError:
            raise
        except Exception as e:
            elapsed = loop.time() - started
            if elapsed >= timeout:
                raise _timed_out(e, attempt=attempt, elapsed=elapsed, timeout=timeout) from e

            last_delay = next(source_of_delays, last_delay)
            delay = min(last_delay, max(interval, timeout - elapsed))
            logger.debug(f"Attempt #{attempt} failed; will retry in {delay}s: {e}")
            unslept = await aiotime.sleep(delay, wakeup=stopper)
            elapsed = loop.time() - started
            if unslept is not None:
                raise ConvergenceStoppedError(
                    f"Stopped after {attempt} attempt(s) in {elapsed:.1f}s. Last error: {e}",
                    last_error=e, attempts=attempt, elapsed=elapsed) from e
            if elapsed >= timeout:
                raise _timed_out(e, attempt=attempt, elapsed=elapsed, timeout=timeout) from e
        else:
            if attempt > 1:
                logger.debug(f"Attempt #{attempt} succeeded.")
            return result  # type: ignore

    raise RuntimeError("Broken retryable routine.")  # impossible, but needed for type-checking.


def _timed_out(e: Exception, *, attempt: int, elapsed: float, timeout: float) -> ConvergenceTimeoutError:
    return ConvergenceTimeoutError(
        f"Timed out after {attempt} attempt(s) in {elapsed:.1f}s (timeout {timeout}s). Last error: {e}",
        last_error=e, attempts=attempt, elapsed=elapsed)


async def invoke(fn: Predicate[_T]) -> _T:
    """ Invoke a sync or async check once, with no retries. """
    result = fn()
    if asyncio.iscoroutine(result) or asyncio.isfuture(result):
        result = await result
    return result  # type: ignore
