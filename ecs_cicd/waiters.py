"""Bounded polling for provider-side state transitions."""

from collections.abc import Callable
import time
from typing import TypeVar

import structlog

from ecs_cicd.errors import NotReadyError, WaitTimeoutError

logger = structlog.get_logger()

T = TypeVar("T")


def poll_until(
    fetch: Callable[[], T],
    done: Callable[[T], bool],
    *,
    timeout: float,
    interval: float,
    what: str,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> T:
    """Call ``fetch`` until ``done(value)``; raise WaitTimeoutError once ``timeout`` has passed."""
    deadline = clock() + timeout
    while True:
        value = fetch()
        if done(value):
            return value
        remaining = deadline - clock()
        if remaining <= 0:
            raise WaitTimeoutError(what, timeout)
        logger.debug("wait.polling", what=what, remaining=round(remaining, 1))
        sleep(min(interval, remaining))


def retry_not_ready(
    fn: Callable[[], T],
    *,
    attempts: int,
    interval: float,
    what: str,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``fn``, retrying NotReadyError up to ``attempts`` times in total."""
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except NotReadyError as e:
            if attempt == attempts:
                raise
            logger.info("wait.not_ready", what=what, attempt=attempt, code=e.code)
            sleep(interval)
    raise AssertionError("unreachable")
