"""
Uninterruptible backoff wait.

The retry policy waits a fixed interval before re-sending a request whose
renewed token was rejected again. The wait always runs for the full
interval: a KeyboardInterrupt delivered in the middle is held back and
re-raised once the interval is over.
"""

import time
from typing import Callable

import structlog

logger = structlog.get_logger(__name__)


def sleep_uninterruptibly(
    seconds: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Block the calling thread for `seconds`, ignoring interruption.

    Args:
        seconds: Interval to wait; values <= 0 return immediately
        clock: Monotonic clock used to measure the remaining time
        sleep: Primitive used to wait

    Raises:
        KeyboardInterrupt: Re-raised after the full interval if one arrived
            while waiting
    """
    if seconds <= 0:
        return

    interrupted = False
    deadline = clock() + seconds
    remaining = seconds
    while remaining > 0:
        try:
            sleep(remaining)
        except KeyboardInterrupt:
            interrupted = True
            logger.debug("Interrupt deferred until backoff completes")
        remaining = deadline - clock()

    if interrupted:
        raise KeyboardInterrupt
