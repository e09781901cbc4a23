"""
core.api.retry

Bounded exponential-backoff retry for calls to the remote generation API.

Only failures classified as transient (rate limited, temporarily
unavailable) are retried. The delay before the retry that follows
attempt k (0-indexed) is:

    base_delay * 2**k + max_jitter * random()    # jitter in [0, max_jitter)

Anything else is re-raised on first occurrence, and the last transient
error is re-raised once the attempt budget is spent.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from exceptions.exceptions import ErrorKind, UpstreamError


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and delay shape (seconds)."""

    max_attempts: int = 5
    base_delay: float = 2.0
    max_jitter: float = 1.0

    def delay_for(self, attempt: int, jitter: float) -> float:
        return self.base_delay * (2 ** attempt) + jitter


DEFAULT_POLICY = RetryPolicy()


def error_kind(error: BaseException) -> ErrorKind:
    """Classify a failure; only upstream errors can be transient."""
    if isinstance(error, UpstreamError):
        return error.kind
    return ErrorKind.PERMANENT


async def invoke_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = DEFAULT_POLICY,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    jitter: Callable[[], float] = random.random,
) -> T:
    """
    Await `operation()` until it succeeds or the policy gives up.

    Parameters
    ----------
    operation : Callable[[], Awaitable[T]]
        Zero-argument coroutine factory; called once per attempt.
    policy : RetryPolicy
        Attempt budget and backoff shape.
    sleep, jitter :
        Injectable for tests; default to asyncio.sleep / random.random.
        `jitter()` must return a value in [0, 1); it is scaled by
        `policy.max_jitter`.

    Raises
    ------
    TransientUpstreamError
        When every permitted attempt failed transiently.
    Exception
        Any non-transient failure, unchanged, without retrying.
    """
    if policy.max_attempts < 1:
        raise ValueError("RetryPolicy.max_attempts must be at least 1")

    for attempt in range(policy.max_attempts):
        try:
            return await operation()
        except Exception as e:
            if error_kind(e) is not ErrorKind.TRANSIENT:
                raise

            if attempt == policy.max_attempts - 1:
                logger.error(
                    "Upstream call failed after %d attempts. No more retries. (%s)",
                    policy.max_attempts,
                    e,
                )
                raise

            delay = policy.delay_for(attempt, jitter() * policy.max_jitter)
            logger.warning(
                "Upstream error (status=%s) on attempt %d/%d. Retrying in %.2fs...",
                getattr(e, "status_code", None),
                attempt + 1,
                policy.max_attempts,
                delay,
            )
            await sleep(delay)

    # Unreachable: the loop either returns or raises.
    raise RuntimeError("invoke_with_retry exited without a result")
