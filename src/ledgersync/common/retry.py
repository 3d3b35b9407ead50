"""Operation-level retry with exponential backoff.

Transport-level retries (``httpx-retries``) cover idempotent reads. Ledger writes
are wrapped here instead so the retryable status set (which includes 409 for
Notion's conflict responses) and the short delay budget stay under the caller's
control.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from .logging import SyncLogger

log = logging.getLogger(__name__)

type Sleep = Callable[[float], Awaitable[None]]


@dataclass(slots=True, frozen=True)
class BackoffPolicy:
    max_retries: int = 2
    base_delay: float = 0.5
    max_delay: float = 2.0
    retryable_statuses: frozenset[int] = field(
        default_factory=lambda: frozenset({409, 429, 500, 502, 503, 504})
    )

    def delay_for(self, retry: int) -> float:
        """Seconds to wait before the ``retry``-th retry (1-based)."""

        return min(self.base_delay * 2 ** (retry - 1), self.max_delay)

    def is_retryable(self, exc: BaseException) -> bool:
        status = status_code_of(exc)
        return status is not None and status in self.retryable_statuses


def status_code_of(exc: BaseException) -> int | None:
    """Return the HTTP status carried by ``exc``, if any."""

    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    if status is None:
        status = getattr(exc, "status_code", None)
    return status if isinstance(status, int) else None


async def retry_with_backoff[T](
    operation: Callable[[], Awaitable[T]],
    policy: BackoffPolicy | None = None,
    *,
    sleep: Sleep = asyncio.sleep,
    logger: SyncLogger | None = None,
) -> T:
    """Run ``operation`` until it succeeds or the retry budget is spent.

    Only failures carrying a status in ``policy.retryable_statuses`` are retried;
    anything else is re-raised on the spot. Once the budget is exhausted the last
    failure propagates unchanged.
    """

    effective = policy or BackoffPolicy()
    logger = logger or log
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as exc:
            if attempt >= effective.max_retries or not effective.is_retryable(exc):
                raise
            attempt += 1
            delay = effective.delay_for(attempt)
            logger.warning(
                "Attempt %s failed with status %s, retrying in %sms",
                attempt,
                status_code_of(exc),
                int(delay * 1000),
            )
            await sleep(delay)


def with_backoff[**P, T](
    policy: BackoffPolicy | None = None,
    *,
    logger: SyncLogger | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator form of :func:`retry_with_backoff` for coroutine functions."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await retry_with_backoff(lambda: func(*args, **kwargs), policy, logger=logger)

        return wrapper

    return decorator
