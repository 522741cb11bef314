"""Bounded retry helper for outbound HTTP calls."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")


def linear_delay(attempt: int) -> float:
    """Seconds to wait before retry ``attempt`` (1-based): 1s, 2s, 3s, ..."""
    return 1.0 * attempt


def is_server_error(exc: BaseException) -> bool:
    """Only 5xx responses are worth retrying."""
    return isinstance(exc, httpx.HTTPStatusError) and exc.response.status_code >= 500


async def retry_async(
    call: Callable[[], Awaitable[T]],
    *,
    max_retries: int,
    should_retry: Callable[[BaseException], bool] = is_server_error,
    delay: Callable[[int], float] = linear_delay,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """
    Await ``call`` and retry it up to ``max_retries`` times.

    Failures rejected by ``should_retry`` propagate immediately. Once the
    budget is spent the last failure is re-raised unchanged.
    """
    attempt = 0
    while True:
        try:
            return await call()
        except Exception as exc:
            if attempt >= max_retries or not should_retry(exc):
                raise
            attempt += 1
            wait = delay(attempt)
            logger.warning(
                "Retrying after transient failure",
                extra={
                    "attempt": attempt,
                    "max_retries": max_retries,
                    "delay_seconds": wait,
                    "error": str(exc),
                },
            )
            await sleep(wait)
