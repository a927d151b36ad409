"""Await-all helpers that turn each task's exception into a typed outcome.

A stage that fans out over many upstream calls gathers them with
:func:`gather_settled`, then decides once what a :class:`Failure` means for
that stage (an empty page of results, a repository without analysis, ...).
"""

import asyncio
import enum
from collections.abc import Awaitable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

import httpx

from app.errors import LLMUnavailable, UpstreamInvalidQuery, UpstreamRateLimited

T = TypeVar("T")


class FailureReason(str, enum.Enum):
    RATE_LIMITED = "rate_limited"
    INVALID_QUERY = "invalid_query"
    TIMEOUT = "timeout"
    LLM_UNAVAILABLE = "llm_unavailable"
    UPSTREAM_ERROR = "upstream_error"


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: BaseException
    reason: FailureReason


Outcome = Success[T] | Failure


def classify(exc: BaseException) -> FailureReason:
    if isinstance(exc, UpstreamRateLimited):
        return FailureReason.RATE_LIMITED
    if isinstance(exc, UpstreamInvalidQuery):
        return FailureReason.INVALID_QUERY
    if isinstance(exc, (asyncio.TimeoutError, httpx.TimeoutException)):
        return FailureReason.TIMEOUT
    if isinstance(exc, LLMUnavailable):
        return FailureReason.LLM_UNAVAILABLE
    return FailureReason.UPSTREAM_ERROR


async def settle(awaitable: Awaitable[T], timeout: float | None = None) -> Outcome[T]:
    """Await *awaitable* and capture its result or exception.

    Cancellation is not captured; it propagates to the caller.
    """
    try:
        if timeout is None:
            value = await awaitable
        else:
            value = await asyncio.wait_for(awaitable, timeout)
    except Exception as e:
        return Failure(error=e, reason=classify(e))
    return Success(value)


async def gather_settled(
    awaitables: Iterable[Awaitable[T]], timeout: float | None = None
) -> list[Outcome[T]]:
    """Run all *awaitables* concurrently and return one outcome per input, in order."""
    return list(await asyncio.gather(*(settle(a, timeout) for a in awaitables)))
