"""Tests for the settled-outcome helpers."""

import asyncio

import httpx

from app.errors import LLMUnavailable, UpstreamInvalidQuery, UpstreamRateLimited
from app.services.settled import Failure, FailureReason, Success, gather_settled, settle


async def _value(v, delay=0.0):
    await asyncio.sleep(delay)
    return v


async def _raise(exc):
    raise exc


async def test_settle_success():
    assert await settle(_value(3)) == Success(3)


async def test_settle_failure_captures_exception():
    outcome = await settle(_raise(ValueError("bad")))
    assert isinstance(outcome, Failure)
    assert isinstance(outcome.error, ValueError)
    assert outcome.reason is FailureReason.UPSTREAM_ERROR


async def test_settle_timeout():
    outcome = await settle(_value(1, delay=1.0), timeout=0.01)
    assert isinstance(outcome, Failure)
    assert outcome.reason is FailureReason.TIMEOUT


async def test_failure_reasons():
    cases = [
        (UpstreamRateLimited(), FailureReason.RATE_LIMITED),
        (UpstreamInvalidQuery(), FailureReason.INVALID_QUERY),
        (httpx.ConnectTimeout("slow"), FailureReason.TIMEOUT),
        (LLMUnavailable("no key"), FailureReason.LLM_UNAVAILABLE),
        (httpx.ConnectError("refused"), FailureReason.UPSTREAM_ERROR),
    ]
    for exc, reason in cases:
        outcome = await settle(_raise(exc))
        assert outcome.reason is reason


async def test_gather_settled_preserves_order_and_isolates_failures():
    outcomes = await gather_settled(
        [_value("a", 0.02), _raise(RuntimeError("x")), _value("c")]
    )
    assert outcomes[0] == Success("a")
    assert isinstance(outcomes[1], Failure)
    assert outcomes[2] == Success("c")


async def test_gather_settled_waits_for_all():
    finished = []

    async def slow():
        await asyncio.sleep(0.05)
        finished.append("slow")
        return "slow"

    outcomes = await gather_settled([_raise(RuntimeError("fast")), slow()])
    assert finished == ["slow"]
    assert outcomes[1] == Success("slow")


async def test_gather_settled_empty():
    assert await gather_settled([]) == []
