"""Ordered fallback chains of independently time-boxed attempts.

A chain is a list of ``Attempt`` objects. Each attempt runs once under its own
deadline; an exception, a timeout or a ``None`` result counts as "this source
yielded nothing" and the chain moves on. The first attempt that produces a
value wins.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Generic, TypeVar

from linkvault.core.logging import get_logger
from linkvault.errors import AttemptFailed, FallbackExhausted

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """One data source in a fallback chain."""

    name: str
    call: Callable[[], Awaitable[T | None]]
    timeout: float


async def run_attempt(attempt: Attempt[T]) -> T:
    """Run one attempt under its deadline.

    Raises:
        AttemptFailed: the call raised, timed out or returned None
    """
    try:
        async with asyncio.timeout(attempt.timeout):
            result = await attempt.call()
    except TimeoutError as e:
        raise AttemptFailed(attempt.name, f"timed out after {attempt.timeout:g}s") from e
    except AttemptFailed:
        raise
    except Exception as e:
        raise AttemptFailed(attempt.name, f"{type(e).__name__}: {e}") from e

    if result is None:
        raise AttemptFailed(attempt.name, "no data")
    return result


def _log_failure(chain: str, failure: AttemptFailed) -> None:
    logger.warning(
        "Fallback attempt failed in %s: %s",
        chain,
        failure,
        extra={
            "component": "fallbacks",
            "operation": chain,
            "context_data": {"attempt": failure.attempt, "reason": failure.reason},
        },
    )


async def _first_success_sequential(chain: str, attempts: Sequence[Attempt[T]]) -> T:
    failures: list[AttemptFailed] = []
    for attempt in attempts:
        try:
            result = await run_attempt(attempt)
        except AttemptFailed as failure:
            _log_failure(chain, failure)
            failures.append(failure)
            continue
        logger.debug("%s resolved by %s", chain, attempt.name)
        return result
    raise FallbackExhausted(chain, failures)


async def _first_success_race(chain: str, attempts: Sequence[Attempt[T]]) -> T:
    tasks = [asyncio.create_task(run_attempt(attempt)) for attempt in attempts]
    failures: list[AttemptFailed] = []
    try:
        # Awaiting in list order keeps the lower-index preference
        for attempt, task in zip(attempts, tasks, strict=True):
            try:
                result = await task
            except AttemptFailed as failure:
                _log_failure(chain, failure)
                failures.append(failure)
                continue
            logger.debug("%s resolved by %s (race)", chain, attempt.name)
            return result
    finally:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
    raise FallbackExhausted(chain, failures)


async def first_success(
    chain: str, attempts: Sequence[Attempt[T]], *, race: bool = False
) -> T:
    """Return the value of the first attempt that succeeds.

    Args:
        chain: Name used in logs and in the FallbackExhausted message
        attempts: Attempts in preference order
        race: Start every attempt at once; on overlapping successes the
            lower-index attempt still wins

    Raises:
        FallbackExhausted: every attempt failed
    """
    if race:
        return await _first_success_race(chain, attempts)
    return await _first_success_sequential(chain, attempts)


async def first_success_or_none(
    chain: str, attempts: Sequence[Attempt[T]], *, race: bool = False
) -> T | None:
    """Like ``first_success`` for optional data: exhaustion yields None."""
    try:
        return await first_success(chain, attempts, race=race)
    except FallbackExhausted as e:
        logger.info("%s", e, extra={"component": "fallbacks", "operation": chain})
        return None
