"""Exponential backoff with jitter around rate-limited external commands.

The loop is bounded by a wall-clock deadline fixed when it starts, not by an
attempt count. Only failures matching the host's secondary rate-limit
signature are retried; everything else propagates on the first attempt.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
import math
import random
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from aws_secrets_github_sync.process.base import InvocationResult
from aws_secrets_github_sync.process.diagnostics import ConsoleDiagnosticSink, DiagnosticSink
from aws_secrets_github_sync.process.errors import DeadlineExceededError, RetryableThrottleError
from aws_secrets_github_sync.process.failure_classifier import check_invocation
from aws_secrets_github_sync.process.invoker import ProcessInvoker

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Sleep = Callable[[float], Awaitable[object]]
RandomSource = Callable[[], float]
Operation = Callable[[], InvocationResult]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Backoff shape and total time budget for one retried operation."""

    initial_backoff_seconds: float
    max_backoff_seconds: float
    backoff_factor: float
    deadline_seconds: float

    def __post_init__(self) -> None:
        if not self.initial_backoff_seconds > 0:
            raise ValueError("initial_backoff_seconds must be > 0.")
        if not self.backoff_factor >= 1:
            raise ValueError("backoff_factor must be >= 1.")
        if not self.max_backoff_seconds >= self.initial_backoff_seconds:
            raise ValueError("max_backoff_seconds must be >= initial_backoff_seconds.")
        if not 0 < self.deadline_seconds < math.inf:
            raise ValueError("deadline_seconds must be a finite number > 0.")

    def with_overrides(self, **changes: float) -> RetryPolicy:
        """Return a validated copy with the given fields replaced."""

        return dataclasses.replace(self, **changes)

    def next_backoff(self, current_seconds: float) -> float:
        return min(current_seconds * self.backoff_factor, self.max_backoff_seconds)


# GitHub asks clients to wait at least a minute after a secondary rate limit,
# and such limits can persist for a long time.
DEFAULT_RETRY_POLICY = RetryPolicy(
    initial_backoff_seconds=60.0,
    max_backoff_seconds=6_000.0,
    backoff_factor=3.0,
    deadline_seconds=7_200.0,
)


def resolve_retry_policy(policy: RetryPolicy | None = None, **overrides: float) -> RetryPolicy:
    """Merge caller overrides onto ``policy`` or the default policy."""

    base = policy or DEFAULT_RETRY_POLICY
    if not overrides:
        return base
    return base.with_overrides(**overrides)


class RetryOrchestrator:
    """Repeat an operation while it is throttled and time remains."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        policy: RetryPolicy | None = None,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
        random_source: RandomSource | None = None,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self.policy = policy or DEFAULT_RETRY_POLICY
        self.clock: Clock = clock or time.monotonic
        self.sleep: Sleep = sleep or asyncio.sleep
        self.random_source: RandomSource = random_source or random.random
        self.sink: DiagnosticSink = sink or ConsoleDiagnosticSink()

    async def run(self, operation: Operation) -> InvocationResult:
        policy = self.policy
        deadline_at = self.clock() + policy.deadline_seconds
        backoff_seconds = policy.initial_backoff_seconds
        attempt = 0

        while True:
            attempt += 1
            try:
                return check_invocation(operation())
            except RetryableThrottleError as error:
                remaining = deadline_at - self.clock()
                if remaining <= 0:
                    raise self._give_up(error, attempt=attempt) from error

                # Waking at the deadline is enough: no attempt starts after it.
                wait_seconds = min(self.random_source() * backoff_seconds, remaining)
                self.sink.log(
                    f"Command throttled (attempt {attempt}, {remaining:.0f}s left). "
                    f"Retrying in {wait_seconds:.0f}s...",
                )
                self.sink.log(f"Error: {error}")
                logger.debug(
                    "Backing off %.3fs (bound %.3fs) after attempt %d",
                    wait_seconds,
                    backoff_seconds,
                    attempt,
                )
                await self.sleep(wait_seconds)
                backoff_seconds = policy.next_backoff(backoff_seconds)

                if self.clock() >= deadline_at:
                    raise self._give_up(error, attempt=attempt) from error

    def _give_up(self, error: RetryableThrottleError, *, attempt: int) -> DeadlineExceededError:
        self.sink.log(
            f"Command still throttled: deadline of {self.policy.deadline_seconds:.0f}s "
            f"reached after {attempt} attempts",
        )
        return DeadlineExceededError(error, attempts=attempt)


def execute_with_retry(  # noqa: PLR0913
    operation: Operation,
    *,
    policy: RetryPolicy | None = None,
    sink: DiagnosticSink | None = None,
    clock: Clock | None = None,
    sleep: Sleep | None = None,
    random_source: RandomSource | None = None,
) -> InvocationResult:
    """Run the retry loop to completion from synchronous code.

    Uses ``asyncio.run``, so it cannot be called while an event loop is running;
    async callers should ``await RetryOrchestrator(...).run(operation)`` instead.
    """

    orchestrator = RetryOrchestrator(
        policy=policy,
        clock=clock,
        sleep=sleep,
        random_source=random_source,
        sink=sink,
    )
    return asyncio.run(orchestrator.run(operation))


def invoke(
    argv: Sequence[str],
    *,
    input_text: str | None = None,
    policy: RetryPolicy | None = None,
    sink: DiagnosticSink | None = None,
    invoker: ProcessInvoker | None = None,
) -> InvocationResult:
    """Run one external command, retrying while the host rate-limits it.

    Blocks in ``execute_with_retry``; from async code await ``RetryOrchestrator.run``.
    """

    sink = sink or ConsoleDiagnosticSink()
    invoker = invoker or ProcessInvoker(sink=sink)
    command = tuple(argv)
    return execute_with_retry(
        lambda: invoker.run(command, input_text=input_text),
        policy=resolve_retry_policy(policy),
        sink=sink,
    )
