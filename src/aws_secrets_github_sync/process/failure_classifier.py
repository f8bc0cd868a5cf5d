"""Deterministic classification of finished commands for the retry loop."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from aws_secrets_github_sync.process.base import InvocationResult
from aws_secrets_github_sync.process.errors import FatalProcessError, RetryableThrottleError

# gh prints "HTTP 403: You have exceeded a secondary rate limit. Please wait ..."
THROTTLING_SIGNATURE = "exceeded a secondary rate limit"


class InvocationClass(str, Enum):
    """How the retry loop treats a finished command."""

    SUCCEEDED = "succeeded"
    THROTTLED = "throttled"
    FATAL = "fatal"


@dataclass(frozen=True, slots=True)
class InvocationClassification:
    """Classification result with the rule that produced it."""

    invocation_class: InvocationClass
    matched_rule: str
    matched_pattern: str | None

    @property
    def retryable(self) -> bool:
        return self.invocation_class is InvocationClass.THROTTLED


def classify_invocation(*, exit_code: int, stderr: str) -> InvocationClassification:
    """Classify an exit status and its error text.

    Zero is success whatever the error stream says. A nonzero exit is
    throttled only when the error text contains ``THROTTLING_SIGNATURE``.
    """

    if exit_code == 0:
        return InvocationClassification(
            invocation_class=InvocationClass.SUCCEEDED,
            matched_rule="zero_exit",
            matched_pattern=None,
        )
    if THROTTLING_SIGNATURE in stderr:
        return InvocationClassification(
            invocation_class=InvocationClass.THROTTLED,
            matched_rule="secondary_rate_limit",
            matched_pattern=THROTTLING_SIGNATURE,
        )
    return InvocationClassification(
        invocation_class=InvocationClass.FATAL,
        matched_rule="fallback_fatal",
        matched_pattern=None,
    )


def check_invocation(result: InvocationResult) -> InvocationResult:
    """Return ``result`` if it succeeded, otherwise raise the matching error."""

    classification = classify_invocation(exit_code=result.exit_code, stderr=result.stderr)
    if classification.invocation_class is InvocationClass.SUCCEEDED:
        return result

    message = _failure_message(result)
    if classification.retryable:
        raise RetryableThrottleError(message, exit_code=result.exit_code, stderr=result.stderr)
    raise FatalProcessError(message, exit_code=result.exit_code, stderr=result.stderr)


def _failure_message(result: InvocationResult) -> str:
    lines = [line.strip() for line in result.stderr.splitlines() if line.strip()]
    if not lines:
        return f"Process exited with code {result.exit_code}"
    return f"Process exited with code {result.exit_code}: {lines[-1]}"
