"""Error taxonomy for external command execution."""

from __future__ import annotations


class ProcessError(RuntimeError):
    """Base class for failures of an external command."""


class TransportError(ProcessError):
    """The command could not be started or was terminated by a signal."""


class _ExitStatusError(ProcessError):
    def __init__(self, message: str, *, exit_code: int, stderr: str) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr


class FatalProcessError(_ExitStatusError):
    """Nonzero exit that is not a rate-limit rejection. Never retried."""


class RetryableThrottleError(_ExitStatusError):
    """Nonzero exit caused by the host's secondary rate limit."""


class DeadlineExceededError(RetryableThrottleError):
    """Still throttled when the retry deadline passed.

    Carries the message, exit code and stderr of the last throttling error so
    callers that only handle ``RetryableThrottleError`` keep working.
    """

    def __init__(self, last_error: RetryableThrottleError, *, attempts: int) -> None:
        super().__init__(
            str(last_error),
            exit_code=last_error.exit_code,
            stderr=last_error.stderr,
        )
        self.last_error = last_error
        self.attempts = attempts
