"""Throttle-aware execution of external command-line tools."""

from aws_secrets_github_sync.process.base import InvocationResult, ProcessRequest
from aws_secrets_github_sync.process.diagnostics import ConsoleDiagnosticSink, DiagnosticSink
from aws_secrets_github_sync.process.errors import (
    DeadlineExceededError,
    FatalProcessError,
    ProcessError,
    RetryableThrottleError,
    TransportError,
)
from aws_secrets_github_sync.process.invoker import ProcessInvoker
from aws_secrets_github_sync.process.retry import (
    DEFAULT_RETRY_POLICY,
    RetryOrchestrator,
    RetryPolicy,
    execute_with_retry,
    invoke,
    resolve_retry_policy,
)

__all__ = [
    "DEFAULT_RETRY_POLICY",
    "ConsoleDiagnosticSink",
    "DeadlineExceededError",
    "DiagnosticSink",
    "FatalProcessError",
    "InvocationResult",
    "ProcessError",
    "ProcessInvoker",
    "ProcessRequest",
    "RetryOrchestrator",
    "RetryPolicy",
    "RetryableThrottleError",
    "TransportError",
    "execute_with_retry",
    "invoke",
    "resolve_retry_policy",
]
