"""Repository and environment secrets via the GitHub CLI."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence

from aws_secrets_github_sync.process import (
    DiagnosticSink,
    InvocationResult,
    ProcessError,
    ProcessInvoker,
    RetryPolicy,
    invoke,
)

logger = logging.getLogger(__name__)


class GitHubSecretsError(RuntimeError):
    """A ``gh`` call failed; the message names the operation and target."""


class GitHubCliClient:
    """Thin wrapper over ``gh`` where every call is throttle-aware."""

    def __init__(
        self,
        *,
        command: Sequence[str] = ("gh",),
        policy: RetryPolicy | None = None,
        sink: DiagnosticSink | None = None,
        invoker: ProcessInvoker | None = None,
    ) -> None:
        if not command:
            raise ValueError("GitHub CLI command must not be empty.")
        self.command = tuple(command)
        self.policy = policy
        self.sink = sink
        self.invoker = invoker

    def get_repository_name(self) -> str:
        """Return ``owner/name`` of the repository in the working directory."""

        result = self._run(
            ["repo", "view", "--json", "nameWithOwner"],
            context="Failed to get repository name",
        )
        output = result.stdout
        try:
            return str(json.loads(output)["nameWithOwner"])
        except (ValueError, KeyError, TypeError) as error:
            raise GitHubSecretsError(
                f"Unable to determine repository name: {output.strip()}",
            ) from error

    def list_secrets(self, repository: str, *, environment: str | None = None) -> list[str]:
        args = ["secret", "list", "--repo", repository, *_env_args(environment)]
        result = self._run(
            args,
            context=f"Failed to list secrets in {_target(repository, environment)}",
        )
        stdout = result.stdout.strip()
        if not stdout:
            return []
        return [line.split("\t")[0] for line in stdout.splitlines() if line.strip()]

    def store_secret(
        self,
        repository: str,
        name: str,
        value: str,
        *,
        environment: str | None = None,
    ) -> None:
        # The value goes through stdin so it never shows up in a process listing.
        args = ["secret", "set", name, "--repo", repository, *_env_args(environment)]
        self._run(
            args,
            input_text=value,
            context=f"Failed to store secret '{name}' in {_target(repository, environment)}",
        )

    def remove_secret(
        self,
        repository: str,
        name: str,
        *,
        environment: str | None = None,
    ) -> None:
        args = ["secret", "remove", name, "--repo", repository, *_env_args(environment)]
        self._run(
            args,
            context=f"Failed to remove secret '{name}' from {_target(repository, environment)}",
        )

    def _run(
        self,
        args: list[str],
        *,
        context: str,
        input_text: str | None = None,
    ) -> InvocationResult:
        argv = [*self.command, *args]
        logger.debug("gh call: %s", " ".join(args))
        try:
            return invoke(
                argv,
                input_text=input_text,
                policy=self.policy,
                sink=self.sink,
                invoker=self.invoker,
            )
        except ProcessError as error:
            raise GitHubSecretsError(f"{context}: {error}") from error


def _env_args(environment: str | None) -> list[str]:
    return ["--env", environment] if environment else []


def _target(repository: str, environment: str | None) -> str:
    if environment:
        return f"environment '{environment}' of repository '{repository}'"
    return f"repository '{repository}'"
