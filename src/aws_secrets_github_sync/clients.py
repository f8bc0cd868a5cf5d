"""Collaborators used by ``update_secrets`` and their default wiring."""

from __future__ import annotations

from typing import Protocol

import click

from aws_secrets_github_sync.aws import Secret, SecretsManagerClient
from aws_secrets_github_sync.github import GitHubCliClient


class Clients(Protocol):
    """Everything the sync flow needs from the outside world."""

    def get_secret(
        self,
        secret_id: str,
        *,
        region: str | None = None,
        profile: str | None = None,
    ) -> Secret:
        """Fetch and decode the source secret."""

    def confirm_prompt(self) -> bool:
        """Ask the operator to approve the planned changes."""

    def get_repository_name(self) -> str:
        """Resolve ``owner/name`` of the current repository."""

    def list_secrets(self, repository: str, *, environment: str | None = None) -> list[str]:
        """List secret names already present at the destination."""

    def store_secret(
        self,
        repository: str,
        key: str,
        value: str,
        *,
        environment: str | None = None,
    ) -> None:
        """Create or overwrite one destination secret."""

    def remove_secret(
        self,
        repository: str,
        key: str,
        *,
        environment: str | None = None,
    ) -> None:
        """Delete one destination secret."""

    def log(self, text: str = "") -> None:
        """Print one line for the operator."""


class DefaultClients:
    """AWS Secrets Manager as the source, ``gh`` as the destination."""

    def __init__(
        self,
        *,
        secrets_manager: SecretsManagerClient | None = None,
        github: GitHubCliClient | None = None,
    ) -> None:
        self.secrets_manager = secrets_manager or SecretsManagerClient()
        self.github = github or GitHubCliClient()

    def get_secret(
        self,
        secret_id: str,
        *,
        region: str | None = None,
        profile: str | None = None,
    ) -> Secret:
        return self.secrets_manager.get_secret(secret_id, region=region, profile=profile)

    def confirm_prompt(self) -> bool:
        return click.confirm("Confirm", default=False, err=True)

    def get_repository_name(self) -> str:
        return self.github.get_repository_name()

    def list_secrets(self, repository: str, *, environment: str | None = None) -> list[str]:
        return self.github.list_secrets(repository, environment=environment)

    def store_secret(
        self,
        repository: str,
        key: str,
        value: str,
        *,
        environment: str | None = None,
    ) -> None:
        self.github.store_secret(repository, key, value, environment=environment)

    def remove_secret(
        self,
        repository: str,
        key: str,
        *,
        environment: str | None = None,
    ) -> None:
        self.github.remove_secret(repository, key, environment=environment)

    def log(self, text: str = "") -> None:
        click.echo(text, err=True)
