"""Controller for the sync CLI command."""

from __future__ import annotations

from dataclasses import dataclass

from aws_secrets_github_sync.aws import SecretsManagerClient
from aws_secrets_github_sync.clients import DefaultClients
from aws_secrets_github_sync.config import Settings
from aws_secrets_github_sync.github import GitHubCliClient
from aws_secrets_github_sync.updater import UpdateSecretsOptions, update_secrets


@dataclass(slots=True)
class UpdateSecretsCommand:
    """CLI input for one sync run."""

    secret: str
    repository: str | None
    environment: str | None
    region: str | None
    profile: str | None
    keys: tuple[str, ...]
    all_keys: bool
    keep: tuple[str, ...]
    prune: bool
    yes: bool


class SyncCliController:
    """Wires settings and default clients into ``update_secrets``."""

    def update(self, command: UpdateSecretsCommand) -> list[str]:
        settings = Settings.from_env()
        github = GitHubCliClient(
            command=settings.github.command,
            policy=settings.retry_policy(),
        )
        clients = DefaultClients(secrets_manager=SecretsManagerClient(), github=github)

        summary = update_secrets(
            UpdateSecretsOptions(
                secret=command.secret,
                region=command.region,
                profile=command.profile,
                repository=command.repository,
                environment=command.environment,
                # click reports an absent --keys as an empty tuple
                keys=command.keys or None,
                all_keys=True if command.all_keys else None,
                confirm=not command.yes,
                prune=command.prune,
                keep=command.keep,
            ),
            clients,
        )
        if summary.cancelled:
            return []
        lines = [
            f"Updated {len(summary.stored)} secret(s) in {summary.repository}: "
            f"{','.join(summary.stored)}",
        ]
        if summary.removed:
            lines.append(f"Removed {len(summary.removed)} secret(s): {','.join(summary.removed)}")
        if summary.skipped:
            lines.append(f"Skipped {len(summary.skipped)} secret(s): {','.join(summary.skipped)}")
        return lines
