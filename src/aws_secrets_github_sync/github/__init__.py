"""GitHub secret store access through the ``gh`` command-line tool."""

from aws_secrets_github_sync.github.client import GitHubCliClient, GitHubSecretsError

__all__ = [
    "GitHubCliClient",
    "GitHubSecretsError",
]
