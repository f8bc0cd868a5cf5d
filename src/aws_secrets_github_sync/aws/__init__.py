"""AWS Secrets Manager access."""

from aws_secrets_github_sync.aws.secrets_manager import (
    Secret,
    SecretFormatError,
    SecretsManagerClient,
    region_from_arn,
)

__all__ = [
    "Secret",
    "SecretFormatError",
    "SecretsManagerClient",
    "region_from_arn",
]
