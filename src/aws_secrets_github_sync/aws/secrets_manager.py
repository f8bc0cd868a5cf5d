"""Fetch and decode a JSON secret from AWS Secrets Manager."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import boto3
from botocore.config import Config

from aws_secrets_github_sync import __version__

logger = logging.getLogger(__name__)

USER_AGENT_EXTRA = f"aws-secrets-github-sync/{__version__}"


class SecretFormatError(ValueError):
    """The secret value is not a JSON object."""


@dataclass(slots=True)
class Secret:
    """Decoded secret: its ARN and the key/value pairs it stores."""

    arn: str
    values: dict[str, Any] = field(default_factory=dict)


def region_from_arn(secret_id: str) -> str | None:
    """Return the region field of an ARN, or None for a plain secret name."""

    if not secret_id.startswith("arn:"):
        return None
    parts = secret_id.split(":")
    if len(parts) < 4 or not parts[3]:
        return None
    return parts[3]


SessionFactory = Callable[..., Any]


class SecretsManagerClient:
    """Read secrets through a boto3 session per call."""

    def __init__(self, *, session_factory: SessionFactory | None = None) -> None:
        self.session_factory: SessionFactory = session_factory or boto3.session.Session

    def get_secret(
        self,
        secret_id: str,
        *,
        region: str | None = None,
        profile: str | None = None,
    ) -> Secret:
        session = self.session_factory(profile_name=profile, region_name=region)
        client = session.client(
            "secretsmanager",
            config=Config(user_agent_extra=USER_AGENT_EXTRA),
        )
        logger.debug("Fetching secret %s (region=%s, profile=%s)", secret_id, region, profile)
        response = client.get_secret_value(SecretId=secret_id)

        secret_string = response.get("SecretString")
        try:
            values = json.loads(secret_string) if secret_string is not None else None
        except json.JSONDecodeError as error:
            raise SecretFormatError(f'Secret "{secret_id}" must be a JSON object') from error
        if not isinstance(values, dict):
            raise SecretFormatError(f'Secret "{secret_id}" must be a JSON object')

        return Secret(arn=str(response.get("ARN", secret_id)), values=values)
