"""Copy selected keys of a Secrets Manager secret into GitHub secrets."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field

from aws_secrets_github_sync.aws import region_from_arn
from aws_secrets_github_sync.clients import Clients

logger = logging.getLogger(__name__)


class UpdateSecretsError(ValueError):
    """The requested key selection cannot be applied to the secret."""


@dataclass(slots=True)
class UpdateSecretsOptions:
    """Inputs for one sync run.

    Exactly one of ``keys`` and ``all_keys`` must be set. ``keep`` names
    destination secrets that survive ``prune`` even though the source secret
    does not contain them.
    """

    secret: str
    region: str | None = None
    profile: str | None = None
    repository: str | None = None
    environment: str | None = None
    keys: tuple[str, ...] | None = None
    all_keys: bool | None = None
    confirm: bool = True
    prune: bool = False
    keep: tuple[str, ...] = ()


@dataclass(slots=True)
class UpdateSecretsSummary:
    """What a sync run changed."""

    repository: str
    stored: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    cancelled: bool = False


def update_secrets(options: UpdateSecretsOptions, clients: Clients) -> UpdateSecretsSummary:
    """Update destination secrets from the source secret.

    Every store and remove is a separate throttle-aware ``gh`` call, made one
    after another.
    """

    secret_id = options.secret
    region = options.region or region_from_arn(secret_id)
    repository = options.repository or clients.get_repository_name()
    secret = clients.get_secret(secret_id, region=region, profile=options.profile)

    if not isinstance(secret.values, dict):
        raise UpdateSecretsError(f'Secret "{secret.arn}" is not an object')

    if options.all_keys is None and options.keys is None:
        raise UpdateSecretsError("Either `all` or `keys` must be set")

    keys = list(options.keys or ())
    if options.all_keys:
        if keys:
            raise UpdateSecretsError("Cannot set both `all` and `keys`")
        keys = list(secret.values)

    if not keys:
        raise UpdateSecretsError("No keys to update")

    for required_key in keys:
        if required_key not in secret.values:
            raise UpdateSecretsError(
                f'Secret "{secret_id}" does not contain key "{required_key}"',
            )

    environment = options.environment
    existing_keys = clients.list_secrets(repository, environment=environment)
    old_keys = [key for key in existing_keys if key not in keys and key not in options.keep]
    logger.debug(
        "Selected %d key(s); %d destination key(s) not in the secret",
        len(keys),
        len(old_keys),
    )

    clients.log(f"FROM  : {secret.arn}")
    clients.log(f"REPO  : {repository}")
    if environment:
        clients.log(f"ENV   : {environment}")
    clients.log(f"UPDATE: {','.join(keys)}")
    if old_keys:
        if options.prune:
            clients.log(f"REMOVE: {','.join(old_keys)}")
        else:
            clients.log(f"SKIP  : {','.join(old_keys)} (use --prune to remove)")
    clients.log()

    summary = UpdateSecretsSummary(repository=repository)
    if options.confirm and not clients.confirm_prompt():
        clients.log("Cancelled by user")
        summary.cancelled = True
        return summary

    for key, value in secret.values.items():
        if key not in keys:
            continue
        clients.store_secret(repository, key, _as_secret_text(value), environment=environment)
        summary.stored.append(key)

    if options.prune:
        for key in old_keys:
            clients.remove_secret(repository, key, environment=environment)
            summary.removed.append(key)
    else:
        summary.skipped.extend(old_keys)

    return summary


def _as_secret_text(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)
