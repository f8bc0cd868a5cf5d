"""Runtime configuration: environment settings and the JSON options file."""

from __future__ import annotations

import json
import math
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from aws_secrets_github_sync.process import DEFAULT_RETRY_POLICY, RetryPolicy

ENV_PREFIX = "AWS_SECRETS_GITHUB_SYNC_"


@dataclass(slots=True)
class RetrySettings:
    """Backoff settings for throttled ``gh`` calls, in seconds."""

    initial_backoff_seconds: float = DEFAULT_RETRY_POLICY.initial_backoff_seconds
    max_backoff_seconds: float = DEFAULT_RETRY_POLICY.max_backoff_seconds
    backoff_factor: float = DEFAULT_RETRY_POLICY.backoff_factor
    deadline_seconds: float = DEFAULT_RETRY_POLICY.deadline_seconds


@dataclass(slots=True)
class GitHubSettings:
    """How to call the GitHub CLI."""

    command: tuple[str, ...] = ("gh",)


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    retry: RetrySettings = field(default_factory=RetrySettings)
    github: GitHubSettings = field(default_factory=GitHubSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment, defaulting to the built-in retry policy."""

        return cls(
            retry=RetrySettings(
                initial_backoff_seconds=_env_float(
                    "RETRY_INITIAL_BACKOFF_SECONDS",
                    DEFAULT_RETRY_POLICY.initial_backoff_seconds,
                ),
                max_backoff_seconds=_env_float(
                    "RETRY_MAX_BACKOFF_SECONDS",
                    DEFAULT_RETRY_POLICY.max_backoff_seconds,
                ),
                backoff_factor=_env_float(
                    "RETRY_BACKOFF_FACTOR",
                    DEFAULT_RETRY_POLICY.backoff_factor,
                ),
                deadline_seconds=_env_float(
                    "RETRY_DEADLINE_SECONDS",
                    DEFAULT_RETRY_POLICY.deadline_seconds,
                ),
            ),
            github=GitHubSettings(
                command=_split_command(os.getenv(f"{ENV_PREFIX}GH_COMMAND", "gh")),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error naming the offending variable."""

        if not self.retry.initial_backoff_seconds > 0:
            raise ValueError(f"{ENV_PREFIX}RETRY_INITIAL_BACKOFF_SECONDS must be > 0.")
        if not self.retry.backoff_factor >= 1:
            raise ValueError(f"{ENV_PREFIX}RETRY_BACKOFF_FACTOR must be >= 1.")
        if not self.retry.max_backoff_seconds >= self.retry.initial_backoff_seconds:
            raise ValueError(
                f"{ENV_PREFIX}RETRY_MAX_BACKOFF_SECONDS must be >= "
                f"{ENV_PREFIX}RETRY_INITIAL_BACKOFF_SECONDS.",
            )
        if not 0 < self.retry.deadline_seconds < math.inf:
            raise ValueError(f"{ENV_PREFIX}RETRY_DEADLINE_SECONDS must be a finite number > 0.")
        if not self.github.command:
            raise ValueError(f"{ENV_PREFIX}GH_COMMAND must not be empty.")

    def retry_policy(self) -> RetryPolicy:
        self.validate()
        return DEFAULT_RETRY_POLICY.with_overrides(
            initial_backoff_seconds=self.retry.initial_backoff_seconds,
            max_backoff_seconds=self.retry.max_backoff_seconds,
            backoff_factor=self.retry.backoff_factor,
            deadline_seconds=self.retry.deadline_seconds,
        )


# Options-file key -> (CLI parameter name, expected kind)
_CONFIG_FILE_KEYS: dict[str, tuple[str, str]] = {
    "secret": ("secret", "str"),
    "repo": ("repo", "str"),
    "env": ("env", "str"),
    "region": ("region", "str"),
    "profile": ("profile", "str"),
    "keys": ("keys", "list"),
    "all": ("all_keys", "bool"),
    "prune": ("prune", "bool"),
    "keep": ("keep", "list"),
    "yes": ("yes", "bool"),
    "debug": ("debug", "bool"),
}


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON options file and return CLI defaults keyed by parameter name."""

    try:
        payload = json.loads(path.read_text("utf-8"))
    except json.JSONDecodeError as error:
        raise ValueError(f"Invalid JSON in config file {path}: {error}") from error
    if not isinstance(payload, dict):
        raise ValueError(f"Config file {path} must contain a JSON object.")

    defaults: dict[str, Any] = {}
    for key, value in payload.items():
        if key not in _CONFIG_FILE_KEYS:
            raise ValueError(
                f"Unknown option {key!r} in config file {path}. "
                f"Supported: {', '.join(sorted(_CONFIG_FILE_KEYS))}.",
            )
        param_name, kind = _CONFIG_FILE_KEYS[key]
        defaults[param_name] = _coerce_config_value(path, key, value, kind)
    return defaults


def _coerce_config_value(path: Path, key: str, value: object, kind: str) -> object:
    if kind == "bool":
        if not isinstance(value, bool):
            raise ValueError(f"Option {key!r} in config file {path} must be true or false.")
        return value
    if kind == "list":
        if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
            raise ValueError(f"Option {key!r} in config file {path} must be a list of strings.")
        return tuple(value)
    if not isinstance(value, str):
        raise ValueError(f"Option {key!r} in config file {path} must be a string.")
    return value


def _split_command(value: str) -> tuple[str, ...]:
    return tuple(shlex.split(value.strip()))


def _env_float(name: str, default: float) -> float:
    full_name = f"{ENV_PREFIX}{name}"
    raw = os.getenv(full_name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as error:
        raise ValueError(f"Invalid number for {full_name}: {raw!r}") from error
