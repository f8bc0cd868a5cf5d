from __future__ import annotations

import json
import shlex
from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from aws_secrets_github_sync import __version__
from aws_secrets_github_sync.aws import Secret
from aws_secrets_github_sync.main import aws_secrets_github_sync

pytestmark = [
    allure.epic("Secret Sync"),
    allure.feature("Command Line"),
]

SECRET_JSON = {
    "NPM_TOKEN": "my-npm-token",
    "TWINE_USERNAME": "my-twine-username",
}


class FakeSecretsManagerClient:
    requests: list[tuple[str, str | None, str | None]] = []

    def get_secret(self, secret_id: str, *, region=None, profile=None) -> Secret:
        self.requests.append((secret_id, region, profile))
        return Secret(arn=f"arn-of-{secret_id}", values=dict(SECRET_JSON))


@pytest.fixture()
def cli_env(stub_gh, monkeypatch):
    FakeSecretsManagerClient.requests = []
    monkeypatch.setattr(
        "aws_secrets_github_sync.controllers.SecretsManagerClient",
        FakeSecretsManagerClient,
    )
    monkeypatch.setenv("AWS_SECRETS_GITHUB_SYNC_GH_COMMAND", shlex.join(stub_gh.command))
    monkeypatch.setenv("AWS_SECRETS_GITHUB_SYNC_RETRY_INITIAL_BACKOFF_SECONDS", "0.01")
    monkeypatch.setenv("AWS_SECRETS_GITHUB_SYNC_RETRY_MAX_BACKOFF_SECONDS", "0.02")
    monkeypatch.setenv("AWS_SECRETS_GITHUB_SYNC_RETRY_DEADLINE_SECONDS", "10")
    return stub_gh


def test_all_keys_are_synced_without_prompt(cli_env) -> None:
    result = CliRunner().invoke(aws_secrets_github_sync, ["-s", "publishing", "--all", "--yes"])

    assert result.exit_code == 0, result.output
    assert cli_env.secrets() == SECRET_JSON
    assert "REPO  : my-owner/my-repo" in result.output
    assert "Updated 2 secret(s) in my-owner/my-repo: NPM_TOKEN,TWINE_USERNAME" in result.output
    assert FakeSecretsManagerClient.requests == [("publishing", None, None)]


def test_prune_respects_keep(cli_env) -> None:
    cli_env.write_state(
        repository="my-owner/my-repo",
        secrets={"": {"OLD": "x", "CODECOV_TOKEN": "y"}},
    )

    result = CliRunner().invoke(
        aws_secrets_github_sync,
        ["-s", "publishing", "-k", "NPM_TOKEN", "--prune", "--keep", "CODECOV_TOKEN", "-y"],
    )

    assert result.exit_code == 0, result.output
    assert cli_env.secrets() == {"CODECOV_TOKEN": "y", "NPM_TOKEN": "my-npm-token"}
    assert "Removed 1 secret(s): OLD" in result.output


def test_unpruned_secrets_are_reported_as_skipped(cli_env) -> None:
    cli_env.write_state(repository="my-owner/my-repo", secrets={"": {"OLD": "x"}})

    result = CliRunner().invoke(aws_secrets_github_sync, ["-s", "publishing", "--all", "-y"])

    assert result.exit_code == 0, result.output
    assert "Skipped 1 secret(s): OLD" in result.output
    assert cli_env.secrets()["OLD"] == "x"
    assert "Removed" not in result.output


def test_options_are_read_from_config_file(cli_env, tmp_path: Path) -> None:
    config = tmp_path / "sm2gh.json"
    config.write_text(
        json.dumps(
            {
                "secret": "from-file",
                "keys": ["TWINE_USERNAME"],
                "region": "eu-west-1",
                "profile": "publisher",
                "yes": True,
            },
        ),
        "utf-8",
    )

    result = CliRunner().invoke(aws_secrets_github_sync, ["-c", str(config)])

    assert result.exit_code == 0, result.output
    assert cli_env.secrets() == {"TWINE_USERNAME": "my-twine-username"}
    assert FakeSecretsManagerClient.requests == [("from-file", "eu-west-1", "publisher")]


def test_command_line_overrides_config_file(cli_env, tmp_path: Path) -> None:
    config = tmp_path / "sm2gh.json"
    config.write_text('{"secret": "from-file", "keys": ["TWINE_USERNAME"], "yes": true}', "utf-8")

    result = CliRunner().invoke(
        aws_secrets_github_sync,
        ["-c", str(config), "-s", "from-flag", "-k", "NPM_TOKEN"],
    )

    assert result.exit_code == 0, result.output
    assert cli_env.secrets() == {"NPM_TOKEN": "my-npm-token"}
    assert FakeSecretsManagerClient.requests[0][0] == "from-flag"


def test_invalid_config_file_is_a_usage_error(cli_env, tmp_path: Path) -> None:
    config = tmp_path / "sm2gh.json"
    config.write_text('{"secret": "s", "bogus": 1}', "utf-8")

    result = CliRunner().invoke(aws_secrets_github_sync, ["-c", str(config)])

    assert result.exit_code == 2
    assert "bogus" in result.output


def test_declined_confirmation_changes_nothing(cli_env) -> None:
    result = CliRunner().invoke(
        aws_secrets_github_sync,
        ["-s", "publishing", "--all"],
        input="n\n",
    )

    assert result.exit_code == 0, result.output
    assert "Cancelled by user" in result.output
    assert cli_env.secrets() == {}
    assert "Updated" not in result.output


def test_accepted_confirmation_syncs(cli_env) -> None:
    result = CliRunner().invoke(
        aws_secrets_github_sync,
        ["-s", "publishing", "-k", "NPM_TOKEN"],
        input="y\n",
    )

    assert result.exit_code == 0, result.output
    assert cli_env.secrets() == {"NPM_TOKEN": "my-npm-token"}


def test_environment_and_explicit_repo(cli_env) -> None:
    result = CliRunner().invoke(
        aws_secrets_github_sync,
        ["-s", "publishing", "-k", "NPM_TOKEN", "-r", "other/repo", "-e", "release", "-y"],
    )

    assert result.exit_code == 0, result.output
    assert cli_env.secrets("release") == {"NPM_TOKEN": "my-npm-token"}
    assert cli_env.secrets() == {}
    assert "ENV   : release" in result.output
    assert cli_env.calls()[0][:2] == ["secret", "list"]


def test_missing_key_exits_with_error(cli_env) -> None:
    result = CliRunner().invoke(
        aws_secrets_github_sync,
        ["-s", "publishing", "-k", "NOT_FOUND", "-y"],
    )

    assert result.exit_code == 1
    assert "NOT_FOUND" in result.output
    assert cli_env.calls() == [["repo", "view", "--json", "nameWithOwner"]]


def test_gh_failure_exits_with_error(cli_env) -> None:
    cli_env.write_state(repository="my-owner/my-repo", secrets={}, fail={"set": "HTTP 422"})

    result = CliRunner().invoke(aws_secrets_github_sync, ["-s", "publishing", "--all", "-y"])

    assert result.exit_code == 1
    assert "NPM_TOKEN" in result.output


def test_throttled_gh_is_retried(cli_env) -> None:
    cli_env.write_state(repository="my-owner/my-repo", secrets={}, throttle={"set": 1})

    result = CliRunner().invoke(aws_secrets_github_sync, ["-s", "publishing", "--all", "-y"])

    assert result.exit_code == 0, result.output
    assert cli_env.secrets() == SECRET_JSON
    assert "Command throttled (attempt 1" in result.output


def test_secret_is_required(cli_env) -> None:
    result = CliRunner().invoke(aws_secrets_github_sync, ["--all"])

    assert result.exit_code == 2


def test_version() -> None:
    result = CliRunner().invoke(aws_secrets_github_sync, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output
