"""Shared test fixtures."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest

from aws_secrets_github_sync.github.stub_gh import STATE_ENV_VAR
from aws_secrets_github_sync.process import RetryPolicy

STUB_GH_COMMAND = (sys.executable, "-m", "aws_secrets_github_sync.github.stub_gh")

FAST_RETRY_POLICY = RetryPolicy(
    initial_backoff_seconds=0.01,
    max_backoff_seconds=0.02,
    backoff_factor=2.0,
    deadline_seconds=10.0,
)


class RecordingSink:
    """Diagnostic sink that keeps everything in memory."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.stderr: list[str] = []
        self.stdout: list[str] = []

    def log(self, message: str) -> None:
        self.lines.append(message)

    def echo_stderr(self, text: str) -> None:
        if text:
            self.stderr.append(text)

    def echo_stdout(self, text: str) -> None:
        if text:
            self.stdout.append(text)


class StubGh:
    """Handle on the JSON state behind ``stub_gh``."""

    command = STUB_GH_COMMAND

    def __init__(self, state_path: Path) -> None:
        self.state_path = state_path

    def write_state(self, **state: object) -> None:
        self.state_path.write_text(json.dumps(state), "utf-8")

    def read_state(self) -> dict:
        return json.loads(self.state_path.read_text("utf-8"))

    def secrets(self, environment: str = "") -> dict[str, str]:
        return self.read_state().get("secrets", {}).get(environment, {})

    def calls(self) -> list[list[str]]:
        return self.read_state().get("calls", [])


@pytest.fixture()
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture()
def stub_gh(tmp_path: Path, monkeypatch) -> StubGh:
    """Point ``stub_gh`` at a fresh state file for one repository."""

    state_path = tmp_path / "gh-state.json"
    monkeypatch.setenv(STATE_ENV_VAR, str(state_path))
    stub = StubGh(state_path)
    stub.write_state(repository="my-owner/my-repo", secrets={})
    return stub


@pytest.fixture()
def fast_retry_policy() -> RetryPolicy:
    return FAST_RETRY_POLICY
