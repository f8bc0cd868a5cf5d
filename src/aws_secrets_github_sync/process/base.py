"""Data types shared by the process invoker and the retry orchestrator."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class InvocationResult:
    """Outcome of one finished external command."""

    exit_code: int
    stdout: str
    stderr: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True, slots=True)
class ProcessRequest:
    """One external command with its standard-stream configuration."""

    argv: tuple[str, ...]
    input_text: str | None = None

    @property
    def stdin(self) -> int:
        """Pipe stdin only when there is a payload to write."""

        return subprocess.PIPE if self.input_text is not None else subprocess.DEVNULL

    def popen_kwargs(self) -> dict[str, Any]:
        return {
            "stdin": self.stdin,
            "stdout": subprocess.PIPE,
            "stderr": subprocess.PIPE,
            "text": True,
        }


class RunningProcess(Protocol):
    """Subset of ``subprocess.Popen`` used by the invoker."""

    returncode: int | None

    def communicate(self, input: str | None = None) -> tuple[str, str]:  # noqa: A002
        """Write optional input, close stdin, and collect stdout/stderr."""


class PopenFactory(Protocol):
    """Execution primitive with the ``subprocess.Popen`` call signature."""

    def __call__(self, args: Sequence[str], **kwargs: Any) -> RunningProcess:
        """Start a child process."""
