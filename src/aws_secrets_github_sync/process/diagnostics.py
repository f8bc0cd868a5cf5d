"""Where retry notices and child process output are reported."""

from __future__ import annotations

from typing import Protocol

import click


class DiagnosticSink(Protocol):
    """Operator-facing output channel used by the invoker and retry loop."""

    def log(self, message: str) -> None:
        """Write one diagnostic line."""

    def echo_stderr(self, text: str) -> None:
        """Relay text a child process wrote to its error stream."""

    def echo_stdout(self, text: str) -> None:
        """Relay text a child process wrote to its output stream."""


class ConsoleDiagnosticSink:
    """Write diagnostics to the current process's own standard streams."""

    def log(self, message: str) -> None:
        click.echo(message, err=True)

    def echo_stderr(self, text: str) -> None:
        if text:
            click.echo(text, err=True, nl=False)

    def echo_stdout(self, text: str) -> None:
        if text:
            click.echo(text, nl=False)
