"""Run one external command with captured standard streams."""

from __future__ import annotations

import logging
import shlex
import signal
import subprocess
from collections.abc import Sequence

from aws_secrets_github_sync.process.base import InvocationResult, PopenFactory, ProcessRequest
from aws_secrets_github_sync.process.diagnostics import ConsoleDiagnosticSink, DiagnosticSink
from aws_secrets_github_sync.process.errors import TransportError

logger = logging.getLogger(__name__)


class ProcessInvoker:
    """Execute a command to completion and return its exit status and output.

    A nonzero exit status is returned, not raised; deciding whether it is
    retryable belongs to the caller. Only start failures and signal
    terminations raise ``TransportError``.
    """

    def __init__(
        self,
        *,
        popen_factory: PopenFactory | None = None,
        sink: DiagnosticSink | None = None,
    ) -> None:
        self.popen_factory: PopenFactory = popen_factory or subprocess.Popen
        self.sink: DiagnosticSink = sink or ConsoleDiagnosticSink()

    def run(self, argv: Sequence[str], *, input_text: str | None = None) -> InvocationResult:
        request = ProcessRequest(argv=tuple(argv), input_text=input_text)
        if not request.argv:
            raise TransportError("Cannot run an empty command.")
        return self.execute(request)

    def execute(self, request: ProcessRequest) -> InvocationResult:
        command_head = request.argv[0]
        logger.debug(
            "Running %s (stdin=%s)",
            shlex.join(request.argv),
            "pipe" if request.input_text is not None else "closed",
        )
        try:
            process = self.popen_factory(request.argv, **request.popen_kwargs())
            stdout, stderr = process.communicate(input=request.input_text)
        except FileNotFoundError as error:
            raise TransportError(f"Command not found: {command_head}") from error
        except OSError as error:
            raise TransportError(f"Failed to start {command_head}: {error}") from error

        stdout = stdout or ""
        stderr = stderr or ""
        self.sink.echo_stderr(stderr)
        if request.input_text is not None:
            self.sink.echo_stdout(stdout)

        returncode = process.returncode
        if returncode is None:
            raise TransportError(f"{command_head} did not report an exit status")
        if returncode < 0:
            raise TransportError(
                f"Process exited with signal {_signal_name(-returncode)}",
            )
        return InvocationResult(exit_code=returncode, stdout=stdout, stderr=stderr)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)
