"""Shell command execution primitives.

Commands run through the user's shell (``$SHELL -c``). There are no
resource limits or sandboxing: a command only gets here after the user
confirmed it.
"""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass
from typing import BinaryIO

from shellmate.logging import Loggers
from shellmate.shellenv import detect_shell

logger = Loggers.execution()

MAX_OUTPUT_BYTES = 8192
TRUNCATION_MARKER = "\n[output truncated]"

_READ_CHUNK = 4096


class ExecutionError(Exception):
    """The shell could not be started for a command."""


@dataclass
class CaptureResult:
    """Result of a captured command run.

    Attributes:
        output: Combined stdout/stderr, cut at the capture limit.
        exit_code: Exit status (negative when killed by a signal).
        truncated: Whether output was cut.
    """

    output: str
    exit_code: int
    truncated: bool = False


def run_command(command: str, shell: str | None = None) -> int:
    """Run a command attached to the terminal and return its exit code.

    Raises:
        ExecutionError: If the shell cannot be started.
    """
    shell = shell or detect_shell()
    logger.info("command_started", command=command, capture=False)
    try:
        completed = subprocess.run([shell, "-c", command])
    except OSError as e:
        raise ExecutionError(f"executing command: {e}") from e
    logger.info("command_finished", exit_code=completed.returncode)
    return completed.returncode


def run_capturing(
    command: str,
    max_output_bytes: int = MAX_OUTPUT_BYTES,
    shell: str | None = None,
    sink: BinaryIO | None = None,
) -> CaptureResult:
    """Run a command, showing output live while keeping a capped copy.

    stdout and stderr are merged, written to ``sink`` as they arrive and
    buffered up to ``max_output_bytes``. A non-zero exit status is data,
    not an error.

    Args:
        command: Shell command line.
        max_output_bytes: Capture limit; the rest is only shown.
        shell: Shell to run under (defaults to $SHELL).
        sink: Where live output goes (defaults to stdout).

    Raises:
        ExecutionError: If the shell cannot be started.
    """
    shell = shell or detect_shell()
    sink = sink if sink is not None else sys.stdout.buffer
    logger.info("command_started", command=command, capture=True)

    try:
        process = subprocess.Popen(
            [shell, "-c", command],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as e:
        raise ExecutionError(f"executing command: {e}") from e

    captured = bytearray()
    total = 0
    with process:
        stdout = process.stdout
        if stdout is None:
            process.kill()
            raise ExecutionError("executing command: output pipe was not opened")
        for chunk in iter(lambda: stdout.read1(_READ_CHUNK), b""):
            sink.write(chunk)
            sink.flush()
            total += len(chunk)
            room = max_output_bytes - len(captured)
            if room > 0:
                captured.extend(chunk[:room])
        exit_code = process.wait()

    output = captured.decode("utf-8", errors="replace")
    truncated = total > max_output_bytes
    if truncated:
        output += TRUNCATION_MARKER

    logger.info("command_finished", exit_code=exit_code, output_bytes=total)
    return CaptureResult(output=output, exit_code=exit_code, truncated=truncated)
