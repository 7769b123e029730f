"""Command execution primitives."""

from shellmate.execution.executor import (
    MAX_OUTPUT_BYTES,
    TRUNCATION_MARKER,
    CaptureResult,
    ExecutionError,
    run_capturing,
    run_command,
)

__all__ = [
    "MAX_OUTPUT_BYTES",
    "TRUNCATION_MARKER",
    "CaptureResult",
    "ExecutionError",
    "run_capturing",
    "run_command",
]
