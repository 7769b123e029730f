"""Best-effort shell environment gathering for model context."""

from shellmate.shellenv.snapshot import (
    DELIMITER_CLOSE,
    DELIMITER_OPEN,
    ENV_VAR_ALLOWLIST,
    NEWLINE_MARKER,
    EnvironmentSnapshot,
    detect_shell,
    format_snapshot,
    gather,
    sanitize_value,
)

__all__ = [
    "DELIMITER_CLOSE",
    "DELIMITER_OPEN",
    "ENV_VAR_ALLOWLIST",
    "NEWLINE_MARKER",
    "EnvironmentSnapshot",
    "detect_shell",
    "format_snapshot",
    "gather",
    "sanitize_value",
]
