"""Data models for command safety classification."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class SafetyLevel(Enum):
    """Safety classification of a shell command."""

    SAFE = "safe"
    DESTRUCTIVE = "destructive"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DestructiveRule:
    """A destructive-command pattern with an optional exclusion.

    The exclusion is tried at the position where ``pattern`` matched;
    an occurrence it covers does not count against the command.
    """

    pattern: re.Pattern[str]
    description: str
    exclude: re.Pattern[str] | None = None

    def matches(self, command: str) -> bool:
        """Check whether any occurrence of the pattern is not excused."""
        for match in self.pattern.finditer(command):
            if self.exclude is None or self.exclude.match(command, match.start()) is None:
                return True
        return False


@dataclass(frozen=True)
class ClassificationResult:
    """Result of classifying a command."""

    command: str
    level: SafetyLevel
    reason: str | None = None  # Description of the matching rule

    @property
    def is_destructive(self) -> bool:
        return self.level is SafetyLevel.DESTRUCTIVE
