"""Destructive-command classifier.

Commands are matched against an ordered table of regular expressions over
the raw command string. There is no shell parsing: quoting and indirection
(``bash -c "rm -rf /"``, ``eval``, ``xargs rm``) must not hide a match, so a
benign command that merely mentions a flagged token is reported as
destructive too. First matching rule wins; no match means SAFE.
"""

import re

from shellmate.logging import Loggers
from shellmate.safety.models import ClassificationResult, DestructiveRule, SafetyLevel

logger = Loggers.safety()

# Redirect targets under /dev that discard or echo output.
_DEV_SINK_EXCLUDE = r">+\|?\s*/dev/(?:null|stdout|stderr)(?=[\s;&|)]|$)"

# (pattern, exclude, description) - order matters, first match wins
DESTRUCTIVE_PATTERNS: list[tuple[str, str | None, str]] = [
    # Deletion
    (r"\brm\s", None, "file deletion (rm)"),
    (r"\brm$", None, "file deletion (rm)"),
    # Privilege escalation
    (r"\bsudo\s", None, "privilege escalation (sudo)"),
    (r"\bdoas\s", None, "privilege escalation (doas)"),
    # Raw disk and filesystem operations
    (r"\bdd\s+if=", None, "raw block copy (dd)"),
    (r"\bmkfs\b", None, "filesystem creation (mkfs)"),
    (r"\bfdisk\b", None, "partition table edit (fdisk)"),
    (r">+\|?\s*/dev/", _DEV_SINK_EXCLUDE, "redirection into a device under /dev"),
    # Permissions and ownership
    (r"\bchmod\s+000\b", None, "permission removal (chmod 000)"),
    (r"\bchown\s+-R\b", None, "recursive ownership change (chown -R)"),
    # Processes and power state
    (r"\bkill\s+-(?:9|KILL|SIGKILL)\b", None, "forced process kill (kill -9)"),
    (r"\bkillall\s", None, "process kill by name (killall)"),
    (r"\bshutdown\b", None, "system shutdown"),
    (r"\breboot\b", None, "system reboot"),
    (r"\bhalt\b", None, "system halt"),
    (r"\bpoweroff\b", None, "system power off"),
    (r"\bsystemctl\s+(?:stop|disable|mask)\b", None, "service stop/disable (systemctl)"),
    # Moves, truncation, secure deletion
    (r"\bmv\s+/", None, "move of an absolute path (mv /...)"),
    (r":\s*>\s*\S", None, "file truncation (: >)"),
    (r"\btruncate\b", None, "file truncation (truncate)"),
    (r"\bshred\b", None, "secure deletion (shred)"),
]


def compile_rules(
    patterns: list[tuple[str, str | None, str]],
) -> tuple[DestructiveRule, ...]:
    """Compile raw (pattern, exclude, description) triples into rules."""
    return tuple(
        DestructiveRule(
            pattern=re.compile(pattern),
            description=description,
            exclude=re.compile(exclude) if exclude else None,
        )
        for pattern, exclude, description in patterns
    )


class CommandClassifier:
    """Classifies shell commands as SAFE or DESTRUCTIVE.

    The rule table is compiled on first use and never mutated afterwards.

    Example:
        classifier = CommandClassifier()
        classifier.classify("rm -rf build")  # SafetyLevel.DESTRUCTIVE
        classifier.classify("ls -la")        # SafetyLevel.SAFE
    """

    def __init__(self, patterns: list[tuple[str, str | None, str]] | None = None):
        """Initialize classifier.

        Args:
            patterns: Rule table to use instead of DESTRUCTIVE_PATTERNS.
        """
        self._patterns = DESTRUCTIVE_PATTERNS if patterns is None else patterns
        self._rules: tuple[DestructiveRule, ...] | None = None

    @property
    def rules(self) -> tuple[DestructiveRule, ...]:
        if self._rules is None:
            self._rules = compile_rules(self._patterns)
        return self._rules

    def explain(self, command: str) -> ClassificationResult:
        """Classify a command and report which rule flagged it."""
        for rule in self.rules:
            if rule.matches(command):
                logger.debug(
                    "command_classified",
                    level=SafetyLevel.DESTRUCTIVE.value,
                    rule=rule.description,
                )
                return ClassificationResult(
                    command=command,
                    level=SafetyLevel.DESTRUCTIVE,
                    reason=rule.description,
                )
        return ClassificationResult(command=command, level=SafetyLevel.SAFE)

    def classify(self, command: str) -> SafetyLevel:
        """Return the safety level of a command."""
        return self.explain(command).level


_default_classifier = CommandClassifier()


def classify(command: str) -> SafetyLevel:
    """Classify a command with the default rule table."""
    return _default_classifier.classify(command)
