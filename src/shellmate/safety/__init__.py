"""Deterministic destructive-command classification.

Usage:
    from shellmate.safety import classify, SafetyLevel

    if classify("rm -rf ./build") is SafetyLevel.DESTRUCTIVE:
        # require a second confirmation
"""

from shellmate.safety.classifier import (
    DESTRUCTIVE_PATTERNS,
    CommandClassifier,
    classify,
)
from shellmate.safety.models import ClassificationResult, DestructiveRule, SafetyLevel

__all__ = [
    "DESTRUCTIVE_PATTERNS",
    "ClassificationResult",
    "CommandClassifier",
    "DestructiveRule",
    "SafetyLevel",
    "classify",
]
