"""Structured reply contract and fail-closed parser.

The model must answer with exactly one JSON object of the shape
``{"text": "...", "commands": ["..."]}``. Anything else (prose around the
object, code fences, wrong field types) yields an UnstructuredReply, which
carries the text for display and can never carry commands.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from pydantic import BaseModel, ConfigDict, ValidationError


class _ReplyEnvelope(BaseModel):
    """Wire shape of a structured reply."""

    model_config = ConfigDict(strict=True, extra="ignore")

    text: str = ""
    commands: list[str] | None = None


@dataclass(frozen=True)
class StructuredReply:
    """A reply that matched the JSON envelope; its commands may be offered."""

    text: str
    commands: tuple[str, ...] = ()

    is_structured: ClassVar[bool] = True

    @property
    def display_text(self) -> str:
        return self.text


@dataclass(frozen=True)
class UnstructuredReply:
    """A reply that did not match the envelope. Display-only."""

    text: str

    is_structured: ClassVar[bool] = False

    @property
    def display_text(self) -> str:
        return self.text

    @property
    def commands(self) -> tuple[str, ...]:
        return ()


ParsedReply = Union[StructuredReply, UnstructuredReply]


def normalize_commands(commands: list[str] | None) -> tuple[str, ...]:
    """Trim each command and drop the ones left empty."""
    if not commands:
        return ()
    return tuple(cmd.strip() for cmd in commands if cmd.strip())


def parse_reply(raw: str) -> ParsedReply:
    """Parse a raw model reply.

    The whole trimmed string must decode as the envelope. There is no
    fallback extraction of fenced code blocks.

    Args:
        raw: Model output exactly as received.

    Returns:
        StructuredReply on success, UnstructuredReply otherwise.
    """
    text = raw.strip()
    if not text:
        return UnstructuredReply(text="")

    try:
        envelope = _ReplyEnvelope.model_validate_json(text)
    except ValidationError:
        return UnstructuredReply(text=text)

    display_text = envelope.text.strip() or text
    return StructuredReply(text=display_text, commands=normalize_commands(envelope.commands))
