"""Prompt construction and reply parsing."""

from shellmate.prompt.response import (
    ParsedReply,
    StructuredReply,
    UnstructuredReply,
    parse_reply,
)
from shellmate.prompt.system import chat_system_prompt, explain_request

__all__ = [
    "ParsedReply",
    "StructuredReply",
    "UnstructuredReply",
    "chat_system_prompt",
    "explain_request",
    "parse_reply",
]
