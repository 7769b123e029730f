"""Bounded conversation history."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from shellmate.providers import Message
from shellmate.providers.base import Role

DEFAULT_MAX_MESSAGES = 50


class ConversationHistory:
    """Ordered user/assistant messages with a fixed maximum length.

    Appending past the cap drops the oldest messages first. System
    messages are never stored here; callers prepend a fresh one per call.
    """

    def __init__(self, max_messages: int = DEFAULT_MAX_MESSAGES):
        if max_messages <= 0:
            raise ValueError("max_messages must be positive")
        self._messages: deque[Message] = deque(maxlen=max_messages)

    @property
    def max_messages(self) -> int:
        return self._messages.maxlen or 0

    def append(self, role: Role, content: str) -> None:
        if role == "system":
            raise ValueError("system messages are not kept in history")
        self._messages.append(Message(role=role, content=content))

    def with_system(self, system_prompt: str) -> list[Message]:
        """Messages to send: a system message followed by the history."""
        return [Message(role="system", content=system_prompt), *self._messages]

    def clear(self) -> None:
        self._messages.clear()

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __len__(self) -> int:
        return len(self._messages)
