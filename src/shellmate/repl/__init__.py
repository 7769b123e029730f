"""Interactive turn engine, input handling and conversation history."""

from shellmate.repl.engine import TurnEngine, run_result_message
from shellmate.repl.history import ConversationHistory
from shellmate.repl.io import (
    InputError,
    LineReader,
    PromptToolkitLineReader,
    StreamLineReader,
    confirm,
)

__all__ = [
    "ConversationHistory",
    "InputError",
    "LineReader",
    "PromptToolkitLineReader",
    "StreamLineReader",
    "TurnEngine",
    "confirm",
    "run_result_message",
]
