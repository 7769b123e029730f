"""Line input for the turn engine and yes/no confirmation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TextIO

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from rich.console import Console


class InputError(Exception):
    """Reading the user's input failed."""


class LineReader(ABC):
    """Source of user input lines."""

    @abstractmethod
    def read_line(self, prompt: str) -> str | None:
        """Show prompt and read one line.

        Returns:
            The line without its terminator, or None at end of input.

        Raises:
            InputError: If the input stream cannot be read.
        """
        ...


class StreamLineReader(LineReader):
    """Reads lines from a text stream; the prompt is written to a console.

    Used for piped input and in tests.
    """

    def __init__(self, stream: TextIO, console: Console):
        self._stream = stream
        self._console = console

    def read_line(self, prompt: str) -> str | None:
        self._console.print(prompt, end="", markup=False, highlight=False)
        try:
            line = self._stream.readline()
        except (OSError, ValueError) as e:
            raise InputError(f"reading input: {e}") from e
        if line == "":
            return None
        return line.rstrip("\r\n")


class PromptToolkitLineReader(LineReader):
    """Interactive terminal input with line editing and in-session history."""

    def __init__(self, session: PromptSession | None = None):
        self._session = session or PromptSession(history=InMemoryHistory())

    def read_line(self, prompt: str) -> str | None:
        try:
            return self._session.prompt(prompt)
        except EOFError:
            return None
        except OSError as e:
            raise InputError(f"reading input: {e}") from e


def confirm(reader: LineReader, prompt: str, default_yes: bool) -> bool:
    """Ask a yes/no question.

    Empty input picks the default; only "y"/"yes" count as yes otherwise.
    End of input is a no.
    """
    hint = "[Y/n]" if default_yes else "[y/N]"
    answer = reader.read_line(f"{prompt} {hint}: ")
    if answer is None:
        return False
    answer = answer.strip().lower()
    if not answer:
        return default_yes
    return answer in ("y", "yes")
