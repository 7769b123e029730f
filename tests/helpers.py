"""Test doubles for the turn engine.

Provides scripted stand-ins for the model backend, user input and
command execution so no real model or command is ever involved.
"""

from __future__ import annotations

import json

from shellmate.execution import CaptureResult
from shellmate.providers import ChatRequest, ChatResponse, Provider
from shellmate.providers.base import is_structured_json
from shellmate.repl import LineReader
from shellmate.shellenv import EnvironmentSnapshot


class FakeProvider(Provider):
    """Provider returning scripted replies and recording every request.

    Each scripted item is a reply string, a ChatResponse, or an exception
    to raise.
    """

    name = "fake"

    def __init__(self, replies: list | None = None, model: str = "fake-model"):
        super().__init__(model)
        self.replies = list(replies or [])
        self.requests: list[ChatRequest] = []

    def chat(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError("FakeProvider ran out of scripted replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, ChatResponse):
            return reply
        return ChatResponse(
            text=reply,
            raw=reply,
            structured=is_structured_json(request.expect_json, reply),
        )


class ScriptedReader(LineReader):
    """Returns scripted lines, then None (end of input).

    An exception in the script is raised when reached.
    """

    def __init__(self, lines: list | None = None):
        self.lines = list(lines or [])
        self.prompts: list[str] = []

    def read_line(self, prompt: str) -> str | None:
        self.prompts.append(prompt)
        if not self.lines:
            return None
        line = self.lines.pop(0)
        if isinstance(line, Exception):
            raise line
        return line


class FakeRunner:
    """Records commands instead of executing them."""

    def __init__(self, exit_code: int = 0, output: str = "", error: Exception | None = None):
        self.exit_code = exit_code
        self.output = output
        self.error = error
        self.commands: list[str] = []

    def capture(self, command: str, max_output_bytes: int = 8192) -> CaptureResult:
        self.commands.append(command)
        if self.error:
            raise self.error
        return CaptureResult(output=self.output, exit_code=self.exit_code)

    def run(self, command: str) -> int:
        self.commands.append(command)
        if self.error:
            raise self.error
        return self.exit_code


SAMPLE_SNAPSHOT = EnvironmentSnapshot(
    cwd="/home/user/project",
    os_name="linux",
    arch="x86_64",
    shell="/bin/bash",
    dir_entries=("README.md", "src/"),
    dir_omitted=0,
    git_branch="main",
    git_dirty=False,
    git_recent=("abc1234 initial commit",),
    env=(("LANG", "en_US.UTF-8"),),
)


def structured(text: str, *commands: str) -> str:
    """Build a reply in the JSON envelope."""
    return json.dumps({"text": text, "commands": list(commands)})
