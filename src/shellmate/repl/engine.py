"""Conversational turn engine.

One turn: read a line, gather a fresh environment snapshot, ask the model,
show the reply, then offer each extracted command for run / explain / skip.
Destructive commands need a second confirmation before they run.

The engine owns the conversation history. Provider and execution failures
are shown and the session continues; input failures propagate.
"""

from __future__ import annotations

from typing import Callable

from rich.console import Console

from shellmate.execution import (
    MAX_OUTPUT_BYTES,
    CaptureResult,
    ExecutionError,
    run_capturing,
    run_command,
)
from shellmate.logging import Loggers
from shellmate.prompt import ParsedReply, chat_system_prompt, explain_request, parse_reply
from shellmate.providers import ChatRequest, Provider, ProviderError
from shellmate.providers.base import DEFAULT_CHAT_TIMEOUT
from shellmate.repl.history import DEFAULT_MAX_MESSAGES, ConversationHistory
from shellmate.repl.io import LineReader, confirm
from shellmate.safety import ClassificationResult, CommandClassifier
from shellmate.shellenv import EnvironmentSnapshot, format_snapshot, gather

logger = Loggers.repl()

PROMPT = "sm> "
CHOICE_PROMPT = "  [r]un / [e]xplain / [s]kip: "
EXIT_WORDS = frozenset({"exit", "quit"})

UNSTRUCTURED_NOTICE = (
    "Note: model response was not valid structured output; no commands were offered."
)

CaptureRunner = Callable[..., CaptureResult]
CommandRunner = Callable[[str], int]


def run_result_message(command: str, result: CaptureResult) -> str:
    """History entry telling the model what happened when a command ran."""
    message = f"I ran `{command}` (exit code {result.exit_code})."
    output = result.output.rstrip("\n")
    if output:
        message += f"\n\nOutput:\n```\n{output}\n```"
    return message


class TurnEngine:
    """Drives chat sessions and one-shot queries against a provider.

    Collaborators are injected so tests can script every step:

        engine = TurnEngine(provider, console, StreamLineReader(stdin, console))
        engine.run()
    """

    def __init__(
        self,
        provider: Provider,
        console: Console,
        reader: LineReader,
        *,
        model: str | None = None,
        max_history: int = DEFAULT_MAX_MESSAGES,
        chat_timeout: float = DEFAULT_CHAT_TIMEOUT,
        query_timeout: float = DEFAULT_CHAT_TIMEOUT,
        max_output_bytes: int = MAX_OUTPUT_BYTES,
        gather_environment: Callable[[], EnvironmentSnapshot] = gather,
        capture_runner: CaptureRunner = run_capturing,
        command_runner: CommandRunner = run_command,
        classifier: CommandClassifier | None = None,
    ):
        self._provider = provider
        self._console = console
        self._reader = reader
        self._model = model
        self._chat_timeout = chat_timeout
        self._query_timeout = query_timeout
        self._max_output_bytes = max_output_bytes
        self._gather = gather_environment
        self._capture_runner = capture_runner
        self._command_runner = command_runner
        self._classifier = classifier or CommandClassifier()
        self.history = ConversationHistory(max_history)

    # ------------------------------------------------------------------
    # Output helpers
    # ------------------------------------------------------------------

    def _say(self, text: str, style: str | None = None) -> None:
        # Model and user text may contain brackets; never interpret markup.
        self._console.print(text, style=style, markup=False, highlight=False)

    def _show_reply(self, reply: ParsedReply) -> None:
        if reply.display_text:
            self._say(reply.display_text)

    def _warn_destructive(self, result: ClassificationResult) -> None:
        self._say(f"  Warning: destructive command ({result.reason})", style="bold red")

    # ------------------------------------------------------------------
    # Model calls
    # ------------------------------------------------------------------

    def _system_prompt(self) -> str:
        return chat_system_prompt(format_snapshot(self._gather()))

    def _ask(self, content: str, timeout: float, error_label: str = "Error") -> ParsedReply | None:
        """Append a user message, call the provider, record and parse the reply.

        Returns None when the provider failed; the user message stays in
        history in that case.
        """
        system_prompt = self._system_prompt()
        self.history.append("user", content)
        request = ChatRequest(
            messages=self.history.with_system(system_prompt),
            model=self._model,
            expect_json=True,
            timeout=timeout,
        )

        try:
            response = self._provider.chat(request)
        except ProviderError as e:
            logger.warning("provider_request_failed", provider=self._provider.name, error=str(e))
            self._say(f"{error_label}: {e}", style="red")
            return None

        logger.debug(
            "model_replied",
            finish_reason=response.finish_reason,
            structured=response.structured,
            total_tokens=response.usage.total_tokens,
        )
        if response.warning:
            self._say(f"Note: {response.warning}", style="yellow")

        self.history.append("assistant", response.text)
        return parse_reply(response.text)

    # ------------------------------------------------------------------
    # Chat mode
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Run the interactive loop until exit or end of input.

        Raises:
            InputError: If reading input fails.
        """
        while True:
            line = self._reader.read_line(PROMPT)
            if line is None:
                self._console.print()
                return

            line = line.strip()
            if not line:
                continue
            if line in EXIT_WORDS:
                self._say("Bye!")
                return

            self._turn(line)

    def _turn(self, line: str) -> None:
        logger.debug("turn_started", history=len(self.history))
        reply = self._ask(line, self._chat_timeout)
        if reply is None:
            return

        self._show_reply(reply)
        if not reply.is_structured:
            logger.debug("reply_unstructured")
            self._say(UNSTRUCTURED_NOTICE, style="yellow")
            return

        for command in reply.commands:
            self._offer(command)

    def _offer(self, command: str) -> None:
        result = self._classifier.explain(command)
        self._say(f"> {command}", style="bold")
        if result.is_destructive:
            self._warn_destructive(result)

        choice = (self._reader.read_line(CHOICE_PROMPT) or "").strip().lower()
        if choice in ("r", "run"):
            self._run(command, result)
        elif choice in ("e", "explain"):
            self._explain(command)
        else:
            self._say("Skipped.")

    def _run(self, command: str, result: ClassificationResult) -> None:
        if result.is_destructive and not confirm(self._reader, "  Are you sure?", default_yes=False):
            self._say("Skipped.")
            return

        try:
            captured = self._capture_runner(command, max_output_bytes=self._max_output_bytes)
        except ExecutionError as e:
            self._say(f"Execution error: {e}", style="red")
            return

        if captured.exit_code != 0:
            self._say(f"Exit code: {captured.exit_code}", style="yellow")
        self.history.append("user", run_result_message(command, captured))

    def _explain(self, command: str) -> None:
        reply = self._ask(explain_request(command), self._chat_timeout, error_label="Explain error")
        if reply is not None:
            self._show_reply(reply)

    # ------------------------------------------------------------------
    # One-shot mode
    # ------------------------------------------------------------------

    def run_once(self, query: str) -> int:
        """Answer a single query and offer its commands.

        Commands run attached to the terminal. Safe commands default to
        yes, destructive ones to no.

        Returns:
            0 on success, 1 on provider or execution error, otherwise the
            last non-zero exit code of a command that ran.

        Raises:
            InputError: If reading input fails.
        """
        self.history.clear()
        reply = self._ask(query.strip(), self._query_timeout)
        if reply is None:
            return 1

        self._show_reply(reply)
        if not reply.is_structured:
            self._say(
                "Note: model response was not valid structured output; no commands were run.",
                style="yellow",
            )
            return 0

        status = 0
        for command in reply.commands:
            result = self._classifier.explain(command)
            self._say(f"> {command}", style="bold")
            if result.is_destructive:
                self._warn_destructive(result)
                approved = confirm(self._reader, "Are you sure?", default_yes=False)
            else:
                approved = confirm(self._reader, "Run this?", default_yes=True)

            if not approved:
                self._say("Skipped.")
                continue

            try:
                exit_code = self._command_runner(command)
            except ExecutionError as e:
                self._say(f"Execution error: {e}", style="red")
                return 1

            if exit_code != 0:
                self._say(f"Exit code: {exit_code}", style="yellow")
                status = exit_code
        return status
