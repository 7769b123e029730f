"""Command-line entry point.

    shellmate [--model M] [--log-level L] [--version] [query ...]

``shellmate chat`` starts the interactive session; any other words are sent
as a single one-shot query.
"""

from __future__ import annotations

import argparse
import functools
import sys

from pydantic import ValidationError
from rich.console import Console

from shellmate import __version__
from shellmate.config import Settings, SettingsValidationError, set_settings, validate_settings
from shellmate.logging import Loggers, bind_context, configure_logging
from shellmate.providers import ProviderError, create_provider
from shellmate.repl import (
    InputError,
    LineReader,
    PromptToolkitLineReader,
    StreamLineReader,
    TurnEngine,
)
from shellmate.shellenv import gather

logger = Loggers.cli()

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INPUT_ERROR = 2
EXIT_INTERRUPTED = 130

LOG_LEVELS = ("debug", "info", "warning", "error")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shellmate",
        description="Natural-language shell assistant. Use 'shellmate chat' for a session.",
    )
    parser.add_argument("--model", help="Model to use instead of the configured default")
    parser.add_argument("--log-level", choices=LOG_LEVELS, help="Diagnostic log level")
    parser.add_argument("--version", action="version", version=f"shellmate {__version__}")
    parser.add_argument("query", nargs="*", help="Question to answer once, or 'chat'")
    return parser


def load_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    settings = Settings(**overrides)
    set_settings(settings)
    return settings


def make_reader(console: Console) -> LineReader:
    if sys.stdin.isatty():
        return PromptToolkitLineReader()
    return StreamLineReader(sys.stdin, console)


def build_engine(settings: Settings, model: str | None, console: Console) -> TurnEngine:
    """Wire provider, environment gathering and input for a session.

    Raises:
        ProviderConfigError: If the provider cannot be built.
    """
    provider = create_provider(settings, model=model)
    return TurnEngine(
        provider,
        console,
        make_reader(console),
        max_history=settings.max_history,
        chat_timeout=settings.chat_timeout,
        query_timeout=settings.query_timeout,
        max_output_bytes=settings.max_output_bytes,
        gather_environment=functools.partial(
            gather,
            probe_timeout=settings.env_probe_timeout,
            max_dir_entries=settings.max_dir_entries,
            max_git_log_lines=settings.max_git_log_lines,
        ),
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.query:
        parser.print_help()
        return EXIT_OK

    console = Console()
    err_console = Console(stderr=True)
    chat_mode = args.query == ["chat"]

    try:
        settings = load_settings(args)
        configure_logging(settings)
        bind_context(mode="chat" if chat_mode else "oneshot")
        validate_settings(settings)
        engine = build_engine(settings, args.model, console)
    except (ValidationError, SettingsValidationError, ProviderError) as e:
        err_console.print(f"Error: {e}", style="red", markup=False, highlight=False)
        return EXIT_FAILURE

    logger.info("session_started", provider=settings.provider, model=args.model or settings.model)
    try:
        if chat_mode:
            engine.run()
            return EXIT_OK
        return engine.run_once(" ".join(args.query))
    except InputError as e:
        err_console.print(f"Error: {e}", style="red", markup=False, highlight=False)
        return EXIT_INPUT_ERROR
    except KeyboardInterrupt:
        console.print()
        return EXIT_INTERRUPTED


def run() -> None:
    sys.exit(main())
