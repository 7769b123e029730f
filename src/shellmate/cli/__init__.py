"""Command-line interface."""

from shellmate.cli.app import build_parser, main

__all__ = ["build_parser", "main"]
