"""Shared test fixtures and utilities for shellmate tests.

Provides:
- MockContext for isolating tests from global settings, HOME and cwd
- A console that records output in memory
- An engine factory wired to the doubles in tests.helpers
"""

import io
import os
import tempfile
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import patch

import pytest
from rich.console import Console

from shellmate.config import Settings, reload_settings, set_settings
from shellmate.providers import Provider
from shellmate.repl import TurnEngine
from tests.helpers import SAMPLE_SNAPSHOT, FakeRunner, ScriptedReader


class MockContext:
    """Context manager for isolating tests from global state.

    Handles:
    - Pointing HOME and the working directory at temporary directories
    - Clearing SHELLMATE_* and OPENAI_API_KEY from the environment
    - Resetting the global settings singleton

    Usage:
        with MockContext(model="test-model") as ctx:
            settings = ctx.settings
    """

    def __init__(self, **settings_kwargs):
        """Initialize mock context.

        Args:
            **settings_kwargs: Settings overrides
        """
        self._settings_kwargs = settings_kwargs
        self._temp_dir: tempfile.TemporaryDirectory | None = None
        self._settings: Settings | None = None
        self._env_patch = None
        self._original_cwd: str | None = None

    def __enter__(self) -> "MockContext":
        """Enter the mock context."""
        self._temp_dir = tempfile.TemporaryDirectory()
        home = self.home_dir
        home.mkdir()
        self.project_dir.mkdir()

        env = {
            key: value
            for key, value in os.environ.items()
            if not key.startswith("SHELLMATE_") and key != "OPENAI_API_KEY"
        }
        env["HOME"] = str(home)
        self._env_patch = patch.dict(os.environ, env, clear=True)
        self._env_patch.start()

        self._original_cwd = os.getcwd()
        os.chdir(self.project_dir)

        self._settings = Settings(**self._settings_kwargs)
        set_settings(self._settings)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the mock context and clean up."""
        if self._original_cwd:
            os.chdir(self._original_cwd)
        if self._env_patch:
            self._env_patch.stop()

        # Reset global settings
        reload_settings()

        if self._temp_dir:
            self._temp_dir.cleanup()

    @property
    def settings(self) -> Settings:
        """Get the test settings instance."""
        if self._settings is None:
            raise RuntimeError("MockContext not entered")
        return self._settings

    @property
    def home_dir(self) -> Path:
        """Get the temporary HOME directory."""
        if self._temp_dir is None:
            raise RuntimeError("MockContext not entered")
        return Path(self._temp_dir.name) / "home"

    @property
    def project_dir(self) -> Path:
        """Get the temporary working directory."""
        if self._temp_dir is None:
            raise RuntimeError("MockContext not entered")
        return Path(self._temp_dir.name) / "project"


@pytest.fixture
def mock_context() -> Generator[MockContext, None, None]:
    """Fixture providing an isolated test context."""
    with MockContext() as ctx:
        yield ctx


@pytest.fixture
def console() -> Console:
    """Console writing to an in-memory buffer (read with console.file.getvalue())."""
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def runner() -> FakeRunner:
    """Fixture providing a command runner that never executes anything."""
    return FakeRunner()


@pytest.fixture
def make_engine(console: Console, runner: FakeRunner) -> Callable[..., TurnEngine]:
    """Factory building a TurnEngine wired to test doubles.

    Usage:
        engine = make_engine(provider, ["list files", "r"])
    """

    def factory(provider: Provider, lines: list | None = None, **kwargs) -> TurnEngine:
        kwargs.setdefault("gather_environment", lambda: SAMPLE_SNAPSHOT)
        kwargs.setdefault("capture_runner", runner.capture)
        kwargs.setdefault("command_runner", runner.run)
        reader = kwargs.pop("reader", None) or ScriptedReader(lines)
        return TurnEngine(provider, console, reader, **kwargs)

    return factory
