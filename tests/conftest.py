"""Shared pytest fixtures for the projinit test suite.

Provides reusable fixtures for:
- Target project paths (missing, empty, non-empty)
- A recording fake ``CommandRunner`` with programmable results
- Mock asyncio subprocess helpers
- Execution contexts and orchestrators wired to the fake runner
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Optional, Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest

from projinit.config import ScaffoldConfig
from projinit.orchestrator import ScaffoldOrchestrator
from projinit.runner import CommandOutput, ExecutionContext, ToolNotFoundError


# ---------------------------------------------------------------------------
# Fake process runner
# ---------------------------------------------------------------------------


class FakeRunner:
    """In-memory ``CommandRunner`` that records every call.

    Results are programmed per command prefix, e.g.
    ``runner.program("git", "remote", exit_code=3, stderr="exists")``.
    The longest matching prefix wins; unprogrammed commands exit 0.
    Commands listed in ``missing`` are absent from ``which`` and raise
    ``ToolNotFoundError`` from ``execute``.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[str, ...], Path]] = []
        self.which_calls: list[str] = []
        self.missing: set[str] = set()
        self._results: dict[tuple[str, ...], CommandOutput] = {}

    def program(
        self,
        *prefix: str,
        exit_code: int = 0,
        stdout: str = "",
        stderr: str = "",
        timed_out: bool = False,
    ) -> None:
        self._results[tuple(prefix)] = CommandOutput(
            exit_code=exit_code, stdout=stdout, stderr=stderr, timed_out=timed_out
        )

    def which(self, command: str) -> Optional[str]:
        self.which_calls.append(command)
        if command in self.missing:
            return None
        return command

    async def execute(
        self, command: str, args: Sequence[str], working_dir: Path
    ) -> CommandOutput:
        self.calls.append((command, tuple(args), Path(working_dir)))
        if command in self.missing:
            raise ToolNotFoundError(command)

        full = (command, *args)
        best: tuple[str, ...] = ()
        for prefix in self._results:
            if full[: len(prefix)] == prefix and len(prefix) > len(best):
                best = prefix
        if best:
            return self._results[best]
        return CommandOutput(exit_code=0)

    # Convenience views -------------------------------------------------

    def commands(self) -> list[tuple[str, ...]]:
        """Every call flattened to ``(command, *args)``."""
        return [(command, *args) for command, args, _ in self.calls]

    def git_calls(self) -> list[tuple[str, ...]]:
        return [args for command, args, _ in self.calls if command == "git"]


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A fresh recording fake runner."""
    return FakeRunner()


@pytest.fixture
def test_config() -> ScaffoldConfig:
    """Config with predictable tool names so tests can match commands."""
    return ScaffoldConfig(
        python_executable="python3",
        virtualenv_command="virtualenv",
        git_command="git",
        command_timeout=5.0,
    )


@pytest.fixture
def orchestrator(test_config: ScaffoldConfig, fake_runner: FakeRunner) -> ScaffoldOrchestrator:
    """Orchestrator wired to the fake runner."""
    return ScaffoldOrchestrator(test_config, runner=fake_runner)


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def missing_dir(tmp_path: Path) -> Path:
    """A project path that does not exist yet."""
    return tmp_path / "demo"


@pytest.fixture
def empty_dir(tmp_path: Path) -> Path:
    """An existing, empty project directory."""
    path = tmp_path / "empty-project"
    path.mkdir()
    return path


@pytest.fixture
def non_empty_dir(tmp_path: Path) -> Path:
    """An existing directory that already contains a file."""
    path = tmp_path / "busy-project"
    path.mkdir()
    (path / "README.md").write_text("# keep me\n", encoding="utf-8")
    return path


@pytest.fixture
def context(empty_dir: Path, fake_runner: FakeRunner) -> ExecutionContext:
    """Execution context rooted at an empty project directory."""
    return ExecutionContext(working_dir=empty_dir, runner=fake_runner)


# ---------------------------------------------------------------------------
# Subprocess helpers
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory


@pytest.fixture
def require_git() -> str:
    """Skip the test when git is not installed."""
    git = shutil.which("git")
    if git is None:
        pytest.skip("git is not available on PATH")
    return git
