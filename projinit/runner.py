"""Process invocation for the provisioners.

Everything that touches an external tool (``python -m venv``, ``virtualenv``,
``git``) goes through a ``CommandRunner``. ``SubprocessRunner`` is the real
asyncio implementation; tests substitute a fake that records calls and
returns programmed results.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Sequence


class ToolNotFoundError(Exception):
    """Raised when an executable cannot be located or launched."""

    def __init__(self, command: str, reason: str | None = None):
        self.command = command
        self.reason = reason
        if reason:
            super().__init__(f"cannot launch '{command}': {reason}")
        else:
            super().__init__(f"command not found: '{command}'")


@dataclass
class CommandOutput:
    """Outcome of one external command."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


class CommandRunner(Protocol):
    """Interface the provisioners use to run external tools."""

    async def execute(
        self, command: str, args: Sequence[str], working_dir: Path
    ) -> CommandOutput: ...

    def which(self, command: str) -> Optional[str]: ...


@dataclass(frozen=True)
class ExecutionContext:
    """Working directory plus the runner, lent to a provisioner for one call."""

    working_dir: Path
    runner: CommandRunner

    async def execute(self, command: str, *args: str) -> CommandOutput:
        """Run *command* with *args* inside ``working_dir``."""
        return await self.runner.execute(command, list(args), self.working_dir)


class SubprocessRunner:
    """Runs commands with ``asyncio.create_subprocess_exec``.

    A timeout, when set, kills the child and reports ``timed_out=True``
    instead of blocking the run forever.
    """

    def __init__(self, timeout: float | None = 300.0):
        self.timeout = timeout

    def which(self, command: str) -> Optional[str]:
        return shutil.which(command)

    async def execute(
        self, command: str, args: Sequence[str], working_dir: Path
    ) -> CommandOutput:
        cmd = [command, *args]

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=str(working_dir),
            )
        except (FileNotFoundError, PermissionError) as exc:
            raise ToolNotFoundError(command) from exc
        except OSError as exc:
            # ENOEXEC and similar: the file exists but cannot be executed.
            raise ToolNotFoundError(command, exc.strerror or str(exc)) from exc

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            return CommandOutput(
                exit_code=-1,
                stderr=f"Command timed out after {self.timeout}s: {' '.join(cmd)}",
                timed_out=True,
            )

        stdout = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
        stderr = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
        return CommandOutput(exit_code=process.returncode or 0, stdout=stdout, stderr=stderr)


def stderr_excerpt(stderr: str, limit: int = 500) -> str:
    """Trim tool stderr to its last *limit* characters.

    Git and venv put the useful line at the end, so the tail is kept.
    """
    stderr = stderr.strip()
    if len(stderr) <= limit:
        return stderr
    return "..." + stderr[-(limit - 3):]
