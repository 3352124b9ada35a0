"""Virtual environment provisioning.

The backend is explicit user input; nothing is auto-detected. ``venv`` runs
``<python> -m venv``, ``virtualenv`` runs the third-party binary, and a
missing binary is reported as ``tool_not_found`` rather than falling back to
the standard library.
"""

from __future__ import annotations

from pathlib import Path

from projinit.config import ScaffoldConfig
from projinit.models import STEP_ENVIRONMENT, EnvBackend, FailureKind, StepResult
from projinit.runner import ExecutionContext, ToolNotFoundError, stderr_excerpt
from projinit.utils import print_executing


class EnvironmentProvisioner:
    """Creates a virtual environment with the requested backend."""

    def __init__(self, config: ScaffoldConfig | None = None) -> None:
        self.config = config or ScaffoldConfig()

    def _command_for(self, backend: EnvBackend, target: Path) -> tuple[str, list[str]]:
        if backend == EnvBackend.VENV:
            return self.config.python_executable, ["-m", "venv", str(target)]
        return self.config.virtualenv_command, ["--no-vcs-ignore", str(target)]

    async def provision(
        self,
        context: ExecutionContext,
        backend: EnvBackend,
        target: Path | None = None,
    ) -> StepResult:
        """Create the environment at *target* (defaults to the working dir).

        Returns:
            ``skipped`` for ``EnvBackend.NONE`` without running anything,
            ``success`` when the tool exits 0, otherwise a ``failed`` result
            with ``tool_not_found`` or ``subprocess_failed``.
        """
        if backend == EnvBackend.NONE:
            return StepResult.skipped(STEP_ENVIRONMENT)

        target = target or context.working_dir
        command, args = self._command_for(backend, target)

        if backend == EnvBackend.VIRTUALENV:
            resolved = context.runner.which(command)
            if resolved is None:
                return StepResult.failed(
                    STEP_ENVIRONMENT,
                    FailureKind.TOOL_NOT_FOUND,
                    f"command not found: '{command}'",
                )
            command = resolved

        print_executing(command, args)
        try:
            output = await context.execute(command, *args)
        except ToolNotFoundError as exc:
            return StepResult.failed(STEP_ENVIRONMENT, FailureKind.TOOL_NOT_FOUND, str(exc))

        if output.timed_out:
            return StepResult.failed(
                STEP_ENVIRONMENT,
                FailureKind.SUBPROCESS_FAILED,
                "timeout",
                exit_code=output.exit_code,
                stderr=stderr_excerpt(output.stderr, self.config.stderr_excerpt_chars),
            )
        if output.exit_code != 0:
            return StepResult.failed(
                STEP_ENVIRONMENT,
                FailureKind.SUBPROCESS_FAILED,
                f"{backend.value} exited with {output.exit_code}",
                exit_code=output.exit_code,
                stderr=stderr_excerpt(output.stderr, self.config.stderr_excerpt_chars),
            )

        return StepResult.success(STEP_ENVIRONMENT, f"{backend.value} at {target}")
