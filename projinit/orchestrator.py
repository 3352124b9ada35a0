"""Scaffold orchestrator.

Sequences the provisioners as an explicit state machine::

    start -> directory_ready -> environment_done -> repository_done -> finished

with ``faulted`` reachable from every non-terminal state. Each step is
attempted exactly once; there are no retries and nothing is rolled back.
"""

from __future__ import annotations

import time
from typing import Awaitable, Callable, Optional

from projinit.config import ScaffoldConfig
from projinit.models import (
    STEP_DIRECTORY,
    STEP_ENVIRONMENT,
    STEP_REPOSITORY,
    EnvBackend,
    FailureKind,
    ProjectSpec,
    Report,
    ScaffoldState,
    StepResult,
)
from projinit.provisioners import (
    EnvironmentProvisioner,
    FilesystemProvisioner,
    RepositoryInitializer,
)
from projinit.runner import CommandRunner, ExecutionContext, SubprocessRunner
from projinit.utils import print_step_header, print_step_result

__all__ = ["ScaffoldOrchestrator", "ScaffoldState"]


StepMethod = Callable[[ProjectSpec, Optional[ExecutionContext]], Awaitable[StepResult]]


class ScaffoldOrchestrator:
    """Drives one scaffolding run and aggregates a ``Report``.

    Attributes:
        config: Tool and timeout settings.
        runner: Process-invocation capability shared by the provisioners.
    """

    # state -> (step name, console title, method name, state on success)
    _TRANSITIONS: dict[ScaffoldState, tuple[str, str, str, ScaffoldState]] = {
        ScaffoldState.START: (
            STEP_DIRECTORY,
            "Creating project ...",
            "_step_directory",
            ScaffoldState.DIRECTORY_READY,
        ),
        ScaffoldState.DIRECTORY_READY: (
            STEP_ENVIRONMENT,
            "Creating virtual environment ...",
            "_step_environment",
            ScaffoldState.ENVIRONMENT_DONE,
        ),
        ScaffoldState.ENVIRONMENT_DONE: (
            STEP_REPOSITORY,
            "Initializing git ...",
            "_step_repository",
            ScaffoldState.REPOSITORY_DONE,
        ),
    }

    def __init__(
        self,
        config: ScaffoldConfig | None = None,
        runner: CommandRunner | None = None,
        filesystem: FilesystemProvisioner | None = None,
        environment: EnvironmentProvisioner | None = None,
        repository: RepositoryInitializer | None = None,
    ) -> None:
        self.config = config or ScaffoldConfig()
        self.runner: CommandRunner = runner or SubprocessRunner(timeout=self.config.command_timeout)
        self.filesystem = filesystem or FilesystemProvisioner()
        self.environment = environment or EnvironmentProvisioner(self.config)
        self.repository = repository or RepositoryInitializer(self.config)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _requested(self, spec: ProjectSpec, step: str) -> bool:
        if step == STEP_ENVIRONMENT:
            return spec.backend != EnvBackend.NONE
        if step == STEP_REPOSITORY:
            return spec.repository is not None
        return True

    async def _step_directory(
        self, spec: ProjectSpec, context: Optional[ExecutionContext]
    ) -> StepResult:
        return await self.filesystem.prepare(spec.path)

    async def _step_environment(
        self, spec: ProjectSpec, context: Optional[ExecutionContext]
    ) -> StepResult:
        assert context is not None
        return await self.environment.provision(context, spec.backend, spec.environment_path)

    async def _step_repository(
        self, spec: ProjectSpec, context: Optional[ExecutionContext]
    ) -> StepResult:
        assert context is not None
        return await self.repository.initialize(context, spec.repository)

    def _not_attempted(self, spec: ProjectSpec, faulted_at: ScaffoldState) -> list[StepResult]:
        """Results for the steps after a fault that happened past ``start``."""
        if faulted_at == ScaffoldState.START:
            return []

        results: list[StepResult] = []
        state = self._TRANSITIONS[faulted_at][3]
        while state in self._TRANSITIONS:
            step, _, _, state = self._TRANSITIONS[state]
            if self._requested(spec, step):
                results.append(
                    StepResult.failed(step, FailureKind.ABORTED, "not attempted: an earlier step failed")
                )
            else:
                results.append(StepResult.skipped(step))
        return results

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    async def run(self, spec: ProjectSpec) -> Report:
        """Execute the scaffolding state machine for *spec*.

        Args:
            spec: The immutable project request.

        Returns:
            A ``Report`` listing every attempted step. ``report.success`` is
            True only when the run reached ``finished``.
        """
        started = time.monotonic()
        report = Report(path=spec.path)
        state = ScaffoldState.START
        report.history.append(state)
        context: Optional[ExecutionContext] = None

        while state in self._TRANSITIONS:
            step, title, method_name, next_state = self._TRANSITIONS[state]
            requested = self._requested(spec, step)
            if requested:
                print_step_header(title)

            method: StepMethod = getattr(self, method_name)
            result = await method(spec, context)
            report.steps.append(result)
            if requested:
                print_step_result(result)

            if not result.ok:
                report.steps.extend(self._not_attempted(spec, state))
                state = ScaffoldState.FAULTED
                report.history.append(state)
                break

            if state == ScaffoldState.START:
                # Everything after this point runs inside the project directory.
                context = ExecutionContext(working_dir=spec.path, runner=self.runner)
            state = next_state
            report.history.append(state)

        if state == ScaffoldState.REPOSITORY_DONE:
            state = ScaffoldState.FINISHED
            report.history.append(state)

        report.state = state
        report.duration_seconds = time.monotonic() - started
        return report
