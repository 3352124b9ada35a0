"""Git repository initialisation.

Runs ``git init`` followed by the optional local identity and remote
sub-steps, in that fixed order. The first failing sub-step ends the step; the
sub-steps after it are never attempted.
"""

from __future__ import annotations

from projinit.config import ScaffoldConfig
from projinit.models import (
    STEP_REPOSITORY,
    FailureKind,
    RepositoryOptions,
    StepResult,
)
from projinit.runner import CommandOutput, ExecutionContext, ToolNotFoundError, stderr_excerpt
from projinit.utils import print_executing

SUBSTEP_INIT = "init"
SUBSTEP_IDENTITY = "identity"
SUBSTEP_REMOTE = "remote"


class RepositoryInitializer:
    """Initialises a git repository inside the project directory."""

    def __init__(self, config: ScaffoldConfig | None = None) -> None:
        self.config = config or ScaffoldConfig()

    async def _git(
        self, context: ExecutionContext, substep: str, kind: FailureKind, *args: str
    ) -> StepResult | None:
        """Run one git command; return a failed result, or ``None`` on success."""
        git = self.config.git_command
        print_executing(git, args)
        try:
            output: CommandOutput = await context.execute(git, *args)
        except ToolNotFoundError as exc:
            return StepResult.failed(substep, FailureKind.TOOL_NOT_FOUND, str(exc))

        if output.ok:
            return None

        excerpt = stderr_excerpt(output.stderr, self.config.stderr_excerpt_chars)
        detail = "timeout" if output.timed_out else f"git {args[0]} exited with {output.exit_code}"
        return StepResult.failed(
            substep, kind, detail, exit_code=output.exit_code, stderr=excerpt
        )

    async def _init(self, context: ExecutionContext, options: RepositoryOptions) -> StepResult:
        args = ["init"]
        if options.branch:
            args += ["--initial-branch", options.branch]
        failure = await self._git(context, SUBSTEP_INIT, FailureKind.SUBPROCESS_FAILED, *args)
        if failure is not None:
            return failure
        return StepResult.success(SUBSTEP_INIT, f"branch {options.branch}" if options.branch else "")

    async def _identity(self, context: ExecutionContext, options: RepositoryOptions) -> StepResult:
        if not options.has_identity:
            return StepResult.skipped(SUBSTEP_IDENTITY)

        written: list[str] = []
        for key, value in (("user.name", options.user_name), ("user.email", options.user_email)):
            if value is None:
                continue
            failure = await self._git(
                context, SUBSTEP_IDENTITY, FailureKind.CONFIG_FAILED, "config", "--local", key, value
            )
            if failure is not None:
                return failure
            written.append(key)

        return StepResult.success(SUBSTEP_IDENTITY, ", ".join(written))

    async def _remote(self, context: ExecutionContext, options: RepositoryOptions) -> StepResult:
        remote = options.remote
        if remote is None:
            return StepResult.skipped(SUBSTEP_REMOTE)

        failure = await self._git(
            context, SUBSTEP_REMOTE, FailureKind.REMOTE_ADD_FAILED, "remote", "add", remote.name, remote.url
        )
        if failure is not None:
            return failure
        return StepResult.success(SUBSTEP_REMOTE, f"{remote.name} -> {remote.url}")

    async def initialize(
        self, context: ExecutionContext, options: RepositoryOptions | None
    ) -> StepResult:
        """Initialise the repository and apply *options*.

        Returns:
            ``skipped`` when *options* is ``None``; otherwise ``success`` with
            one sub-step result per sub-step, or ``failed`` carrying the
            failing sub-step's kind, detail and stderr.
        """
        if options is None:
            return StepResult.skipped(STEP_REPOSITORY)

        substeps: list[StepResult] = []
        for run_substep in (self._init, self._identity, self._remote):
            result = await run_substep(context, options)
            substeps.append(result)
            if not result.ok:
                return StepResult.failed(
                    STEP_REPOSITORY,
                    result.failure or FailureKind.SUBPROCESS_FAILED,
                    f"{result.step}: {result.detail}",
                    exit_code=result.exit_code,
                    stderr=result.stderr,
                    substeps=substeps,
                )

        return StepResult.success(STEP_REPOSITORY, str(context.working_dir), substeps=substeps)
