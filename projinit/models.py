"""Data models for the scaffolder.

Provides Pydantic v2 models for the immutable request (``ProjectSpec`` and
its repository options) and for the outcomes the provisioners report
(``StepResult``) which the orchestrator aggregates into a ``Report``.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path, PurePath
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class EnvBackend(str, Enum):
    """Tool used to create the virtual environment."""

    NONE = "none"
    VENV = "venv"
    VIRTUALENV = "virtualenv"


class StepStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Why a step failed."""

    ALREADY_EXISTS = "already_exists"
    IO_ERROR = "io_error"
    TOOL_NOT_FOUND = "tool_not_found"
    SUBPROCESS_FAILED = "subprocess_failed"
    CONFIG_FAILED = "config_failed"
    REMOTE_ADD_FAILED = "remote_add_failed"
    # Requested, but never attempted because an earlier step faulted.
    ABORTED = "aborted"


class ScaffoldState(str, Enum):
    """States walked by ``ScaffoldOrchestrator.run``."""

    START = "start"
    DIRECTORY_READY = "directory_ready"
    ENVIRONMENT_DONE = "environment_done"
    REPOSITORY_DONE = "repository_done"
    FINISHED = "finished"
    FAULTED = "faulted"


# Step names as they appear in a Report.
STEP_DIRECTORY = "directory"
STEP_ENVIRONMENT = "environment"
STEP_REPOSITORY = "repository"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class RemoteSpec(BaseModel):
    """A named remote to register after ``git init``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Remote short name, e.g. 'origin'")
    url: str = Field(..., min_length=1, description="Fetch/push URL of the remote")


class RepositoryOptions(BaseModel):
    """Optional git settings. Every field is independently present or absent."""

    model_config = ConfigDict(frozen=True)

    branch: Optional[str] = Field(default=None, description="Initial branch name")
    user_name: Optional[str] = Field(default=None, description="Local user.name")
    user_email: Optional[str] = Field(default=None, description="Local user.email")
    remote: Optional[RemoteSpec] = Field(default=None)

    @field_validator("branch", "user_name", "user_email", mode="before")
    @classmethod
    def _strip_blank(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @property
    def has_identity(self) -> bool:
        return self.user_name is not None or self.user_email is not None


class ProjectSpec(BaseModel):
    """What to scaffold. Built once from CLI input and never mutated.

    ``path`` is resolved to an absolute path exactly once, when the model is
    constructed, so later changes of the process working directory cannot
    redirect any step.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    backend: EnvBackend = EnvBackend.NONE
    repository: Optional[RepositoryOptions] = None
    venv_dir: Optional[str] = Field(
        default=None,
        description="Environment sub-directory relative to the project root",
    )

    @field_validator("path", mode="before")
    @classmethod
    def _resolve_path(cls, value: Any) -> Path:
        if value is None or not str(value).strip():
            raise ValueError("project path cannot be empty")
        try:
            raw = Path(str(value)).expanduser()
        except RuntimeError as exc:
            # Unknown ~user, or no home directory to expand ~ against.
            raise ValueError(f"cannot expand home directory in {value}: {exc}") from exc
        if raw.name in ("", ".", ".."):
            raise ValueError(f"project directory cannot be '.', '..' or a root: {value}")
        return raw.resolve()

    @field_validator("venv_dir", mode="before")
    @classmethod
    def _check_venv_dir(cls, value: Any) -> Optional[str]:
        value = _blank_to_none(value)
        if value is None:
            return None
        candidate = PurePath(str(value))
        if candidate.is_absolute() or ".." in candidate.parts:
            raise ValueError(f"environment path must stay inside the project: {value}")
        if str(candidate) == ".":
            return None
        return str(candidate)

    @computed_field  # type: ignore[misc]
    @property
    def name(self) -> str:
        """Project name, taken from the final segment of ``path``."""
        return self.path.name

    @property
    def environment_path(self) -> Path:
        """Directory the virtual environment is created in."""
        if self.venv_dir is None:
            return self.path
        return self.path / self.venv_dir

    @classmethod
    def from_input(
        cls,
        path: str | Path,
        backend: EnvBackend | str = EnvBackend.NONE,
        repository: RepositoryOptions | None = None,
        venv_dir: str | None = None,
    ) -> "ProjectSpec":
        """Build a spec from raw (CLI-style) values."""
        return cls(
            path=path,
            backend=EnvBackend(backend),
            repository=repository,
            venv_dir=venv_dir,
        )


# ---------------------------------------------------------------------------
# Outcome models
# ---------------------------------------------------------------------------


class StepResult(BaseModel):
    """Outcome of one provisioning step (or of a repository sub-step)."""

    step: str = Field(..., description="Step name such as 'directory' or 'init'")
    status: StepStatus
    failure: Optional[FailureKind] = Field(default=None, description="Set only when failed")
    detail: str = Field(default="", description="Human-readable explanation")
    exit_code: Optional[int] = Field(default=None, description="Exit code of the failing tool")
    stderr: str = Field(default="", description="Excerpt of the failing tool's stderr")
    substeps: list[StepResult] = Field(default_factory=list)

    @classmethod
    def success(
        cls, step: str, detail: str = "", substeps: list[StepResult] | None = None
    ) -> "StepResult":
        return cls(step=step, status=StepStatus.SUCCESS, detail=detail, substeps=substeps or [])

    @classmethod
    def skipped(cls, step: str, detail: str = "not requested") -> "StepResult":
        return cls(step=step, status=StepStatus.SKIPPED, detail=detail)

    @classmethod
    def failed(
        cls,
        step: str,
        failure: FailureKind,
        detail: str,
        exit_code: int | None = None,
        stderr: str = "",
        substeps: list[StepResult] | None = None,
    ) -> "StepResult":
        return cls(
            step=step,
            status=StepStatus.FAILED,
            failure=failure,
            detail=detail,
            exit_code=exit_code,
            stderr=stderr,
            substeps=substeps or [],
        )

    @property
    def ok(self) -> bool:
        """True unless the step failed."""
        return self.status != StepStatus.FAILED

    def describe(self) -> str:
        """One-line description such as ``failed (tool_not_found): ...``."""
        if self.status == StepStatus.FAILED:
            text = f"failed ({self.failure.value if self.failure else 'unknown'})"
            if self.detail:
                text += f": {self.detail}"
            if self.exit_code is not None:
                text += f" [exit {self.exit_code}]"
            return text
        if self.detail:
            return f"{self.status.value}: {self.detail}"
        return self.status.value


class Report(BaseModel):
    """Aggregated outcome of a scaffolding run."""

    path: Path
    state: ScaffoldState = ScaffoldState.START
    steps: list[StepResult] = Field(default_factory=list)
    history: list[ScaffoldState] = Field(default_factory=list)
    duration_seconds: float = Field(default=0.0, ge=0.0)

    @computed_field  # type: ignore[misc]
    @property
    def success(self) -> bool:
        """True when the run reached ``finished``."""
        return self.state == ScaffoldState.FINISHED

    @property
    def failed_step(self) -> Optional[StepResult]:
        """The step that faulted the run, if any."""
        for result in self.steps:
            if result.status == StepStatus.FAILED and result.failure != FailureKind.ABORTED:
                return result
        return None

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    def get(self, step: str) -> Optional[StepResult]:
        """Return the result recorded for *step*, or ``None`` if it never ran."""
        for result in self.steps:
            if result.step == step:
                return result
        return None

    def step_names(self) -> list[str]:
        return [result.step for result in self.steps]
