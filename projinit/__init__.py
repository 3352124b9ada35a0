"""projinit -- scaffold a new project directory.

Creates the project directory, optionally provisions a Python virtual
environment inside it, and optionally initialises a git repository with a
branch, local identity and a remote.

Quick usage::

    import asyncio

    from projinit import ProjectSpec, ScaffoldOrchestrator

    spec = ProjectSpec.from_input("./demo", backend="venv")
    report = asyncio.run(ScaffoldOrchestrator().run(spec))
"""

from projinit.config import ScaffoldConfig
from projinit.models import (
    EnvBackend,
    FailureKind,
    ProjectSpec,
    RemoteSpec,
    Report,
    RepositoryOptions,
    StepResult,
    StepStatus,
)
from projinit.orchestrator import ScaffoldOrchestrator, ScaffoldState

__version__ = "0.1.0"

__all__ = [
    "EnvBackend",
    "FailureKind",
    "ProjectSpec",
    "RemoteSpec",
    "Report",
    "RepositoryOptions",
    "ScaffoldConfig",
    "ScaffoldOrchestrator",
    "ScaffoldState",
    "StepResult",
    "StepStatus",
    "__version__",
]
