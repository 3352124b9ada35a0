"""projinit provisioners.

Each provisioner performs one scaffolding step and reports a ``StepResult``
instead of raising; only the orchestrator decides whether a failure ends the
run.

Key classes:
    FilesystemProvisioner   - Creates (or accepts an empty) project directory
    EnvironmentProvisioner  - Runs ``venv`` or ``virtualenv``
    RepositoryInitializer   - ``git init`` + local identity + remote
"""

from .environment import EnvironmentProvisioner
from .filesystem import FilesystemProvisioner
from .repository import RepositoryInitializer

__all__ = [
    "EnvironmentProvisioner",
    "FilesystemProvisioner",
    "RepositoryInitializer",
]
