"""Project directory provisioning.

Creates the target directory, or accepts it when it already exists and is
empty. A non-empty directory is never touched.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from projinit.models import STEP_DIRECTORY, FailureKind, StepResult
from projinit.utils import console, print_warning


def _inspect(path: Path) -> str:
    """Classify *path* as ``missing``, ``empty``, ``non_empty`` or ``not_dir``."""
    if not path.exists():
        return "missing"
    if not path.is_dir():
        return "not_dir"
    if any(path.iterdir()):
        return "non_empty"
    return "empty"


class FilesystemProvisioner:
    """Prepares the project directory."""

    async def prepare(self, path: str | Path) -> StepResult:
        """Make sure *path* is an empty directory.

        Args:
            path: Target project directory (already resolved by ProjectSpec).

        Returns:
            ``success`` if the directory was created or already existed empty,
            ``failed(already_exists)`` if it holds anything, and
            ``failed(io_error)`` for any filesystem error.
        """
        target = Path(path)

        try:
            state = await asyncio.to_thread(_inspect, target)
        except OSError as exc:
            return StepResult.failed(STEP_DIRECTORY, FailureKind.IO_ERROR, f"{target}: {exc}")

        if state == "non_empty":
            return StepResult.failed(
                STEP_DIRECTORY,
                FailureKind.ALREADY_EXISTS,
                f"project directory already exists and is not empty: {target}",
            )
        if state == "not_dir":
            return StepResult.failed(
                STEP_DIRECTORY,
                FailureKind.IO_ERROR,
                f"directory expected, not file: {target}",
            )
        if state == "empty":
            print_warning(f"|   warning: using existing empty directory {target}")
            return StepResult.success(STEP_DIRECTORY, f"{target} (already existed, empty)")

        console.print(f"|   Creating directory: {target}")
        try:
            await asyncio.to_thread(target.mkdir, parents=True)
        except OSError as exc:
            return StepResult.failed(
                STEP_DIRECTORY,
                FailureKind.IO_ERROR,
                f"cannot create {target}: {exc.strerror or exc}",
            )

        return StepResult.success(STEP_DIRECTORY, str(target))
