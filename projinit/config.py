"""projinit configuration.

Typed settings for the external tools the scaffolder drives. All settings use
Pydantic v2 models so they can be validated at construction time and loaded
from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


class ScaffoldConfig(BaseModel):
    """Global projinit configuration.

    Instances are created once by the CLI entry point (or by a caller using
    the library directly) and handed to ``ScaffoldOrchestrator``.
    """

    python_executable: str = Field(
        default_factory=lambda: sys.executable or "python3",
        description="Interpreter used for `-m venv`",
    )
    virtualenv_command: str = Field(default="virtualenv", min_length=1)
    git_command: str = Field(default="git", min_length=1)
    command_timeout: Optional[float] = Field(
        default=300.0,
        gt=0,
        description="Per-command timeout in seconds; None waits forever",
    )
    stderr_excerpt_chars: int = Field(
        default=500, ge=40, description="How much tool stderr a failure keeps"
    )

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path) -> "ScaffoldConfig":
        """Load a configuration from a JSON file.

        Args:
            path: The JSON file to read.

        Returns:
            A validated ``ScaffoldConfig`` instance.
        """
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            PROJINIT_PYTHON, PROJINIT_VIRTUALENV, PROJINIT_GIT,
            PROJINIT_TIMEOUT (``0`` disables the timeout, negative values are
            rejected).
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("PROJINIT_PYTHON"):
            kwargs["python_executable"] = os.environ["PROJINIT_PYTHON"]
        if os.environ.get("PROJINIT_VIRTUALENV"):
            kwargs["virtualenv_command"] = os.environ["PROJINIT_VIRTUALENV"]
        if os.environ.get("PROJINIT_GIT"):
            kwargs["git_command"] = os.environ["PROJINIT_GIT"]
        if os.environ.get("PROJINIT_TIMEOUT"):
            timeout = float(os.environ["PROJINIT_TIMEOUT"])
            kwargs["command_timeout"] = None if timeout == 0 else timeout

        return cls(**kwargs)
