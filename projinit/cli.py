"""Command-line front end for projinit.

Usage::

    projinit ./demo --venv
    projinit ./demo --virtualenv --venv-path .venv --branch main \\
        --git-user Alice --git-email alice@example.com \\
        --remote origin git@example.com:alice/demo.git
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, Sequence

from pydantic import ValidationError

from projinit import __version__
from projinit.config import ScaffoldConfig
from projinit.models import EnvBackend, ProjectSpec, RemoteSpec, RepositoryOptions
from projinit.orchestrator import ScaffoldOrchestrator
from projinit.utils import print_error, print_report, print_success


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projinit",
        description="Create a project directory with an optional virtual environment and git repository",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  projinit ./demo --venv\n"
            "  projinit ./demo --virtualenv --venv-path .venv\n"
            "  projinit ./demo --branch main --git-user Alice --remote origin URL\n"
        ),
    )
    parser.add_argument("project", help="Project directory to create (its last segment is the project name)")

    env = parser.add_argument_group("Virtual Environment")
    backend = env.add_mutually_exclusive_group()
    backend.add_argument(
        "--venv",
        dest="backend",
        action="store_const",
        const=EnvBackend.VENV.value,
        help="Create the environment with `python -m venv`",
    )
    backend.add_argument(
        "--virtualenv",
        dest="backend",
        action="store_const",
        const=EnvBackend.VIRTUALENV.value,
        help="Create the environment with the `virtualenv` tool",
    )
    env.add_argument(
        "--venv-path",
        metavar="DIR",
        default=None,
        help="Sub-directory of the project for the environment (default: project root)",
    )

    git = parser.add_argument_group("Git")
    git.add_argument("--git", action="store_true", help="Initialise a git repository")
    git.add_argument("--branch", metavar="NAME", help="Initial branch name (implies --git)")
    git.add_argument("--git-user", metavar="NAME", help="Local user.name (implies --git)")
    git.add_argument("--git-email", metavar="EMAIL", help="Local user.email (implies --git)")
    git.add_argument(
        "--remote",
        nargs=2,
        metavar=("NAME", "URL"),
        help="Register a remote (implies --git)",
    )

    other = parser.add_argument_group("Other Options")
    other.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds before an external tool is killed (0 waits forever)",
    )
    other.add_argument("--config", type=Path, default=None, help="JSON configuration file")
    other.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _repository_options(args: argparse.Namespace) -> Optional[RepositoryOptions]:
    wanted = args.git or args.branch or args.git_user or args.git_email or args.remote
    if not wanted:
        return None
    remote = RemoteSpec(name=args.remote[0], url=args.remote[1]) if args.remote else None
    return RepositoryOptions(
        branch=args.branch,
        user_name=args.git_user,
        user_email=args.git_email,
        remote=remote,
    )


def _load_config(args: argparse.Namespace) -> ScaffoldConfig:
    config = ScaffoldConfig.load(args.config) if args.config else ScaffoldConfig.from_env()
    if args.timeout is not None:
        timeout = None if args.timeout == 0 else args.timeout
        config = ScaffoldConfig.model_validate(
            {**config.model_dump(), "command_timeout": timeout}
        )
    return config


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``projinit`` and ``python -m projinit``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.venv_path is not None and not args.backend:
        parser.error("--venv-path requires --venv or --virtualenv")

    try:
        spec = ProjectSpec.from_input(
            args.project,
            backend=args.backend or EnvBackend.NONE.value,
            repository=_repository_options(args),
            venv_dir=args.venv_path,
        )
        config = _load_config(args)
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        parser.error(messages)
    except ValueError as exc:
        parser.error(str(exc))
    except OSError as exc:
        parser.error(f"cannot read configuration: {exc}")

    orchestrator = ScaffoldOrchestrator(config)
    report = asyncio.run(orchestrator.run(spec))
    print_report(report, report.duration_seconds)

    if report.success:
        print_success(f"Project {spec.name} ready at {spec.path}")
        return

    failed = report.failed_step
    if failed is not None:
        print_error(f"error: {failed.step}: {failed.describe()}")
    sys.exit(report.exit_code)


if __name__ == "__main__":
    main()
