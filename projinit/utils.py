"""Shared console helpers for projinit.

Rich-based progress and report output. Everything the scaffolder prints goes
through the module-level ``console`` so callers (and tests) can swap it.
"""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from projinit.models import Report, StepResult, StepStatus

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"

    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes > 0:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


def format_command(command: str, args: Sequence[str]) -> str:
    """Render a command line for display."""
    return " ".join([command, *args])


STATUS_STYLES: dict[StepStatus, str] = {
    StepStatus.SUCCESS: "green",
    StepStatus.SKIPPED: "dim",
    StepStatus.FAILED: "red",
}


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step_header(title: str) -> None:
    """Print a bold header announcing a step, e.g. ``Creating project ...``."""
    console.print(f"[bold]{title}[/bold]")


def print_executing(command: str, args: Sequence[str]) -> None:
    """Print the command a step is about to run."""
    console.print(f"[magenta]|   Executing[/magenta] - {escape(format_command(command, args))}")


def print_step_result(result: StepResult) -> None:
    """Print the closing line of a step."""
    style = STATUS_STYLES.get(result.status, "white")
    console.print(f"[{style}]`-- {escape(result.describe())}[/{style}]")
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message to stderr."""
    err_console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def build_report_table(report: Report) -> Table:
    """Build a table listing every step (and sub-step) with its outcome."""
    table = Table(title=f"Scaffold report: {escape(str(report.path))}", show_header=True, header_style="bold cyan")
    table.add_column("Step", no_wrap=True)
    table.add_column("Status")
    table.add_column("Detail")

    for result in report.steps:
        style = STATUS_STYLES.get(result.status, "white")
        table.add_row(result.step, f"[{style}]{result.status.value}[/{style}]", escape(result.describe()))
        for sub in result.substeps:
            sub_style = STATUS_STYLES.get(sub.status, "white")
            table.add_row(f"  {sub.step}", f"[{sub_style}]{sub.status.value}[/{sub_style}]", escape(sub.describe()))

    return table


def print_report(report: Report, elapsed: float | None = None) -> None:
    """Print the final report table and a status panel."""
    console.print(build_report_table(report))

    if report.success:
        border_style = "bold green"
        lines = ["[bold green]SCAFFOLD SUCCEEDED[/bold green]"]
    else:
        border_style = "bold red"
        lines = ["[bold red]SCAFFOLD FAILED[/bold red]"]
        failed = report.failed_step
        if failed is not None:
            lines.append(f"Failed step : {failed.step}")
            if failed.stderr:
                lines.append(f"stderr      : {escape(failed.stderr)}")

    lines.append(f"Final state : {report.state.value}")
    if elapsed is not None:
        lines.append(f"Duration    : {format_duration(elapsed)}")

    console.print(Panel("\n".join(lines), title="[bold]Done[/bold]", border_style=border_style))
