"""Output formatting utilities"""

from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from ...constants import EMOJI_SUCCESS, EMOJI_ERROR, EMOJI_WARNING, StepStatus
from ...models import DeployResult, StepResult
from ...utils.formatting import format_size

console = Console()

_STEP_STYLES = {
    StepStatus.SUCCESS: ("green", EMOJI_SUCCESS),
    StepStatus.SKIPPED: ("dim", "-"),
    StepStatus.DEGRADED: ("yellow", EMOJI_WARNING),
    StepStatus.FAILED: ("red", EMOJI_ERROR),
}


def _step_line(label: str, step: StepResult) -> str:
    style, mark = _STEP_STYLES[step.status]
    line = f"[bold]{label}:[/bold] [{style}]{mark} {step.status.value}[/{style}]"
    if step.failed_stage:
        line += f" at {step.failed_stage.value} stage"
    if step.message and step.status != StepStatus.SUCCESS:
        line += f" ({step.message})"
    return line


def format_deploy_result(result: DeployResult) -> None:
    """Format and display deploy operation result"""
    if not result.success:
        panel = Panel(
            f"[red]{EMOJI_ERROR} Deploy failed:[/red] {result.error}",
            title="Deploy Error",
            border_style="red"
        )
        console.print(panel)
        return

    stats = result.stats
    estimated = " [dim](estimated)[/dim]" if stats.estimated else ""
    title = "Dry Run Result" if result.dry_run else "Deploy Result"

    lines = [
        f"[green]{EMOJI_SUCCESS}[/green] Deployment completed successfully!",
        "",
        f"[bold]Files transferred:[/bold] {stats.files_transferred}{estimated}",
        f"[bold]Bytes transferred:[/bold] {format_size(stats.bytes_transferred)}{estimated}",
        f"[bold]Deployment time:[/bold] {stats.elapsed_seconds}s",
    ]

    if result.transfer_failed_in_dry_run:
        lines.append("[yellow]Dry-run transfer failed; no changes were made[/yellow]")

    if result.plugin:
        lines.append(_step_line("MU plugin", result.plugin))
    if result.cache:
        lines.append(_step_line("Cache purge", result.cache))

    if result.stats_file:
        lines.append(f"[bold]Statistics:[/bold] {result.stats_file}")

    border = "yellow" if result.degraded_steps else "green"
    console.print(Panel("\n".join(lines), title=title, border_style=border))

    for step in (result.plugin, result.cache):
        if step is None:
            continue
        for warning in step.warnings:
            print_warning(warning)


def format_step_result(result: StepResult, title: str) -> None:
    """Format and display a standalone step result"""
    style, _ = _STEP_STYLES[result.status]
    console.print(Panel(_step_line(title, result), title=title, border_style=style))
    for warning in result.warnings:
        print_warning(warning)


def format_yaml(data: Any, title: Optional[str] = None) -> None:
    """Format and display YAML data with syntax highlighting"""
    import yaml

    yaml_str = yaml.dump(data, default_flow_style=False, sort_keys=False)
    syntax = Syntax(yaml_str, "yaml", theme="monokai", line_numbers=False)

    if title:
        panel = Panel(syntax, title=title, border_style="blue")
        console.print(panel)
    else:
        console.print(syntax)


def print_error(message: str, error: Optional[Exception] = None) -> None:
    """Print error message"""
    if error:
        console.print(f"[red]Error:[/red] {message}: {str(error)}")
    else:
        console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    """Print warning message"""
    console.print(f"[yellow]Warning:[/yellow] {message}")
