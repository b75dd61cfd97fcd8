"""
Functions for formatting and displaying data in the console using Rich.
"""

from datetime import timedelta
from pathlib import Path
from typing import Any, Sequence

from rich import filesize
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from batchstream.core.process import BatchError
from batchstream.core.sequence import SequenceError


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "HTTPStatusError": [
            "• Check that every URL is spelled correctly and still exists.",
            "• The server may require authentication for this resource.",
        ],
        "TransportError": [
            "• A network connection issue occurred.",
            "• Check your internet connection and proxy settings.",
            "• Increase `read_timeout` in the configuration for slow servers.",
        ],
        "ConfigurationError": [
            "• Check the values in the configuration file.",
            "• Run `batchstream init --force` to write a fresh default file.",
        ],
        "AlreadyClosedError": [
            "• The stream was closed twice; this is a usage error in the caller.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(Text("\n".join(suggestions)))

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def build_failures_table(failure: BatchError, sources: Sequence[str]) -> Table:
    """Lists every failed job of a batch next to the source it was processing."""
    table = Table(title=f"[bold red]{failure}[/bold red]", show_lines=False)
    table.add_column("#", style="dim", justify="right")
    table.add_column("Source", style="cyan", overflow="fold")
    table.add_column("Cause", style="red")
    for job_error in failure:
        source = sources[job_error.index] if job_error.index < len(sources) else "?"
        table.add_row(str(job_error.index), source, str(job_error))
    return table


def format_sequence_error(failure: SequenceError) -> Text:
    text = Text()
    text.append("✗ ", style="bold red")
    text.append(f"Step {failure.index + 1} ", style="bold")
    text.append(f"'{failure.step.name}'", style="yellow")
    text.append(f" failed: {failure.cause}")
    return text


def format_size(size_bytes: int) -> str:
    """
    Formats a byte count with the decimal units of the progress bar, keeping the
    exact count alongside once a unit prefix is used.
    """
    if size_bytes < 1000:
        return filesize.decimal(size_bytes)
    return f"{filesize.decimal(size_bytes)} ({size_bytes:,} bytes)"


def format_duration(seconds: float) -> str:
    # Same H:MM:SS shape as the elapsed time column
    return str(timedelta(seconds=max(0, int(seconds))))


def print_summary_panel(
    console: Console, sources: int, size_bytes: int, duration: float, failed: int = 0
) -> None:
    """Displays a summary of a finished transfer."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    table.add_row("Sources:", str(sources))
    table.add_row("Transferred:", format_size(size_bytes))
    table.add_row("Duration:", format_duration(duration))
    if failed:
        table.add_row("Failed:", f"[red]{failed}[/red]")
    border = "red" if failed else "green"
    console.print(Panel(table, title="[bold]Transfer Summary[/bold]", border_style=border))


def print_config(console: Console, config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    if not config_data:
        console.print(f"[yellow]No settings found in '{config_path}'.[/yellow]")
        return
    content = "\n".join(f"{key} = {value}" for key, value in config_data.items())
    console.print(
        Panel(
            content,
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )
