"""
Drives a Rich progress bar from the Progress interface used by the core streams.
"""

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class RichProgress:
    """
    A Progress implementation that renders one Rich task.

    Use as a context manager so the live display is started and stopped around
    the transfer.
    """

    def __init__(self, console: Console, description: str, transient: bool = False):
        self.console = console
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            DownloadColumn(),
            "•",
            TransferSpeedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=transient,
        )
        self.task_id: TaskID = self.progress.add_task(
            description, total=None, start=True
        )
        self.finished = False

    @property
    def total(self) -> float | None:
        return self.progress.tasks[0].total

    @property
    def current(self) -> float:
        return self.progress.tasks[0].completed

    def set(self, total: int) -> None:
        self.progress.update(self.task_id, total=total)

    def add(self, delta: int) -> None:
        self.progress.advance(self.task_id, delta)

    def update(self, current: int) -> None:
        self.progress.update(self.task_id, completed=current)

    def finish(self) -> None:
        # Stops the clock without filling the bar, a failed transfer stays short
        self.finished = True
        self.progress.stop_task(self.task_id)

    def __enter__(self) -> "RichProgress":
        self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()
        return False
