"""
Defines the command-line interface for the application using Typer.
"""

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from batchstream import __version__
from batchstream.core.multisource import MultiSourceStream
from batchstream.core.progress import SharedProgress
from batchstream.core.sequence import Step, sequence
from batchstream.exceptions import BatchStreamError
from batchstream.http.trackable import fetch_files, get_list, get_total_size
from batchstream.http.transport import HttpTransport
from batchstream.models.config import TransportConfig
from batchstream.storage.config_manager import ConfigManager
from batchstream.utils.structured_logger import create_structured_logger

from .formatters import (
    build_failures_table,
    format_error_with_suggestions,
    format_sequence_error,
    format_size,
    print_config,
    print_summary_panel,
)
from .progress_manager import RichProgress

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=False,
        )
    ],
)
log = logging.getLogger("batchstream")

app = typer.Typer(
    name="batchstream",
    help=(
        "Fetch remote files in batches or as one concatenated stream, with"
        " progress. Use 'batchstream <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "batchstream"


CONFIG_FILE = get_config_dir() / "config.ini"


@dataclass
class AppState:
    config_file: Path = CONFIG_FILE
    log_dir: Path | None = None


def _state(ctx: typer.Context) -> AppState:
    if not isinstance(ctx.obj, AppState):
        ctx.obj = AppState()
    return ctx.obj


def _load_config(ctx: typer.Context, cli_options: dict[str, Any]) -> TransportConfig:
    options = {key: value for key, value in cli_options.items() if value is not None}
    try:
        return ConfigManager(_state(ctx).config_file).load_config(options)
    except BatchStreamError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    config_file: Path = typer.Option(
        CONFIG_FILE,
        "--config",
        envvar="BATCHSTREAM_CONFIG",
        help="Path of the configuration file.",
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
    log_dir: Path | None = typer.Option(
        None, "--log-dir", help="Write JSON lines logs of each session to this directory."
    ),
):
    """batchstream CLI"""
    if version:
        console.print(f"[bold]batchstream[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("batchstream").setLevel(log_level)

    ctx.obj = AppState(config_file=config_file, log_dir=log_dir)

    if show_config:
        if not config_file.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]batchstream init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        try:
            config_data = ConfigManager(config_file).get_config_as_dict()
        except BatchStreamError as e:
            console.print(format_error_with_suggestions(e))
            raise typer.Exit(code=1) from e
        print_config(console, config_file, config_data)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing file without asking."
    ),
):
    """Write a configuration file with the default settings."""
    config_file = _state(ctx).config_file
    if (
        config_file.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()
    try:
        ConfigManager(config_file).save_new_config()
    except BatchStreamError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{config_file}'[/bold green]")


@app.command()
def size(
    ctx: typer.Context,
    urls: list[str] = typer.Argument(..., help="One or more URLs."),  # noqa: B008
):
    """Show the combined size of the given URLs."""
    config = _load_config(ctx, {})
    with HttpTransport(config) as transport:
        try:
            total = get_total_size(urls, transport)
        except BatchStreamError as e:
            console.print(format_error_with_suggestions(e))
            raise typer.Exit(code=1) from e
    console.print(f"{format_size(total)} in {len(urls)} sources")


@app.command()
def concat(
    ctx: typer.Context,
    urls: list[str] = typer.Argument(..., help="URLs to join, in order."),  # noqa: B008
    output: Path = typer.Option(..., "-o", "--output", help="File to write."),  # noqa: B008
    chunk_size: int | None = typer.Option(
        None, "--chunk-size", help="Read size in bytes (overrides the config)."
    ),
):
    """Download several URLs into one file, joined in the order given."""
    config = _load_config(ctx, {"chunk_size": chunk_size})
    base_logger, transfer_logger = create_structured_logger(_state(ctx).log_dir)
    opened: list[MultiSourceStream] = []

    start_time = time.monotonic()
    with (
        base_logger,
        HttpTransport(config) as transport,
        RichProgress(console, output.name) as progress,
    ):

        def probe_sources() -> None:
            stream, error = get_list(SharedProgress(progress), urls, transport)
            opened.append(stream)
            if error is not None:
                raise error

        def write_output() -> None:
            with opened[0] as stream, open(output, "wb") as f:
                while chunk := stream.read(config.chunk_size):
                    f.write(chunk)

        failure = sequence(
            [
                Step("probe sources", probe_sources),
                Step(f"write {output.name}", write_output),
            ]
        )
        progress.finish()

        duration = time.monotonic() - start_time
        if failure:
            transfer_logger.step_failed(failure)
            console.print(format_sequence_error(failure))
            raise typer.Exit(code=1)

        transferred = int(progress.current)
        transfer_logger.transfer_completed(len(urls), transferred, duration)

    print_summary_panel(console, len(urls), transferred, duration)


@app.command()
def fetch(
    ctx: typer.Context,
    urls: list[str] = typer.Argument(..., help="URLs to download."),  # noqa: B008
    directory: Path = typer.Option(  # noqa: B008
        Path("."), "-d", "--dir", help="Directory to save the files in."
    ),
    chunk_size: int | None = typer.Option(
        None, "--chunk-size", help="Read size in bytes (overrides the config)."
    ),
):
    """Download each URL to its own file; failures do not stop the others."""
    config = _load_config(ctx, {"chunk_size": chunk_size})
    base_logger, transfer_logger = create_structured_logger(_state(ctx).log_dir)

    start_time = time.monotonic()
    with (
        base_logger,
        HttpTransport(config) as transport,
        RichProgress(console, f"{len(urls)} files") as progress,
    ):
        failure = fetch_files(progress, urls, directory, transport)
        duration = time.monotonic() - start_time
        transferred = int(progress.current)

        if failure:
            for job_error in failure:
                transfer_logger.job_failed(
                    job_error.index, urls[job_error.index], str(job_error)
                )
        transfer_logger.batch_completed(len(urls), failure)

    failed = len(failure) if failure else 0
    print_summary_panel(console, len(urls), transferred, duration, failed=failed)
    if failure:
        console.print(build_failures_table(failure, urls))
        raise typer.Exit(code=1)
