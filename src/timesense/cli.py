"""Command-line interface for TimeSense."""

from __future__ import annotations

import logging
import webbrowser
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

import typer

from .config import ConfigError, TrackerConfig, load_config, save_config
from .paths import get_config_path, get_data_dir, get_log_path

app = typer.Typer(help="Automated time awareness for the focused application.")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


@app.callback(no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        path_type=Path,
        help="Location of the JSON configuration file.",
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
    )
    ctx.obj = {"config_path": config_path or get_config_path()}


def _load_config(ctx: typer.Context) -> TrackerConfig:
    path = ctx.obj["config_path"]
    try:
        return load_config(path)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc


def _data_dir(config: TrackerConfig) -> Path:
    if config.data_directory is not None:
        path = Path(config.data_directory)
        path.mkdir(parents=True, exist_ok=True)
        return path
    return get_data_dir()


def _parse_day(value: Optional[str]) -> datetime:
    if not value:
        return datetime.now()
    try:
        return datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise typer.BadParameter("expected YYYY-MM-DD", param_hint="--date") from exc


@app.command()
def track(
    ctx: typer.Context,
    sample_seconds: Optional[float] = typer.Option(
        None,
        "--interval",
        min=1.0,
        help="Sampling interval in seconds (overrides the configuration).",
    ),
    idle_seconds: Optional[float] = typer.Option(
        None,
        "--idle-threshold",
        min=0.0,
        help="Seconds without input before time counts as idle.",
    ),
) -> None:
    """Run the tracker until interrupted, then write the day's summary and report."""
    from .storage import SummaryWriter
    from .tracker import create_tracker

    config = _load_config(ctx)
    data_dir = _data_dir(config)
    file_handler = logging.FileHandler(get_log_path(), encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.getLogger().addHandler(file_handler)

    settings = config.settings()
    if sample_seconds is not None:
        settings.sample_interval = timedelta(seconds=sample_seconds)
    if idle_seconds is not None:
        settings.idle_threshold = timedelta(seconds=idle_seconds)

    tracker = create_tracker(settings, config.rules(), sink=SummaryWriter(data_dir))
    typer.echo("TimeSense is running. Press Ctrl+C to stop and generate a report.")
    tracker.run_forever()
    typer.echo(f"Summaries and reports are in {data_dir}")


@app.command()
def summary(
    ctx: typer.Context,
    date: Optional[str] = typer.Option(
        None,
        "--date",
        help="Date (YYYY-MM-DD) to summarize. Defaults to today.",
    ),
) -> None:
    """Print a stored daily summary with grouped applications."""
    from .reporting import SummaryPrinter

    target = _parse_day(date)
    printer = SummaryPrinter(data_dir=_data_dir(_load_config(ctx)))
    printer.print_daily_summary(target.date())


@app.command()
def report(
    ctx: typer.Context,
    date: Optional[str] = typer.Option(
        None,
        "--date",
        help="Date (YYYY-MM-DD) to render. Defaults to today.",
    ),
    open_report: bool = typer.Option(
        False, "--open/--no-open", help="Open the report in your default browser."
    ),
) -> None:
    """Regenerate the HTML report from a stored summary."""
    from .storage import load_summary, write_report

    target = _parse_day(date).date()
    data_dir = _data_dir(_load_config(ctx))
    daily = load_summary(data_dir, target)
    if daily is None:
        typer.echo("No activity recorded for the selected day.", err=True)
        raise typer.Exit(code=1)
    path = write_report(daily, data_dir).resolve()
    typer.echo(path.as_uri())
    if open_report:
        webbrowser.open(path.as_uri())


@app.command()
def web(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the dashboard."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the dashboard."
    ),
    open_browser: bool = typer.Option(
        True,
        "--open-browser/--no-open-browser",
        help="Automatically launch the dashboard in your default browser.",
    ),
) -> None:
    """Start the local dashboard with the background tracker."""
    from .server_runner import run_dashboard

    config = _load_config(ctx)
    run_dashboard(
        host=host,
        port=port,
        config=config,
        data_dir=_data_dir(config),
        open_browser=open_browser,
    )


@app.command("init-config")
def init_config(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file."),
) -> None:
    """Write the default configuration file."""
    path = ctx.obj["config_path"]
    if path.exists() and not force:
        typer.echo(f"{path} already exists; use --force to overwrite.", err=True)
        raise typer.Exit(code=1)
    save_config(TrackerConfig(), path)
    typer.echo(str(path))
