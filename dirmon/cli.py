from __future__ import annotations

import asyncio
import logging
import signal
import sys
from typing import Any

import typer

from dirmon.core.config import ConfigError, build_config
from dirmon.core.usage import render_usage
from dirmon.daemon.runner import DaemonRunner

app = typer.Typer(help="Run an action file once per burst of directory changes", add_completion=False)

logger = logging.getLogger("dirmon")

_LOG_FORMAT = "[%(asctime)s] %(message)s"
_DATE_FORMAT = "%a %b %d %H:%M:%S %Y"


class _BelowWarning(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.WARNING


def configure_logging(level: str) -> None:
    """Send INFO and below to stdout, warnings and errors to stderr."""
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)

    out = logging.StreamHandler(sys.stdout)
    out.addFilter(_BelowWarning())
    out.setFormatter(formatter)

    err = logging.StreamHandler(sys.stderr)
    err.setLevel(logging.WARNING)
    err.setFormatter(formatter)

    logging.basicConfig(level=level.upper(), handlers=[out, err], force=True)


async def _serve(runner: DaemonRunner) -> None:
    loop = asyncio.get_running_loop()

    def _handle_term(_sig: int, _frame: Any) -> None:
        logger.info("received signal %d, stopping", _sig)
        loop.call_soon_threadsafe(runner.stop)

    signal.signal(signal.SIGTERM, _handle_term)
    signal.signal(signal.SIGINT, _handle_term)
    await runner.run()


@app.command()
def main(
    watch_path: str | None = typer.Argument(None, help="Directory to watch", show_default=False),
    action_path: str | None = typer.Argument(None, help="Action file to run on changes", show_default=False),
    log_level: str = typer.Option("info", "--log-level", help="debug, info, warning, or error"),
) -> None:
    """Watch a directory and run an action file once per burst of changes."""
    if watch_path is None:
        typer.echo(render_usage())
        return
    if action_path is None:
        typer.echo("too few arguments", err=True)
        raise typer.Exit(code=1)

    try:
        config = build_config(watch_path=watch_path, action_path=action_path, log_level=log_level)
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)

    configure_logging(config.log_level)
    runner = DaemonRunner(config)
    try:
        asyncio.run(_serve(runner))
    except ConfigError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1)
