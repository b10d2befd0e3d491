"""Command-line entry point: status-bar daemon, config dump and control client."""

from __future__ import annotations

import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Any, Optional

import typer

from app_config import (
    AppConfig,
    AppConfigurationError,
    ConfigWriteError,
    dump_display_config,
    load_app_config,
)
from contracts.control_protocol import (
    COMMAND_CANCEL_BLOCK,
    COMMAND_PAUSE_BLOCK,
    COMMAND_START_BLOCK,
    COMMAND_TASK_LOG_ADD,
    COMMAND_TASK_LOG_OUTPUT,
    COMMAND_TASK_LOG_REMOVE,
)
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from server import ControlClientError, ControlServerConfig, ServerConfigurationError, send_command

app = typer.Typer(help="Pomodoro block timer for xmobar-style status bars.")

_state: dict[str, Any] = {"config_path": None}


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application (stderr; stdout carries the status line)."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )
    return logging.getLogger("blockbar")


def setup_signal_handlers(stop_event: threading.Event) -> None:
    """Stop the tick loop gracefully on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        del frame
        logging.getLogger("blockbar").info(
            "%s received, stopping...", signal.Signals(signum).name
        )
        stop_event.set()

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def _load_config_or_exit(logger: logging.Logger) -> AppConfig:
    try:
        app_config = load_app_config(_state["config_path"])
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        raise typer.Exit(code=1)
    if app_config.source_file:
        logger.info("Loaded config: %s", app_config.source_file)
    return app_config


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logs."),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config.toml (default: $BLOCKBAR_CONFIG_FILE or ./config.toml).",
    ),
) -> None:
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    _state["config_path"] = config


@app.command()
def run() -> None:
    """Run the timer daemon, writing one status line per tick to stdout."""
    logger = logging.getLogger("blockbar")
    app_config = _load_config_or_exit(logger)
    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            stream=sys.stdout,
            hooks=RuntimeHooks(setup_signal_handlers=setup_signal_handlers),
        )
    )
    raise typer.Exit(code=engine.run())


@app.command("dump-config")
def dump_config(
    target: Path = typer.Argument(..., help="File to write the colour/threshold settings to."),
) -> None:
    """Write the current status bar parameters to TOML for editing, then exit."""
    logger = logging.getLogger("blockbar")
    app_config = _load_config_or_exit(logger)
    try:
        path = dump_display_config(app_config, target)
    except ConfigWriteError as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Wrote {path}")


@app.command()
def start(
    seconds: Optional[int] = typer.Argument(None, help="Block length in seconds."),
) -> None:
    """Start a block (rejected unless idle)."""
    arguments = {} if seconds is None else {"duration_seconds": seconds}
    _send(COMMAND_START_BLOCK, arguments)


@app.command()
def pause() -> None:
    """Pause the running block, or resume a paused one."""
    _send(COMMAND_PAUSE_BLOCK)


@app.command()
def cancel() -> None:
    """Cancel the running or paused block."""
    _send(COMMAND_CANCEL_BLOCK)


@app.command("log-add")
def log_add(label: str = typer.Argument(..., help="Name of the task log.")) -> None:
    """Enable activity logging, clearing it under a new name."""
    _send(COMMAND_TASK_LOG_ADD, {"label": label})


@app.command("log-remove")
def log_remove() -> None:
    """Stop activity logging."""
    _send(COMMAND_TASK_LOG_REMOVE)


@app.command("log-output")
def log_output(
    reset: bool = typer.Option(False, "--reset", help="Clear the totals after printing."),
) -> None:
    """Print the activity log."""
    _send(COMMAND_TASK_LOG_OUTPUT, {"reset": reset})


def _send(command: str, arguments: Optional[dict[str, Any]] = None) -> None:
    logger = logging.getLogger("blockbar")
    app_config = _load_config_or_exit(logger)
    try:
        server_config = ControlServerConfig.from_settings(app_config.control_server)
        reply = send_command(server_config.url, command, arguments)
    except (ServerConfigurationError, ControlClientError) as error:
        typer.echo(f"Error: {error}", err=True)
        raise typer.Exit(code=2)

    output = reply.get("output")
    if isinstance(output, str):
        typer.echo(output, nl=False)
    message = reply.get("message")
    if message:
        typer.echo(message, err=not reply.get("accepted", False))
    if not reply.get("accepted", False):
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
