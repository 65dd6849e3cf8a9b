from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer
import uvicorn

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_health, render_history, render_reading, render_stats
from logging_config import configure_logging
from settings import ConfigInvalid, get_settings, validate_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for running and querying the voltage telemetry gateway.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1, message="CLI state is uninitialized.")
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Gateway base URL (defaults to API_BASE_URL env or http://localhost:3000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Check that the gateway is up."""
    state = _get_state(ctx)
    render_health(state.client.get_health())


@app.command("current")
def current_command(ctx: typer.Context) -> None:
    """Show the live voltages."""
    state = _get_state(ctx)
    render_reading(state.client.get_current())


@app.command("history")
def history_command(
    ctx: typer.Context,
    hours: float = typer.Option(24.0, "--hours", help="Size of the time window in hours."),
) -> None:
    """List stored readings from the last N hours."""
    state = _get_state(ctx)
    render_history(state.client.get_history(hours), hours)


@app.command("stats")
def stats_command(ctx: typer.Context) -> None:
    """Show averages and extremes over the latest readings."""
    state = _get_state(ctx)
    render_stats(state.client.get_stats())


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind (defaults to HOST env)."),
    port: Optional[int] = typer.Option(None, "--port", help="Port to listen on (defaults to PORT env)."),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level for the server (defaults to LOG_LEVEL env)."
    ),
) -> None:
    """Run the gateway HTTP server."""
    settings = get_settings()
    try:
        validate_settings(settings)
    except ConfigInvalid as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    bind_host = host or settings.host
    bind_port = port or settings.port
    level = (log_level or settings.log_level).upper()
    configure_logging(level)
    typer.echo(f"Serving telemetry gateway on {bind_host}:{bind_port} ...")
    uvicorn.run(
        "app.main:app",
        host=bind_host,
        port=bind_port,
        log_config=None,
        log_level=level.lower(),
    )
