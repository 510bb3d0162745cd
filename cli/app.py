from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    render_analysis,
    render_history,
    render_ingest,
    render_stats,
    render_status,
)


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the air monitor service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Service base URL (defaults to API_BASE_URL env or http://localhost:8080).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="HTTP request timeout in seconds.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    payload: str = typer.Argument(
        ..., help="Eight comma-separated values, e.g. 1200,12,20,650,22.5,45,150,1024."
    ),
) -> None:
    """Post one raw reading as the device would."""
    state = _get_state(ctx)
    render_ingest(state.client.send_payload(payload))


@app.command("replay")
def replay_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Capture file, one payload per line."
    ),
    interval: float = typer.Option(
        0.0,
        "--interval",
        min=0.0,
        help="Seconds to wait between posts.",
    ),
) -> None:
    """Post every non-empty line of a capture file in order."""
    state = _get_state(ctx)
    lines = [line.strip() for line in file.read_text(encoding="utf-8").splitlines()]
    payloads = [line for line in lines if line]
    typer.echo(f"Replaying {len(payloads)} readings to {state.config.base_url} ...")
    for index, payload in enumerate(payloads):
        if index and interval:
            time.sleep(interval)
        render_ingest(state.client.send_payload(payload))


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show sensor health and the latest reading."""
    state = _get_state(ctx)
    render_status(state.client.get_status())


@app.command("history")
def history_command(
    ctx: typer.Context,
    hours: Optional[int] = typer.Option(None, "--hours", help="Only the last N hours."),
    limit: Optional[int] = typer.Option(None, "--limit", help="Maximum number of readings."),
) -> None:
    """List stored readings, newest first."""
    state = _get_state(ctx)
    render_history(state.client.get_history(hours=hours, limit=limit))


@app.command("stats")
def stats_command(
    ctx: typer.Context,
    hours: Optional[int] = typer.Option(None, "--hours", help="Window size in hours."),
) -> None:
    """Show per-metric statistics and anomalies."""
    state = _get_state(ctx)
    render_stats(state.client.get_stats(hours=hours))


@app.command("analysis")
def analysis_command(
    ctx: typer.Context,
    hours: Optional[int] = typer.Option(None, "--hours", help="Window size in hours."),
) -> None:
    """Show AQI, correlations, peak hours and suggestions."""
    state = _get_state(ctx)
    render_analysis(state.client.get_analysis(hours=hours))
