from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_import, render_report


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the weather report service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

_START_OPTION = typer.Option(
    None, "--start", "-s", help="Inclusive start, formatted yyyy-MM-dd HH:mm:ss."
)
_END_OPTION = typer.Option(
    None, "--end", "-e", help="Inclusive end, formatted yyyy-MM-dd HH:mm:ss."
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _show_report(
    ctx: typer.Context, kind: str, code: str, start: Optional[str], end: Optional[str]
) -> None:
    state = _get_state(ctx)
    payload = state.client.get_report(kind, code, start_date=start, end_date=end)
    render_report(kind, payload)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Report API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each API request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("network")
def network_command(
    ctx: typer.Context,
    code: str = typer.Argument(..., help="Network code, e.g. NET_01."),
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
) -> None:
    """Show gateway activity and the measurement histogram of a network."""
    _show_report(ctx, "network", code, start, end)


@app.command("gateway")
def gateway_command(
    ctx: typer.Context,
    code: str = typer.Argument(..., help="Gateway code."),
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
) -> None:
    """Show sensor activity, outliers and inter-arrival times of a gateway."""
    _show_report(ctx, "gateway", code, start, end)


@app.command("sensor")
def sensor_command(
    ctx: typer.Context,
    code: str = typer.Argument(..., help="Sensor code."),
    start: Optional[str] = _START_OPTION,
    end: Optional[str] = _END_OPTION,
) -> None:
    """Show statistics and the value histogram of a sensor."""
    _show_report(ctx, "sensor", code, start, end)


@app.command("import")
def import_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to CSV file."),
) -> None:
    """Upload a measurements CSV file."""
    state = _get_state(ctx)
    typer.echo(f"Uploading {file} to {state.config.base_url} ...")
    payload = state.client.import_file(file)
    typer.secho(f"Imported {payload.get('imported', 0)} measurements.", fg=typer.colors.GREEN)
    typer.echo()
    render_import(payload)
