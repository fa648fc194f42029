from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_health, render_history, render_ingest
from services.payloads import PayloadFormat


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Run and talk to the Arduino sensor API.",
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
        help="Sensor API base URL (defaults to API_BASE_URL env or http://localhost:3000).",
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


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (defaults to HOST env)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Listen port (defaults to PORT env or 3000)."),
) -> None:
    """Run the sensor API server."""
    from app.main import serve

    serve(host=host, port=port)


@app.command("send")
def send_command(
    ctx: typer.Context,
    temperature: float = typer.Argument(..., help="Temperature in degrees Celsius."),
    humidity: float = typer.Argument(..., help="Relative humidity in percent."),
    payload_format: PayloadFormat = typer.Option(
        PayloadFormat.form,
        "--format",
        "-f",
        case_sensitive=False,
        help="Body encoding to send.",
    ),
) -> None:
    """Post one reading to /api/data."""
    state = _get_state(ctx)
    typer.echo(f"Sending {payload_format.value} reading to {state.config.base_url} ...")
    payload = state.client.send_reading(temperature, humidity, payload_format)
    render_ingest(payload)


@app.command("readings")
def readings_command(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="Show only the newest N readings."),
) -> None:
    """List stored readings and request counters."""
    state = _get_state(ctx)
    render_history(state.client.get_readings(), limit=limit)


@app.command("health")
def health_command(ctx: typer.Context) -> None:
    """Show the server health payload."""
    state = _get_state(ctx)
    render_health(state.client.get_health())


@app.command("ping")
def ping_command(ctx: typer.Context) -> None:
    """Check connectivity through the plain-text probe."""
    state = _get_state(ctx)
    typer.echo(state.client.ping())
