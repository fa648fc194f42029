from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_stats(stats: Dict[str, Any]) -> None:
    echo_heading("Requests")
    echo_key_values(
        [
            ("totalRequests", stats.get("totalRequests")),
            ("successfulPosts", stats.get("successfulPosts")),
            ("lastRequest", stats.get("lastRequest") or "never"),
        ]
    )


def render_ingest(payload: Dict[str, Any]) -> None:
    reading = payload.get("data") or {}
    typer.secho(payload.get("message", "Data received"), fg=typer.colors.GREEN)
    echo_key_values(
        [
            ("id", reading.get("id")),
            ("timestamp", reading.get("timestamp")),
            ("temperature", reading.get("temperature")),
            ("humidity", reading.get("humidity")),
            ("count", payload.get("count")),
            ("server", payload.get("server")),
        ]
    )


def render_history(payload: Dict[str, Any], limit: int | None = None) -> None:
    entries = payload.get("data") or []
    echo_heading(f"Readings ({payload.get('count', len(entries))} stored)")
    shown = entries if limit is None else entries[:limit]
    if shown:
        for entry in shown:
            source = entry.get("method") or entry.get("client") or "?"
            typer.echo(
                f"  - {entry.get('timestamp')}: temp={entry.get('temperature')} "
                f"hum={entry.get('humidity')} ({source})"
            )
    else:
        typer.echo("No readings stored.")

    typer.echo()
    render_stats(payload.get("stats") or {})


def render_health(payload: Dict[str, Any]) -> None:
    echo_heading("Health")
    echo_key_values(
        [
            ("status", payload.get("status")),
            ("server", payload.get("server")),
            ("runtime", payload.get("runtime")),
            ("uptime", payload.get("uptime")),
        ]
    )
    memory = payload.get("memory") or {}
    if memory:
        typer.echo("memory:")
        for key, value in memory.items():
            typer.echo(f"  - {key}: {value}")
    typer.echo()
    render_stats(payload.get("requests") or {})
