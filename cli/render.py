from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_PHASES = ("voltage1", "voltage2", "voltage3")


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_health(payload: Dict[str, Any]) -> None:
    echo_heading("Gateway Health")
    echo_key_values([("status", payload.get("status")), ("timestamp", payload.get("timestamp"))])


def render_reading(payload: Dict[str, Any]) -> None:
    echo_heading("Current Voltages")
    echo_key_values([(phase, payload.get(phase)) for phase in _PHASES])
    echo_key_values([("total", payload.get("total")), ("timestamp", payload.get("timestamp"))])


def render_history(records: List[Dict[str, Any]], hours: float) -> None:
    echo_heading(f"History (last {hours:g}h)")
    if not records:
        typer.echo("No readings in this window.")
        return
    for record in records:
        values = " ".join(f"{phase}={record.get(phase)}" for phase in _PHASES)
        typer.echo(f"  - {record.get('timestamp')}: {values}")
    typer.echo(f"{len(records)} readings")


def render_stats(payload: Dict[str, Any]) -> None:
    echo_heading("Voltage Statistics")
    for section in ("averages", "max", "min"):
        values = payload.get(section) or {}
        typer.echo(f"{section}:")
        for phase in _PHASES:
            typer.echo(f"  - {phase}: {values.get(phase)}")
    echo_key_values([("timestamp", payload.get("timestamp"))])
