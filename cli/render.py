from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer

_READING_COLUMNS = (
    "sequence_number",
    "timestamp",
    "pm25",
    "co2",
    "hcho",
    "voc",
    "temperature",
    "humidity",
    "is_valid",
)


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_reading(reading: Dict[str, Any]) -> None:
    echo_key_values((column, reading.get(column)) for column in _READING_COLUMNS)
    typer.echo(f"particle_count: {reading.get('particle_count')}")


def render_ingest(payload: Dict[str, Any]) -> None:
    reading = payload.get("data") or {}
    color = typer.colors.GREEN if reading.get("is_valid") else typer.colors.YELLOW
    typer.secho(
        f"Stored reading id={reading.get('id')} seq={reading.get('sequence_number')}: "
        f"{payload.get('message')}",
        fg=color,
    )


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Sensor Status")
    echo_key_values(
        [
            ("sensor_status", payload.get("sensor_status")),
            ("last_sequence", payload.get("last_sequence")),
        ]
    )
    typer.echo()
    echo_heading("Last Reading")
    render_reading(payload.get("last_data") or {})


def render_history(payload: Dict[str, Any]) -> None:
    readings: List[Dict[str, Any]] = payload.get("data") or []
    echo_heading(f"History ({payload.get('count', len(readings))} readings)")
    if not readings:
        typer.echo("No readings available.")
        return
    typer.echo("  ".join(_READING_COLUMNS))
    for reading in readings:
        typer.echo("  ".join(str(reading.get(column)) for column in _READING_COLUMNS))


def render_anomalies(anomalies: List[Dict[str, Any]]) -> None:
    echo_heading("Anomalies")
    if not anomalies:
        typer.echo("No anomalies detected.")
        return
    for anomaly in anomalies:
        color = typer.colors.RED if anomaly.get("level") == "danger" else typer.colors.YELLOW
        line = f"  - [{anomaly.get('level')}] {anomaly.get('type')}: {anomaly.get('message')}"
        if anomaly.get("value") is not None:
            line += f" ({anomaly.get('value')} > {anomaly.get('threshold')})"
        typer.secho(line, fg=color)


def render_stats(payload: Dict[str, Any]) -> None:
    echo_heading(f"Statistics (last {payload.get('hours')}h, {payload.get('count')} readings)")
    for metric, summary in (payload.get("stats") or {}).items():
        typer.echo(
            f"  {metric}: min={summary.get('min')} max={summary.get('max')} "
            f"avg={summary.get('avg')} median={summary.get('median')} "
            f"std_dev={summary.get('std_dev')}"
        )
    typer.echo()
    render_anomalies(payload.get("anomalies") or [])


def render_analysis(payload: Dict[str, Any]) -> None:
    aqi = payload.get("aqi") or {}
    echo_heading(f"Air Quality (last {payload.get('hours')}h)")
    echo_key_values(
        [
            ("overall_score", f"{aqi.get('overall_score')} ({aqi.get('overall_level')})"),
            ("pm25_aqi", f"{aqi.get('pm25_aqi')} ({aqi.get('pm25_level')})"),
            ("co2_level", aqi.get("co2_level")),
            ("voc_level", aqi.get("voc_level")),
        ]
    )

    typer.echo()
    echo_heading("Correlations")
    echo_key_values((payload.get("correlations") or {}).items())

    typer.echo()
    echo_heading("Peak Hours")
    for metric, peak in (payload.get("peak_hours") or {}).items():
        typer.echo(f"{metric}: {peak.get('hour')}:00 ({peak.get('value')})")

    typer.echo()
    echo_heading("Suggestions")
    for suggestion in payload.get("suggestions") or []:
        typer.echo(f"  - [{suggestion.get('icon')}] {suggestion.get('message')}")
