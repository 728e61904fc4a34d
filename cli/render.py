from __future__ import annotations

from typing import Any, Iterable

import typer

from models.config import CeilingThreshold, MonitorConfig
from models.records import SeverityBand
from models.schemas import CycleReport

_BAND_COLORS = {
    SeverityBand.SAFE: typer.colors.GREEN,
    SeverityBand.MODERATE: typer.colors.YELLOW,
    SeverityBand.HAZARD: typer.colors.RED,
}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_value(value: float) -> str:
    return f"{value:g}"


def on_off(active: bool) -> str:
    return "ON" if active else "OFF"


def render_report(report: CycleReport, output: str = "text") -> None:
    if output == "json":
        typer.echo(report.model_dump_json())
        return

    echo_heading(f"=== SENSOR READINGS (cycle {report.cycle}, profile {report.profile}) ===")
    for status in report.parameters:
        unit = f" {status.unit}" if status.unit else ""
        suffix = " (fallback)" if status.fallback else ""
        typer.echo(f"{status.label}: {_format_value(status.value)}{unit} ", nl=False)
        typer.secho(f"[{status.band.value}]", fg=_BAND_COLORS[status.band], nl=False)
        typer.echo(suffix)

    echo_heading("=== ACTUATORS ===")
    echo_key_values(
        [
            ("ALARM", on_off(report.actuators.alarm)),
            ("FAN", on_off(report.actuators.fan)),
            ("VENT", on_off(report.actuators.vent)),
        ]
    )
    typer.echo()


def render_profile(config: MonitorConfig) -> None:
    echo_heading(f"{config.profile} ({len(config.parameters)} parameters)")
    for parameter in config.parameters:
        threshold = parameter.threshold
        if isinstance(threshold, CeilingThreshold):
            limits = f"safe<{_format_value(threshold.safe_limit)} hazard>={_format_value(threshold.hazard_limit)}"
        else:
            limits = f"low<{_format_value(threshold.low_limit)} high>={_format_value(threshold.high_limit)}"
        typer.echo(f"  - {parameter.display_name} [{parameter.unit}]: {limits}")
    for rule in config.rules:
        triggers = ", ".join(f"{t.parameter}>={t.min_band.value}" for t in rule.triggers) or "never"
        typer.echo(f"  {rule.actuator.value}: {triggers}")
