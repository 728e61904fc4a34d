from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, NoReturn, Optional

import click
import typer

from cli.config import CLIConfig, load_config
from cli.render import render_profile, render_report
from logging_config import configure_logging
from models.config import MonitorConfig
from models.errors import ConfigurationError, InvalidReadingError
from services.acquisition import SimulatedSource
from services.monitor import LoggingActuator, MonitorService, evaluate_values
from services.profiles import available_profiles, build_profile, resolve_config
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig


app = typer.Typer(
    help="Classify air-quality readings and drive alarm, fan and ventilation outputs.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


def _fail(message: str) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _load_monitor_config(state: CLIState) -> MonitorConfig:
    try:
        return resolve_config(
            profile=state.config.profile, config_path=state.config.config_path
        )
    except ConfigurationError as exc:
        _fail(f"Configuration error: {exc}")


def _parse_assignments(assignments: List[str], config: MonitorConfig) -> Dict[str, float]:
    known = set(config.parameter_names)
    values: Dict[str, float] = {}
    for assignment in assignments:
        name, sep, raw = assignment.partition("=")
        name = name.strip()
        if not sep or not name:
            raise typer.BadParameter(f"Expected NAME=VALUE, got {assignment!r}.")
        if name not in known:
            raise typer.BadParameter(
                f"Unknown parameter {name!r}; configured: {', '.join(config.parameter_names)}."
            )
        try:
            values[name] = float(raw)
        except ValueError as exc:
            raise typer.BadParameter(f"Value for {name!r} is not a number: {raw!r}.") from exc
    return values


@app.callback()
def main(
    ctx: typer.Context,
    profile: Optional[str] = typer.Option(
        None,
        "--profile",
        "-p",
        help="Built-in profile (defaults to AIRMON_PROFILE env or 'full').",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="JSON threshold/rule file; takes precedence over --profile.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Report format: text or json (defaults to AIRMON_OUTPUT env or text).",
    ),
) -> None:
    """Entry point for the CLI."""
    configure_logging()
    ctx.obj = CLIState(config=load_config(profile=profile, config_path=config_path, output=output))


@app.command("profiles")
def profiles_command() -> None:
    """List the built-in profiles with their limits and rules."""
    for name in available_profiles():
        render_profile(build_profile(name))
        typer.echo()


@app.command("check")
def check_command(ctx: typer.Context) -> None:
    """Validate the active configuration."""
    config = _load_monitor_config(_get_state(ctx))
    typer.secho(
        f"Configuration OK: profile={config.profile} parameters={len(config.parameters)}",
        fg=typer.colors.GREEN,
    )


@app.command("evaluate")
def evaluate_command(
    ctx: typer.Context,
    assignments: Optional[List[str]] = typer.Option(
        None,
        "--set",
        "-s",
        help="Parameter value as NAME=VALUE; repeat for each parameter.",
    ),
) -> None:
    """Classify one set of readings and show the resulting actuator commands."""
    state = _get_state(ctx)
    config = _load_monitor_config(state)
    values = _parse_assignments(assignments or [], config)
    try:
        report = evaluate_values(config, values)
    except InvalidReadingError as exc:
        _fail(f"Invalid reading: {exc}")
    render_report(report, state.config.output)


@app.command("run")
def run_command(
    ctx: typer.Context,
    cycles: Optional[int] = typer.Option(
        None, "--cycles", "-n", min=1, help="Stop after this many cycles (default: run forever)."
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        click_type=click.FloatRange(min=0.0, min_open=True),
        help="Seconds between cycles (defaults to AIRMON_CYCLE_INTERVAL env or 1.0).",
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the simulated sensors."),
    failure_rate: Optional[float] = typer.Option(
        None,
        "--failure-rate",
        min=0.0,
        max=1.0,
        help="Probability per cycle of a simulated temperature/humidity sensor failure.",
    ),
) -> None:
    """Run the monitoring loop against simulated sensors."""
    state = _get_state(ctx)
    config = _load_monitor_config(state)
    settings = get_settings()
    source = SimulatedSource(
        config,
        seed=seed if seed is not None else settings.sim_seed,
        failure_rate=failure_rate if failure_rate is not None else settings.sim_failure_rate,
    )
    service = MonitorService(
        config,
        source,
        actuators=[LoggingActuator()],
        on_report=lambda report: render_report(report, state.config.output),
    )
    period = interval if interval is not None else state.config.interval
    try:
        service.run(cycles=cycles, interval=period)
    except KeyboardInterrupt:
        typer.echo("Stopped.")
