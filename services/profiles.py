"""Built-in monitor profiles and startup configuration resolution."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterable, List, Optional

from models.config import (
    ALL_PARAMETERS,
    ActuatorName,
    ActuatorRule,
    CeilingThreshold,
    ComfortThreshold,
    MonitorConfig,
    ParameterConfig,
    Trigger,
    load_config_file,
)
from models.errors import ConfigurationError
from models.records import SeverityBand
from settings import get_settings

DEFAULT_PROFILE = "full"

TEMPERATURE_FALLBACK = 25.0
HUMIDITY_FALLBACK = 50.0

_PARAMETERS: Dict[str, ParameterConfig] = {
    parameter.name: parameter
    for parameter in (
        ParameterConfig(
            name="pm25",
            label="PM2.5",
            unit="ug/m3",
            threshold=CeilingThreshold(safe_limit=75, hazard_limit=150),
            analog_full_scale=300,
        ),
        ParameterConfig(
            name="pm10",
            label="PM10",
            unit="ug/m3",
            threshold=CeilingThreshold(safe_limit=50, hazard_limit=100),
            analog_full_scale=200,
        ),
        ParameterConfig(
            name="co",
            label="CO",
            unit="ppm",
            threshold=CeilingThreshold(safe_limit=50, hazard_limit=200),
            analog_full_scale=300,
        ),
        ParameterConfig(
            name="no2",
            label="NO2",
            unit="ug/m3",
            threshold=CeilingThreshold(safe_limit=100, hazard_limit=200),
            analog_full_scale=300,
        ),
        ParameterConfig(
            name="o3",
            label="O3",
            unit="ug/m3",
            threshold=CeilingThreshold(safe_limit=100, hazard_limit=200),
            analog_full_scale=300,
        ),
        ParameterConfig(
            name="so2",
            label="SO2",
            unit="ug/m3",
            threshold=CeilingThreshold(safe_limit=50, hazard_limit=150),
            analog_full_scale=200,
        ),
        ParameterConfig(
            name="temperature",
            label="Temp",
            unit="C",
            threshold=ComfortThreshold(low_limit=20, high_limit=30),
            fallback=TEMPERATURE_FALLBACK,
            fallback_group="dht",
        ),
        ParameterConfig(
            name="humidity",
            label="Humidity",
            unit="%",
            threshold=ComfortThreshold(low_limit=30, high_limit=70),
            fallback=HUMIDITY_FALLBACK,
            fallback_group="dht",
        ),
    )
}

_PROFILE_PARAMETERS: Dict[str, List[str]] = {
    "full": ["pm25", "pm10", "co", "no2", "o3", "so2", "temperature", "humidity"],
    "compact": ["pm25", "pm10", "co", "no2", "temperature", "humidity"],
    "minimal": ["pm25", "co"],
}

# (actuator, parameter, minimum band); entries for absent parameters are dropped per profile
_DEFAULT_TRIGGERS = (
    (ActuatorName.alarm, ALL_PARAMETERS, SeverityBand.HAZARD),
    (ActuatorName.fan, "pm25", SeverityBand.MODERATE),
    (ActuatorName.vent, "co", SeverityBand.MODERATE),
    (ActuatorName.vent, "humidity", SeverityBand.HAZARD),
    (ActuatorName.vent, "temperature", SeverityBand.HAZARD),
)


def _default_rules(parameter_names: Iterable[str]) -> List[ActuatorRule]:
    available = set(parameter_names)
    rules = []
    for actuator in ActuatorName:
        triggers = [
            Trigger(parameter=parameter, min_band=band)
            for rule_actuator, parameter, band in _DEFAULT_TRIGGERS
            if rule_actuator is actuator and (parameter == ALL_PARAMETERS or parameter in available)
        ]
        rules.append(ActuatorRule(actuator=actuator, triggers=triggers))
    return rules


def available_profiles() -> List[str]:
    return list(_PROFILE_PARAMETERS)


def build_profile(name: str) -> MonitorConfig:
    """Return the built-in configuration registered under ``name``."""
    try:
        names = _PROFILE_PARAMETERS[name]
    except KeyError as exc:
        known = ", ".join(available_profiles())
        raise ConfigurationError(f"Unknown profile {name!r}; expected one of: {known}.") from exc
    return MonitorConfig(
        profile=name,
        parameters=[_PARAMETERS[parameter] for parameter in names],
        rules=_default_rules(names),
    )


def resolve_config(profile: Optional[str] = None, config_path: Optional[str] = None) -> MonitorConfig:
    """A configuration file wins over a profile name; both fall back to settings."""
    settings = get_settings()
    path = config_path if config_path is not None else settings.config_path
    if path:
        return load_config_file(Path(path))
    return build_profile(profile or settings.profile)

