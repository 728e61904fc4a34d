"""Pydantic schemas for threshold tables and actuator rules."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from models.errors import ConfigurationError
from models.records import SeverityBand

ALL_PARAMETERS = "*"


class ActuatorName(str, Enum):
    """Outputs driven by the decision engine."""

    alarm = "alarm"
    fan = "fan"
    vent = "vent"


class CeilingThreshold(BaseModel):
    """Pollutant limits where higher readings are worse."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["ceiling"] = "ceiling"
    safe_limit: float = Field(..., allow_inf_nan=False)
    hazard_limit: float = Field(..., allow_inf_nan=False)

    @model_validator(mode="after")
    def _check_order(self) -> "CeilingThreshold":
        if self.safe_limit > self.hazard_limit:
            raise ValueError(
                f"safe_limit {self.safe_limit} exceeds hazard_limit {self.hazard_limit}"
            )
        return self


class ComfortThreshold(BaseModel):
    """Comfort range: at or above ``high_limit`` is hazardous, below ``low_limit`` is moderate."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["comfort"] = "comfort"
    low_limit: float = Field(..., allow_inf_nan=False)
    high_limit: float = Field(..., allow_inf_nan=False)

    @model_validator(mode="after")
    def _check_order(self) -> "ComfortThreshold":
        if self.low_limit > self.high_limit:
            raise ValueError(
                f"low_limit {self.low_limit} exceeds high_limit {self.high_limit}"
            )
        return self


Threshold = Annotated[
    Union[CeilingThreshold, ComfortThreshold], Field(discriminator="kind")
]


class ParameterConfig(BaseModel):
    """A monitored quantity and the limits used to classify it."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    label: str = ""
    unit: str = ""
    threshold: Threshold
    fallback: Optional[float] = Field(
        default=None,
        allow_inf_nan=False,
        description="Substitute value used when the sensor fails.",
    )
    fallback_group: Optional[str] = Field(
        default=None,
        description="Parameters sharing a group fall back together when any of them fails.",
    )
    analog_full_scale: Optional[int] = Field(
        default=None,
        gt=0,
        description="Engineering value at the top of the ADC range; None for direct readings.",
    )

    @property
    def display_name(self) -> str:
        return self.label or self.name


class Trigger(BaseModel):
    """Fires when ``parameter`` is classified at ``min_band`` or worse."""

    model_config = ConfigDict(frozen=True)

    parameter: str = Field(..., min_length=1)
    min_band: SeverityBand = SeverityBand.HAZARD


class ActuatorRule(BaseModel):
    """An actuator is on when any of its triggers fires."""

    model_config = ConfigDict(frozen=True)

    actuator: ActuatorName
    triggers: List[Trigger] = Field(default_factory=list)


class MonitorConfig(BaseModel):
    """Complete engine configuration: parameters and one rule per actuator."""

    model_config = ConfigDict(frozen=True)

    profile: str = "custom"
    parameters: List[ParameterConfig] = Field(..., min_length=1)
    rules: List[ActuatorRule]

    @model_validator(mode="after")
    def _check_consistency(self) -> "MonitorConfig":
        names = [parameter.name for parameter in self.parameters]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(f"duplicate parameters: {', '.join(duplicates)}")

        seen: Dict[ActuatorName, int] = {}
        for rule in self.rules:
            seen[rule.actuator] = seen.get(rule.actuator, 0) + 1
            for trigger in rule.triggers:
                if trigger.parameter != ALL_PARAMETERS and trigger.parameter not in names:
                    raise ValueError(
                        f"rule {rule.actuator.value!r} references unconfigured parameter "
                        f"{trigger.parameter!r}"
                    )

        missing = [actuator.value for actuator in ActuatorName if actuator not in seen]
        if missing:
            raise ValueError(f"missing actuator rules: {', '.join(missing)}")
        repeated = [actuator.value for actuator, count in seen.items() if count > 1]
        if repeated:
            raise ValueError(f"duplicate actuator rules: {', '.join(repeated)}")
        return self

    @property
    def parameter_names(self) -> List[str]:
        return [parameter.name for parameter in self.parameters]

    def parameter(self, name: str) -> ParameterConfig:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        raise KeyError(f"Parameter {name!r} is not configured.")

    def rule(self, actuator: ActuatorName) -> ActuatorRule:
        for rule in self.rules:
            if rule.actuator is actuator:
                return rule
        raise KeyError(f"No rule configured for actuator {actuator.value!r}.")


def parse_config(payload: Union[str, bytes, dict]) -> MonitorConfig:
    """Validate a JSON document or mapping, raising ConfigurationError on failure."""
    try:
        if isinstance(payload, dict):
            return MonitorConfig.model_validate(payload)
        return MonitorConfig.model_validate_json(payload)
    except ValidationError as exc:
        raise ConfigurationError(_summarize(exc)) from exc


def load_config_file(path: Path) -> MonitorConfig:
    try:
        contents = path.read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration {path}: {exc}") from exc
    return parse_config(contents)


def _summarize(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "invalid configuration"
