"""Actuator decisions derived from a Classification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

from models.config import ALL_PARAMETERS, ActuatorName, ActuatorRule, MonitorConfig
from models.errors import ConfigurationError, InvalidReadingError
from models.records import ActuatorState, Classification, SeverityBand


@dataclass(frozen=True)
class _CompiledRule:
    actuator: ActuatorName
    # (parameter, minimum band) pairs with the wildcard already expanded
    triggers: Tuple[Tuple[str, SeverityBand], ...]

    def fires(self, classification: Classification) -> bool:
        for name, min_band in self.triggers:
            try:
                band = classification[name]
            except KeyError as exc:
                raise InvalidReadingError(
                    f"Classification lacks parameter {name!r} needed by {self.actuator.value!r}."
                ) from exc
            if band >= min_band:
                return True
        return False


def _compile(rule: ActuatorRule, parameter_names: Sequence[str]) -> _CompiledRule:
    expanded: list[Tuple[str, SeverityBand]] = []
    for trigger in rule.triggers:
        if trigger.parameter == ALL_PARAMETERS:
            expanded.extend((name, trigger.min_band) for name in parameter_names)
        elif trigger.parameter in parameter_names:
            expanded.append((trigger.parameter, trigger.min_band))
        else:
            raise ConfigurationError(
                f"Rule {rule.actuator.value!r} references unconfigured parameter "
                f"{trigger.parameter!r}."
            )
    return _CompiledRule(actuator=rule.actuator, triggers=tuple(expanded))


class DecisionEngine:
    """Evaluates the alarm, fan and vent rules of a MonitorConfig.

    Rules are checked against the configured parameters once, at construction.
    """

    def __init__(self, config: MonitorConfig) -> None:
        names = config.parameter_names
        rules: Dict[ActuatorName, _CompiledRule] = {}
        for rule in config.rules:
            if rule.actuator in rules:
                raise ConfigurationError(f"Duplicate rule for actuator {rule.actuator.value!r}.")
            rules[rule.actuator] = _compile(rule, names)
        missing = [actuator.value for actuator in ActuatorName if actuator not in rules]
        if missing:
            raise ConfigurationError(f"No rule configured for: {', '.join(missing)}.")
        self._rules = rules

    def decide(self, classification: Classification) -> ActuatorState:
        return ActuatorState(
            alarm=self._rules[ActuatorName.alarm].fires(classification),
            fan=self._rules[ActuatorName.fan].fires(classification),
            vent=self._rules[ActuatorName.vent].fires(classification),
        )
