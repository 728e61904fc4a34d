"""Reading sources: fixed values, analog channels and a seeded simulator.

Sources own the fallback policy. A failed sensor is replaced by its
configured fallback before the reading reaches the classifier; a parameter
without a fallback turns the failure into an InvalidReadingError.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Callable, Dict, Mapping, Optional, Protocol, Set

from models.config import ComfortThreshold, MonitorConfig, ParameterConfig
from models.errors import InvalidReadingError
from models.records import Reading

logger = logging.getLogger(__name__)

ADC_MAX = 4095

RawChannel = Callable[[], Optional[float]]


class ReadingSource(Protocol):
    def read(self) -> Reading:
        ...


def scale_analog(raw: float, full_scale: int, adc_max: int = ADC_MAX) -> int:
    """Integer linear mapping of an ADC count onto ``0..full_scale``."""
    count = min(max(int(raw), 0), adc_max)
    return count * full_scale // adc_max


def _is_valid(value: object) -> bool:
    if value is None or isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def build_reading(config: MonitorConfig, raw_values: Mapping[str, object]) -> Reading:
    """Assemble a Reading for every configured parameter, substituting fallbacks.

    When one member of a ``fallback_group`` fails, every member of that group
    with a fallback is substituted, since they come from the same sensor.
    """
    failed_groups = {
        parameter.fallback_group
        for parameter in config.parameters
        if parameter.fallback_group is not None
        and not _is_valid(raw_values.get(parameter.name))
    }

    values: Dict[str, float] = {}
    fallbacks: Set[str] = set()
    for parameter in config.parameters:
        value = raw_values.get(parameter.name)
        valid = _is_valid(value)
        group_failed = parameter.fallback_group in failed_groups
        if valid and not (group_failed and parameter.fallback is not None):
            values[parameter.name] = value  # type: ignore[assignment]
            continue
        if parameter.fallback is None:
            raise InvalidReadingError(
                f"Sensor for {parameter.name!r} returned {value!r} and has no fallback."
            )
        logger.warning(
            "Sensor reading invalid; using fallback",
            extra={
                "parameter": parameter.name,
                "invalid_value": value,
                "fallback": parameter.fallback,
                "reason": None if not valid else f"{parameter.fallback_group} group failed",
            },
        )
        values[parameter.name] = parameter.fallback
        fallbacks.add(parameter.name)
    return Reading(values=values, fallbacks=frozenset(fallbacks))


class StaticSource:
    """Serves the same values every cycle."""

    def __init__(self, config: MonitorConfig, values: Mapping[str, object]) -> None:
        self.config = config
        self.values = dict(values)

    def read(self) -> Reading:
        return build_reading(self.config, self.values)


class AnalogSource:
    """Polls one raw channel per parameter.

    Parameters with an ``analog_full_scale`` receive ADC counts which are
    scaled to engineering units; the others are read as-is.
    """

    def __init__(self, config: MonitorConfig, channels: Mapping[str, RawChannel]) -> None:
        missing = [name for name in config.parameter_names if name not in channels]
        if missing:
            raise ValueError(f"No channel wired for: {', '.join(missing)}")
        self.config = config
        self.channels = dict(channels)

    def read(self) -> Reading:
        raw_values: Dict[str, object] = {}
        for parameter in self.config.parameters:
            raw = self.channels[parameter.name]()
            if parameter.analog_full_scale is not None and _is_valid(raw):
                raw_values[parameter.name] = scale_analog(raw, parameter.analog_full_scale)  # type: ignore[arg-type]
            else:
                raw_values[parameter.name] = raw
        return build_reading(self.config, raw_values)


class SimulatedSource(AnalogSource):
    """Random potentiometer counts and DHT22 values from a seeded generator.

    ``failure_rate`` is the chance per cycle that the temperature/humidity
    sensor returns NaN, as a DHT22 occasionally does.
    """

    def __init__(
        self,
        config: MonitorConfig,
        seed: Optional[int] = None,
        failure_rate: float = 0.0,
    ) -> None:
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be between 0 and 1.")
        self._random = random.Random(seed)
        self.failure_rate = failure_rate
        self._dht_failed = False
        channels = {
            parameter.name: self._channel_for(parameter) for parameter in config.parameters
        }
        super().__init__(config, channels)

    def read(self) -> Reading:
        self._dht_failed = self._random.random() < self.failure_rate
        return super().read()

    def _channel_for(self, parameter: ParameterConfig) -> RawChannel:
        if parameter.analog_full_scale is not None:
            return lambda: self._random.randint(0, ADC_MAX)

        threshold = parameter.threshold
        if isinstance(threshold, ComfortThreshold):
            span = max(threshold.high_limit - threshold.low_limit, 1.0)
            low = threshold.low_limit - span / 2
            high = threshold.high_limit + span / 2
        else:
            low = 0.0
            high = threshold.hazard_limit * 1.5 or 1.0

        def channel() -> Optional[float]:
            if self._dht_failed:
                return math.nan
            return round(self._random.uniform(low, high), 1)

        return channel
