"""Severity classification of raw parameter readings."""

from __future__ import annotations

import math
from typing import Dict, Iterable

from models.config import CeilingThreshold, ComfortThreshold, MonitorConfig, ParameterConfig
from models.errors import InvalidReadingError
from models.records import Classification, Reading, SeverityBand


def classify_value(value: float, threshold: CeilingThreshold | ComfortThreshold) -> SeverityBand:
    """Map one reading onto a band; both limits are inclusive toward the worse band."""
    if isinstance(threshold, ComfortThreshold):
        if value >= threshold.high_limit:
            return SeverityBand.HAZARD
        if value < threshold.low_limit:
            return SeverityBand.MODERATE
        return SeverityBand.SAFE

    if value >= threshold.hazard_limit:
        return SeverityBand.HAZARD
    if value >= threshold.safe_limit:
        return SeverityBand.MODERATE
    return SeverityBand.SAFE


def classify(reading: Reading, parameters: Iterable[ParameterConfig]) -> Classification:
    """Classify every configured parameter of ``reading`` independently.

    Raises InvalidReadingError when a configured parameter is absent or not a
    finite number; substitution of failed sensors happens before this point.
    """
    bands: Dict[str, SeverityBand] = {}
    for parameter in parameters:
        if parameter.name not in reading:
            raise InvalidReadingError(f"Reading is missing parameter {parameter.name!r}.")
        value = reading[parameter.name]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidReadingError(
                f"Reading for {parameter.name!r} is not a finite number: {value!r}"
            )
        bands[parameter.name] = classify_value(value, parameter.threshold)
    return Classification(bands=bands)


class Classifier:
    """Classifier bound to the parameter table of a MonitorConfig."""

    def __init__(self, config: MonitorConfig) -> None:
        self.config = config

    def classify(self, reading: Reading) -> Classification:
        return classify(reading, self.config.parameters)
