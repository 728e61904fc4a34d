"""Tests for reading sources and fallback substitution."""

from __future__ import annotations

import logging
import math

import pytest

from models.errors import InvalidReadingError
from services.acquisition import (
    AnalogSource,
    SimulatedSource,
    StaticSource,
    build_reading,
    scale_analog,
)
from services.profiles import build_profile


@pytest.mark.parametrize(
    ("raw", "full_scale", "expected"),
    [
        (0, 300, 0),
        (2048, 300, 150),
        (4095, 300, 300),
        (4095, 200, 200),
        (5000, 300, 300),
        (-12, 300, 0),
    ],
)
def test_scale_analog(raw: int, full_scale: int, expected: int) -> None:
    assert scale_analog(raw, full_scale) == expected


def test_failed_dht_values_fall_back(caplog) -> None:
    config = build_profile("full")
    values = {name: 10 for name in config.parameter_names}
    values.update(temperature=math.nan, humidity=None)

    with caplog.at_level(logging.WARNING, logger="services.acquisition"):
        reading = build_reading(config, values)

    assert reading["temperature"] == 25.0
    assert reading["humidity"] == 50.0
    assert reading.fallbacks == {"temperature", "humidity"}
    assert sum("using fallback" in record.getMessage() for record in caplog.records) == 2


def test_missing_value_without_fallback_fails() -> None:
    config = build_profile("minimal")

    with pytest.raises(InvalidReadingError, match="co"):
        StaticSource(config, {"pm25": 12}).read()


def test_static_source_returns_fresh_readings() -> None:
    config = build_profile("minimal")
    source = StaticSource(config, {"pm25": 12, "co": 40})

    first = source.read()
    second = source.read()

    assert dict(first.values) == {"pm25": 12, "co": 40}
    assert first.values == second.values
    assert not first.fallbacks


def test_reading_values_are_read_only() -> None:
    reading = StaticSource(build_profile("minimal"), {"pm25": 12, "co": 40}).read()

    with pytest.raises(TypeError):
        reading.values["pm25"] = 999  # type: ignore[index]


def test_analog_source_scales_adc_counts() -> None:
    config = build_profile("compact")
    channels = {
        "pm25": lambda: 4095,
        "pm10": lambda: 2048,
        "co": lambda: 0,
        "no2": lambda: 1365,
        "temperature": lambda: 22.4,
        "humidity": lambda: None,
    }

    reading = AnalogSource(config, channels).read()

    assert reading["pm25"] == 300
    assert reading["pm10"] == 100
    assert reading["co"] == 0
    assert reading["no2"] == 100
    assert reading["temperature"] == 25.0
    assert reading["humidity"] == 50.0
    assert reading.fallbacks == {"temperature", "humidity"}


def test_analog_source_requires_every_channel() -> None:
    with pytest.raises(ValueError, match="co"):
        AnalogSource(build_profile("minimal"), {"pm25": lambda: 0})


def test_simulated_source_is_deterministic_for_a_seed() -> None:
    config = build_profile("full")

    first = SimulatedSource(config, seed=42)
    second = SimulatedSource(config, seed=42)

    assert [first.read().values for _ in range(5)] == [second.read().values for _ in range(5)]


def test_simulated_values_stay_in_range() -> None:
    config = build_profile("full")
    source = SimulatedSource(config, seed=3)

    for _ in range(50):
        reading = source.read()
        for parameter in config.parameters:
            value = reading[parameter.name]
            if parameter.analog_full_scale is not None:
                assert 0 <= value <= parameter.analog_full_scale
            else:
                assert math.isfinite(value)
        assert not reading.fallbacks


def test_simulated_sensor_failures_use_fallbacks() -> None:
    config = build_profile("full")
    source = SimulatedSource(config, seed=1, failure_rate=1.0)

    reading = source.read()

    assert reading.fallbacks == {"temperature", "humidity"}
    assert reading["temperature"] == 25.0


def test_invalid_failure_rate() -> None:
    with pytest.raises(ValueError):
        SimulatedSource(build_profile("full"), failure_rate=1.5)


def test_one_failed_dht_value_replaces_the_whole_group(caplog) -> None:
    config = build_profile("full")
    values = {name: 10 for name in config.parameter_names}
    values.update(temperature=22.4, humidity=math.nan)

    with caplog.at_level(logging.WARNING, logger="services.acquisition"):
        reading = build_reading(config, values)

    assert reading["temperature"] == 25.0
    assert reading["humidity"] == 50.0
    assert reading.fallbacks == {"temperature", "humidity"}
    reasons = {record.parameter: record.reason for record in caplog.records}
    assert reasons == {"temperature": "dht group failed", "humidity": None}


def test_ungrouped_fallback_only_replaces_itself() -> None:
    full = build_profile("full")
    parameters = [
        parameter.model_copy(update={"fallback_group": None}) for parameter in full.parameters
    ]
    config = full.model_copy(update={"parameters": parameters})
    values = {name: 10 for name in config.parameter_names}
    values.update(temperature=22.4, humidity=None)

    reading = build_reading(config, values)

    assert reading["temperature"] == 22.4
    assert reading.fallbacks == {"humidity"}
