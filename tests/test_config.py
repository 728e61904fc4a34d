"""Tests for threshold configuration loading and the built-in profiles."""

from __future__ import annotations

import json
import math

import pytest
from pydantic import ValidationError

from models.config import (
    ActuatorName,
    CeilingThreshold,
    ComfortThreshold,
    load_config_file,
    parse_config,
)
from models.errors import ConfigurationError
from models.records import SeverityBand
from services.profiles import available_profiles, build_profile


def _document() -> dict:
    return {
        "profile": "lab",
        "parameters": [
            {
                "name": "co",
                "label": "CO",
                "unit": "ppm",
                "threshold": {"kind": "ceiling", "safe_limit": 50, "hazard_limit": 200},
            },
            {
                "name": "humidity",
                "threshold": {"kind": "comfort", "low_limit": 30, "high_limit": 70},
                "fallback": 50,
            },
        ],
        "rules": [
            {"actuator": "alarm", "triggers": [{"parameter": "*", "min_band": "HAZARD"}]},
            {"actuator": "fan", "triggers": []},
            {
                "actuator": "vent",
                "triggers": [
                    {"parameter": "co", "min_band": "MODERATE"},
                    {"parameter": "humidity"},
                ],
            },
        ],
    }


def test_profiles_have_expected_parameters() -> None:
    assert available_profiles() == ["full", "compact", "minimal"]
    assert len(build_profile("full").parameters) == 8
    assert len(build_profile("compact").parameters) == 6
    assert build_profile("minimal").parameter_names == ["pm25", "co"]


def test_full_profile_limits() -> None:
    config = build_profile("full")

    assert config.parameter("pm25").threshold == CeilingThreshold(safe_limit=75, hazard_limit=150)
    assert config.parameter("so2").threshold == CeilingThreshold(safe_limit=50, hazard_limit=150)
    assert config.parameter("temperature").threshold == ComfortThreshold(low_limit=20, high_limit=30)
    assert config.parameter("temperature").fallback == 25.0
    assert config.parameter("humidity").fallback == 50.0
    assert config.parameter("pm10").analog_full_scale == 200


def test_minimal_profile_drops_rules_for_absent_parameters() -> None:
    config = build_profile("minimal")

    vent = config.rule(ActuatorName.vent)

    assert [trigger.parameter for trigger in vent.triggers] == ["co"]


def test_unknown_profile_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="Unknown profile"):
        build_profile("office")


def test_parse_valid_document() -> None:
    config = parse_config(json.dumps(_document()))

    assert config.profile == "lab"
    assert isinstance(config.parameter("humidity").threshold, ComfortThreshold)
    humidity_trigger = config.rule(ActuatorName.vent).triggers[1]
    assert humidity_trigger.min_band is SeverityBand.HAZARD


def test_inverted_limits_are_rejected() -> None:
    with pytest.raises(ValidationError):
        CeilingThreshold(safe_limit=200, hazard_limit=50)

    document = _document()
    document["parameters"][1]["threshold"] = {"kind": "comfort", "low_limit": 80, "high_limit": 70}
    with pytest.raises(ConfigurationError, match="low_limit"):
        parse_config(document)


def test_rule_referencing_unknown_parameter_is_rejected() -> None:
    document = _document()
    document["rules"][1]["triggers"] = [{"parameter": "pm25", "min_band": "MODERATE"}]

    with pytest.raises(ConfigurationError, match="pm25"):
        parse_config(document)


def test_missing_actuator_rule_is_rejected() -> None:
    document = _document()
    document["rules"] = document["rules"][:2]

    with pytest.raises(ConfigurationError, match="vent"):
        parse_config(document)


def test_duplicate_parameters_are_rejected() -> None:
    document = _document()
    document["parameters"].append(document["parameters"][0])

    with pytest.raises(ConfigurationError, match="duplicate parameters"):
        parse_config(document)


def test_unknown_threshold_kind_is_rejected() -> None:
    document = _document()
    document["parameters"][0]["threshold"]["kind"] = "floor"

    with pytest.raises(ConfigurationError):
        parse_config(document)


def test_load_config_file(tmp_path) -> None:
    path = tmp_path / "thresholds.json"
    path.write_text(build_profile("compact").model_dump_json(), encoding="utf-8")

    config = load_config_file(path)

    assert config.model_dump() == build_profile("compact").model_dump()


def test_load_missing_file(tmp_path) -> None:
    with pytest.raises(ConfigurationError, match="Cannot read"):
        load_config_file(tmp_path / "absent.json")


def test_malformed_json_is_a_configuration_error(tmp_path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config_file(path)


@pytest.mark.parametrize("limit", [math.nan, math.inf, -math.inf])
def test_non_finite_limits_are_rejected(limit: float) -> None:
    document = _document()
    document["parameters"][0]["threshold"]["hazard_limit"] = limit

    with pytest.raises(ConfigurationError, match="hazard_limit"):
        parse_config(document)


def test_non_finite_comfort_limit_is_rejected() -> None:
    document = _document()
    document["parameters"][1]["threshold"]["low_limit"] = math.nan

    with pytest.raises(ConfigurationError, match="low_limit"):
        parse_config(document)


def test_non_finite_fallback_is_rejected() -> None:
    document = _document()
    document["parameters"][1]["fallback"] = math.nan

    with pytest.raises(ConfigurationError, match="fallback"):
        parse_config(document)


def test_nan_in_json_file_is_a_configuration_error(tmp_path) -> None:
    document = _document()
    document["parameters"][0]["threshold"]["safe_limit"] = math.nan
    path = tmp_path / "nan.json"
    path.write_text(json.dumps(document), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_config_file(path)


def test_threshold_constructor_rejects_infinity() -> None:
    with pytest.raises(ValidationError):
        CeilingThreshold(safe_limit=50, hazard_limit=math.inf)
