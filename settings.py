from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_PROFILE_ENV = "AIRMON_PROFILE"
_CONFIG_PATH_ENV = "AIRMON_CONFIG_PATH"
_INTERVAL_ENV = "AIRMON_CYCLE_INTERVAL"
_SEED_ENV = "AIRMON_SIM_SEED"
_FAILURE_RATE_ENV = "AIRMON_SIM_FAILURE_RATE"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    profile: str
    config_path: Optional[str]
    cycle_interval: float
    sim_seed: Optional[int]
    sim_failure_rate: float
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_interval(default: float) -> float:
    value = os.getenv(_INTERVAL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = float(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_seed() -> Optional[int]:
    value = _read_optional_env(_SEED_ENV, None)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _read_failure_rate(default: float) -> float:
    value = _read_optional_env(_FAILURE_RATE_ENV, None)
    if value is None:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if 0.0 <= parsed <= 1.0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        profile=_read_str_env(_PROFILE_ENV, "full"),
        config_path=_read_optional_env(_CONFIG_PATH_ENV, None),
        cycle_interval=_read_interval(1.0),
        sim_seed=_read_seed(),
        sim_failure_rate=_read_failure_rate(0.0),
        log_level=_read_log_level("INFO"),
    )
