from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from settings import get_settings

DEFAULT_OUTPUT = "text"
OUTPUT_FORMATS = ("text", "json")

_OUTPUT_ENV = "AIRMON_OUTPUT"


@dataclass(frozen=True)
class CLIConfig:
    profile: str
    config_path: Optional[str] = None
    interval: float = 1.0
    output: str = DEFAULT_OUTPUT


def _read_output(value: Optional[str], default: str) -> str:
    if value is None:
        return default
    candidate = value.strip().lower()
    return candidate if candidate in OUTPUT_FORMATS else default


def load_config(
    profile: Optional[str] = None,
    config_path: Optional[str] = None,
    interval: Optional[float] = None,
    output: Optional[str] = None,
) -> CLIConfig:
    settings = get_settings()
    if interval is None or interval <= 0:
        interval = settings.cycle_interval
    return CLIConfig(
        profile=profile or settings.profile,
        config_path=config_path if config_path is not None else settings.config_path,
        interval=interval,
        output=_read_output(output if output is not None else os.getenv(_OUTPUT_ENV), DEFAULT_OUTPUT),
    )
