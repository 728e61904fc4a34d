"""Pydantic schemas for cycle reports handed to presentation sinks."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from models.records import SeverityBand


class ParameterStatus(BaseModel):
    """Value and band of one parameter within a cycle."""

    name: str
    label: str
    unit: str = ""
    value: float
    band: SeverityBand
    fallback: bool = Field(
        default=False, description="True when the value is a substitute for a failed sensor."
    )


class ActuatorStatus(BaseModel):
    alarm: bool
    fan: bool
    vent: bool


class CycleReport(BaseModel):
    """Everything a display or log sink needs about one completed cycle."""

    cycle: int = Field(..., ge=1)
    profile: str
    taken_at: datetime
    parameters: List[ParameterStatus] = Field(default_factory=list)
    actuators: ActuatorStatus

    def status_for(self, name: str) -> Optional[ParameterStatus]:
        for status in self.parameters:
            if status.name == name:
                return status
        return None
