"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from functools import total_ordering
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, Mapping


@total_ordering
class SeverityBand(Enum):
    """Three-tier severity of a single parameter, ordered SAFE < MODERATE < HAZARD."""

    SAFE = "SAFE"
    MODERATE = "MODERATE"
    HAZARD = "HAZARD"

    @property
    def rank(self) -> int:
        return _BAND_RANKS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SeverityBand):
            return NotImplemented
        return self.rank < other.rank


_BAND_RANKS: Dict[SeverityBand, int] = {
    SeverityBand.SAFE: 0,
    SeverityBand.MODERATE: 1,
    SeverityBand.HAZARD: 2,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class Reading:
    """Latest value of every monitored parameter for one cycle.

    ``fallbacks`` names the parameters whose value was substituted by the
    acquisition side after a sensor failure.
    """

    values: Mapping[str, float]
    taken_at: datetime = field(default_factory=_utcnow)
    fallbacks: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))
        object.__setattr__(self, "fallbacks", frozenset(self.fallbacks))

    def __getitem__(self, name: str) -> float:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values


@dataclass(frozen=True, slots=True)
class Classification:
    """Severity band per parameter, derived from a single Reading."""

    bands: Mapping[str, SeverityBand]

    def __post_init__(self) -> None:
        object.__setattr__(self, "bands", MappingProxyType(dict(self.bands)))

    def __getitem__(self, name: str) -> SeverityBand:
        return self.bands[name]

    def __contains__(self, name: object) -> bool:
        return name in self.bands

    def __iter__(self) -> Iterator[str]:
        return iter(self.bands)

    def __len__(self) -> int:
        return len(self.bands)

    def at_least(self, band: SeverityBand) -> list[str]:
        """Names of the parameters classified at ``band`` or worse."""
        return [name for name, value in self.bands.items() if value >= band]

    def worst(self) -> SeverityBand:
        return max(self.bands.values(), default=SeverityBand.SAFE)


@dataclass(frozen=True, slots=True)
class ActuatorState:
    """Alarm, fan and ventilation commands for one cycle."""

    alarm: bool = False
    fan: bool = False
    vent: bool = False

    def as_dict(self) -> Dict[str, bool]:
        return {"alarm": self.alarm, "fan": self.fan, "vent": self.vent}
