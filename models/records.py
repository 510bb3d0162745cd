"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True, slots=True)
class Reading:
    """A single sample reported by the air monitor."""

    timestamp: datetime
    particle_count: float
    pm25: float
    hcho: float
    co2: float
    temperature: float
    humidity: float
    voc: float
    sequence_number: int
    is_valid: bool
    id: int = 0


class Metric(str, Enum):
    """Numeric measurements carried by every reading."""

    particle = "particle"
    pm25 = "pm25"
    hcho = "hcho"
    co2 = "co2"
    temperature = "temperature"
    humidity = "humidity"
    voc = "voc"

    @property
    def attribute(self) -> str:
        if self is Metric.particle:
            return "particle_count"
        return self.value

    def value_of(self, reading: Reading) -> float:
        return getattr(reading, self.attribute)
