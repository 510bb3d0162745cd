"""Air quality index and comfort scoring for a single reading."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from services.statistics import round_half_away


class PollutionLevel(str, Enum):
    """PM2.5 air quality categories."""

    good = "优"
    moderate = "良"
    light = "轻度污染"
    medium = "中度污染"
    heavy = "重度污染"
    severe = "严重污染"


class ComfortLevel(str, Enum):
    """Qualitative grades for CO2, VOC and the overall score."""

    excellent = "优秀"
    good = "良好"
    fair = "一般"
    poor = "较差"
    very_poor = "很差"


@dataclass(frozen=True)
class Segment:
    """Linear map from a concentration range onto an index range."""

    conc_low: float
    conc_span: float
    index_low: float
    index_span: float

    def at(self, value: float) -> float:
        return self.index_low + (value - self.conc_low) * self.index_span / self.conc_span


@dataclass(frozen=True)
class Band:
    upper: float
    label: Enum
    segment: Optional[Segment] = None


PM25_BANDS = (
    Band(35, PollutionLevel.good, Segment(0, 35, 0, 50)),
    Band(75, PollutionLevel.moderate, Segment(35, 40, 50, 50)),
    Band(115, PollutionLevel.light, Segment(75, 40, 100, 50)),
    Band(150, PollutionLevel.medium, Segment(115, 35, 150, 50)),
    Band(250, PollutionLevel.heavy, Segment(150, 100, 200, 100)),
    Band(math.inf, PollutionLevel.severe, Segment(250, 100, 300, 100)),
)

CO2_BANDS = (
    Band(450, ComfortLevel.excellent),
    Band(700, ComfortLevel.good),
    Band(1000, ComfortLevel.fair),
    Band(2000, ComfortLevel.poor),
    Band(math.inf, ComfortLevel.very_poor),
)

VOC_BANDS = (
    Band(200, ComfortLevel.excellent),
    Band(400, ComfortLevel.good),
    Band(600, ComfortLevel.fair),
    Band(math.inf, ComfortLevel.poor),
)

# Lower bounds, checked in order; anything below the last is poor.
OVERALL_LEVELS = (
    (80, ComfortLevel.excellent),
    (60, ComfortLevel.good),
    (40, ComfortLevel.fair),
)

PM25_AQI_BASELINE = 50
PM25_AQI_PENALTY = 0.5
CO2_BASELINE = 700
CO2_PENALTY = 0.02
VOC_BASELINE = 300
VOC_PENALTY = 0.05


@dataclass(frozen=True)
class AQIResult:
    pm25_aqi: int
    pm25_level: PollutionLevel
    co2_level: ComfortLevel
    voc_level: ComfortLevel
    overall_score: int
    overall_level: ComfortLevel


def piecewise_lookup(bands: Sequence[Band], value: float) -> Band:
    """Return the first band whose upper bound covers ``value``."""
    for band in bands:
        if value <= band.upper:
            return band
    return bands[-1]


def pm25_index(pm25: float) -> float:
    band = piecewise_lookup(PM25_BANDS, pm25)
    assert band.segment is not None
    return band.segment.at(pm25)


def overall_level(score_value: float) -> ComfortLevel:
    for lower, level in OVERALL_LEVELS:
        if score_value >= lower:
            return level
    return ComfortLevel.poor


def composite_score(aqi: float, co2: float, voc: float) -> float:
    value = 100.0
    value -= max(0.0, aqi - PM25_AQI_BASELINE) * PM25_AQI_PENALTY
    value -= max(0.0, co2 - CO2_BASELINE) * CO2_PENALTY
    value -= max(0.0, voc - VOC_BASELINE) * VOC_PENALTY
    return max(0.0, value)


def score(pm25: float, co2: float, voc: float) -> AQIResult:
    aqi = pm25_index(pm25)
    composite = composite_score(aqi, co2, voc)
    return AQIResult(
        pm25_aqi=int(round_half_away(aqi)),
        pm25_level=piecewise_lookup(PM25_BANDS, pm25).label,
        co2_level=piecewise_lookup(CO2_BANDS, co2).label,
        voc_level=piecewise_lookup(VOC_BANDS, voc).label,
        overall_score=int(round_half_away(composite)),
        overall_level=overall_level(composite),
    )
