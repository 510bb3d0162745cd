"""Hour-of-day aggregation for sensor readings."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from models.records import Metric, Reading
from services.statistics import round_half_away

TRENDED_METRICS = (
    Metric.pm25,
    Metric.co2,
    Metric.hcho,
    Metric.voc,
    Metric.temperature,
    Metric.humidity,
)
PEAK_METRICS = (Metric.pm25, Metric.co2)


@dataclass(frozen=True)
class HourlyAverage:
    """Per-metric averages for readings received within one hour of the day."""

    hour: int
    pm25: float
    co2: float
    hcho: float
    voc: float
    temperature: float
    humidity: float
    count: int


@dataclass(frozen=True)
class PeakHour:
    hour: int = 0
    value: float = 0.0


class Aggregator:
    """Pure aggregation component that can be unit tested in isolation."""

    def aggregate_by_hour(self, readings: Iterable[Reading]) -> List[HourlyAverage]:
        buckets: Dict[int, List[Reading]] = {}
        for reading in readings:
            buckets.setdefault(reading.timestamp.hour, []).append(reading)

        trend: List[HourlyAverage] = []
        for hour in range(24):
            bucket = buckets.get(hour)
            if not bucket:
                continue
            count = len(bucket)
            averages = {
                metric.value: round_half_away(
                    sum(metric.value_of(reading) for reading in bucket) / count, 2
                )
                for metric in TRENDED_METRICS
            }
            trend.append(HourlyAverage(hour=hour, count=count, **averages))
        return trend

    def peak_hours(self, trend: Sequence[HourlyAverage]) -> Dict[str, PeakHour]:
        """Return the earliest hour holding the highest average per tracked metric."""
        peaks: Dict[str, PeakHour] = {}
        for metric in PEAK_METRICS:
            peak = None
            for bucket in trend:
                value = getattr(bucket, metric.value)
                if peak is None or value > peak.value:
                    peak = PeakHour(hour=bucket.hour, value=value)
            peaks[metric.value] = peak or PeakHour()
        return peaks
