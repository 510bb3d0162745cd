"""Composes statistics, trends, scoring and advice into report objects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from models.records import Metric, Reading
from services.advisor import Anomaly, Suggestion, detect_anomalies, suggest
from services.aggregator import Aggregator, HourlyAverage, PeakHour
from services.scoring import AQIResult, score
from services.statistics import StatsResult, correlation, stats

CORRELATION_PAIRS: Tuple[Tuple[str, Metric, Metric], ...] = (
    ("temp_hcho", Metric.temperature, Metric.hcho),
    ("humidity_hcho", Metric.humidity, Metric.hcho),
    ("temp_voc", Metric.temperature, Metric.voc),
    ("humidity_voc", Metric.humidity, Metric.voc),
    ("pm25_particle", Metric.pm25, Metric.particle),
)


@dataclass(frozen=True)
class StatsReport:
    hours: int
    count: int
    start_time: datetime
    end_time: datetime
    stats: Dict[str, StatsResult] = field(default_factory=dict)
    anomalies: List[Anomaly] = field(default_factory=list)


@dataclass(frozen=True)
class AnalysisResult:
    hours: int
    correlations: Dict[str, float]
    hourly_trend: List[HourlyAverage]
    peak_hours: Dict[str, PeakHour]
    aqi: AQIResult
    suggestions: List[Suggestion]
    latest: Reading


def metric_series(readings: Sequence[Reading], metric: Metric) -> List[float]:
    return [metric.value_of(reading) for reading in readings]


class Analyzer:
    """Pure analysis over an ascending series of readings."""

    def __init__(self, aggregator: Optional[Aggregator] = None) -> None:
        self.aggregator = aggregator or Aggregator()

    def summarize(
        self,
        readings: Sequence[Reading],
        hours: int,
        start_time: datetime,
        end_time: datetime,
    ) -> StatsReport:
        per_metric = {
            metric.value: stats(metric_series(readings, metric)) for metric in Metric
        }
        anomalies = detect_anomalies(readings[-1]) if readings else []
        return StatsReport(
            hours=hours,
            count=len(readings),
            start_time=start_time,
            end_time=end_time,
            stats=per_metric,
            anomalies=anomalies,
        )

    def correlations(self, readings: Sequence[Reading]) -> Dict[str, float]:
        return {
            name: correlation(metric_series(readings, left), metric_series(readings, right))
            for name, left, right in CORRELATION_PAIRS
        }

    def analyze(self, readings: Sequence[Reading], hours: int) -> AnalysisResult:
        """Build the full analysis; ``readings`` must not be empty."""
        if not readings:
            raise ValueError("Analysis requires at least one reading.")

        latest = readings[-1]
        trend = self.aggregator.aggregate_by_hour(readings)
        return AnalysisResult(
            hours=hours,
            correlations=self.correlations(readings),
            hourly_trend=trend,
            peak_hours=self.aggregator.peak_hours(trend),
            aqi=score(latest.pm25, latest.co2, latest.voc),
            suggestions=suggest(latest),
            latest=latest,
        )
