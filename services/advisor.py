"""Rule-based suggestions and threshold anomalies for the latest reading."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from models.records import Metric, Reading


class SuggestionType(str, Enum):
    temperature = "temperature"
    humidity = "humidity"
    co2 = "co2"
    pm25 = "pm25"
    hcho = "hcho"
    voc = "voc"
    comfort = "comfort"
    good = "good"


class AnomalyType(str, Enum):
    pm25 = "pm25"
    co2 = "co2"
    hcho = "hcho"
    voc = "voc"
    sensor = "sensor"


class Severity(str, Enum):
    warning = "warning"
    danger = "danger"


@dataclass(frozen=True)
class Suggestion:
    type: SuggestionType
    icon: str
    message: str


@dataclass(frozen=True)
class Anomaly:
    type: AnomalyType
    level: Severity
    message: str
    value: Optional[float] = None
    threshold: Optional[float] = None


@dataclass(frozen=True)
class SuggestionRule:
    applies: Callable[[Reading], bool]
    suggestion: Suggestion


@dataclass(frozen=True)
class AnomalyRule:
    type: AnomalyType
    metric: Metric
    threshold: float
    level: Severity
    message: str

    def check(self, reading: Reading) -> Optional[Anomaly]:
        value = self.metric.value_of(reading)
        if value <= self.threshold:
            return None
        return Anomaly(
            type=self.type,
            level=self.level,
            message=self.message,
            value=value,
            threshold=self.threshold,
        )


def _is_comfortable(reading: Reading) -> bool:
    return 20 <= reading.temperature <= 24 and 40 <= reading.humidity <= 60


SUGGESTION_RULES = (
    SuggestionRule(
        lambda r: r.temperature < 18,
        Suggestion(SuggestionType.temperature, "cold", "室温偏低，建议适当增加保暖"),
    ),
    SuggestionRule(
        lambda r: r.temperature > 26,
        Suggestion(SuggestionType.temperature, "hot", "室温偏高，建议开启空调或通风降温"),
    ),
    SuggestionRule(
        lambda r: r.humidity < 30,
        Suggestion(SuggestionType.humidity, "dry", "空气干燥，建议使用加湿器"),
    ),
    SuggestionRule(
        lambda r: r.humidity > 70,
        Suggestion(SuggestionType.humidity, "wet", "湿度过高，建议通风或使用除湿机"),
    ),
    SuggestionRule(
        lambda r: r.co2 > 1000,
        Suggestion(SuggestionType.co2, "ventilation", "CO2浓度偏高，建议开窗通风"),
    ),
    SuggestionRule(
        lambda r: r.pm25 > 75,
        Suggestion(SuggestionType.pm25, "air", "PM2.5超标，建议使用空气净化器"),
    ),
    SuggestionRule(
        lambda r: r.hcho > 80,
        Suggestion(SuggestionType.hcho, "warning", "甲醛偏高，建议开窗通风并检查污染源"),
    ),
    SuggestionRule(
        lambda r: r.voc > 500,
        Suggestion(SuggestionType.voc, "warning", "VOC偏高，建议通风换气"),
    ),
    SuggestionRule(
        _is_comfortable,
        Suggestion(SuggestionType.comfort, "check", "当前温湿度处于舒适区间"),
    ),
)

DEFAULT_SUGGESTION = Suggestion(SuggestionType.good, "check", "室内环境良好，无需调整")

ANOMALY_RULES = (
    AnomalyRule(AnomalyType.pm25, Metric.pm25, 75.0, Severity.warning, "PM2.5 超标"),
    AnomalyRule(AnomalyType.pm25, Metric.pm25, 150.0, Severity.danger, "PM2.5 严重超标"),
    AnomalyRule(AnomalyType.co2, Metric.co2, 1000.0, Severity.warning, "CO2 偏高，建议通风"),
    AnomalyRule(AnomalyType.co2, Metric.co2, 2000.0, Severity.danger, "CO2 严重超标"),
    AnomalyRule(AnomalyType.hcho, Metric.hcho, 80.0, Severity.warning, "甲醛偏高"),
    AnomalyRule(AnomalyType.hcho, Metric.hcho, 100.0, Severity.danger, "甲醛超标"),
    AnomalyRule(AnomalyType.voc, Metric.voc, 500.0, Severity.warning, "VOC 偏高"),
)

SENSOR_FAULT = Anomaly(type=AnomalyType.sensor, level=Severity.danger, message="传感器可能故障")


def suggest(reading: Reading) -> List[Suggestion]:
    suggestions = [rule.suggestion for rule in SUGGESTION_RULES if rule.applies(reading)]
    return suggestions or [DEFAULT_SUGGESTION]


def detect_anomalies(reading: Reading) -> List[Anomaly]:
    """Collect every threshold the reading crosses; tiers are not exclusive."""
    anomalies = [
        anomaly
        for anomaly in (rule.check(reading) for rule in ANOMALY_RULES)
        if anomaly is not None
    ]
    if not reading.is_valid:
        anomalies.append(SENSOR_FAULT)
    return anomalies
