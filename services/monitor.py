"""Ingestion and query orchestration for the air monitor."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from functools import lru_cache
from typing import Callable, List, Optional

from datastore.reading_store import ReadingStore, build_default_store
from models.errors import FormatError, NotFound
from models.records import Reading
from services.analyzer import AnalysisResult, Analyzer, StatsReport
from services.validator import SequenceWatermark
from settings import get_settings

logger = logging.getLogger(__name__)

FIELD_COUNT = 8


class SensorHealth(str, Enum):
    normal = "正常"
    abnormal = "异常"


@dataclass(frozen=True)
class SensorStatus:
    sensor_status: SensorHealth
    last_sequence: int
    last_data: Reading


def local_now() -> datetime:
    return datetime.now(timezone.utc).astimezone()


def parse_payload(payload: str) -> List[float]:
    """Split a raw ``v1,...,v8`` device line into floats."""
    fields = payload.split(",")
    if len(fields) != FIELD_COUNT:
        raise FormatError(f"expected {FIELD_COUNT} fields, got {len(fields)}")

    values: List[float] = []
    for index, raw in enumerate(fields, start=1):
        try:
            value = float(raw.strip())
        except ValueError:
            raise FormatError("invalid numeric value", field_index=index) from None
        if not math.isfinite(value):
            raise FormatError("invalid numeric value", field_index=index)
        values.append(value)
    return values


class MonitorService:
    """Coordinates validation, storage and analysis of sensor readings."""

    def __init__(
        self,
        store: ReadingStore,
        analyzer: Analyzer,
        default_hours: int = 24,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self.store = store
        self.analyzer = analyzer
        self.default_hours = default_hours
        self.clock = clock
        self._watermark = SequenceWatermark(store.latest_valid_sequence())

    def ingest(self, payload: str) -> Reading:
        """Parse, classify and persist one device payload."""
        try:
            values = parse_payload(payload)
        except FormatError as exc:
            logger.warning(
                "Rejecting malformed payload",
                extra={"field_index": exc.field_index, "reason": exc.reason},
            )
            raise

        timestamp = self.clock()
        sequence_number = int(values[7])
        # The watermark advances before the write; a failed put still consumes the sequence.
        is_valid = self._watermark.compare_and_advance(sequence_number)

        reading = self.store.put(
            Reading(
                timestamp=timestamp,
                particle_count=values[0],
                pm25=values[1],
                hcho=values[2],
                co2=values[3],
                temperature=values[4],
                humidity=values[5],
                voc=values[6],
                sequence_number=sequence_number,
                is_valid=is_valid,
            )
        )

        context = {
            "reading_id": reading.id,
            "sequence_number": sequence_number,
            "is_valid": is_valid,
        }
        if is_valid:
            logger.info("Stored reading", extra=context)
        else:
            logger.warning("Stored suspect reading; sequence did not advance", extra=context)
        return reading

    def current_status(self) -> SensorStatus:
        latest = self.store.latest()
        if latest is None:
            raise NotFound("No readings have been received yet.")
        health = SensorHealth.normal if latest.is_valid else SensorHealth.abnormal
        return SensorStatus(
            sensor_status=health,
            last_sequence=latest.sequence_number,
            last_data=latest,
        )

    def history(self, hours: Optional[int] = None, limit: Optional[int] = None) -> List[Reading]:
        """Return readings newest first, optionally bounded by age and count."""
        since = None
        if hours is not None and hours > 0:
            since = self.clock() - timedelta(hours=hours)
        if limit is not None and limit <= 0:
            limit = None
        return self.store.query(since=since, limit=limit, newest_first=True)

    def stats(self, hours: Optional[int] = None) -> StatsReport:
        window = self._window(hours)
        end_time = self.clock()
        start_time = end_time - timedelta(hours=window)
        readings = self.store.query(since=start_time)
        logger.debug("Computing stats", extra={"hours": window, "row_count": len(readings)})
        return self.analyzer.summarize(readings, window, start_time, end_time)

    def analysis(self, hours: Optional[int] = None) -> AnalysisResult:
        window = self._window(hours)
        start_time = self.clock() - timedelta(hours=window)
        readings = self.store.query(since=start_time)
        if not readings:
            raise NotFound(f"No readings in the last {window} hours.")
        logger.debug("Computing analysis", extra={"hours": window, "row_count": len(readings)})
        return self.analyzer.analyze(readings, window)

    def _window(self, hours: Optional[int]) -> int:
        if hours is None or hours <= 0:
            return self.default_hours
        return hours


@lru_cache
def build_default_monitor() -> MonitorService:
    """Factory that wires the monitor with the configured store."""
    settings = get_settings()
    return MonitorService(
        store=build_default_store(),
        analyzer=Analyzer(),
        default_hours=settings.default_window_hours,
    )
