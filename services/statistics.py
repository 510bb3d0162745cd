"""Descriptive statistics and correlation over numeric series."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class StatsResult:
    """Summary of a numeric series, rounded to two decimals."""

    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    median: float = 0.0
    std_dev: float = 0.0
    count: int = 0


def round_half_away(value: float, digits: int = 0) -> float:
    """Round ``value`` to ``digits`` decimals, halves away from zero."""
    scale = 10**digits
    scaled = value * scale
    rounded = math.floor(abs(scaled) + 0.5)
    if scaled < 0:
        rounded = -rounded
    return rounded / scale


def stats(values: Sequence[float]) -> StatsResult:
    count = len(values)
    if count == 0:
        return StatsResult()

    ordered = sorted(values)
    mid = count // 2
    if count % 2:
        median = ordered[mid]
    else:
        median = (ordered[mid - 1] + ordered[mid]) / 2

    avg = sum(values) / count
    variance = sum((value - avg) ** 2 for value in values) / count

    return StatsResult(
        min=round_half_away(ordered[0], 2),
        max=round_half_away(ordered[-1], 2),
        avg=round_half_away(avg, 2),
        median=round_half_away(median, 2),
        std_dev=round_half_away(math.sqrt(variance), 2),
        count=count,
    )


def correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient of two equal-length series.

    Mismatched lengths, empty input and series without variance all yield 0.
    """
    if len(x) != len(y) or not x:
        return 0.0

    n = float(len(x))
    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(a * b for a, b in zip(x, y))
    sum_x2 = sum(a * a for a in x)
    sum_y2 = sum(b * b for b in y)

    numerator = n * sum_xy - sum_x * sum_y
    radicand = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    if radicand <= 0:
        return 0.0

    return round_half_away(numerator / math.sqrt(radicand), 3)
