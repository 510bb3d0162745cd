"""Sequence-number based sensor health classification."""

from __future__ import annotations

from threading import Lock
from typing import Tuple


def validate(sequence_number: int, watermark: int) -> Tuple[bool, int]:
    """Classify a reading against the last accepted sequence number.

    Returns ``(is_valid, new_watermark)``. A reading is valid only when its
    sequence number strictly exceeds the watermark; suspect readings leave the
    watermark untouched so later in-order readings are still accepted.
    """
    if sequence_number > watermark:
        return True, sequence_number
    return False, watermark


class SequenceWatermark:
    """Lock-guarded watermark shared by concurrent ingestion requests."""

    def __init__(self, initial: int = 0) -> None:
        self._value = initial
        self._lock = Lock()

    def compare_and_advance(self, sequence_number: int) -> bool:
        with self._lock:
            is_valid, self._value = validate(sequence_number, self._value)
            return is_valid
