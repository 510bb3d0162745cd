"""Thread-safe reading store with optional JSON-lines persistence."""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from models.errors import StoreError
from models.records import Reading
from settings import get_settings

logger = logging.getLogger(__name__)

_READING_ADAPTER = TypeAdapter(Reading)


class ReadingStore:
    """Append-only reading log, optionally persisted as JSON lines."""

    def __init__(self, persistence_path: Optional[Path] = None) -> None:
        self._items: List[Reading] = []
        self._next_id = 1
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put(self, reading: Reading) -> Reading:
        """Store ``reading`` and return it with its assigned id."""
        with self._lock:
            stored = dataclasses.replace(reading, id=self._next_id)
            self._persist(stored)
            self._items.append(stored)
            self._next_id += 1
            return stored

    def query(
        self,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
        newest_first: bool = False,
    ) -> List[Reading]:
        with self._lock:
            items = list(self._items)

        if since is not None:
            items = [item for item in items if item.timestamp >= since]
        items.sort(key=lambda item: (item.timestamp, item.id), reverse=newest_first)
        if limit is not None:
            items = items[:limit]
        return items

    def latest(self) -> Optional[Reading]:
        """Return the most recently received reading, if any."""
        with self._lock:
            if not self._items:
                return None
            return max(self._items, key=lambda item: (item.timestamp, item.id))

    def latest_valid_sequence(self) -> int:
        with self._lock:
            return max(
                (item.sequence_number for item in self._items if item.is_valid),
                default=0,
            )

    def count(self) -> int:
        with self._lock:
            return len(self._items)

    def _persist(self, reading: Reading) -> None:
        if not self.persistence_path:
            return
        line = _READING_ADAPTER.dump_json(reading).decode("utf-8")
        try:
            with self.persistence_path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
        except OSError as exc:
            raise StoreError(f"Failed to persist reading: {exc}") from exc

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            text = self.persistence_path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise StoreError(f"Failed to load readings: {exc}") from exc

        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            try:
                reading = _READING_ADAPTER.validate_json(line)
            except ValidationError:
                logger.warning(
                    "Skipping corrupt store line",
                    extra={"store_path": str(self.persistence_path), "row_number": line_number},
                )
                continue
            self._items.append(reading)
            self._next_id = max(self._next_id, reading.id + 1)

        logger.info(
            "Loaded readings from disk",
            extra={"store_path": str(self.persistence_path), "row_count": len(self._items)},
        )


@lru_cache
def build_default_store(path: Optional[str] = None) -> ReadingStore:
    settings = get_settings()
    store_path = settings.store_path if path is None else path
    persistence = Path(store_path) if store_path else None
    return ReadingStore(persistence_path=persistence)
