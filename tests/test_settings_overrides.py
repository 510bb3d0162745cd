from __future__ import annotations

from typing import Iterable

from datastore.reading_store import build_default_store
from services.monitor import build_default_monitor
from settings import get_settings


def _clear_caches(caches: Iterable) -> None:
    for cache in caches:
        cache.cache_clear()


CACHES = (get_settings, build_default_store, build_default_monitor)


def test_environment_overrides_apply(monkeypatch, tmp_path) -> None:
    store_path = tmp_path / "readings.jsonl"

    monkeypatch.setenv("READINGS_STORE_PATH", str(store_path))
    monkeypatch.setenv("DEFAULT_WINDOW_HOURS", "6")
    monkeypatch.setenv("LOG_LEVEL", " debug ")
    _clear_caches(CACHES)

    try:
        settings = get_settings()
        monitor = build_default_monitor()

        assert settings.log_level == "DEBUG"
        assert monitor.store.persistence_path == store_path
        assert monitor.default_hours == 6
        assert monitor.stats().hours == 6
    finally:
        _clear_caches(CACHES)


def test_invalid_values_fall_back_to_defaults(monkeypatch) -> None:
    monkeypatch.setenv("READINGS_STORE_PATH", "   ")
    monkeypatch.setenv("DEFAULT_WINDOW_HOURS", "-4")
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    _clear_caches(CACHES)

    try:
        settings = get_settings()
        store = build_default_store()

        assert settings.store_path is None
        assert settings.default_window_hours == 24
        assert settings.log_level == "INFO"
        assert store.persistence_path is None
    finally:
        _clear_caches(CACHES)
